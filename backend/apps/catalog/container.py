from __future__ import annotations

from django.conf import settings

from .client import DEFAULT_TIMEOUT, ProductCatalogClient
from .services import ProductQueryService


def build_catalog_client() -> ProductCatalogClient:
    return ProductCatalogClient(
        settings.BONDEX_CATALOG_API_URL,
        timeout=getattr(settings, "BONDEX_CATALOG_TIMEOUT", DEFAULT_TIMEOUT),
    )


def build_product_query_service() -> ProductQueryService:
    return ProductQueryService(
        catalog=build_catalog_client(),
        page_size=getattr(settings, "BONDEX_CATALOG_PAGE_SIZE", 12),
    )
