from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from apps.common import get_logger

from .client import CatalogUnavailableError
from .filters import FilterState, from_query_params
from .mappers import FilterStateMapper
from .protocols import CatalogClientProtocol

logger = get_logger(__name__).bind(component="catalog", layer="service")

ErrorTuple = Tuple[str, str, Optional[Dict[str, Any]]]

CATALOG_UNAVAILABLE: ErrorTuple = (
    "SERVICE_UNAVAILABLE",
    "Catalog service unavailable",
    None,
)


class ProductQueryService:
    def __init__(self, catalog: CatalogClientProtocol, *, page_size: int = 12):
        self.catalog = catalog
        self.page_size = page_size
        self.logger = logger.bind(service="ProductQueryService")

    def parse_filters(self, params: Optional[Mapping[str, Any]]) -> FilterState:
        state = from_query_params(params)
        self.logger.debug("Parsed listing filters", filters=FilterStateMapper.to_dict(state))
        return state

    def canonical_filters(self, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        return FilterStateMapper.to_canonical(self.parse_filters(params))

    def list_products(
        self, params: Optional[Mapping[str, Any]]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ErrorTuple]]:
        state = self.parse_filters(params)
        try:
            listing = self.catalog.list_products(state, limit=self.page_size)
        except CatalogUnavailableError as exc:
            self.logger.warning("Product listing failed", error=str(exc))
            return None, CATALOG_UNAVAILABLE
        payload = dict(listing)
        payload.update(FilterStateMapper.to_canonical(state))
        self.logger.info(
            "Listed products",
            count=len(payload.get("products") or []),
            query=payload["queryString"],
        )
        return payload, None

    def get_product(
        self, product_id: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ErrorTuple]]:
        try:
            record = self.catalog.get_product(product_id)
        except CatalogUnavailableError as exc:
            self.logger.warning(
                "Product lookup failed", product_id=product_id, error=str(exc)
            )
            return None, CATALOG_UNAVAILABLE
        if record is None:
            return None, ("NOT_FOUND", "Product not found", {"id": str(product_id)})
        return record, None
