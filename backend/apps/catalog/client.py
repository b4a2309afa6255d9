from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from apps.common import get_logger

from .filters import FilterState, to_query_params

logger = get_logger(__name__).bind(component="catalog", layer="client")

DEFAULT_TIMEOUT = 10.0


class CatalogUnavailableError(Exception):
    """Raised when the catalog API cannot be reached or answers with a server error."""


def _unwrap(payload: Any, *keys: str) -> Any:
    if isinstance(payload, dict):
        for key in keys:
            if key in payload:
                return payload[key]
    return payload


class ProductCatalogClient:
    """Synchronous REST client for the catalog API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        self.logger = logger.bind(client="ProductCatalogClient", base_url=self.base_url)

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        try:
            response = self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            self.logger.error("Catalog request failed", path=path, error=str(exc))
            raise CatalogUnavailableError(str(exc)) from exc
        if response.status_code >= 500:
            self.logger.error(
                "Catalog server error", path=path, status=response.status_code
            )
            raise CatalogUnavailableError(
                f"Catalog responded with {response.status_code}"
            )
        return response

    def list_products(
        self, state: FilterState, *, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        params = to_query_params(state)
        if limit:
            params["limit"] = str(limit)
        self.logger.debug("Listing catalog products", params=params)
        response = self._get("/products", params=params)
        if response.status_code >= 400:
            self.logger.warning(
                "Catalog rejected listing request", status=response.status_code
            )
            return {"products": [], "total": 0}
        payload = response.json()
        if isinstance(payload, list):
            return {"products": payload, "total": len(payload)}
        if not isinstance(payload, dict):
            return {"products": [], "total": 0}
        products = _unwrap(payload, "data", "products")
        products = products if isinstance(products, list) else []
        return {
            "products": products,
            "total": payload.get("total", len(products)),
            "page": payload.get("page", state.page),
            "pages": payload.get("pages"),
        }

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        path = f"/products/{quote(str(product_id), safe='')}"
        self.logger.debug("Fetching catalog product", product_id=product_id)
        response = self._get(path)
        if response.status_code == 404:
            self.logger.info("Catalog product not found", product_id=product_id)
            return None
        if response.status_code >= 400:
            self.logger.warning(
                "Catalog rejected product lookup",
                product_id=product_id,
                status=response.status_code,
            )
            return None
        record = _unwrap(response.json(), "data", "product")
        return record if isinstance(record, dict) else None

    def ping(self) -> bool:
        try:
            response = self._client.get("/products", params={"limit": "1"})
        except httpx.HTTPError as exc:
            self.logger.warning("Catalog ping failed", error=str(exc))
            return False
        return response.status_code < 500
