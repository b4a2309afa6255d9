from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from .filters import FilterState


class CatalogClientProtocol(Protocol):
    def list_products(
        self, state: FilterState, *, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        ...

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        ...
