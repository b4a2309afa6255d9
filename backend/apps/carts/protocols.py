from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from .dtos import CartSnapshot, Discount, DiscountRule


class PersistenceAdapterProtocol(Protocol):
    def load(self) -> Optional[CartSnapshot]:
        ...

    def save(self, snapshot: CartSnapshot) -> None:
        ...


class DiscountCodeResolverProtocol(Protocol):
    def resolve(self, code: str) -> Optional[Discount]:
        ...

    def lookup(self, code: str) -> Optional[DiscountRule]:
        ...


class ProductLookupProtocol(Protocol):
    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        ...


class SessionProtocol(Protocol):
    modified: bool

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def __setitem__(self, key: str, value: Any) -> None:
        ...


class CacheBackendProtocol(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        ...
