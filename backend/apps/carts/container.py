from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core.cache import cache

from .discounts import StaticDiscountCodeResolver
from .persistence import DEFAULT_SESSION_KEY, CachePersistence, SessionPersistence
from .protocols import (
    DiscountCodeResolverProtocol,
    PersistenceAdapterProtocol,
    ProductLookupProtocol,
)
from .services import CartService
from .store import CartStore

STORAGE_SESSION = "session"
STORAGE_CACHE = "cache"


def build_discount_resolver() -> StaticDiscountCodeResolver:
    return StaticDiscountCodeResolver(getattr(settings, "BONDEX_DISCOUNT_CODES", None))


def build_persistence(request) -> PersistenceAdapterProtocol:
    storage = getattr(settings, "BONDEX_CART_STORAGE", STORAGE_SESSION)
    session = request.session
    if storage == STORAGE_CACHE:
        if session.session_key is None:
            session.save()
        return CachePersistence(
            cache,
            session.session_key,
            timeout=getattr(settings, "BONDEX_CART_CACHE_TTL", None),
        )
    return SessionPersistence(
        session, key=getattr(settings, "BONDEX_CART_SESSION_KEY", DEFAULT_SESSION_KEY)
    )


def build_cart_service(
    request,
    *,
    resolver: Optional[DiscountCodeResolverProtocol] = None,
    products: Optional[ProductLookupProtocol] = None,
) -> CartService:
    return CartService(
        store=CartStore(build_persistence(request)),
        resolver=resolver or build_discount_resolver(),
        products=products,
    )
