"""
Product listing filters and their query-string form.

The storefront keeps the whole listing state in the URL so a shared link
reproduces the same filtered view. ``to_query_params`` drops every field that
still holds its unset value, and ``from_query_params`` restores defaults for
anything missing, so the pair round-trips on the non-default keys.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

from apps.common.money import to_decimal, to_int

ALL = "all"

SORT_NEWEST = "newest"
SORT_PRICE_LOW = "price-low"
SORT_PRICE_HIGH = "price-high"
SORT_RATING = "rating"
SORT_POPULAR = "popular"
SORT_CHOICES = (SORT_NEWEST, SORT_PRICE_LOW, SORT_PRICE_HIGH, SORT_RATING, SORT_POPULAR)
DEFAULT_SORT = SORT_NEWEST
DEFAULT_PAGE = 1

# the catalog API only honours the literal "true", so nothing else is accepted
TRUE_VALUE = "true"

# query parameter name -> FilterState attribute
PARAM_FIELDS = {
    "protectionType": "protection_type",
    "industry": "industry",
    "search": "search",
    "minPrice": "min_price",
    "maxPrice": "max_price",
    "sort": "sort",
    "inStock": "in_stock",
    "featured": "featured",
    "onSale": "on_sale",
    "page": "page",
}
BOOLEAN_FIELDS = {"in_stock", "featured", "on_sale"}


@dataclass(frozen=True)
class FilterState:
    protection_type: str = ALL
    industry: str = ALL
    search: str = ""
    min_price: str = ""
    max_price: str = ""
    sort: str = DEFAULT_SORT
    in_stock: bool = False
    featured: bool = False
    on_sale: bool = False
    page: int = DEFAULT_PAGE

    @property
    def min_price_value(self) -> Optional[Decimal]:
        return to_decimal(self.min_price, default=None) if self.min_price else None

    @property
    def max_price_value(self) -> Optional[Decimal]:
        return to_decimal(self.max_price, default=None) if self.max_price else None

    def with_changes(self, **changes: Any) -> "FilterState":
        """Return a copy with ``changes`` applied; any filter change resets paging."""
        if "page" not in changes:
            changes["page"] = DEFAULT_PAGE
        return replace(self, **changes)


DEFAULT_FILTERS = FilterState()


def _get(params: Mapping[str, Any], key: str) -> Optional[str]:
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        value = value[-1] if value else None
    if value is None:
        return None
    return str(value).strip()


def _category(raw: Optional[str]) -> str:
    if not raw or raw.lower() == ALL:
        return ALL
    return raw


def _price(raw: Optional[str]) -> str:
    if not raw:
        return ""
    value = to_decimal(raw, default=None)
    if value is None or value < 0:
        return ""
    return raw


def _flag(raw: Optional[str]) -> bool:
    return raw == TRUE_VALUE


def _sort(raw: Optional[str]) -> str:
    if raw and raw in SORT_CHOICES:
        return raw
    return DEFAULT_SORT


def _page(raw: Optional[str]) -> int:
    page = to_int(raw, default=DEFAULT_PAGE) if raw else DEFAULT_PAGE
    return page if page > 0 else DEFAULT_PAGE


def from_query_params(params: Optional[Mapping[str, Any]]) -> FilterState:
    """Build a filter state from query parameters; unknown keys are ignored."""
    params = params or {}
    return FilterState(
        protection_type=_category(_get(params, "protectionType")),
        industry=_category(_get(params, "industry")),
        search=_get(params, "search") or "",
        min_price=_price(_get(params, "minPrice")),
        max_price=_price(_get(params, "maxPrice")),
        sort=_sort(_get(params, "sort")),
        in_stock=_flag(_get(params, "inStock")),
        featured=_flag(_get(params, "featured")),
        on_sale=_flag(_get(params, "onSale")),
        page=_page(_get(params, "page")),
    )


def to_query_params(state: FilterState) -> Dict[str, str]:
    """Canonical query parameters, omitting every field left at its default."""
    out: Dict[str, str] = {}
    for param, attr in PARAM_FIELDS.items():
        value = getattr(state, attr)
        if value == getattr(DEFAULT_FILTERS, attr):
            continue
        if attr in BOOLEAN_FIELDS:
            out[param] = TRUE_VALUE
        else:
            out[param] = str(value)
    return out


def to_query_string(state: FilterState) -> str:
    return urlencode(to_query_params(state))


def from_query_string(query: str) -> FilterState:
    return from_query_params(dict(parse_qsl((query or "").lstrip("?"))))


def has_active_filters(state: FilterState) -> bool:
    """True when anything besides sort order and paging narrows the listing."""
    ignored = {"sort", "page"}
    return any(
        getattr(state, f.name) != getattr(DEFAULT_FILTERS, f.name)
        for f in fields(FilterState)
        if f.name not in ignored
    )
