from typing import Any, Dict

from .filters import FilterState, has_active_filters, to_query_params, to_query_string


class FilterStateMapper:
    @staticmethod
    def to_dict(state: FilterState) -> Dict[str, Any]:
        return {
            "protectionType": state.protection_type,
            "industry": state.industry,
            "search": state.search,
            "minPrice": state.min_price,
            "maxPrice": state.max_price,
            "sort": state.sort,
            "inStock": state.in_stock,
            "featured": state.featured,
            "onSale": state.on_sale,
            "page": state.page,
        }

    @staticmethod
    def to_canonical(state: FilterState) -> Dict[str, Any]:
        """Filter state plus the minimal query that reproduces it."""
        return {
            "filters": FilterStateMapper.to_dict(state),
            "query": to_query_params(state),
            "queryString": to_query_string(state),
            "hasActiveFilters": has_active_filters(state),
        }
