from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from apps.common import get_logger
from apps.common.money import ZERO, to_decimal

from .dtos import Discount, DiscountKind, DiscountRule

logger = get_logger(__name__).bind(component="carts", layer="discounts")

DEFAULT_DISCOUNT_CODES: Dict[str, Dict[str, Any]] = {
    "WELCOME10": {"kind": "percentage", "value": "10", "description": "10% off"},
    "BULK15": {
        "kind": "percentage",
        "value": "15",
        "description": "15% off bulk orders",
        "minimumOrderAmount": "10000",
        "maximumDiscountAmount": "5000",
    },
    "SAVE500": {
        "kind": "fixed",
        "value": "500",
        "description": "KES 500 off",
        "minimumOrderAmount": "2000",
    },
}


def _entry_amount(entry: Mapping[str, Any], *keys: str) -> Optional[Decimal]:
    for key in keys:
        if entry.get(key) is not None:
            return to_decimal(entry.get(key), default=None)
    return None


class StaticDiscountCodeResolver:
    """
    Resolve promo codes against a fixed, case-insensitive registry.

    Entries may carry ``minimumOrderAmount`` (the subtotal a cart needs before
    the code applies) and ``maximumDiscountAmount`` (a ceiling on percentage
    discounts).
    """

    def __init__(self, codes: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._rules: Dict[str, DiscountRule] = {}
        source = DEFAULT_DISCOUNT_CODES if codes is None else codes
        for raw_code, entry in source.items():
            rule = self._build(raw_code, entry)
            if rule is None:
                logger.warning("Skipping invalid discount code entry", code=raw_code)
                continue
            self._rules[rule.discount.code] = rule

    @staticmethod
    def _build(raw_code: str, entry: Mapping[str, Any]) -> Optional[DiscountRule]:
        code = str(raw_code or "").strip().upper()
        if not code or not isinstance(entry, Mapping):
            return None
        kind = DiscountKind.parse(entry.get("kind") or entry.get("type"))
        value: Optional[Decimal] = to_decimal(entry.get("value"), default=None)
        if kind is None or value is None or value <= 0:
            return None
        minimum = _entry_amount(entry, "minimumOrderAmount", "minimum_order_amount")
        maximum = _entry_amount(entry, "maximumDiscountAmount", "maximum_discount_amount")
        if (minimum is not None and minimum < 0) or (maximum is not None and maximum <= 0):
            return None
        discount = Discount(
            code=code,
            kind=kind,
            value=value,
            description=str(entry.get("description") or ""),
            maximum_amount=maximum,
        )
        return DiscountRule(discount=discount, minimum_order_amount=minimum or ZERO)

    @property
    def codes(self):
        return sorted(self._rules)

    def lookup(self, code: str) -> Optional[DiscountRule]:
        normalized = str(code or "").strip().upper()
        rule = self._rules.get(normalized)
        logger.debug("Resolved discount code", code=normalized, found=rule is not None)
        return rule

    def resolve(self, code: str) -> Optional[Discount]:
        rule = self.lookup(code)
        return rule.discount if rule is not None else None
