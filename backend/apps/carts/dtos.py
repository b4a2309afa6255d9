from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from apps.common.money import ZERO


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed"

    @classmethod
    def parse(cls, raw) -> Optional["DiscountKind"]:
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        normalized = raw.strip().lower().replace("-", "_")
        aliases = {
            "percentage": cls.PERCENTAGE,
            "percent": cls.PERCENTAGE,
            "fixed": cls.FIXED_AMOUNT,
            "fixed_amount": cls.FIXED_AMOUNT,
            "fixedamount": cls.FIXED_AMOUNT,
        }
        return aliases.get(normalized)


@dataclass(frozen=True)
class LineItem:
    id: str
    name: str
    unit_price: Decimal
    stock_cap: int
    quantity: int
    brand: str = ""
    category: str = ""
    image_url: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "LineItem":
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class Discount:
    code: str
    kind: DiscountKind
    value: Decimal
    description: str = ""
    # caps a percentage discount; None means uncapped
    maximum_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class DiscountRule:
    """A registered code: the discount it grants and the order it needs."""

    discount: Discount
    minimum_order_amount: Decimal = ZERO


@dataclass(frozen=True)
class CartSnapshot:
    items: Tuple[LineItem, ...] = field(default_factory=tuple)
    discount: Optional[Discount] = None

    def find(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class CartTotals:
    total_item_count: int = 0
    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    final_total: Decimal = ZERO
    delivery_fee: Decimal = ZERO
    order_total: Decimal = ZERO


EMPTY_SNAPSHOT = CartSnapshot()
"""DTO dataclasses only. Totals math lives in totals.py, wire mapping in mappers.py."""
