"""Derived cart figures, computed from a snapshot and never stored."""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from apps.common.money import ZERO, quantize

from .dtos import CartSnapshot, CartTotals, Discount, DiscountKind

HUNDRED = Decimal("100")
FREE_DELIVERY_THRESHOLD = Decimal("5000")
DELIVERY_FEE = Decimal("300")


def discount_amount_for(subtotal: Decimal, discount: Optional[Discount]) -> Decimal:
    """Amount taken off ``subtotal``; never more than the subtotal itself."""
    if discount is None or subtotal <= ZERO:
        return ZERO
    if discount.kind is DiscountKind.PERCENTAGE:
        amount = quantize(subtotal * discount.value / HUNDRED)
        if discount.maximum_amount is not None:
            amount = min(amount, discount.maximum_amount)
    else:
        amount = discount.value
    return max(ZERO, min(amount, subtotal))


def delivery_fee_for(subtotal: Decimal, item_count: int) -> Decimal:
    """Flat fee below the free-delivery threshold; nothing to deliver means no fee."""
    if item_count <= 0 or subtotal >= FREE_DELIVERY_THRESHOLD:
        return ZERO
    return DELIVERY_FEE


def compute_totals(snapshot: CartSnapshot) -> CartTotals:
    total_item_count = sum(item.quantity for item in snapshot.items)
    subtotal = sum((item.line_total for item in snapshot.items), ZERO)
    discount_amount = discount_amount_for(subtotal, snapshot.discount)
    final_total = max(ZERO, subtotal - discount_amount)
    delivery_fee = delivery_fee_for(subtotal, total_item_count)
    return CartTotals(
        total_item_count=total_item_count,
        subtotal=subtotal,
        discount_amount=discount_amount,
        final_total=final_total,
        delivery_fee=delivery_fee,
        order_total=final_total + delivery_fee,
    )
