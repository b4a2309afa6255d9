from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple, Union

from apps.common import get_logger
from apps.common.money import ZERO, to_decimal, to_int

from .commands import ProductSnapshot
from .dtos import (
    EMPTY_SNAPSHOT,
    CartSnapshot,
    CartTotals,
    Discount,
    DiscountKind,
    LineItem,
)
from .protocols import PersistenceAdapterProtocol
from .totals import HUNDRED, compute_totals

logger = get_logger(__name__).bind(component="carts", layer="store")


def _positive_quantity(quantity: Any) -> int:
    qty = to_int(quantity, default=1)
    return qty if qty > 0 else 1


class CartStore:
    """
    Owns one visitor's cart snapshot.

    Every mutation builds a new immutable snapshot, recomputes the derived
    totals and hands the snapshot to the persistence adapter. Nothing here
    raises for out-of-range input: quantities and discount values are clamped.
    """

    def __init__(self, persistence: PersistenceAdapterProtocol):
        self.persistence = persistence
        self.logger = logger.bind(store="CartStore")
        loaded = persistence.load()
        self._snapshot: CartSnapshot = loaded if loaded is not None else EMPTY_SNAPSHOT
        self._totals: CartTotals = compute_totals(self._snapshot)
        self.logger.debug(
            "Cart store initialised",
            hydrated=loaded is not None,
            items=len(self._snapshot.items),
        )

    # Reads

    @property
    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    def get_snapshot(self) -> CartSnapshot:
        return self._snapshot

    @property
    def totals(self) -> CartTotals:
        return self._totals

    def get_totals(self) -> CartTotals:
        return self._totals

    @property
    def items(self) -> Tuple[LineItem, ...]:
        return self._snapshot.items

    @property
    def discount(self) -> Optional[Discount]:
        return self._snapshot.discount

    @property
    def total_item_count(self) -> int:
        return self._totals.total_item_count

    @property
    def subtotal(self) -> Decimal:
        return self._totals.subtotal

    @property
    def discount_amount(self) -> Decimal:
        return self._totals.discount_amount

    @property
    def final_total(self) -> Decimal:
        return self._totals.final_total

    def is_in_cart(self, item_id: str) -> bool:
        return self._snapshot.find(str(item_id)) is not None

    def get_item(self, item_id: str) -> Optional[LineItem]:
        return self._snapshot.find(str(item_id))

    # Mutations

    def add_item(
        self,
        product: Union[ProductSnapshot, Mapping[str, Any]],
        quantity: Any = 1,
    ) -> CartSnapshot:
        record = ProductSnapshot.from_raw(product)
        qty = _positive_quantity(quantity)
        if not record.id:
            self.logger.warning("Ignoring product without id", name=record.name)
            return self._snapshot
        if record.stock_cap <= 0:
            self.logger.warning("Ignoring out-of-stock product", product_id=record.id)
            return self._snapshot
        existing = self._snapshot.find(record.id)
        if existing is not None:
            new_qty = min(existing.quantity + qty, existing.stock_cap)
            items = tuple(
                i.with_quantity(new_qty) if i.id == record.id else i
                for i in self._snapshot.items
            )
            self.logger.debug(
                "Incremented cart line",
                product_id=record.id,
                requested=qty,
                quantity=new_qty,
            )
        else:
            new_qty = min(qty, record.stock_cap)
            line = LineItem(
                id=record.id,
                name=record.name,
                unit_price=record.unit_price,
                stock_cap=record.stock_cap,
                quantity=new_qty,
                brand=record.brand,
                category=record.category,
                image_url=record.image_url,
            )
            items = self._snapshot.items + (line,)
            self.logger.debug(
                "Added cart line", product_id=record.id, requested=qty, quantity=new_qty
            )
        return self._commit(CartSnapshot(items=items, discount=self._snapshot.discount))

    def remove_item(self, item_id: str) -> CartSnapshot:
        item_id = str(item_id)
        if self._snapshot.find(item_id) is None:
            return self._snapshot
        items = tuple(i for i in self._snapshot.items if i.id != item_id)
        self.logger.debug("Removed cart line", product_id=item_id)
        return self._commit(CartSnapshot(items=items, discount=self._snapshot.discount))

    def update_quantity(self, item_id: str, new_quantity: Any) -> CartSnapshot:
        item_id = str(item_id)
        existing = self._snapshot.find(item_id)
        if existing is None:
            return self._snapshot
        qty = to_int(new_quantity, default=0)
        if qty <= 0:
            return self.remove_item(item_id)
        qty = min(qty, existing.stock_cap)
        items = tuple(
            i.with_quantity(qty) if i.id == item_id else i for i in self._snapshot.items
        )
        self.logger.debug(
            "Updated cart line quantity",
            product_id=item_id,
            requested=new_quantity,
            quantity=qty,
        )
        return self._commit(CartSnapshot(items=items, discount=self._snapshot.discount))

    def clear_cart(self) -> CartSnapshot:
        self.logger.info("Clearing cart", items=len(self._snapshot.items))
        return self._commit(EMPTY_SNAPSHOT)

    def apply_discount(
        self,
        code: str,
        kind: Union[DiscountKind, str],
        value: Any,
        description: str = "",
        maximum_amount: Any = None,
    ) -> CartSnapshot:
        normalized_code = str(code or "").strip()
        if not normalized_code:
            # persisted discounts are keyed by code; a blank one would not survive a reload
            self.logger.warning("Ignoring discount without a code")
            return self._snapshot
        parsed_kind = DiscountKind.parse(kind) or DiscountKind.PERCENTAGE
        amount = max(ZERO, to_decimal(value))
        if parsed_kind is DiscountKind.PERCENTAGE:
            amount = min(amount, HUNDRED)
        cap: Optional[Decimal] = to_decimal(maximum_amount, default=None)
        discount = Discount(
            code=normalized_code,
            kind=parsed_kind,
            value=amount,
            description=description or "",
            maximum_amount=max(ZERO, cap) if cap is not None else None,
        )
        self.logger.info(
            "Applying discount",
            code=discount.code,
            kind=discount.kind,
            value=discount.value,
            replaced=self._snapshot.discount is not None,
        )
        return self._commit(CartSnapshot(items=self._snapshot.items, discount=discount))

    def remove_discount(self) -> CartSnapshot:
        if self._snapshot.discount is None:
            return self._snapshot
        self.logger.info("Removing discount", code=self._snapshot.discount.code)
        return self._commit(CartSnapshot(items=self._snapshot.items, discount=None))

    def _commit(self, snapshot: CartSnapshot) -> CartSnapshot:
        self._snapshot = snapshot
        self._totals = compute_totals(snapshot)
        self.persistence.save(snapshot)
        return snapshot
