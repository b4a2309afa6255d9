from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Set

from apps.common import get_logger
from apps.common.money import CURRENCY, ZERO, format_kes, money_str, to_decimal, to_int

from .dtos import CartSnapshot, CartTotals, Discount, DiscountKind, LineItem

SCHEMA_VERSION = 1

logger = get_logger(__name__).bind(component="carts", layer="mapper")


class SnapshotFormatError(ValueError):
    """Raised when a persisted blob cannot be read as a cart snapshot."""


class LineItemMapper:
    @staticmethod
    def to_blob(item: LineItem) -> Dict[str, Any]:
        return {
            "id": item.id,
            "name": item.name,
            "brand": item.brand,
            "category": item.category,
            "unitPrice": money_str(item.unit_price),
            "imageUrl": item.image_url,
            "stockCap": item.stock_cap,
            "quantity": item.quantity,
        }

    @staticmethod
    def from_blob(raw: Any) -> Optional[LineItem]:
        if not isinstance(raw, Mapping):
            return None
        item_id = str(raw.get("id") or raw.get("_id") or "").strip()
        quantity = to_int(raw.get("quantity"), default=0)
        if not item_id or quantity <= 0:
            return None
        # pre-versioned blobs never recorded stock; trust the stored quantity
        stock_cap = to_int(raw.get("stockCap", raw.get("stock")), default=quantity)
        quantity = min(quantity, stock_cap)
        if quantity <= 0:
            return None
        price = raw.get("unitPrice", raw.get("price"))
        return LineItem(
            id=item_id,
            name=str(raw.get("name") or ""),
            unit_price=max(ZERO, to_decimal(price)),
            stock_cap=stock_cap,
            quantity=quantity,
            brand=str(raw.get("brand") or ""),
            category=str(raw.get("category") or ""),
            image_url=str(raw.get("imageUrl") or raw.get("image") or ""),
        )


class DiscountMapper:
    @staticmethod
    def to_blob(discount: Optional[Discount]) -> Optional[Dict[str, Any]]:
        if discount is None:
            return None
        return {
            "code": discount.code,
            "kind": discount.kind.value,
            "value": money_str(discount.value),
            "description": discount.description,
            "maximumAmount": (
                money_str(discount.maximum_amount)
                if discount.maximum_amount is not None
                else None
            ),
        }

    @staticmethod
    def from_blob(raw: Any) -> Optional[Discount]:
        if not isinstance(raw, Mapping):
            return None
        code = str(raw.get("code") or "").strip()
        kind = DiscountKind.parse(raw.get("kind") or raw.get("type"))
        value = to_decimal(raw.get("value"), default=None)
        if not code or kind is None or value is None:
            return None
        return Discount(
            code=code,
            kind=kind,
            value=value,
            description=str(raw.get("description") or ""),
            maximum_amount=to_decimal(raw.get("maximumAmount"), default=None),
        )


class SnapshotMapper:
    """Translate snapshots to and from the persisted blob format."""

    @staticmethod
    def to_blob(snapshot: CartSnapshot) -> Dict[str, Any]:
        return {
            "schemaVersion": SCHEMA_VERSION,
            "items": [LineItemMapper.to_blob(i) for i in snapshot.items],
            "discount": DiscountMapper.to_blob(snapshot.discount),
        }

    @staticmethod
    def from_blob(blob: Any) -> CartSnapshot:
        if isinstance(blob, list):
            # oldest format: a bare list of items
            raw_items, raw_discount, version = blob, None, 0
        elif isinstance(blob, Mapping):
            version = to_int(blob.get("schemaVersion"), default=0)
            raw_items = blob.get("items") or []
            raw_discount = blob.get("discount")
        else:
            raise SnapshotFormatError(f"Unsupported blob type {type(blob).__name__}")
        if version > SCHEMA_VERSION:
            raise SnapshotFormatError(f"Unknown schema version {version}")
        if not isinstance(raw_items, list):
            raise SnapshotFormatError("items must be a list")
        items: List[LineItem] = []
        seen: Set[str] = set()
        for raw in raw_items:
            item = LineItemMapper.from_blob(raw)
            if item is None or item.id in seen:
                logger.debug("Dropping unreadable cart line", version=version)
                continue
            seen.add(item.id)
            items.append(item)
        return CartSnapshot(
            items=tuple(items), discount=DiscountMapper.from_blob(raw_discount)
        )


class CartMapper:
    """API representation of a snapshot with its derived totals."""

    @staticmethod
    def item_to_dict(item: LineItem) -> Dict[str, Any]:
        data = LineItemMapper.to_blob(item)
        data["lineTotal"] = money_str(item.line_total)
        return data

    @staticmethod
    def totals_to_dict(totals: CartTotals) -> Dict[str, Any]:
        return {
            "totalItemCount": totals.total_item_count,
            "subtotal": money_str(totals.subtotal),
            "discountAmount": money_str(totals.discount_amount),
            "finalTotal": money_str(totals.final_total),
            "deliveryFee": money_str(totals.delivery_fee),
            "orderTotal": money_str(totals.order_total),
            "currency": CURRENCY,
            "formatted": {
                "subtotal": format_kes(totals.subtotal),
                "discountAmount": format_kes(totals.discount_amount),
                "finalTotal": format_kes(totals.final_total),
                "deliveryFee": format_kes(totals.delivery_fee),
                "orderTotal": format_kes(totals.order_total),
            },
        }

    @staticmethod
    def to_dict(snapshot: CartSnapshot, totals: CartTotals) -> Dict[str, Any]:
        return {
            "items": [CartMapper.item_to_dict(i) for i in snapshot.items],
            "discount": DiscountMapper.to_blob(snapshot.discount),
            "totals": CartMapper.totals_to_dict(totals),
        }
