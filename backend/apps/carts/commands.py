from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from django.conf import settings

from apps.common.money import ZERO, to_decimal, to_int

DEFAULT_PLACEHOLDER_IMAGE_URL = "/images/placeholder-product.png"


def _placeholder_image_url() -> str:
    return getattr(
        settings, "BONDEX_PLACEHOLDER_IMAGE_URL", DEFAULT_PLACEHOLDER_IMAGE_URL
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first_image(raw: Mapping[str, Any]) -> str:
    image = _text(raw.get("product_image") or raw.get("image"))
    if image:
        return image
    images = raw.get("images")
    if isinstance(images, (list, tuple)) and images:
        first = images[0]
        # uploaded images come back either as plain URLs or as {url, public_id}
        if isinstance(first, Mapping):
            first = first.get("url") or first.get("secure_url")
        image = _text(first)
        if image:
            return image
    return _placeholder_image_url()


def _category_name(raw_category: Any) -> str:
    if isinstance(raw_category, Mapping):
        return _text(raw_category.get("name"))
    return _text(raw_category)


@dataclass(frozen=True)
class ProductSnapshot:
    """Catalog fields copied into the cart at add-time."""

    id: str
    name: str
    unit_price: Decimal
    stock_cap: int
    brand: str = ""
    category: str = ""
    image_url: str = ""

    @staticmethod
    def from_raw(raw: Mapping[str, Any]) -> "ProductSnapshot":
        if isinstance(raw, ProductSnapshot):
            return raw
        data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
        pid = data.get("_id")
        if pid in (None, ""):
            pid = data.get("id")
        name = data.get("product_name")
        if name in (None, ""):
            name = data.get("name")
        price = data.get("product_price")
        if price in (None, ""):
            price = data.get("price")
        brand = data.get("product_brand")
        if brand in (None, ""):
            brand = data.get("brand")
        return ProductSnapshot(
            id=_text(pid),
            name=_text(name),
            unit_price=max(ZERO, to_decimal(price)),
            stock_cap=max(0, to_int(data.get("stock"))),
            brand=_text(brand),
            category=_category_name(data.get("category")),
            image_url=_first_image(data),
        )


@dataclass
class CartItemCommand:
    quantity: int
    product: Optional[ProductSnapshot] = None
    product_id: Optional[str] = None

    @staticmethod
    def from_raw(raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            raise ValueError("Payload must be a dict")
        qty = to_int(raw.get("quantity", 1), default=1)
        if qty <= 0:
            qty = 1
        product_raw = raw.get("product")
        if isinstance(product_raw, Mapping):
            product = ProductSnapshot.from_raw(product_raw)
            if product.id:
                return CartItemCommand(quantity=qty, product=product)
        pid = _text(raw.get("productId") or raw.get("product_id"))
        if not pid:
            raise ValueError("Either product or productId is required")
        return CartItemCommand(quantity=qty, product_id=pid)


@dataclass
class QuantityUpdateCommand:
    item_id: str
    quantity: int

    @staticmethod
    def from_raw(item_id: str, raw: Dict[str, Any]):
        payload = raw if isinstance(raw, dict) else {}
        # anything unparseable is treated as a removal request
        qty = to_int(payload.get("quantity"), default=0)
        return QuantityUpdateCommand(item_id=_text(item_id), quantity=qty)


@dataclass
class DiscountCommand:
    code: str

    @staticmethod
    def from_raw(raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            raise ValueError("Payload must be a dict")
        code = _text(raw.get("code") or raw.get("promoCode")).upper()
        if not code:
            raise ValueError("code is required")
        return DiscountCommand(code=code)
