from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from apps.catalog.client import CatalogUnavailableError
from apps.common import get_logger
from apps.common.money import format_kes, money_str

from .commands import CartItemCommand, DiscountCommand, ProductSnapshot, QuantityUpdateCommand
from .mappers import CartMapper
from .protocols import DiscountCodeResolverProtocol, ProductLookupProtocol
from .store import CartStore

logger = get_logger(__name__).bind(component="carts", layer="service")

ErrorTuple = Tuple[str, str, Optional[Dict[str, Any]]]
Result = Tuple[Optional[Dict[str, Any]], Optional[ErrorTuple]]


class CartService:
    """Request-facing cart operations over one visitor's CartStore."""

    def __init__(
        self,
        store: CartStore,
        resolver: DiscountCodeResolverProtocol,
        products: Optional[ProductLookupProtocol] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.products = products
        self.logger = logger.bind(service="CartService")

    def get_cart(self) -> Dict[str, Any]:
        return CartMapper.to_dict(self.store.snapshot, self.store.totals)

    def add_item(self, payload: Dict[str, Any]) -> Result:
        try:
            command = CartItemCommand.from_raw(payload)
        except ValueError as exc:
            return None, ("VALIDATION_ERROR", str(exc), None)
        product = command.product
        if self.products is not None:
            # an inline record only names the product; price and stock come from the catalog
            product_id = product.id if product is not None else command.product_id
            product, error = self._lookup_product(product_id)
            if error:
                return None, error
        elif product is None:
            return None, ("VALIDATION_ERROR", "Inline product record is required", None)
        if product.stock_cap <= 0:
            self.logger.info("Add rejected: product out of stock", product_id=product.id)
            return None, (
                "CONFLICT",
                "Product is out of stock",
                {"productId": product.id},
            )
        self.store.add_item(product, command.quantity)
        self.logger.info(
            "Item added to cart",
            product_id=product.id,
            quantity=command.quantity,
            total_items=self.store.total_item_count,
        )
        return self.get_cart(), None

    def _lookup_product(
        self, product_id: Optional[str]
    ) -> Tuple[Optional[ProductSnapshot], Optional[ErrorTuple]]:
        try:
            record = self.products.get_product(str(product_id))
        except CatalogUnavailableError as exc:
            self.logger.warning(
                "Catalog lookup failed while adding to cart",
                product_id=product_id,
                error=str(exc),
            )
            return None, ("SERVICE_UNAVAILABLE", "Catalog service unavailable", None)
        if record is None:
            return None, ("NOT_FOUND", "Product not found", {"productId": str(product_id)})
        return ProductSnapshot.from_raw(record), None

    def update_quantity(self, item_id: str, payload: Dict[str, Any]) -> Result:
        command = QuantityUpdateCommand.from_raw(item_id, payload)
        if not self.store.is_in_cart(command.item_id):
            return None, ("NOT_FOUND", "Cart item not found", {"id": command.item_id})
        self.store.update_quantity(command.item_id, command.quantity)
        self.logger.info(
            "Cart item quantity updated",
            product_id=command.item_id,
            requested=command.quantity,
        )
        return self.get_cart(), None

    def remove_item(self, item_id: str) -> Result:
        if not self.store.is_in_cart(item_id):
            return None, ("NOT_FOUND", "Cart item not found", {"id": str(item_id)})
        self.store.remove_item(item_id)
        self.logger.info("Cart item removed", product_id=item_id)
        return self.get_cart(), None

    def clear_cart(self) -> Dict[str, Any]:
        self.store.clear_cart()
        return self.get_cart()

    def apply_code(self, payload: Dict[str, Any]) -> Result:
        try:
            command = DiscountCommand.from_raw(payload)
        except ValueError as exc:
            return None, ("VALIDATION_ERROR", str(exc), None)
        if not self.store.items:
            return None, ("VALIDATION_ERROR", "Cart is empty", None)
        rule = self.resolver.lookup(command.code)
        if rule is None:
            self.logger.info("Unknown discount code", code=command.code)
            return None, (
                "NOT_FOUND",
                "Discount code not found",
                {"code": command.code},
            )
        if self.store.subtotal < rule.minimum_order_amount:
            self.logger.info(
                "Discount code below minimum order",
                code=command.code,
                subtotal=self.store.subtotal,
                minimum=rule.minimum_order_amount,
            )
            return None, (
                "VALIDATION_ERROR",
                f"Minimum order amount of {format_kes(rule.minimum_order_amount)} required",
                {
                    "code": command.code,
                    "minimumOrderAmount": money_str(rule.minimum_order_amount),
                },
            )
        discount = rule.discount
        self.store.apply_discount(
            discount.code,
            discount.kind,
            discount.value,
            discount.description,
            maximum_amount=discount.maximum_amount,
        )
        return self.get_cart(), None

    def remove_discount(self) -> Dict[str, Any]:
        self.store.remove_discount()
        return self.get_cart()
