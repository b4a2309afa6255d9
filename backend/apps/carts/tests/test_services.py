import unittest

from apps.carts.discounts import StaticDiscountCodeResolver
from apps.carts.persistence import InMemoryPersistence
from apps.carts.services import CartService
from apps.carts.store import CartStore
from apps.catalog.client import CatalogUnavailableError


class FakeCatalog:
    def __init__(self, products=None, fail=False):
        self.products = {p["_id"]: p for p in (products or [])}
        self.fail = fail
        self.calls = []

    def get_product(self, product_id):
        self.calls.append(product_id)
        if self.fail:
            raise CatalogUnavailableError("catalog timed out")
        return self.products.get(product_id)


BOOTS = {
    "_id": "B",
    "product_name": "Steel Toe Boots",
    "product_price": 4800,
    "product_brand": "Bondex",
    "category": {"name": "Footwear"},
    "stock": 3,
    "product_image": "https://cdn.example/boots.jpg",
}


class CartServiceTests(unittest.TestCase):
    def setUp(self):
        self.persistence = InMemoryPersistence()
        self.catalog = FakeCatalog([BOOTS, {"_id": "Z", "product_price": 10, "stock": 0}])
        self.service = CartService(
            CartStore(self.persistence),
            StaticDiscountCodeResolver(),
            products=self.catalog,
        )

    def test_get_cart_on_empty_store(self):
        data = self.service.get_cart()
        self.assertEqual(data["items"], [])
        self.assertIsNone(data["discount"])
        self.assertEqual(data["totals"]["totalItemCount"], 0)
        self.assertEqual(data["totals"]["finalTotal"], "0")

    def test_add_by_product_id_looks_up_catalog(self):
        data, error = self.service.add_item({"productId": "B", "quantity": 5})
        self.assertIsNone(error)
        self.assertEqual(self.catalog.calls, ["B"])
        self.assertEqual(data["items"][0]["quantity"], 3)
        self.assertEqual(data["items"][0]["name"], "Steel Toe Boots")
        self.assertEqual(data["totals"]["subtotal"], "14400")

    def test_inline_product_is_refetched_from_catalog(self):
        data, error = self.service.add_item(
            {"product": {"_id": "B", "product_price": "1", "stock": 999}, "quantity": 5}
        )
        self.assertIsNone(error)
        self.assertEqual(self.catalog.calls, ["B"])
        item = data["items"][0]
        self.assertEqual(item["unitPrice"], "4800")
        self.assertEqual(item["stockCap"], 3)
        self.assertEqual(item["quantity"], 3)
        self.assertEqual(data["totals"]["subtotal"], "14400")

    def test_inline_product_unknown_to_catalog_is_not_found(self):
        data, error = self.service.add_item(
            {"product": {"id": "H", "name": "Hard Hat", "price": "2500", "stock": 15}}
        )
        self.assertIsNone(data)
        self.assertEqual(error, ("NOT_FOUND", "Product not found", {"productId": "H"}))
        self.assertEqual(self.service.store.items, ())

    def test_inline_product_trusted_without_catalog(self):
        service = CartService(CartStore(InMemoryPersistence()), StaticDiscountCodeResolver())
        data, error = service.add_item(
            {"product": {"id": "H", "name": "Hard Hat", "price": "2500", "stock": 15}, "quantity": 2}
        )
        self.assertIsNone(error)
        self.assertEqual(data["totals"]["subtotal"], "5000")

    def test_add_unknown_product(self):
        data, error = self.service.add_item({"productId": "missing"})
        self.assertIsNone(data)
        self.assertEqual(error[0], "NOT_FOUND")
        self.assertEqual(error[2], {"productId": "missing"})

    def test_add_out_of_stock_product_conflicts(self):
        data, error = self.service.add_item({"productId": "Z"})
        self.assertIsNone(data)
        self.assertEqual(error[0], "CONFLICT")
        self.assertEqual(self.service.store.items, ())

    def test_add_when_catalog_unavailable(self):
        service = CartService(
            CartStore(InMemoryPersistence()),
            StaticDiscountCodeResolver(),
            products=FakeCatalog(fail=True),
        )
        data, error = service.add_item({"productId": "B"})
        self.assertIsNone(data)
        self.assertEqual(error[0], "SERVICE_UNAVAILABLE")

    def test_add_by_id_without_catalog_is_validation_error(self):
        service = CartService(CartStore(InMemoryPersistence()), StaticDiscountCodeResolver())
        _, error = service.add_item({"productId": "B"})
        self.assertEqual(error[0], "VALIDATION_ERROR")

    def test_add_invalid_payload(self):
        _, error = self.service.add_item({"quantity": 1})
        self.assertEqual(error[0], "VALIDATION_ERROR")

    def test_update_quantity_clamps_and_zero_removes(self):
        self.service.add_item({"productId": "B"})
        data, error = self.service.update_quantity("B", {"quantity": 10})
        self.assertIsNone(error)
        self.assertEqual(data["items"][0]["quantity"], 3)
        data, error = self.service.update_quantity("B", {"quantity": 0})
        self.assertIsNone(error)
        self.assertEqual(data["items"], [])

    def test_update_and_remove_missing_item(self):
        _, error = self.service.update_quantity("nope", {"quantity": 1})
        self.assertEqual(error[0], "NOT_FOUND")
        _, error = self.service.remove_item("nope")
        self.assertEqual(error, ("NOT_FOUND", "Cart item not found", {"id": "nope"}))

    def test_remove_item(self):
        self.service.add_item({"productId": "B"})
        data, error = self.service.remove_item("B")
        self.assertIsNone(error)
        self.assertEqual(data["totals"]["totalItemCount"], 0)

    def test_apply_and_remove_discount_code(self):
        self.service.add_item({"productId": "B", "quantity": 3})
        data, error = self.service.apply_code({"code": "welcome10"})
        self.assertIsNone(error)
        self.assertEqual(data["discount"]["code"], "WELCOME10")
        self.assertEqual(data["totals"]["discountAmount"], "1440")
        self.assertEqual(data["totals"]["finalTotal"], "12960")
        self.assertEqual(data["totals"]["formatted"]["finalTotal"], "KES 12,960")

        data = self.service.remove_discount()
        self.assertIsNone(data["discount"])
        self.assertEqual(data["totals"]["finalTotal"], "14400")

    def test_unknown_discount_code_leaves_cart_untouched(self):
        self.service.add_item({"productId": "B"})
        data, error = self.service.apply_code({"code": "bogus"})
        self.assertIsNone(data)
        self.assertEqual(error, ("NOT_FOUND", "Discount code not found", {"code": "BOGUS"}))
        self.assertIsNone(self.service.store.discount)

    def test_clear_cart(self):
        self.service.add_item({"productId": "B"})
        self.service.apply_code({"code": "SAVE500"})
        data = self.service.clear_cart()
        self.assertEqual(data["items"], [])
        self.assertIsNone(data["discount"])
        self.assertEqual(
            InMemoryPersistence(self.persistence.blob).load().items, ()
        )

    def test_apply_code_on_empty_cart_is_rejected(self):
        data, error = self.service.apply_code({"code": "WELCOME10"})
        self.assertIsNone(data)
        self.assertEqual(error, ("VALIDATION_ERROR", "Cart is empty", None))
        self.assertIsNone(self.service.store.discount)

    def test_empty_cart_is_checked_before_code_lookup(self):
        _, error = self.service.apply_code({"code": "bogus"})
        self.assertEqual(error[1], "Cart is empty")

    def test_apply_code_below_minimum_order_is_rejected(self):
        self.service.add_item({"productId": "B", "quantity": 2})
        data, error = self.service.apply_code({"code": "bulk15"})
        self.assertIsNone(data)
        self.assertEqual(
            error,
            (
                "VALIDATION_ERROR",
                "Minimum order amount of KES 10,000 required",
                {"code": "BULK15", "minimumOrderAmount": "10000"},
            ),
        )
        self.assertIsNone(self.service.store.discount)

    def test_percentage_code_is_capped_at_maximum_discount(self):
        service = CartService(
            CartStore(InMemoryPersistence()),
            StaticDiscountCodeResolver(),
            products=FakeCatalog([{"_id": "G", "product_price": 50000, "stock": 5}]),
        )
        service.add_item({"productId": "G", "quantity": 5})
        data, error = service.apply_code({"code": "BULK15"})
        self.assertIsNone(error)
        # 15% of 250000 would be 37500
        self.assertEqual(data["discount"]["maximumAmount"], "5000")
        self.assertEqual(data["totals"]["discountAmount"], "5000")
        self.assertEqual(data["totals"]["finalTotal"], "245000")

    def test_totals_expose_delivery_fee_and_order_total(self):
        data, _ = self.service.add_item({"productId": "B"})
        totals = data["totals"]
        self.assertEqual(totals["finalTotal"], "4800")
        self.assertEqual(totals["deliveryFee"], "300")
        self.assertEqual(totals["orderTotal"], "5100")

        data, _ = self.service.apply_code({"code": "SAVE500"})
        totals = data["totals"]
        self.assertEqual(totals["finalTotal"], "4300")
        self.assertEqual(totals["deliveryFee"], "300")
        self.assertEqual(totals["orderTotal"], "4600")

        data, _ = self.service.update_quantity("B", {"quantity": 2})
        totals = data["totals"]
        # free delivery is judged on the subtotal, before the discount
        self.assertEqual(totals["finalTotal"], "9100")
        self.assertEqual(totals["deliveryFee"], "0")
        self.assertEqual(totals["orderTotal"], "9100")
