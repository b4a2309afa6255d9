import unittest

from apps.catalog.client import CatalogUnavailableError
from apps.catalog.filters import FilterState
from apps.catalog.services import ProductQueryService


class FakeCatalogClient:
    def __init__(self, products=None, fail=False):
        self.products = list(products or [])
        self.fail = fail
        self.list_calls = []

    def list_products(self, state, *, limit=None):
        self.list_calls.append((state, limit))
        if self.fail:
            raise CatalogUnavailableError("down")
        return {"products": self.products, "total": len(self.products), "page": state.page, "pages": 1}

    def get_product(self, product_id):
        if self.fail:
            raise CatalogUnavailableError("down")
        for product in self.products:
            if product["_id"] == product_id:
                return product
        return None


class ProductQueryServiceTests(unittest.TestCase):
    def setUp(self):
        self.catalog = FakeCatalogClient([{"_id": "A"}, {"_id": "B"}])
        self.service = ProductQueryService(self.catalog, page_size=6)

    def test_list_products_includes_canonical_filters(self):
        payload, error = self.service.list_products(
            {"industry": "mining", "sort": "newest", "page": "1", "bogus": "x"}
        )
        self.assertIsNone(error)
        state, limit = self.catalog.list_calls[0]
        self.assertEqual(state, FilterState(industry="mining"))
        self.assertEqual(limit, 6)
        self.assertEqual(payload["products"], [{"_id": "A"}, {"_id": "B"}])
        self.assertEqual(payload["total"], 2)
        self.assertEqual(payload["query"], {"industry": "mining"})
        self.assertEqual(payload["queryString"], "industry=mining")
        self.assertTrue(payload["hasActiveFilters"])
        self.assertEqual(payload["filters"]["industry"], "mining")

    def test_list_products_catalog_unavailable(self):
        service = ProductQueryService(FakeCatalogClient(fail=True))
        payload, error = service.list_products({})
        self.assertIsNone(payload)
        self.assertEqual(error[0], "SERVICE_UNAVAILABLE")

    def test_canonical_filters(self):
        data = self.service.canonical_filters({"onSale": "true", "page": "2"})
        self.assertEqual(data["query"], {"onSale": "true", "page": "2"})
        self.assertEqual(data["queryString"], "onSale=true&page=2")
        self.assertEqual(data["filters"]["page"], 2)

    def test_get_product(self):
        record, error = self.service.get_product("B")
        self.assertIsNone(error)
        self.assertEqual(record, {"_id": "B"})

    def test_get_missing_product(self):
        record, error = self.service.get_product("Z")
        self.assertIsNone(record)
        self.assertEqual(error, ("NOT_FOUND", "Product not found", {"id": "Z"}))

    def test_get_product_catalog_unavailable(self):
        service = ProductQueryService(FakeCatalogClient(fail=True))
        _, error = service.get_product("A")
        self.assertEqual(error[0], "SERVICE_UNAVAILABLE")
