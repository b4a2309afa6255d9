import unittest
from decimal import Decimal

from apps.carts.dtos import CartSnapshot, Discount, DiscountKind, LineItem
from apps.carts.mappers import (
    SCHEMA_VERSION,
    CartMapper,
    SnapshotFormatError,
    SnapshotMapper,
)
from apps.carts.totals import compute_totals


def make_item(item_id="A", price="2500", quantity=2, stock=15):
    return LineItem(
        id=item_id,
        name=f"Item {item_id}",
        unit_price=Decimal(price),
        stock_cap=stock,
        quantity=quantity,
        brand="Bondex",
        category="Footwear",
        image_url=f"https://cdn.example/{item_id}.jpg",
    )


class SnapshotMapperTests(unittest.TestCase):
    def test_blob_layout(self):
        snapshot = CartSnapshot(
            items=(make_item(price="19.90"),),
            discount=Discount("WELCOME10", DiscountKind.PERCENTAGE, Decimal("10")),
        )
        blob = SnapshotMapper.to_blob(snapshot)
        self.assertEqual(blob["schemaVersion"], SCHEMA_VERSION)
        self.assertEqual(
            blob["items"][0],
            {
                "id": "A",
                "name": "Item A",
                "brand": "Bondex",
                "category": "Footwear",
                "unitPrice": "19.9",
                "imageUrl": "https://cdn.example/A.jpg",
                "stockCap": 15,
                "quantity": 2,
            },
        )
        self.assertEqual(
            blob["discount"],
            {
                "code": "WELCOME10",
                "kind": "percentage",
                "value": "10",
                "description": "",
                "maximumAmount": None,
            },
        )
        self.assertEqual(SnapshotMapper.from_blob(blob), snapshot)

    def test_discount_cap_survives_blob_round_trip(self):
        snapshot = CartSnapshot(
            items=(make_item(),),
            discount=Discount(
                "BULK15",
                DiscountKind.PERCENTAGE,
                Decimal("15"),
                "15% off bulk orders",
                maximum_amount=Decimal("5000"),
            ),
        )
        blob = SnapshotMapper.to_blob(snapshot)
        self.assertEqual(blob["discount"]["maximumAmount"], "5000")
        self.assertEqual(SnapshotMapper.from_blob(blob), snapshot)

    def test_empty_snapshot_blob(self):
        self.assertEqual(
            SnapshotMapper.to_blob(CartSnapshot()),
            {"schemaVersion": SCHEMA_VERSION, "items": [], "discount": None},
        )

    def test_migrates_bare_list_blob(self):
        legacy = [
            {"_id": "A", "name": "Boots", "price": 4800, "quantity": 2, "image": "b.jpg", "stock": 3},
            {"id": "B", "name": "Hat", "price": "1200", "quantity": 1},
        ]
        snapshot = SnapshotMapper.from_blob(legacy)
        self.assertEqual([i.id for i in snapshot.items], ["A", "B"])
        self.assertEqual(snapshot.items[0].unit_price, Decimal("4800"))
        self.assertEqual(snapshot.items[0].image_url, "b.jpg")
        self.assertEqual(snapshot.items[0].stock_cap, 3)
        # no stock recorded: the stored quantity becomes the cap
        self.assertEqual(snapshot.items[1].stock_cap, 1)
        self.assertIsNone(snapshot.discount)

    def test_unversioned_dict_blob_is_read(self):
        snapshot = SnapshotMapper.from_blob(
            {"items": [{"id": "A", "price": "10", "quantity": 1}], "discount": {"code": "X", "type": "fixed", "value": 5}}
        )
        self.assertEqual(len(snapshot.items), 1)
        self.assertEqual(snapshot.discount.kind, DiscountKind.FIXED_AMOUNT)

    def test_invalid_and_duplicate_lines_are_dropped(self):
        snapshot = SnapshotMapper.from_blob(
            {
                "schemaVersion": 1,
                "items": [
                    {"id": "A", "unitPrice": "10", "stockCap": 5, "quantity": 9},
                    {"id": "A", "unitPrice": "10", "stockCap": 5, "quantity": 1},
                    {"id": "", "quantity": 1},
                    {"id": "C", "quantity": 0},
                    "garbage",
                ],
                "discount": {"code": "", "kind": "percentage", "value": "5"},
            }
        )
        self.assertEqual(len(snapshot.items), 1)
        # stored quantity is re-clamped to the stored stock cap
        self.assertEqual(snapshot.items[0].quantity, 5)
        self.assertIsNone(snapshot.discount)

    def test_rejects_unknown_version_and_shapes(self):
        with self.assertRaises(SnapshotFormatError):
            SnapshotMapper.from_blob({"schemaVersion": SCHEMA_VERSION + 1, "items": []})
        with self.assertRaises(SnapshotFormatError):
            SnapshotMapper.from_blob({"schemaVersion": 1, "items": "nope"})
        with self.assertRaises(SnapshotFormatError):
            SnapshotMapper.from_blob(42)


class CartMapperTests(unittest.TestCase):
    def test_to_dict_includes_line_totals_and_formatted_totals(self):
        snapshot = CartSnapshot(
            items=(make_item("B", price="4800", quantity=3, stock=3),),
            discount=Discount("WELCOME10", DiscountKind.PERCENTAGE, Decimal("10"), "10% off"),
        )
        data = CartMapper.to_dict(snapshot, compute_totals(snapshot))
        self.assertEqual(data["items"][0]["lineTotal"], "14400")
        self.assertEqual(data["discount"]["description"], "10% off")
        totals = data["totals"]
        self.assertEqual(totals["totalItemCount"], 3)
        self.assertEqual(totals["subtotal"], "14400")
        self.assertEqual(totals["discountAmount"], "1440")
        self.assertEqual(totals["finalTotal"], "12960")
        self.assertEqual(totals["currency"], "KES")
        self.assertEqual(totals["formatted"]["finalTotal"], "KES 12,960")
        self.assertEqual(totals["deliveryFee"], "0")
        self.assertEqual(totals["orderTotal"], "12960")

    def test_delivery_fee_below_threshold_is_added_to_order_total(self):
        snapshot = CartSnapshot(items=(make_item("A", price="1200", quantity=2),))
        totals = CartMapper.totals_to_dict(compute_totals(snapshot))
        self.assertEqual(totals["finalTotal"], "2400")
        self.assertEqual(totals["deliveryFee"], "300")
        self.assertEqual(totals["orderTotal"], "2700")
        self.assertEqual(totals["formatted"]["deliveryFee"], "KES 300")
        self.assertEqual(totals["formatted"]["orderTotal"], "KES 2,700")
