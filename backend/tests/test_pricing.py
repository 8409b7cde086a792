from decimal import Decimal
import unittest

from app.utils.pricing import cart_totals, normalize_discount_percentage, promo_price
from app.utils.promo_allocation import InvalidAllocationInput


class TestPromoPrice(unittest.TestCase):
    def test_fractional_rate(self):
        self.assertEqual(promo_price(100000, Decimal("0.15")), Decimal("85000"))

    def test_rounds_to_whole_dong(self):
        self.assertEqual(promo_price(99999, 0.1), Decimal("89999"))

    def test_no_promo(self):
        self.assertEqual(promo_price(120000, None), Decimal("120000"))

    def test_rate_out_of_range(self):
        with self.assertRaises(InvalidAllocationInput):
            promo_price(100000, 15)


class TestNormalizeDiscountPercentage(unittest.TestCase):
    def test_fraction_becomes_percentage(self):
        self.assertEqual(normalize_discount_percentage(0.15), Decimal("15"))

    def test_percentage_kept(self):
        self.assertEqual(normalize_discount_percentage(20), Decimal("20"))

    def test_missing(self):
        self.assertEqual(normalize_discount_percentage(None), Decimal("0"))


class TestCartTotals(unittest.TestCase):
    def test_totals(self):
        items = [
            {"price": 90000, "quantity": 2, "original_price": 100000},
            {"price": "50000", "quantity": 1},
        ]
        totals = cart_totals(items)
        self.assertEqual(totals["item_count"], 3)
        self.assertEqual(totals["subtotal"], Decimal("230000"))
        self.assertEqual(totals["total_discount"], Decimal("20000"))

    def test_zero_original_price_ignored(self):
        """JSONB hands back "0" as text; it still means no strike-through price."""
        items = [{"price": "90000", "quantity": 1, "original_price": "0"}]
        self.assertEqual(cart_totals(items)["total_discount"], Decimal("0"))

    def test_empty_cart(self):
        self.assertEqual(
            cart_totals([]),
            {"item_count": 0, "subtotal": Decimal("0"), "total_discount": Decimal("0")},
        )


if __name__ == "__main__":
    unittest.main()
