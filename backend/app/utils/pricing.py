from decimal import Decimal, ROUND_HALF_UP

from app.utils.promo_allocation import InvalidAllocationInput, to_decimal, round_to_unit


def promo_price(sale_price, pct_promo, unit=Decimal("1"), rounding: str = ROUND_HALF_UP) -> Decimal:
    """Sale price after a promo rate given as a fraction (0.1 = 10% off)."""
    price = to_decimal(sale_price, "sale_price")
    pct = to_decimal(pct_promo if pct_promo is not None else 0, "pct_promo")
    if price < 0:
        raise InvalidAllocationInput(f"sale_price must be >= 0, got {price}")
    if pct < 0 or pct > 1:
        raise InvalidAllocationInput(f"pct_promo must be between 0 and 1, got {pct}")
    return round_to_unit(price * (1 - pct), to_decimal(unit, "unit"), rounding)


def normalize_discount_percentage(raw) -> Decimal:
    """
    Promo rates are stored either as a fraction (0.15) or as a percentage (15).
    Anything above 1 is taken to already be a percentage.
    """
    if raw is None:
        return Decimal("0")
    value = to_decimal(raw, "discount_percentage")
    return value if value > 1 else value * 100


def cart_totals(items: list[dict]) -> dict:
    """
    Totals shown on the cart badge and cart page.
    Each item: {price, quantity, original_price?}. Only items that carry an
    original_price contribute to total_discount.
    """
    item_count = 0
    subtotal = Decimal("0")
    total_discount = Decimal("0")

    for item in items:
        quantity = int(item.get("quantity") or 0)
        price = to_decimal(item.get("price") or 0, "price")
        item_count += quantity
        subtotal += price * quantity

        original = item.get("original_price")
        if original is None:
            continue
        original = to_decimal(original, "original_price")
        if original > 0:
            total_discount += (original - price) * quantity

    return {
        "item_count": item_count,
        "subtotal": subtotal,
        "total_discount": total_discount,
    }
