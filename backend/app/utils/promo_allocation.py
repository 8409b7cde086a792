from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, ROUND_HALF_EVEN

ABSORB_LAST = "last"
ABSORB_LARGEST = "largest"

ROUNDING_MODES = {
    "half_up": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
}


class InvalidAllocationInput(ValueError):
    """Raised when prices, quantities or the discount cannot be allocated."""


def to_decimal(value, field: str) -> Decimal:
    """
    Money-safe conversion. Floats go through str() so 0.1 stays 0.1; numeric
    strings are accepted since JSONB round-trips Decimals as text.
    """
    # bool is an int subclass, never a price
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise InvalidAllocationInput(f"{field} must be a number, got {value!r}")
    try:
        value = Decimal(str(value)) if isinstance(value, (float, str)) else Decimal(value)
    except InvalidOperation:
        raise InvalidAllocationInput(f"{field} must be a number, got {value!r}") from None
    if not value.is_finite():
        raise InvalidAllocationInput(f"{field} must be finite, got {value}")
    return value


def item_field(item, *names):
    for name in names:
        if isinstance(item, Mapping):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return None


def round_to_unit(value: Decimal, unit: Decimal, rounding: str) -> Decimal:
    return (value / unit).to_integral_value(rounding=rounding) * unit


def line_total(item, position: int = 0) -> Decimal:
    """
    unit_price * quantity for one cart line.
    Accepts a mapping or an object exposing `unit_price` (or `price`) and an
    optional `quantity`; a missing quantity counts as 1, a quantity of 0
    makes a free line.
    """
    label = f"items[{position}]"
    price = item_field(item, "unit_price", "price")
    if price is None:
        raise InvalidAllocationInput(f"{label}.unit_price is required")
    price = to_decimal(price, f"{label}.unit_price")
    if price < 0:
        raise InvalidAllocationInput(f"{label}.unit_price must be >= 0, got {price}")

    quantity = item_field(item, "quantity")
    if quantity is None:
        return price
    quantity = to_decimal(quantity, f"{label}.quantity")
    if quantity != quantity.to_integral_value() or quantity < 0:
        raise InvalidAllocationInput(
            f"{label}.quantity must be a non-negative integer, got {quantity}"
        )
    return price * quantity


def allocate_promo_discount(
    line_totals: list,
    total_discount,
    *,
    unit=Decimal("1"),
    rounding: str = ROUND_HALF_UP,
    absorb: str = ABSORB_LAST,
) -> list[Decimal]:
    """
    Split total_discount across line totals proportionally so that the parts
    sum EXACTLY to total_discount.

    Every line except the absorbing one gets round(D * P_i / S) rounded to the
    nearest `unit`; the absorbing line gets D minus the others. The absorbing
    line is the last one by default, or the one with the largest line total
    when absorb="largest" (earliest position wins ties). Its share is not
    clamped, so it can dip below zero when rounding overshoots.

    Args:
        line_totals: Pre-discount total of each line (price * quantity).
        total_discount: The discount to split (D). When D is finer than unit, the
            absorbing line takes the fraction.
        unit: Smallest money step. 1 for VND.
        rounding: decimal rounding mode for the proportional shares.
        absorb: "last" or "largest".

    Returns:
        List of Decimal discounts aligned index-for-index with line_totals.
    """
    unit = to_decimal(unit, "unit")
    if unit <= 0:
        raise InvalidAllocationInput(f"unit must be > 0, got {unit}")
    if absorb not in (ABSORB_LAST, ABSORB_LARGEST):
        raise InvalidAllocationInput(f"Unknown absorb strategy: {absorb!r}")

    discount = to_decimal(total_discount, "total_discount")
    if discount < 0:
        raise InvalidAllocationInput(f"total_discount must be >= 0, got {discount}")

    totals = []
    for i, value in enumerate(line_totals):
        value = to_decimal(value, f"line_totals[{i}]")
        if value < 0:
            raise InvalidAllocationInput(f"line_totals[{i}] must be >= 0, got {value}")
        totals.append(value)

    n = len(totals)
    if n == 0:
        return []

    subtotal = sum(totals, Decimal("0"))
    if discount == 0 or subtotal == 0:
        return [Decimal("0")] * n

    if absorb == ABSORB_LARGEST:
        absorber = max(range(n), key=lambda i: (totals[i], -i))
    else:
        absorber = n - 1

    result = [Decimal("0")] * n
    allocated = Decimal("0")
    for i, value in enumerate(totals):
        if i == absorber:
            continue
        share = round_to_unit(discount * value / subtotal, unit, rounding)
        result[i] = share
        allocated += share

    result[absorber] = discount - allocated
    return result


def allocate(
    items: list,
    total_discount,
    *,
    unit=Decimal("1"),
    rounding: str = ROUND_HALF_UP,
    absorb: str = ABSORB_LAST,
) -> list[Decimal]:
    """
    Allocate total_discount across cart line items by their share of the
    subtotal. Items carry `unit_price` (or `price`) and an optional
    `quantity` (defaults to 1). See allocate_promo_discount for the rules.

    >>> allocate([{"unit_price": 100}, {"unit_price": 200}, {"unit_price": 300}], 100)
    [Decimal('17'), Decimal('33'), Decimal('50')]
    """
    totals = [line_total(item, i) for i, item in enumerate(items)]
    return allocate_promo_discount(
        totals, total_discount, unit=unit, rounding=rounding, absorb=absorb
    )
