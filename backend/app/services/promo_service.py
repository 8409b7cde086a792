import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.utils.pricing import cart_totals
from app.utils.promo_allocation import ROUNDING_MODES, ABSORB_LAST, allocate, item_field, line_total, to_decimal
from app.services.cart_service import get_cart_items

logger = logging.getLogger(__name__)


def allocate_discount(items: list, total_discount, absorb: str = ABSORB_LAST) -> list[Decimal]:
    """allocate() with the store's currency unit and rounding mode."""
    return allocate(
        items,
        total_discount,
        unit=settings.currency_unit,
        rounding=ROUNDING_MODES[settings.promo_rounding],
        absorb=absorb,
    )


def build_checkout_summary(items: list[dict], total_discount) -> dict:
    """
    Per-line breakdown of a promo applied to the whole cart.
    Each item: {unit_price (or price), quantity?, label?}. Lines without a
    label are named after their 1-based position.
    """
    discounts = allocate_discount(items, total_discount)
    total_discount = Decimal(str(total_discount))

    lines = []
    subtotal = Decimal("0")
    for i, (item, discount) in enumerate(zip(items, discounts)):
        total = line_total(item, i)
        subtotal += total
        quantity = item_field(item, "quantity")
        lines.append({
            "label": item_field(item, "label") or f"Sản phẩm {i + 1}",
            "quantity": 1 if quantity is None else int(quantity),
            "unit_price": to_decimal(item_field(item, "unit_price", "price"), "unit_price"),
            "line_total": total,
            "discount": discount,
        })

    return {
        "currency": settings.currency,
        "lines": lines,
        "subtotal": subtotal,
        "total_discount": total_discount,
        "total_after_discount": max(Decimal("0"), subtotal - total_discount),
    }


def _cart_lines(rows) -> list[dict]:
    return [
        {
            "label": row.name,
            "unit_price": row.price if row.price is not None else 0,
            "quantity": row.quantity,
        }
        for row in rows
    ]


async def get_cart_summary(db: AsyncSession, account_id: int, total_discount) -> dict:
    """Checkout summary for a stored cart. Lines keep the cart order (newest first)."""
    rows = await get_cart_items(db, account_id)
    summary = build_checkout_summary(_cart_lines(rows), total_discount)
    logger.info(
        f"Cart {account_id}: {len(rows)} lines, subtotal {summary['subtotal']}, "
        f"discount {summary['total_discount']}"
    )
    return summary


async def get_cart_totals(db: AsyncSession, account_id: int) -> dict:
    rows = await get_cart_items(db, account_id)
    return cart_totals([
        {"price": row.price, "quantity": row.quantity, "original_price": row.original_price}
        for row in rows
    ])
