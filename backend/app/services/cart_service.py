import logging
from datetime import datetime, timezone

from sqlalchemy import select, update, delete, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.cart import CartItem, cart_item_id
from app.utils.pricing import normalize_discount_percentage, promo_price

logger = logging.getLogger(__name__)


def normalize_extra_info(extra_info: dict | None) -> dict | None:
    """
    Store discount_percentage as a percentage (0.15 and 15 both become 15)
    and fill in a missing price from original_price and that percentage.
    Amounts are kept as strings, the way JSONB holds them.
    """
    if not extra_info or extra_info.get("discount_percentage") is None:
        return extra_info

    info = dict(extra_info)
    pct = normalize_discount_percentage(info["discount_percentage"])
    info["discount_percentage"] = str(pct)
    if info.get("price") is None and info.get("original_price") is not None:
        price = promo_price(info["original_price"], pct / 100, unit=settings.currency_unit)
        info["price"] = str(price)
    return info


async def get_cart_items(db: AsyncSession, account_id: int) -> list[CartItem]:
    """All cart items for an account, newest first."""
    result = await db.execute(
        select(CartItem)
        .where(CartItem.account_id == account_id)
        .order_by(CartItem.created_at.desc())
    )
    return list(result.scalars().all())


async def get_cart_item(db: AsyncSession, account_id: int, variant_id: str) -> CartItem | None:
    result = await db.execute(
        select(CartItem)
        .where(CartItem.account_id == account_id, CartItem.variant_id == variant_id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def add_cart_item(
    db: AsyncSession,
    account_id: int,
    variant_id: str,
    quantity: int = 1,
    extra_info: dict | None = None,
) -> CartItem:
    """
    Add a variant to the cart, or bump its quantity if it is already there.
    extra_info replaces the stored one only when provided.
    """
    extra_info = normalize_extra_info(extra_info)
    now = datetime.now(timezone.utc)
    stmt = pg_insert(CartItem).values(
        id=cart_item_id(account_id, variant_id),
        account_id=account_id,
        variant_id=variant_id,
        quantity=quantity,
        extra_info=extra_info,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[CartItem.id],
        set_={
            "quantity": CartItem.quantity + stmt.excluded.quantity,
            "extra_info": func.coalesce(stmt.excluded.extra_info, CartItem.extra_info),
            "updated_at": now,
        },
    ).returning(CartItem)

    result = await db.execute(stmt, execution_options={"populate_existing": True})
    item = result.scalar_one_or_none()
    if item is None:
        raise RuntimeError("Cart insert did not return row")
    await db.commit()
    logger.info(f"Cart {account_id}: added {quantity} x {variant_id} (now {item.quantity})")
    return item


async def update_cart_item_quantity(
    db: AsyncSession,
    account_id: int,
    variant_id: str,
    quantity: int,
) -> CartItem | None:
    """
    Set the quantity of a cart item.
    A quantity of 0 or less removes the item; returns None in that case
    and when the item does not exist.
    """
    if quantity <= 0:
        await remove_cart_item(db, account_id, variant_id)
        return None

    result = await db.execute(
        update(CartItem)
        .where(CartItem.account_id == account_id, CartItem.variant_id == variant_id)
        .values(quantity=quantity, updated_at=datetime.now(timezone.utc))
        .returning(CartItem),
        execution_options={"populate_existing": True},
    )
    item = result.scalar_one_or_none()
    await db.commit()
    return item


async def remove_cart_item(db: AsyncSession, account_id: int, variant_id: str) -> bool:
    result = await db.execute(
        delete(CartItem).where(
            CartItem.account_id == account_id, CartItem.variant_id == variant_id
        )
    )
    await db.commit()
    removed = result.rowcount > 0
    if removed:
        logger.info(f"Cart {account_id}: removed {variant_id}")
    return removed


async def clear_cart(db: AsyncSession, account_id: int) -> int:
    result = await db.execute(delete(CartItem).where(CartItem.account_id == account_id))
    await db.commit()
    return result.rowcount


async def get_cart_item_count(db: AsyncSession, account_id: int) -> int:
    """Total quantity across the cart (0 for an empty cart)."""
    result = await db.execute(
        select(func.coalesce(func.sum(CartItem.quantity), 0))
        .where(CartItem.account_id == account_id)
    )
    return int(result.scalar_one())


async def sync_cart_items(
    db: AsyncSession,
    account_id: int,
    local_items: list[dict],
) -> list[CartItem]:
    """
    Merge a cart held on the client (before login) into the stored cart.
    Each local item: {variant_id, quantity, extra_info?}. Quantities add up
    with what is already stored.
    """
    for item in local_items:
        await add_cart_item(
            db,
            account_id,
            item["variant_id"],
            quantity=item.get("quantity", 1),
            extra_info=item.get("extra_info"),
        )
    return await get_cart_items(db, account_id)
