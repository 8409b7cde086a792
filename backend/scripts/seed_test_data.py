"""Fill a test account's cart and print its checkout summary.

Usage: python -m scripts.seed_test_data [account_id] [discount]
Run from the backend/ directory.
"""

import asyncio
import sys
from decimal import Decimal

from sqlalchemy import text

from app.core.database import Base, CART_SCHEMA, async_session_factory, engine
from app.services.cart_service import clear_cart, sync_cart_items
from app.services.promo_service import get_cart_summary

TEST_ITEMS = [
    {"variant_id": "office365-1y", "quantity": 1,
     "extra_info": {"name": "Microsoft 365 Family 1 năm", "price": 590000, "original_price": 690000}},
    {"variant_id": "canva-pro-1y", "quantity": 2,
     "extra_info": {"name": "Canva Pro 1 năm", "price": 149000}},
    {"variant_id": "win11-pro", "quantity": 1,
     "extra_info": {"name": "Windows 11 Pro", "price": 333333}},
]


async def main():
    account_id = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    discount = Decimal(sys.argv[2]) if len(sys.argv) > 2 else Decimal("100000")

    async with engine.begin() as conn:
        await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {CART_SCHEMA}"))
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        removed = await clear_cart(db, account_id)
        print(f"Cleared {removed} existing items for account {account_id}")
        items = await sync_cart_items(db, account_id, TEST_ITEMS)
        print(f"Cart now has {len(items)} lines")

        summary = await get_cart_summary(db, account_id, discount)

    for line in summary["lines"]:
        print(f"  {line['label']:<32} x{line['quantity']}  {line['line_total']:>10}  -{line['discount']}")
    print(f"Subtotal: {summary['subtotal']} {summary['currency']}")
    print(f"Discount: {summary['total_discount']}")
    print(f"Total:    {summary['total_after_discount']}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
