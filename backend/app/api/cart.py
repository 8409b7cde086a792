from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.cart import (
    CartItemAdd, CartItemUpdate, CartSyncRequest,
    CartItemResponse, CartResponse, CartTotalsResponse,
)
from app.schemas.promo import CheckoutSummary
from app.services.cart_service import (
    get_cart_items, get_cart_item, get_cart_item_count, add_cart_item, update_cart_item_quantity,
    remove_cart_item, clear_cart, sync_cart_items,
)
from app.services.promo_service import get_cart_summary, get_cart_totals
from app.utils.promo_allocation import InvalidAllocationInput

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _extra_info(body: CartItemAdd) -> dict | None:
    if body.extra_info is None:
        return None
    return body.extra_info.model_dump(mode="json", exclude_none=True)


@router.get("/{account_id}", response_model=CartResponse)
async def get_cart(account_id: int, db: AsyncSession = Depends(get_db)):
    items = await get_cart_items(db, account_id)
    count = await get_cart_item_count(db, account_id)
    return {"items": items, "count": count}


@router.get("/{account_id}/items/{variant_id}", response_model=CartItemResponse)
async def get_item(account_id: int, variant_id: str, db: AsyncSession = Depends(get_db)):
    item = await get_cart_item(db, account_id, variant_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return item


@router.post("/{account_id}/items", response_model=CartItemResponse, status_code=201)
async def add_item(account_id: int, body: CartItemAdd, db: AsyncSession = Depends(get_db)):
    try:
        return await add_cart_item(
            db, account_id, body.variant_id, quantity=body.quantity, extra_info=_extra_info(body)
        )
    except InvalidAllocationInput as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.patch("/{account_id}/items/{variant_id}", response_model=CartItemResponse | None)
async def update_item(
    account_id: int,
    variant_id: str,
    body: CartItemUpdate,
    db: AsyncSession = Depends(get_db),
):
    item = await update_cart_item_quantity(db, account_id, variant_id, body.quantity)
    # quantity <= 0 removes the item, nothing to return
    if item is None and body.quantity > 0:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return item


@router.delete("/{account_id}/items/{variant_id}", status_code=204)
async def remove_item(account_id: int, variant_id: str, db: AsyncSession = Depends(get_db)):
    if not await remove_cart_item(db, account_id, variant_id):
        raise HTTPException(status_code=404, detail="Cart item not found")


@router.delete("/{account_id}")
async def clear(account_id: int, db: AsyncSession = Depends(get_db)):
    removed = await clear_cart(db, account_id)
    return {"removed": removed}


@router.post("/{account_id}/sync", response_model=CartResponse)
async def sync(account_id: int, body: CartSyncRequest, db: AsyncSession = Depends(get_db)):
    local_items = [
        {"variant_id": item.variant_id, "quantity": item.quantity, "extra_info": _extra_info(item)}
        for item in body.items
    ]
    try:
        items = await sync_cart_items(db, account_id, local_items)
    except InvalidAllocationInput as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"items": items, "count": sum(item.quantity for item in items)}


@router.get("/{account_id}/totals", response_model=CartTotalsResponse)
async def totals(account_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await get_cart_totals(db, account_id)
    except InvalidAllocationInput as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{account_id}/summary", response_model=CheckoutSummary)
async def summary(
    account_id: int,
    discount: Decimal = Query(default=Decimal("0"), ge=0),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await get_cart_summary(db, account_id, discount)
    except InvalidAllocationInput as e:
        raise HTTPException(status_code=422, detail=str(e))
