from fastapi import APIRouter, HTTPException

from app.schemas.promo import AllocationRequest, AllocationResponse, SummaryRequest, CheckoutSummary
from app.services.promo_service import allocate_discount, build_checkout_summary
from app.utils.promo_allocation import InvalidAllocationInput

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


@router.post("/allocate", response_model=AllocationResponse)
async def allocate_promo(body: AllocationRequest):
    items = [item.model_dump() for item in body.items]
    try:
        discounts = allocate_discount(items, body.total_discount, absorb=body.absorb)
    except InvalidAllocationInput as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"discounts": discounts, "total_discount": body.total_discount}


@router.post("/summary", response_model=CheckoutSummary)
async def checkout_summary(body: SummaryRequest):
    try:
        return build_checkout_summary([item.model_dump() for item in body.items], body.total_discount)
    except InvalidAllocationInput as e:
        raise HTTPException(status_code=422, detail=str(e))
