from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, AliasChoices


class AllocationItem(BaseModel):
    unit_price: Decimal = Field(ge=0, validation_alias=AliasChoices("unit_price", "price"))
    quantity: int = Field(default=1, ge=0)


class AllocationRequest(BaseModel):
    items: list[AllocationItem]
    total_discount: Decimal = Field(ge=0)
    absorb: Literal["last", "largest"] = "last"


class AllocationResponse(BaseModel):
    discounts: list[Decimal]
    total_discount: Decimal


class SummaryItem(AllocationItem):
    label: str | None = None


class SummaryRequest(BaseModel):
    items: list[SummaryItem]
    total_discount: Decimal = Field(default=Decimal("0"), ge=0)


class SummaryLine(BaseModel):
    label: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    discount: Decimal


class CheckoutSummary(BaseModel):
    currency: str
    lines: list[SummaryLine]
    subtotal: Decimal
    total_discount: Decimal
    total_after_discount: Decimal
