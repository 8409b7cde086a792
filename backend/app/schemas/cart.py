from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class CartExtraInfo(BaseModel):
    name: str | None = None
    package_name: str | None = None
    duration: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    original_price: Decimal | None = Field(default=None, ge=0)
    discount_percentage: Decimal | None = None
    image_url: str | None = None


class CartItemAdd(BaseModel):
    variant_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    extra_info: CartExtraInfo | None = None


class CartItemUpdate(BaseModel):
    quantity: int  # <= 0 removes the item


class CartSyncRequest(BaseModel):
    items: list[CartItemAdd]


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    variant_id: str
    quantity: int
    extra_info: dict | None = None
    created_at: datetime
    updated_at: datetime


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    count: int


class CartTotalsResponse(BaseModel):
    item_count: int
    subtotal: Decimal
    total_discount: Decimal
