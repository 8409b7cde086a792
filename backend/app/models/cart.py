from datetime import datetime, timezone

from sqlalchemy import String, Integer, BigInteger, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


def cart_item_id(account_id: int, variant_id: str) -> str:
    return f"{account_id}-{variant_id}"


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (Index("ix_cart_items_account_variant", "account_id", "variant_id"),)

    # "{account_id}-{variant_id}", one row per variant per account
    id: Mapped[str] = mapped_column(String, primary_key=True)
    account_id: Mapped[int] = mapped_column(BigInteger, index=True, nullable=False)
    variant_id: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    extra_info: Mapped[dict | None] = mapped_column(JSONB(none_as_null=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def _extra(self, key: str):
        return (self.extra_info or {}).get(key)

    @property
    def name(self) -> str | None:
        return self._extra("name")

    @property
    def price(self):
        return self._extra("price")

    @property
    def original_price(self):
        return self._extra("original_price")
