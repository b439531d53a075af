# shiprates/models/shipping_method.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiprates.db.base import Base


class ShippingMethod(Base):
    __tablename__ = "shipping_methods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    carrier: Mapped[str] = mapped_column(String(64), nullable=False)
    service_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )
    display_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    # 时效（天）：仅用于 fastest 推荐，引擎不做日期推算
    estimated_days_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    estimated_days_max: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    rates = relationship("ShippingRate", back_populates="shipping_method")

    def __repr__(self) -> str:
        return f"<ShippingMethod id={self.id} name={self.name!r} carrier={self.carrier!r}>"
