# shiprates/models/shipping_zone.py
from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiprates.db.base import Base


class ShippingZone(Base):
    __tablename__ = "shipping_zones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)

    # 匹配的国家/地区：对引擎不透明（zone 由调用方解析好再传入）
    countries: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    rates = relationship("ShippingRate", back_populates="shipping_zone")

    def __repr__(self) -> str:
        return f"<ShippingZone id={self.id} name={self.name!r}>"
