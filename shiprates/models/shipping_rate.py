# shiprates/models/shipping_rate.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiprates.db.base import Base


class ShippingRate(Base):
    """
    一条费率规则：weight 区间 × total 区间 → rate。

    - weight 单位：克（整数）
    - total / rate / free_threshold：最小货币单位（便士，整数）
    - max_* 为 NULL 视为 +∞；区间两端闭合 [min, max]
    """

    __tablename__ = "shipping_rates"
    __table_args__ = (
        Index("ix_shipping_rates_method_zone", "shipping_method_id", "shipping_zone_id"),
        CheckConstraint("min_weight >= 0", name="ck_shipping_rates_min_weight"),
        CheckConstraint("min_total >= 0", name="ck_shipping_rates_min_total"),
        CheckConstraint(
            "max_weight IS NULL OR max_weight >= min_weight", name="ck_shipping_rates_weight_range"
        ),
        CheckConstraint(
            "max_total IS NULL OR max_total >= min_total", name="ck_shipping_rates_total_range"
        ),
        CheckConstraint("rate >= 0", name="ck_shipping_rates_rate"),
        CheckConstraint(
            "free_threshold IS NULL OR free_threshold >= 0", name="ck_shipping_rates_free_threshold"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    shipping_method_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("shipping_methods.id", ondelete="RESTRICT"),
        nullable=False,
    )
    shipping_zone_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("shipping_zones.id", ondelete="RESTRICT"),
        nullable=False,
    )

    min_weight: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_weight: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # null = infinity

    min_total: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    max_total: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)  # null = infinity

    rate: Mapped[int] = mapped_column(BigInteger, nullable=False)
    free_threshold: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    shipping_method = relationship("ShippingMethod", back_populates="rates")
    shipping_zone = relationship("ShippingZone", back_populates="rates")

    def __repr__(self) -> str:
        return (
            f"<ShippingRate id={self.id} method={self.shipping_method_id} zone={self.shipping_zone_id} "
            f"w={self.min_weight}-{self.max_weight} t={self.min_total}-{self.max_total} rate={self.rate}>"
        )
