# shiprates/services/shipping_rates/catalog.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy import and_, or_, select, update
from sqlalchemy.orm import Session

from shiprates.models.shipping_method import ShippingMethod
from shiprates.models.shipping_rate import ShippingRate
from shiprates.models.shipping_zone import ShippingZone

from .errors import RateNotFound
from .types import RateDraft, _utcnow


@dataclass
class RateFilters:
    shipping_method_id: Optional[int] = None
    shipping_zone_id: Optional[int] = None
    is_active: Optional[bool] = None
    min_rate: Optional[int] = None
    max_rate: Optional[int] = None
    weight: Optional[int] = None  # 适用于该重量（克）的费率
    total: Optional[int] = None  # 适用于该订单金额的费率


def _covers(min_col, max_col, value: int):
    return and_(min_col <= value, or_(max_col.is_(None), max_col >= value))


class RateCatalog:
    """
    费率目录（shipping_rates 表）的显式查询/写入接口。

    只负责读写，不做冲突判定；不 commit（事务边界属于调用方）。
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # -----------------------
    # 读
    # -----------------------
    def find_active_rates_for(self, method_id: int, zone_id: int) -> List[ShippingRate]:
        stmt = (
            select(ShippingRate)
            .where(ShippingRate.shipping_method_id == int(method_id))
            .where(ShippingRate.shipping_zone_id == int(zone_id))
            .where(ShippingRate.is_active.is_(True))
            .order_by(ShippingRate.id.asc())
        )
        return list(self.db.scalars(stmt).all())

    def get(self, rate_id: int) -> Optional[ShippingRate]:
        return self.db.get(ShippingRate, int(rate_id))

    def require(self, rate_id: int) -> ShippingRate:
        row = self.get(rate_id)
        if row is None:
            raise RateNotFound(f"shipping rate {int(rate_id)} not found")
        return row

    def get_method(self, method_id: int) -> Optional[ShippingMethod]:
        return self.db.get(ShippingMethod, int(method_id))

    def get_zone(self, zone_id: int) -> Optional[ShippingZone]:
        return self.db.get(ShippingZone, int(zone_id))

    def existing_method_ids(self, ids: Iterable[int]) -> Set[int]:
        wanted = {int(x) for x in ids}
        if not wanted:
            return set()
        stmt = select(ShippingMethod.id).where(ShippingMethod.id.in_(wanted))
        return {int(x) for x in self.db.scalars(stmt).all()}

    def existing_zone_ids(self, ids: Iterable[int]) -> Set[int]:
        wanted = {int(x) for x in ids}
        if not wanted:
            return set()
        stmt = select(ShippingZone.id).where(ShippingZone.id.in_(wanted))
        return {int(x) for x in self.db.scalars(stmt).all()}

    def active_methods(self) -> List[ShippingMethod]:
        stmt = (
            select(ShippingMethod)
            .where(ShippingMethod.is_active.is_(True))
            .order_by(ShippingMethod.display_order.asc(), ShippingMethod.id.asc())
        )
        return list(self.db.scalars(stmt).all())

    def list_rates(self, filters: Optional[RateFilters] = None) -> List[ShippingRate]:
        f = filters or RateFilters()
        stmt = select(ShippingRate)

        if f.shipping_method_id is not None:
            stmt = stmt.where(ShippingRate.shipping_method_id == int(f.shipping_method_id))
        if f.shipping_zone_id is not None:
            stmt = stmt.where(ShippingRate.shipping_zone_id == int(f.shipping_zone_id))
        if f.is_active is not None:
            stmt = stmt.where(ShippingRate.is_active.is_(bool(f.is_active)))
        if f.min_rate is not None:
            stmt = stmt.where(ShippingRate.rate >= int(f.min_rate))
        if f.max_rate is not None:
            stmt = stmt.where(ShippingRate.rate <= int(f.max_rate))
        if f.weight is not None:
            stmt = stmt.where(_covers(ShippingRate.min_weight, ShippingRate.max_weight, int(f.weight)))
        if f.total is not None:
            stmt = stmt.where(_covers(ShippingRate.min_total, ShippingRate.max_total, int(f.total)))

        stmt = stmt.order_by(
            ShippingRate.shipping_method_id.asc(),
            ShippingRate.shipping_zone_id.asc(),
            ShippingRate.min_weight.asc(),
            ShippingRate.min_total.asc(),
            ShippingRate.id.asc(),
        )
        return list(self.db.scalars(stmt).all())

    # -----------------------
    # 写
    # -----------------------
    @staticmethod
    def new_rate(draft: RateDraft, *, now: Optional[datetime] = None) -> ShippingRate:
        """写路径工厂：显式补齐 is_active 默认值与时间戳。"""
        ts = now or _utcnow()
        return ShippingRate(
            shipping_method_id=int(draft.shipping_method_id),
            shipping_zone_id=int(draft.shipping_zone_id),
            min_weight=int(draft.min_weight or 0),
            max_weight=None if draft.max_weight is None else int(draft.max_weight),
            min_total=int(draft.min_total or 0),
            max_total=None if draft.max_total is None else int(draft.max_total),
            rate=int(draft.rate),
            free_threshold=None if draft.free_threshold is None else int(draft.free_threshold),
            is_active=True if draft.is_active is None else bool(draft.is_active),
            created_at=ts,
            updated_at=ts,
        )

    def add(self, draft: RateDraft, *, now: Optional[datetime] = None) -> ShippingRate:
        row = self.new_rate(draft, now=now)
        self.db.add(row)
        return row

    def add_all(self, drafts: Sequence[RateDraft]) -> List[ShippingRate]:
        now = _utcnow()
        rows = [self.new_rate(d, now=now) for d in drafts]
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def update_fields(self, rate_ids: Iterable[int], values: Dict[str, Any]) -> int:
        """返回实际命中的行数；不存在的 id 不计数。"""
        ids = sorted({int(x) for x in rate_ids})
        if not ids:
            return 0

        # rowcount 在 RETURNING 场景下因驱动而异，先查出命中的 id
        hit = [int(x) for x in self.db.scalars(select(ShippingRate.id).where(ShippingRate.id.in_(ids))).all()]
        if not hit:
            return 0

        payload = dict(values)
        payload["updated_at"] = _utcnow()
        stmt = (
            update(ShippingRate)
            .where(ShippingRate.id.in_(hit))
            .values(**payload)
            .execution_options(synchronize_session="fetch")
        )
        self.db.execute(stmt)
        return len(hit)

    def delete(self, row: ShippingRate) -> None:
        self.db.delete(row)
