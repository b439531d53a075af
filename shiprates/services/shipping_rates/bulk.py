# shiprates/services/shipping_rates/bulk.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from sqlalchemy.orm import Session

from shiprates.db.locks import rate_pair_locks
from shiprates.metrics import BULK_BATCH_SIZE, BULK_ROWS, DUPLICATES

from .catalog import RateCatalog
from .conflicts import ConflictValidator
from .errors import NotApplicable, RateConflict, RateValidationError
from .types import BulkCreateOutcome, DuplicateOutcome, RateDraft, Rejection
from .validators import check_draft

logger = logging.getLogger("shiprates.bulk")

BULK_UPDATABLE_FIELDS = ("rate", "free_threshold", "is_active")


def _dedupe(ids: Sequence[int]) -> List[int]:
    seen: set[int] = set()
    out: List[int] = []
    for x in ids:
        v = int(x)
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


def _draft_from_row(row: Any, **overrides: Any) -> RateDraft:
    d = RateDraft(
        shipping_method_id=int(row.shipping_method_id),
        shipping_zone_id=int(row.shipping_zone_id),
        rate=int(row.rate),
        min_weight=int(row.min_weight),
        max_weight=row.max_weight,
        min_total=int(row.min_total),
        max_total=row.max_total,
        free_threshold=row.free_threshold,
        is_active=bool(row.is_active),
    )
    for k, v in overrides.items():
        setattr(d, k, v)
    return d


def normalize_bulk_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    只取 rate / free_threshold / is_active；未出现的字段保持不变。
    free_threshold 显式传 None 表示清空。
    """
    out: Dict[str, Any] = {}
    details: List[Dict[str, Any]] = []

    if "rate" in changes:
        v = changes["rate"]
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            details.append({"type": "validation", "path": "rate", "reason": "rate must be an integer >= 0"})
        else:
            out["rate"] = int(v)

    if "free_threshold" in changes:
        v = changes["free_threshold"]
        if v is not None and (isinstance(v, bool) or not isinstance(v, int) or v < 0):
            details.append(
                {"type": "validation", "path": "free_threshold", "reason": "free_threshold must be null or an integer >= 0"}
            )
        else:
            out["free_threshold"] = None if v is None else int(v)

    if "is_active" in changes:
        v = changes["is_active"]
        if not isinstance(v, bool):
            details.append({"type": "validation", "path": "is_active", "reason": "is_active must be a boolean"})
        else:
            out["is_active"] = v

    if details:
        raise RateValidationError(details[0]["reason"], details=details)
    return out


class BulkMutationCoordinator:
    """
    批量写入编排：bulk create / bulk update / duplicate-into-zones。

    每个操作一个事务；validate-then-insert 在 (method, zone) 粒度的 pair lock 内执行，
    并发调用不可能同时通过校验再插入重叠区间。
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.catalog = RateCatalog(db)

    # ------------------------------------------------------------------
    # bulk create（全有或全无）
    # ------------------------------------------------------------------
    def bulk_create(self, drafts: Sequence[RateDraft]) -> BulkCreateOutcome:
        BULK_BATCH_SIZE.observe(len(drafts))
        rejected: Dict[int, Rejection] = {}

        for i, d in enumerate(drafts):
            details = check_draft(d)
            if details:
                rejected[i] = Rejection(index=i, code="validation_error", reason=f"Rate {i}: {details[0]['reason']}")

        known_methods = self.catalog.existing_method_ids(d.shipping_method_id for d in drafts)
        known_zones = self.catalog.existing_zone_ids(d.shipping_zone_id for d in drafts)
        for i, d in enumerate(drafts):
            if i in rejected:
                continue
            if int(d.shipping_method_id) not in known_methods:
                rejected[i] = Rejection(
                    index=i, code="validation_error", reason=f"Rate {i}: shipping method {int(d.shipping_method_id)} does not exist"
                )
            elif int(d.shipping_zone_id) not in known_zones:
                rejected[i] = Rejection(
                    index=i, code="validation_error", reason=f"Rate {i}: shipping zone {int(d.shipping_zone_id)} does not exist"
                )

        valid: List[Tuple[int, RateDraft]] = [(i, d) for i, d in enumerate(drafts) if i not in rejected]
        pairs = {(int(d.shipping_method_id), int(d.shipping_zone_id)) for _, d in valid}

        try:
            with rate_pair_locks(self.db, pairs):
                validator = ConflictValidator(self.catalog)
                for rej in validator.find_batch_conflicts(valid):
                    rejected[rej.index] = rej

                if rejected:
                    self.db.rollback()
                    outcome = BulkCreateOutcome(rejected=[rejected[i] for i in sorted(rejected)])
                    BULK_ROWS.labels(outcome="rejected").inc(len(outcome.rejected))
                    logger.warning(
                        "bulk create shipping rates rejected: total=%d rejected=%d indexes=%s",
                        len(drafts),
                        len(outcome.rejected),
                        [r.index for r in outcome.rejected],
                    )
                    return outcome

                rows = self.catalog.add_all(list(drafts))
                created_ids = [int(r.id) for r in rows]
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        BULK_ROWS.labels(outcome="created").inc(len(created_ids))
        logger.info("bulk shipping rates created: created_count=%d ids=%s", len(created_ids), created_ids)
        return BulkCreateOutcome(created_ids=created_ids)

    # ------------------------------------------------------------------
    # bulk update（同一 delta 作用于所有 id）
    # ------------------------------------------------------------------
    def bulk_update(self, rate_ids: Sequence[int], changes: Mapping[str, Any]) -> int:
        values = normalize_bulk_changes(changes)
        if not values:
            raise NotApplicable("No valid updates provided.")

        ids = _dedupe(rate_ids)
        if not ids:
            return 0

        try:
            if values.get("is_active") is True:
                rows = [r for r in (self.catalog.get(x) for x in ids) if r is not None]
                to_activate = [r for r in rows if not bool(r.is_active)]
                pairs = {(int(r.shipping_method_id), int(r.shipping_zone_id)) for r in to_activate}
                with rate_pair_locks(self.db, pairs):
                    validator = ConflictValidator(self.catalog)
                    items = [(int(r.id), _draft_from_row(r, is_active=True)) for r in to_activate]
                    conflicts = validator.find_batch_conflicts(items)
                    if conflicts:
                        first = conflicts[0]
                        raise RateConflict(
                            f"activating rate {first.index} would overlap an active rate",
                            conflicting_ids=first.conflicting_ids,
                            index=first.index,
                        )
                    updated = self.catalog.update_fields(ids, values)
                    self.db.commit()
            else:
                updated = self.catalog.update_fields(ids, values)
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "bulk shipping rates updated: rate_ids=%s updated_count=%d updates=%s",
            ids,
            updated,
            values,
        )
        return updated

    # ------------------------------------------------------------------
    # duplicate-into-zones（冲突 zone 静默跳过）
    # ------------------------------------------------------------------
    def duplicate(self, source_rate_id: int, target_zone_ids: Sequence[int]) -> DuplicateOutcome:
        src = self.catalog.require(source_rate_id)
        method_id = int(src.shipping_method_id)
        src_zone_id = int(src.shipping_zone_id)

        zones = _dedupe(target_zone_ids)
        known = self.catalog.existing_zone_ids(zones)
        pairs = {(method_id, z) for z in zones if z != src_zone_id and z in known}

        outcome = DuplicateOutcome(source_rate_id=int(src.id))
        drafts: List[RateDraft] = []

        try:
            with rate_pair_locks(self.db, pairs):
                validator = ConflictValidator(self.catalog)
                src_range = _draft_from_row(src).range

                for z in zones:
                    if z == src_zone_id:
                        outcome.skipped.append({"zone_id": z, "reason": "source_zone"})
                        continue
                    if z not in known:
                        outcome.skipped.append({"zone_id": z, "reason": "zone_not_found"})
                        continue
                    if bool(src.is_active) and validator.has_conflict(method_id, z, src_range):
                        outcome.skipped.append({"zone_id": z, "reason": "conflict"})
                        continue
                    drafts.append(_draft_from_row(src, shipping_zone_id=z))

                rows = self.catalog.add_all(drafts) if drafts else []
                outcome.duplicated_rate_ids = [int(r.id) for r in rows]
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        DUPLICATES.labels(outcome="created").inc(outcome.duplicated_count)
        DUPLICATES.labels(outcome="skipped").inc(len(outcome.skipped))
        logger.info(
            "shipping rate duplicated: original_rate_id=%d target_zone_ids=%s duplicated_count=%d skipped=%s",
            int(src.id),
            zones,
            outcome.duplicated_count,
            outcome.skipped,
        )
        return outcome
