# shiprates/metrics.py
from __future__ import annotations

import os

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    multiprocess,
)

# 报价：ok / not_found / invalid / zone
QUOTES = Counter("shipping_rate_quotes_total", "Shipping rate quotes", ["outcome"])

# 批量写入：created / rejected（按行计）
BULK_ROWS = Counter("shipping_rate_bulk_rows_total", "Bulk-created rate rows", ["outcome"])
BULK_BATCH_SIZE = Histogram(
    "shipping_rate_bulk_batch_size",
    "Rows submitted per bulk create",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500),
)

# 复制：created / skipped（按目标 zone 计）
DUPLICATES = Counter("shipping_rate_duplicates_total", "Rate duplication results per target zone", ["outcome"])

router = APIRouter()


def _export_registry() -> CollectorRegistry:
    # gunicorn 多 worker：PROMETHEUS_MULTIPROC_DIR 下各分片合并导出
    if not os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        return REGISTRY
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    return registry


@router.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(_export_registry()), media_type=CONTENT_TYPE_LATEST)
