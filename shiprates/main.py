# shiprates/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from shiprates.api.routers.shipping_rates import router as shipping_rates_router
from shiprates.core.config import get_settings
from shiprates.core.logging import setup_logging
from shiprates.http_problem_handlers import register_exception_handlers
from shiprates.metrics import router as metrics_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL, json=settings.JSON_LOG)
logger = logging.getLogger("shiprates")

app = FastAPI(
    title="Shipping Rates",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

register_exception_handlers(app)

app.include_router(shipping_rates_router)
app.include_router(metrics_router)


@app.get("/healthz")
def healthz():
    return {"ok": True}


logger.info("shiprates app ready (env=%s)", settings.ENV)
