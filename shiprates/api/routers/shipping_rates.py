# shiprates/api/routers/shipping_rates.py
from __future__ import annotations

from fastapi import APIRouter

from shiprates.api.routers.shipping_rates_routes_bulk import register_bulk_routes
from shiprates.api.routers.shipping_rates_routes_calc import register_calc_routes
from shiprates.api.routers.shipping_rates_routes_crud import register_crud_routes

router = APIRouter(tags=["shipping-rates"])

# 顺序有意义：/shipping-rates/bulk、/shipping-rates/calculate 必须先于 /shipping-rates/{rate_id}
register_bulk_routes(router)
register_calc_routes(router)
register_crud_routes(router)
