# shiprates/models/__init__.py
from __future__ import annotations

from .shipping_method import ShippingMethod
from .shipping_rate import ShippingRate
from .shipping_zone import ShippingZone

__all__ = ["ShippingMethod", "ShippingRate", "ShippingZone"]
