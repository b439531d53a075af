# shiprates/services/shipping_rates/__init__.py
from __future__ import annotations

from .bulk import BulkMutationCoordinator
from .catalog import RateCatalog, RateFilters
from .conflicts import ConflictValidator
from .crud import activate_rate, create_rate, deactivate_rate, delete_rate, get_rate, list_rates, update_rate
from .errors import NotApplicable, RateConflict, RateNotFound, RateValidationError
from .pricing import ShippingCost, calc_cost
from .quote import ShippingQuote, ZoneQuotes, quote, quote_zone
from .ranges import Interval, RateRange, kg_to_grams
from .resolver import RateResolver, select_rate
from .types import BulkCreateOutcome, DuplicateOutcome, RateDraft, Rejection

__all__ = [
    "BulkCreateOutcome",
    "BulkMutationCoordinator",
    "ConflictValidator",
    "DuplicateOutcome",
    "Interval",
    "NotApplicable",
    "RateCatalog",
    "RateConflict",
    "RateDraft",
    "RateFilters",
    "RateNotFound",
    "RateRange",
    "RateResolver",
    "RateValidationError",
    "Rejection",
    "ShippingCost",
    "ShippingQuote",
    "ZoneQuotes",
    "activate_rate",
    "calc_cost",
    "create_rate",
    "deactivate_rate",
    "delete_rate",
    "get_rate",
    "kg_to_grams",
    "list_rates",
    "quote",
    "quote_zone",
    "select_rate",
    "update_rate",
]
