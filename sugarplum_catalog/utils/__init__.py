"""
Utility package for the catalog service.
"""
from sugarplum_catalog.utils.validation import (
    validate_positive_seconds,
    parse_quantity
)
from sugarplum_catalog.utils.clock import Clock, SystemClock
from sugarplum_catalog.utils.logging_config import setup_logging, get_logger
