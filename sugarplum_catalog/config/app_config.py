"""
Application-wide configuration settings for the catalog service.
"""
import os
from typing import List
from sugarplum_catalog.utils.logging_config import get_logger
from sugarplum_catalog.utils.validation import validate_positive_seconds

# Set up logging
logger = get_logger(__name__)

DEFAULT_CATALOG_TTL_SECONDS = 24 * 60 * 60
DEFAULT_INVENTORY_TTL_SECONDS = 5 * 60


def _duration_from_env(env_key: str, default: float) -> float:
    """
    Read a duration in seconds from the environment.
    
    Args:
        env_key (str): Environment variable name
        default (float): Fallback value in seconds
    
    Returns:
        float: The configured duration
    """
    raw = os.environ.get(env_key)
    if raw is None:
        return default
    
    seconds = validate_positive_seconds(raw)
    if seconds is None:
        logger.warning(f"Invalid value for {env_key}: {raw!r}. Using default: {default}")
        return default
    return seconds


# Cache freshness. Changing these only affects staleness tolerance.
CATALOG_TTL_SECONDS = _duration_from_env("CATALOG_TTL_SECONDS", DEFAULT_CATALOG_TTL_SECONDS)
INVENTORY_TTL_SECONDS = _duration_from_env("INVENTORY_TTL_SECONDS", DEFAULT_INVENTORY_TTL_SECONDS)

# Local storage
PRODUCT_FLAGS_PATH = os.environ.get("PRODUCT_FLAGS_PATH", "productConfig.json")
DEFAULT_EXPORT_DIR = os.environ.get("EXPORT_DIR", "exports")

# Listing channels
SALES_CHANNELS: List[str] = ["online", "kiosk"]
