"""
Vendor platform configuration settings for the catalog service.
"""
import os
from typing import Dict, Any
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)

SQUARE_BASE_URLS = {
    "production": "https://connect.squareup.com/v2",
    "sandbox": "https://connect.squareupsandbox.com/v2",
}


def get_square_config() -> Dict[str, Any]:
    """
    Get Square configuration from environment variables or defaults.
    
    Returns:
        Dict[str, Any]: Square configuration dictionary
    """
    environment = os.environ.get("SQUARE_ENVIRONMENT", "sandbox").lower()
    if environment not in SQUARE_BASE_URLS:
        logger.warning(f"Unknown SQUARE_ENVIRONMENT {environment!r}. Falling back to sandbox.")
        environment = "sandbox"
    
    try:
        timeout = float(os.environ.get("SQUARE_TIMEOUT_SECONDS", "30"))
    except ValueError:
        logger.warning("Invalid SQUARE_TIMEOUT_SECONDS. Using default: 30")
        timeout = 30.0
    
    config = {
        "access_token": os.environ.get("SQUARE_ACCESS_TOKEN", ""),
        "environment": environment,
        "base_url": SQUARE_BASE_URLS[environment],
        "location_id": os.environ.get("SQUARE_LOCATION_ID", ""),
        "api_version": os.environ.get("SQUARE_API_VERSION", "2024-01-18"),
        "timeout": timeout,
    }
    
    if not config["access_token"]:
        logger.warning("SQUARE_ACCESS_TOKEN is not set")
    
    logger.debug(f"Using Square config with environment: {environment}")
    
    return config
