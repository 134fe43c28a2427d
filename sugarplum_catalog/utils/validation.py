"""
Validation utilities for configuration values and admin input.
"""
from typing import Any, Optional


def validate_positive_seconds(value: Any, default: Optional[float] = None) -> Optional[float]:
    """
    Validate a duration expressed in seconds.

    Args:
        value (Any): The raw value (usually an environment string)
        default (Optional[float]): Value to use when the input is missing or invalid

    Returns:
        Optional[float]: A strictly positive number of seconds, or the default
    """
    try:
        seconds = float(value)
    except (ValueError, TypeError):
        return default
    
    if seconds <= 0:
        return default
    return seconds


def parse_quantity(value: Any) -> Optional[int]:
    """
    Parse a whole-number quantity.
    
    Accepts ints and numeric strings ("3", "-2", "4.0"). Fractional values
    and anything non-numeric are rejected.
    
    Args:
        value (Any): The value to parse
        
    Returns:
        Optional[int]: The integer value, or None if it is not a whole number
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except (ValueError, TypeError):
        return None
    if number != number or not number.is_integer():
        return None
    return int(number)
