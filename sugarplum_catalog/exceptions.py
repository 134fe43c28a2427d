"""
Exceptions raised by the catalog service.
"""
from typing import Any, List, Optional


class CatalogError(Exception):
    """Base class for catalog service errors."""


class VendorError(CatalogError):
    """
    A call to the vendor platform failed.
    
    The vendor's own error payload is kept verbatim so admin callers can
    show it unchanged. When a multi-request write fails part way,
    ``applied_changes`` counts the changes the vendor already accepted.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []
        self.applied_changes = 0
        self.applied_counts: List[Any] = []


class CatalogUnavailableError(CatalogError):
    """No snapshot has ever been built and the refresh needed to build one failed."""


class InvalidCartError(CatalogError, ValueError):
    """A checkout cart is empty or contains a malformed line."""


class EmptyDeltaBatchError(CatalogError, ValueError):
    """An inventory delta batch contained no updates."""
