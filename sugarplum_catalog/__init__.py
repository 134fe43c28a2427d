"""
Sugarplum Catalog Package.

This package keeps a cached, classified view of the shop's apparel catalog
and inventory from the commerce platform, and guards checkout and stock
adjustments against it.
"""
from sugarplum_catalog.main import CatalogApp

__version__ = "1.0.0"
