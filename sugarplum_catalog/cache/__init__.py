"""
Catalog/inventory cache and its refresh scheduler.
"""
from sugarplum_catalog.cache.catalog_cache import CatalogCache
from sugarplum_catalog.cache.scheduler import RefreshScheduler
