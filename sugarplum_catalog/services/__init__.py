"""
Services built on the catalog cache.
"""
from sugarplum_catalog.services.availability_guard import AvailabilityGuard
from sugarplum_catalog.services.delta_applier import InventoryDeltaApplier
from sugarplum_catalog.services.product_listing import ProductListingService
