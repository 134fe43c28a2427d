"""
Data models for the catalog service.
"""
from sugarplum_catalog.data.models.catalog import (
    Variation,
    CatalogItem,
    CatalogSnapshot,
    InventorySnapshot
)
from sugarplum_catalog.data.models.flags import ProductFlags
from sugarplum_catalog.data.models.inventory import (
    CartLine,
    LineConflict,
    AvailabilityResult,
    InventoryDeltaRequest,
    RejectedDelta,
    DeltaApplyResult
)
from sugarplum_catalog.data.models.vendor import (
    VendorVariation,
    VendorCatalogItem,
    CatalogPage,
    InventoryCount,
    VendorInventoryUpdate
)
