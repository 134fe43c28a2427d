"""
Read-only product projections for the storefront and the admin screens.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sugarplum_catalog.cache.catalog_cache import CatalogCache
from sugarplum_catalog.config.app_config import SALES_CHANNELS
from sugarplum_catalog.data.models.catalog import CatalogItem
from sugarplum_catalog.data.models.flags import ProductFlags
from sugarplum_catalog.data.repositories.flag_repository import ProductFlagRepository
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)


def storefront_sort_key(item: CatalogItem, flags: ProductFlags):
    """Pinned first, then featured, then new, then name A-Z."""
    return (not flags.pin_to_top, not flags.is_featured, not flags.is_new, item.name.casefold())


class ProductListingService:
    """
    Builds listings from the current cache snapshot with product flags attached.

    Every listing is a fresh list of plain dicts; the snapshot itself is
    never handed out for mutation.
    """

    def __init__(self, cache: CatalogCache, flag_repository: ProductFlagRepository):
        """
        Initialize the listing service.

        Args:
            cache (CatalogCache): The catalog/inventory cache
            flag_repository (ProductFlagRepository): Stored product flags
        """
        self.cache = cache
        self.flag_repository = flag_repository

    async def list_storefront(self, channel: str = "online") -> List[Dict[str, Any]]:
        """
        List products for a sales channel.

        Items hidden for the channel and items with no stock are removed.

        Args:
            channel (str): "online" or "kiosk"

        Returns:
            List[Dict[str, Any]]: Products with flags, in storefront order
        """
        if channel not in SALES_CHANNELS:
            raise ValueError(f"Unknown sales channel: {channel!r}")

        snapshot = await self.cache.get_snapshot()

        listed = []
        for item in snapshot:
            flags = self.flag_repository.get(item.id)
            if channel == "online" and flags.hide_online:
                continue
            if channel == "kiosk" and flags.hide_kiosk:
                continue
            if item.total_quantity <= 0:
                continue
            listed.append((item, flags))

        listed.sort(key=lambda pair: storefront_sort_key(*pair))

        products = []
        for item, flags in listed:
            product = item.to_dict()
            product["flags"] = flags.to_dict()
            products.append(product)
        return products

    async def list_admin_products(self) -> List[Dict[str, Any]]:
        """
        Summarize every cached item for the admin product screen.

        Returns:
            List[Dict[str, Any]]: id, name, type, subcategory, total inventory
            and flags, sorted by name
        """
        snapshot = await self.cache.get_snapshot()
        products = [
            {
                "id": item.id,
                "name": item.name,
                "type": item.garment_type,
                "subcategory": item.subcategory,
                "totalInventory": item.total_quantity,
                "flags": self.flag_repository.get(item.id).to_dict(),
            }
            for item in snapshot
        ]
        products.sort(key=lambda p: p["name"].casefold())
        return products

    async def list_count_sheet(
        self,
        search: Optional[str] = None,
        subcategory: Optional[str] = None,
        show_zero: bool = True
    ) -> List[Dict[str, Any]]:
        """
        List one row per variation for counting and barcode labels.

        Args:
            search (Optional[str]): Case-insensitive text matched against item
                name, SKU and color
            subcategory (Optional[str]): Only items in this subcategory
            show_zero (bool): Include variations with no stock

        Returns:
            List[Dict[str, Any]]: Variation rows sorted by item name
        """
        snapshot = await self.cache.get_snapshot()
        needle = (search or "").strip().casefold()

        rows = []
        for item in sorted(snapshot, key=lambda i: i.name.casefold()):
            if subcategory and item.subcategory != subcategory:
                continue
            for variation in item.variations:
                quantity = variation.quantity or 0
                if not show_zero and quantity <= 0:
                    continue
                if needle:
                    haystack = " ".join(
                        filter(None, [item.name, variation.sku, variation.color])
                    ).casefold()
                    if needle not in haystack:
                        continue
                rows.append({
                    "item_id": item.id,
                    "item_name": item.name,
                    "subcategory": item.subcategory,
                    "variation_id": variation.id,
                    "sku": variation.sku,
                    "size": variation.size,
                    "color": variation.color,
                    "price_cents": variation.price_cents,
                    "quantity": quantity,
                })
        return rows

    def update_flags(self, updates: Iterable[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """
        Merge admin flag edits into the flag store.

        Args:
            updates (Iterable[Mapping[str, Any]]): {"id": ..., "flags": {...}} entries

        Returns:
            Dict[str, Dict[str, Any]]: All stored flags by item id
        """
        stored = self.flag_repository.update_many(updates)
        return {item_id: flags.to_dict() for item_id, flags in stored.items()}
