"""
Main entry point for the catalog service.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from sugarplum_catalog.cache.catalog_cache import CatalogCache
from sugarplum_catalog.cache.scheduler import RefreshScheduler
from sugarplum_catalog.config.app_config import CATALOG_TTL_SECONDS, DEFAULT_EXPORT_DIR, INVENTORY_TTL_SECONDS
from sugarplum_catalog.data.connectors.base_connector import BaseVendorConnector
from sugarplum_catalog.data.connectors.square_connector import SquareConnector
from sugarplum_catalog.data.models.inventory import AvailabilityResult, DeltaApplyResult
from sugarplum_catalog.data.repositories.catalog_repository import CatalogRepository
from sugarplum_catalog.data.repositories.flag_repository import ProductFlagRepository
from sugarplum_catalog.data.repositories.inventory_repository import InventoryRepository
from sugarplum_catalog.exporters.csv_exporter import CSVExporter
from sugarplum_catalog.services.availability_guard import AvailabilityGuard
from sugarplum_catalog.services.delta_applier import InventoryDeltaApplier
from sugarplum_catalog.services.product_listing import ProductListingService
from sugarplum_catalog.utils.clock import Clock
from sugarplum_catalog.utils.logging_config import setup_logging


class CatalogApp:
    """
    Main application class wiring the vendor connector, the cache and the services.
    """

    def __init__(
        self,
        connector: Optional[BaseVendorConnector] = None,
        flags_path: Optional[str] = None,
        catalog_ttl: float = CATALOG_TTL_SECONDS,
        inventory_ttl: float = INVENTORY_TTL_SECONDS,
        clock: Optional[Clock] = None,
        log_level=logging.INFO,
        log_dir: Optional[str] = None
    ):
        """
        Initialize the application.

        Args:
            connector (Optional[BaseVendorConnector]): Vendor connector (default: Square)
            flags_path (Optional[str]): Product flag file (default: PRODUCT_FLAGS_PATH)
            catalog_ttl (float): Catalog staleness limit in seconds
            inventory_ttl (float): Inventory staleness limit in seconds
            clock (Optional[Clock]): Time source for the cache
            log_level: Logging level
            log_dir (Optional[str]): Log file directory ("" for console only)
        """
        # Set up logging
        self.logger = setup_logging(log_level=log_level, log_dir=log_dir)

        # Initialize vendor connector
        self.connector = connector or SquareConnector()

        # Initialize repositories
        self.catalog_repository = CatalogRepository(self.connector)
        self.inventory_repository = InventoryRepository(self.connector)
        self.flag_repository = ProductFlagRepository(flags_path)

        # Cache and services
        self.cache = CatalogCache(
            self.catalog_repository,
            self.inventory_repository,
            catalog_ttl=catalog_ttl,
            inventory_ttl=inventory_ttl,
            clock=clock,
        )
        self.guard = AvailabilityGuard(self.cache)
        self.delta_applier = InventoryDeltaApplier(self.cache, self.inventory_repository)
        self.listing = ProductListingService(self.cache, self.flag_repository)
        self.scheduler = RefreshScheduler(self.cache)
        self.exporter = CSVExporter()

    async def sync_catalog(self) -> Dict[str, Any]:
        """
        Rebuild the catalog and then the inventory, regardless of age.

        Returns:
            Dict[str, Any]: The cache status after the sync
        """
        self.logger.info("Manual catalog sync requested.")
        await self.cache.refresh_catalog()
        await self.cache.refresh_inventory()
        return self.cache.status()

    async def sync_inventory(self) -> Dict[str, Any]:
        """
        Rebuild the inventory only, regardless of age.

        Returns:
            Dict[str, Any]: The cache status after the sync
        """
        self.logger.info("Manual inventory sync requested.")
        await self.cache.refresh_inventory()
        return self.cache.status()

    async def validate_and_reserve_none(self, cart_lines: Iterable[Any]) -> AvailabilityResult:
        return await self.guard.validate_and_reserve_none(cart_lines)

    async def apply_inventory_counts(self, updates: Iterable[Mapping[str, Any]]) -> DeltaApplyResult:
        """
        Forward counted changes to the vendor and refresh inventory afterwards.

        A failed post-apply refresh is logged; the vendor already holds the
        new counts and the next refresh picks them up.

        Args:
            updates (Iterable[Mapping[str, Any]]): Delta requests

        Returns:
            DeltaApplyResult: Applied and rejected entries
        """
        result = await self.delta_applier.apply_deltas(updates)
        if result.applied:
            try:
                await self.cache.refresh_inventory()
            except Exception as e:
                self.logger.error(f"Inventory refresh after applying counts failed: {str(e)}", exc_info=True)
        return result

    async def export_count_sheet(self, output_dir: Optional[str] = None) -> str:
        """
        Export the current inventory snapshot as CSV.

        Args:
            output_dir (Optional[str]): Base directory (default: DEFAULT_EXPORT_DIR)

        Returns:
            str: Path to the export directory
        """
        snapshot = await self.cache.get_snapshot()
        return self.exporter.export(snapshot, output_dir or DEFAULT_EXPORT_DIR)

    def status(self) -> Dict[str, Any]:
        status = self.cache.status()
        status["scheduler_running"] = self.scheduler.running
        return status

    async def serve(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Warm the cache and keep it fresh until cancelled or ``stop_event`` is set.

        Args:
            stop_event (Optional[asyncio.Event]): Event that ends the loop
        """
        try:
            await self.cache.get_snapshot()
        except Exception as e:
            self.logger.error(f"Initial cache warm-up failed: {str(e)}", exc_info=True)

        self.scheduler.start()
        self.logger.info("Catalog service running.")
        try:
            if stop_event is None:
                stop_event = asyncio.Event()
            await stop_event.wait()
        finally:
            await self.scheduler.stop()
            await self.cache.wait_for_background_refreshes()

    def close(self) -> None:
        """Release the vendor connection."""
        try:
            self.connector.disconnect()
            self.logger.info("Vendor connection closed.")
        except Exception as e:
            self.logger.error(f"Error closing vendor connection: {str(e)}")
