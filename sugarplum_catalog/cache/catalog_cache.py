"""
Two-tier catalog and inventory cache.

The catalog tier holds slow-changing item definitions; the inventory tier
merges fast-changing quantities onto the catalog's shape. Each tier is an
immutable snapshot replaced by a single reference assignment, so readers
never see a half-built snapshot and never wait on a refresh they did not
ask to wait for.
"""
import asyncio
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from sugarplum_catalog.config.app_config import CATALOG_TTL_SECONDS, INVENTORY_TTL_SECONDS
from sugarplum_catalog.data.models.catalog import CatalogSnapshot, InventorySnapshot
from sugarplum_catalog.data.repositories.catalog_repository import CatalogRepository
from sugarplum_catalog.data.repositories.inventory_repository import InventoryRepository
from sugarplum_catalog.exceptions import CatalogError, CatalogUnavailableError
from sugarplum_catalog.utils.clock import Clock, SystemClock
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)

# Attempts to build inventory against a catalog that keeps being replaced
MAX_INVENTORY_BUILD_ATTEMPTS = 3


class CatalogCache:
    """
    Owns the catalog and inventory snapshots and decides when to refresh them.

    At most one refresh per tier is in flight at a time: concurrent callers
    join the running refresh instead of issuing their own vendor calls, so
    an older refresh can never overwrite a newer snapshot.
    """

    def __init__(
        self,
        catalog_repository: CatalogRepository,
        inventory_repository: InventoryRepository,
        catalog_ttl: float = CATALOG_TTL_SECONDS,
        inventory_ttl: float = INVENTORY_TTL_SECONDS,
        clock: Optional[Clock] = None
    ):
        """
        Initialize an empty cache.

        Args:
            catalog_repository (CatalogRepository): Source of catalog items
            inventory_repository (InventoryRepository): Source of stock counts
            catalog_ttl (float): Catalog staleness limit in seconds
            inventory_ttl (float): Inventory staleness limit in seconds
            clock (Optional[Clock]): Time source (default: system clock)
        """
        self.catalog_repository = catalog_repository
        self.inventory_repository = inventory_repository
        self.catalog_ttl = timedelta(seconds=catalog_ttl)
        self.inventory_ttl = timedelta(seconds=inventory_ttl)
        self.clock = clock or SystemClock()

        self._catalog: Optional[CatalogSnapshot] = None
        self._inventory: Optional[InventorySnapshot] = None
        # The catalog snapshot the current inventory snapshot was built from
        self._inventory_catalog: Optional[CatalogSnapshot] = None

        self._catalog_refresh: Optional[asyncio.Task] = None
        self._inventory_refresh: Optional[asyncio.Task] = None
        self._background_tasks: Set[asyncio.Task] = set()

    # ---------- Read-only state ----------

    @property
    def catalog_snapshot(self) -> Optional[CatalogSnapshot]:
        return self._catalog

    @property
    def inventory_snapshot(self) -> Optional[InventorySnapshot]:
        return self._inventory

    @property
    def catalog_fetched_at(self) -> Optional[datetime]:
        return self._catalog.fetched_at if self._catalog is not None else None

    @property
    def inventory_fetched_at(self) -> Optional[datetime]:
        return self._inventory.fetched_at if self._inventory is not None else None

    def _age(self, fetched_at: datetime) -> timedelta:
        return self.clock.now() - fetched_at

    def is_catalog_stale(self) -> bool:
        return self._catalog is None or self._age(self._catalog.fetched_at) > self.catalog_ttl

    def is_inventory_stale(self) -> bool:
        return self._inventory is None or self._age(self._inventory.fetched_at) > self.inventory_ttl

    def inventory_needs_rebuild(self) -> bool:
        """True when there is no inventory snapshot or the catalog was replaced since it was built."""
        return self._inventory is None or self._inventory_catalog is not self._catalog

    # ---------- Single-flight plumbing ----------

    def _start(self, attr: str, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        task = getattr(self, attr)
        if task is None or task.done():
            task = asyncio.ensure_future(factory())
            setattr(self, attr, task)
            task.add_done_callback(partial(self._clear_in_flight, attr))
        return task

    def _clear_in_flight(self, attr: str, task: asyncio.Task) -> None:
        if getattr(self, attr) is task:
            setattr(self, attr, None)
        # Mark the outcome as retrieved even when every caller went away
        if not task.cancelled():
            task.exception()

    # ---------- Catalog tier ----------

    async def _refresh_catalog(self) -> CatalogSnapshot:
        items = await self.catalog_repository.get_all()
        snapshot = CatalogSnapshot(items=tuple(items), fetched_at=self.clock.now())
        # Installing a new catalog invalidates the inventory tier by identity
        self._catalog = snapshot
        logger.info(f"Catalog refreshed: {len(snapshot)} item(s), {len(snapshot.variation_ids)} variation(s).")
        return snapshot

    async def refresh_catalog(self) -> CatalogSnapshot:
        """
        Rebuild the catalog snapshot from the vendor.

        Joins a refresh already in flight. On failure the exception
        propagates and the previous snapshot stays installed.

        Returns:
            CatalogSnapshot: The newly installed snapshot
        """
        task = self._start("_catalog_refresh", self._refresh_catalog)
        return await asyncio.shield(task)

    async def ensure_catalog_fresh(self) -> CatalogSnapshot:
        """
        Refresh the catalog synchronously if it is missing or older than its TTL.

        A failed refresh is logged and the stale snapshot is served.

        Returns:
            CatalogSnapshot: The installed snapshot

        Raises:
            CatalogUnavailableError: If no catalog was ever built and the refresh failed
        """
        if not self.is_catalog_stale():
            return self._catalog

        try:
            return await self.refresh_catalog()
        except Exception as e:
            if self._catalog is None:
                raise CatalogUnavailableError("No catalog data available yet") from e
            logger.error(
                f"Catalog refresh failed; serving catalog from {self._catalog.fetched_at.isoformat()}: {str(e)}",
                exc_info=True,
            )
            return self._catalog

    # ---------- Inventory tier ----------

    async def _refresh_inventory(self) -> InventorySnapshot:
        for _ in range(MAX_INVENTORY_BUILD_ATTEMPTS):
            catalog = self._catalog
            if catalog is None:
                catalog = await self.refresh_catalog()

            quantities = await self.inventory_repository.get_quantities(catalog.variation_ids)

            if self._catalog is not catalog:
                logger.info("Catalog was replaced during the inventory lookup; rebuilding inventory.")
                continue

            snapshot = InventorySnapshot.build(catalog, quantities, fetched_at=self.clock.now())
            self._inventory = snapshot
            self._inventory_catalog = catalog
            logger.info(
                f"Inventory refreshed: {len(quantities)} counted variation(s), "
                f"{sum(quantities.values())} unit(s) on hand."
            )
            return snapshot

        raise CatalogError("Catalog kept changing while inventory was being rebuilt")

    @property
    def inventory_refreshing(self) -> bool:
        return self._inventory_refresh is not None and not self._inventory_refresh.done()

    async def refresh_inventory(self, after_in_flight: bool = False) -> InventorySnapshot:
        """
        Rebuild the inventory snapshot with one batched quantity lookup.

        Builds the catalog first if none exists. Joins a refresh already in
        flight unless ``after_in_flight`` is set, in which case the running
        refresh is allowed to finish (its outcome ignored) and a new lookup
        is started. On failure the exception propagates and the previous
        snapshot stays installed.

        Args:
            after_in_flight (bool): Never reuse a lookup that is already running

        Returns:
            InventorySnapshot: The newly installed snapshot
        """
        running = self._inventory_refresh
        if after_in_flight and running is not None and not running.done():
            logger.debug("Waiting for the running inventory refresh before starting a new one.")
            await asyncio.wait([running])
        task = self._start("_inventory_refresh", self._refresh_inventory)
        return await asyncio.shield(task)

    async def ensure_inventory_initialized(self) -> InventorySnapshot:
        """
        Make sure some inventory snapshot exists, building one synchronously if not.

        The inventory is also rebuilt when the catalog was replaced since it
        was built. If that rebuild fails the previous snapshot is served.

        Returns:
            InventorySnapshot: The installed snapshot (possibly stale)

        Raises:
            CatalogUnavailableError: If no inventory was ever built and the refresh failed
        """
        if not self.inventory_needs_rebuild():
            return self._inventory

        try:
            return await self.refresh_inventory()
        except CatalogUnavailableError:
            raise
        except Exception as e:
            if self._inventory is None:
                raise CatalogUnavailableError("No inventory data available yet") from e
            logger.error(
                f"Inventory refresh failed; serving inventory from {self._inventory.fetched_at.isoformat()}: {str(e)}",
                exc_info=True,
            )
            return self._inventory

    def schedule_inventory_refresh(self) -> Optional[asyncio.Task]:
        """
        Start an inventory refresh in the background without waiting for it.

        Returns:
            Optional[asyncio.Task]: The in-flight refresh task
        """
        already_running = self.inventory_refreshing
        task = self._start("_inventory_refresh", self._refresh_inventory)
        if not already_running:
            logger.debug("Inventory is stale; refreshing in the background.")
            self._background_tasks.add(task)
            task.add_done_callback(self._finish_background_refresh)
        return task

    def _finish_background_refresh(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background inventory refresh failed: {str(error)}", exc_info=error)

    async def wait_for_background_refreshes(self) -> None:
        """Wait until every background refresh started so far has finished."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    # ---------- Read path ----------

    async def get_snapshot(self) -> InventorySnapshot:
        """
        Serve the current best-effort snapshot.

        Blocks only when no data exists yet (or the catalog itself must be
        refreshed). Stale inventory is served immediately and refreshed in
        the background.

        Returns:
            InventorySnapshot: The current snapshot
        """
        await self.ensure_catalog_fresh()
        snapshot = await self.ensure_inventory_initialized()
        if self.is_inventory_stale():
            self.schedule_inventory_refresh()
        return snapshot

    def status(self) -> Dict[str, Any]:
        """
        Describe the cache state.

        Returns:
            Dict[str, Any]: Fetch times, ages in seconds, sizes and in-flight refreshes
        """
        def describe(snapshot):
            if snapshot is None:
                return {"fetched_at": None, "age_seconds": None, "items": 0, "variations": 0}
            return {
                "fetched_at": snapshot.fetched_at.isoformat(),
                "age_seconds": round(self._age(snapshot.fetched_at).total_seconds(), 1),
                "items": len(snapshot),
                "variations": len(snapshot.variation_ids),
            }

        catalog = describe(self._catalog)
        catalog["refreshing"] = self._catalog_refresh is not None and not self._catalog_refresh.done()
        catalog["ttl_seconds"] = self.catalog_ttl.total_seconds()

        inventory = describe(self._inventory)
        inventory["refreshing"] = self.inventory_refreshing
        inventory["ttl_seconds"] = self.inventory_ttl.total_seconds()
        inventory["matches_catalog"] = not self.inventory_needs_rebuild()

        return {"catalog": catalog, "inventory": inventory}
