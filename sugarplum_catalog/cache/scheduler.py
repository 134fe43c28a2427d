"""
Periodic background refresh of the catalog cache.
"""
import asyncio
from typing import Awaitable, Callable, List, Optional

from sugarplum_catalog.cache.catalog_cache import CatalogCache
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)


class RefreshScheduler:
    """
    Runs two timers against a cache: an inventory refresh every inventory
    interval and a full catalog + inventory refresh every catalog interval.

    A failing iteration is logged and the timer keeps running.
    """
    
    def __init__(
        self,
        cache: CatalogCache,
        inventory_interval: Optional[float] = None,
        catalog_interval: Optional[float] = None
    ):
        """
        Initialize the scheduler.
        
        Args:
            cache (CatalogCache): The cache to refresh
            inventory_interval (Optional[float]): Seconds between inventory
                refreshes (default: the cache's inventory TTL)
            catalog_interval (Optional[float]): Seconds between full refreshes
                (default: the cache's catalog TTL)
        """
        self.cache = cache
        self.inventory_interval = inventory_interval or cache.inventory_ttl.total_seconds()
        self.catalog_interval = catalog_interval or cache.catalog_ttl.total_seconds()
        self._tasks: List[asyncio.Task] = []
    
    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)
    
    async def _refresh_inventory(self) -> None:
        await self.cache.refresh_inventory()
    
    async def _refresh_all(self) -> None:
        await self.cache.refresh_catalog()
        await self.cache.refresh_inventory()
    
    async def _run_every(self, name: str, interval: float, job: Callable[[], Awaitable[None]]) -> None:
        logger.info(f"Scheduled {name} refresh every {interval:g}s.")
        while True:
            await asyncio.sleep(interval)
            try:
                await job()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Scheduled {name} refresh failed: {str(e)}", exc_info=True)
    
    def start(self) -> None:
        """
        Start both timers on the running event loop. Calling it again while
        running does nothing.
        """
        if self.running:
            return
        self._tasks = [
            asyncio.ensure_future(self._run_every("inventory", self.inventory_interval, self._refresh_inventory)),
            asyncio.ensure_future(self._run_every("catalog", self.catalog_interval, self._refresh_all)),
        ]
    
    async def stop(self) -> None:
        """Cancel both timers and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Refresh scheduler stopped.")
