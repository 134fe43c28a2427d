"""
Tests for the periodic refresh scheduler.
"""
import asyncio

from sugarplum_catalog.cache.scheduler import RefreshScheduler
from sugarplum_catalog.exceptions import VendorError


def test_intervals_default_to_ttls(cache):
    scheduler = RefreshScheduler(cache)

    assert scheduler.inventory_interval == 300
    assert scheduler.catalog_interval == 86400


def test_inventory_timer_refreshes(cache, connector):
    scheduler = RefreshScheduler(cache, inventory_interval=0.01, catalog_interval=3600)

    async def scenario():
        scheduler.start()
        await asyncio.sleep(0.2)
        running = scheduler.running
        await scheduler.stop()
        return running

    assert asyncio.run(scenario())
    assert not scheduler.running
    assert connector.calls["batch_get_inventory_counts"] >= 2
    # The catalog is built once for the first inventory refresh and then reused
    assert connector.calls["list_catalog_page"] == 2


def test_catalog_timer_refreshes_both_tiers(cache, connector):
    scheduler = RefreshScheduler(cache, inventory_interval=3600, catalog_interval=0.01)

    async def scenario():
        scheduler.start()
        await asyncio.sleep(0.2)
        await scheduler.stop()

    asyncio.run(scenario())

    assert connector.calls["list_catalog_page"] >= 4
    assert connector.calls["batch_get_inventory_counts"] >= 2


def test_failures_do_not_stop_the_timer(cache, connector):
    connector.inventory_error = VendorError("timeout")
    scheduler = RefreshScheduler(cache, inventory_interval=0.01, catalog_interval=3600)

    async def scenario():
        scheduler.start()
        await asyncio.sleep(0.2)
        running = scheduler.running
        await scheduler.stop()
        return running

    assert asyncio.run(scenario())
    assert connector.calls["batch_get_inventory_counts"] >= 2
    assert cache.inventory_snapshot is None


def test_start_is_idempotent(cache):
    scheduler = RefreshScheduler(cache, inventory_interval=3600, catalog_interval=3600)

    async def scenario():
        scheduler.start()
        tasks = list(scheduler._tasks)
        scheduler.start()
        same = scheduler._tasks == tasks
        await scheduler.stop()
        return same

    assert asyncio.run(scenario())
