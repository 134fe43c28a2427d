"""
Tests for the checkout availability guard.
"""
import asyncio

import pytest

from sugarplum_catalog.data.models.inventory import INSUFFICIENT_STOCK, OUT_OF_STOCK, UNRESOLVED, CartLine
from sugarplum_catalog.exceptions import CatalogUnavailableError, InvalidCartError, VendorError
from sugarplum_catalog.services.availability_guard import AvailabilityGuard

from tests.conftest import ITEM_HOODIE


@pytest.fixture
def guard(cache):
    return AvailabilityGuard(cache)


def test_request_above_stock_is_rejected(guard, connector):
    connector.set_quantities(V_TEE_S=2)

    result = asyncio.run(guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": 3}]))

    assert not result.ok
    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.variation_id == "V_TEE_S"
    assert conflict.requested == 3
    assert conflict.available == 2
    assert conflict.reason == INSUFFICIENT_STOCK


def test_request_within_stock_passes(guard, connector):
    connector.set_quantities(V_TEE_S=2)

    result = asyncio.run(guard.validate_and_reserve_none([CartLine(quantity=2, variation_id="V_TEE_S")]))

    assert result.ok
    assert result.conflicts == ()
    assert result.to_dict() == {"ok": True}


def test_every_check_reads_fresh_inventory(guard, cache, connector):
    async def scenario():
        await cache.get_snapshot()
        connector.set_quantities(V_TEE_S=0)
        return await guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": 1}])

    result = asyncio.run(scenario())

    assert not result.ok
    assert result.conflicts[0].reason == OUT_OF_STOCK
    assert connector.calls["batch_get_inventory_counts"] == 2


def test_first_check_on_empty_cache_fetches_once(guard, connector):
    asyncio.run(guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": 1}]))
    assert connector.calls["batch_get_inventory_counts"] == 1


def test_lines_for_same_variation_are_summed(guard, connector):
    connector.set_quantities(V_TEE_S=3)

    result = asyncio.run(guard.validate_and_reserve_none([
        {"variation_id": "V_TEE_S", "quantity": 2},
        {"variation_id": "V_HOOD_L", "quantity": 1},
        {"variation_id": "V_TEE_S", "quantity": 2},
    ]))

    assert not result.ok
    assert [c.variation_id for c in result.conflicts] == ["V_TEE_S", "V_HOOD_L"]
    tee = result.conflicts[0]
    assert tee.line_indexes == (0, 2)
    assert tee.requested == 4
    assert tee.available == 3
    assert result.conflicts[1].reason == OUT_OF_STOCK


def test_unknown_variation_is_a_conflict(guard):
    result = asyncio.run(guard.validate_and_reserve_none([{"variation_id": "GONE", "quantity": 1}]))

    assert not result.ok
    assert result.conflicts[0].reason == UNRESOLVED
    assert result.conflicts[0].available == 0
    assert result.to_dict()["conflicts"][0]["lines"] == [0]


def test_color_and_size_fallback(guard):
    result = asyncio.run(guard.validate_and_reserve_none([
        {"itemId": ITEM_HOODIE, "color": "heather gray", "size": "Large", "qty": 1},
    ]))
    assert result.ok


def test_color_and_size_fallback_respects_stock(guard):
    result = asyncio.run(guard.validate_and_reserve_none([
        {"item_id": ITEM_HOODIE, "variation_id": "STALE_ID", "color": "Heather Gray", "size": "L", "quantity": 2},
    ]))

    assert not result.ok
    assert result.conflicts[0].variation_id == "V_HOOD_L"
    assert result.conflicts[0].item_name == "Lake Life Hoodie"


def test_all_or_nothing(guard, connector):
    connector.set_quantities(V_TEE_S=5, V_HOOD_L=0)

    result = asyncio.run(guard.validate_and_reserve_none([
        {"variation_id": "V_TEE_S", "quantity": 1},
        {"variation_id": "V_HOOD_L", "quantity": 1},
    ]))

    assert not result.ok
    assert [c.variation_id for c in result.conflicts] == ["V_HOOD_L"]


def test_empty_cart_rejected(guard, connector):
    with pytest.raises(InvalidCartError):
        asyncio.run(guard.validate_and_reserve_none([]))
    assert connector.calls["batch_get_inventory_counts"] == 0


@pytest.mark.parametrize("quantity", [0, -1, "two", 1.5, True])
def test_bad_quantity_rejected(guard, quantity):
    with pytest.raises(InvalidCartError):
        asyncio.run(guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": quantity}]))


def test_numeric_string_quantity_accepted(guard):
    result = asyncio.run(guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": "2"}]))
    assert result.ok


def test_vendor_failure_fails_closed(guard, cache, connector):
    async def scenario():
        await cache.get_snapshot()
        connector.inventory_error = VendorError("timeout")
        return await guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": 1}])

    with pytest.raises(VendorError):
        asyncio.run(scenario())


def test_no_data_and_vendor_down(guard, connector):
    connector.catalog_error = VendorError("down")

    with pytest.raises(CatalogUnavailableError):
        asyncio.run(guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": 1}]))


def test_check_does_not_reuse_lookup_started_before_it(guard, cache, connector, clock):
    async def scenario():
        await cache.get_snapshot()
        clock.advance(minutes=6)
        connector.inventory_gate = asyncio.Event()
        # The background refresh reads the old stock of 5 and is held
        await cache.get_snapshot()
        while connector.calls["batch_get_inventory_counts"] < 2:
            await asyncio.sleep(0)

        connector.set_quantities(V_TEE_S=0)
        check = asyncio.ensure_future(guard.validate_and_reserve_none([{"variation_id": "V_TEE_S", "quantity": 5}]))
        for _ in range(5):
            await asyncio.sleep(0)
        connector.inventory_gate.set()
        return await check

    result = asyncio.run(scenario())

    assert not result.ok
    assert result.conflicts[0].reason == OUT_OF_STOCK
    assert connector.calls["batch_get_inventory_counts"] == 3
