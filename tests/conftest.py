"""
Shared fixtures: an in-memory vendor connector, a controllable clock and a
small apparel catalog.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest

from sugarplum_catalog.cache.catalog_cache import CatalogCache
from sugarplum_catalog.data.connectors.base_connector import BaseVendorConnector
from sugarplum_catalog.data.models.vendor import (
    CatalogPage,
    InventoryCount,
    VendorCatalogItem,
    VendorInventoryUpdate,
    VendorVariation
)
from sugarplum_catalog.data.repositories.catalog_repository import CatalogRepository
from sugarplum_catalog.data.repositories.inventory_repository import InventoryRepository
from sugarplum_catalog.utils.clock import Clock

ITEM_TEE = "ITEM_TEE"
ITEM_HOODIE = "ITEM_HOODIE"
ITEM_KIDS = "ITEM_KIDS"
ITEM_GIFT_CARD = "ITEM_GIFT_CARD"
ITEM_TEMPLATE = "ITEM_TEMPLATE"
ITEM_NO_VARIATIONS = "ITEM_NO_VARIATIONS"


class FakeClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 11, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeVendorConnector(BaseVendorConnector):
    """
    In-memory vendor.

    ``pages`` is a list of item lists served in cursor order. Set one of the
    ``*_error`` attributes to make the matching call raise, or a ``*_gate``
    asyncio.Event to hold the call until the event is set.
    """

    def __init__(
        self,
        pages: Optional[List[List[VendorCatalogItem]]] = None,
        counts: Optional[List[InventoryCount]] = None,
        images: Optional[Dict[str, str]] = None
    ):
        self.pages = pages if pages is not None else []
        self.counts = list(counts or [])
        self.images = dict(images or {})

        self.calls = {
            "list_catalog_page": 0,
            "retrieve_image": 0,
            "batch_get_inventory_counts": 0,
            "adjust_inventory": 0,
        }
        self.inventory_requests: List[List[str]] = []
        self.adjustments: List[List[VendorInventoryUpdate]] = []

        self.catalog_error: Optional[Exception] = None
        self.image_error: Optional[Exception] = None
        self.inventory_error: Optional[Exception] = None
        self.adjust_error: Optional[Exception] = None
        self.adjust_result: Dict[str, Any] = {"counts": []}

        self.catalog_gate = None
        self.inventory_gate = None

    async def list_catalog_page(self, cursor: Optional[str] = None) -> CatalogPage:
        self.calls["list_catalog_page"] += 1
        if self.catalog_gate is not None:
            await self.catalog_gate.wait()
        if self.catalog_error is not None:
            raise self.catalog_error

        index = int(cursor) if cursor else 0
        items = self.pages[index] if index < len(self.pages) else []
        next_cursor = str(index + 1) if index + 1 < len(self.pages) else None
        return CatalogPage(items=list(items), next_cursor=next_cursor)

    async def retrieve_image(self, image_id: str) -> Optional[str]:
        self.calls["retrieve_image"] += 1
        if self.image_error is not None:
            raise self.image_error
        return self.images.get(image_id)

    async def batch_get_inventory_counts(self, variation_ids: Sequence[str]) -> List[InventoryCount]:
        self.calls["batch_get_inventory_counts"] += 1
        self.inventory_requests.append(list(variation_ids))
        # Stock is read when the request is made, not when the gate opens
        wanted = set(variation_ids)
        counts = [c for c in self.counts if c.variation_id in wanted]
        if self.inventory_gate is not None:
            await self.inventory_gate.wait()
        if self.inventory_error is not None:
            raise self.inventory_error
        return counts

    async def adjust_inventory(self, updates: Sequence[VendorInventoryUpdate]) -> Dict[str, Any]:
        self.calls["adjust_inventory"] += 1
        self.adjustments.append(list(updates))
        if self.adjust_error is not None:
            raise self.adjust_error
        return self.adjust_result

    def set_quantities(self, **quantities: int) -> None:
        self.counts = [InventoryCount(variation_id, qty) for variation_id, qty in quantities.items()]


def vendor_item(
    item_id: str,
    name: str,
    variations: Sequence[tuple] = (),
    description: str = "",
    image_url: Optional[str] = "https://images.example.com/default.png",
    image_ids: Sequence[str] = ()
) -> VendorCatalogItem:
    """
    Build a vendor item. Each variation is (id, name, price_cents[, sku]).
    """
    built = []
    for variation in variations:
        variation_id, variation_name, price_cents = variation[:3]
        sku = variation[3] if len(variation) > 3 else None
        built.append(VendorVariation(id=variation_id, name=variation_name, sku=sku, price_cents=price_cents))
    return VendorCatalogItem(
        id=item_id,
        name=name,
        description=description,
        image_url=image_url,
        image_ids=list(image_ids),
        variations=built,
    )


def shop_pages() -> List[List[VendorCatalogItem]]:
    """Two catalog pages mixing apparel with items that must be filtered out."""
    return [
        [
            vendor_item(ITEM_TEE, "Grinch Christmas Football Tee", [
                ("V_TEE_S", "Black / S", 2500, "TEE-BLK-S"),
                ("V_TEE_M", "Black / M", 2500, "TEE-BLK-M"),
            ]),
            vendor_item(ITEM_GIFT_CARD, "Gift Card", [("V_GIFT", "Regular", 5000)]),
            vendor_item(ITEM_HOODIE, "Lake Life Hoodie", [
                ("V_HOOD_L", "Heather Gray, Large", 4000, "HOOD-L"),
            ]),
        ],
        [
            vendor_item(ITEM_TEMPLATE, "T-Shirt", [("V_TEMPLATE", "Regular", 0)], image_url=None),
            vendor_item(ITEM_NO_VARIATIONS, "Mystery Shirt", []),
            vendor_item(
                ITEM_KIDS,
                "Dino Youth Tee",
                [
                    ("V_KID_XS", "Hot Pink, Youth X-Small", 1800),
                    ("V_KID_S", "Hot Pink, Youth Small", 1800),
                ],
                image_url=None,
                image_ids=["IMG_DINO"],
            ),
        ],
    ]


def shop_counts() -> List[InventoryCount]:
    return [
        InventoryCount("V_TEE_S", 3),
        InventoryCount("V_TEE_S", 2),
        InventoryCount("V_TEE_M", 0),
        InventoryCount("V_HOOD_L", 1),
        InventoryCount("V_KID_XS", 4),
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def connector():
    return FakeVendorConnector(
        pages=shop_pages(),
        counts=shop_counts(),
        images={"IMG_DINO": "https://images.example.com/dino.png"},
    )


@pytest.fixture
def cache(connector, clock):
    return CatalogCache(
        CatalogRepository(connector),
        InventoryRepository(connector),
        catalog_ttl=24 * 60 * 60,
        inventory_ttl=5 * 60,
        clock=clock,
    )


@pytest.fixture
def flags_path(tmp_path):
    return str(tmp_path / "productConfig.json")
