"""
Tests for catalog models and input validation helpers.
"""
from datetime import datetime, timezone

import pytest

from sugarplum_catalog.data.models.catalog import CatalogItem, CatalogSnapshot, InventorySnapshot, Variation
from sugarplum_catalog.data.models.flags import ProductFlags
from sugarplum_catalog.data.models.vendor import VendorCatalogItem
from sugarplum_catalog.utils.validation import parse_quantity, validate_positive_seconds

FETCHED_AT = datetime(2024, 11, 1, tzinfo=timezone.utc)


def _item(item_id="I1", variation_ids=("V1", "V2")):
    return CatalogItem(
        id=item_id,
        name="Graphic Tee",
        variations=tuple(Variation(id=v, name="Black / S", price_cents=2000, sku=f"SKU-{v}") for v in variation_ids),
    )


def test_item_requires_variations():
    with pytest.raises(ValueError):
        CatalogItem(id="I1", name="Graphic Tee", variations=())


def test_item_rejects_duplicate_variation_ids():
    with pytest.raises(ValueError):
        _item(variation_ids=("V1", "V1"))


def test_item_rejects_unknown_garment_type():
    with pytest.raises(ValueError):
        CatalogItem(
            id="I1",
            name="Graphic Tee",
            variations=(Variation(id="V1", name="S", price_cents=100),),
            garment_type="Poncho",
        )


def test_variation_rejects_negative_quantity():
    with pytest.raises(ValueError):
        Variation(id="V1", name="S", price_cents=100, quantity=-1)


def test_inventory_snapshot_defaults_missing_counts_to_zero():
    catalog = CatalogSnapshot(items=(_item(),), fetched_at=FETCHED_AT)
    inventory = InventorySnapshot.build(catalog, {"V1": 3}, fetched_at=FETCHED_AT)

    assert [v.quantity for v in inventory.get_item("I1").variations] == [3, 0]
    assert inventory.catalog_fetched_at == FETCHED_AT
    # The catalog snapshot is left untouched
    assert [v.quantity for v in catalog.get_item("I1").variations] == [None, None]


def test_snapshot_lookups():
    snapshot = CatalogSnapshot(items=(_item(),), fetched_at=FETCHED_AT)

    assert snapshot.find_variation("V2")[1].id == "V2"
    assert snapshot.find_by_sku("SKU-V1")[1].id == "V1"
    assert snapshot.find_by_sku("nope") is None
    assert snapshot.get_item("missing") is None
    assert snapshot.variation_ids == ["V1", "V2"]


def test_vendor_item_defaults_missing_fields():
    item = VendorCatalogItem.from_square({"id": "I1", "type": "ITEM"})

    assert item.name == ""
    assert item.variations == []
    assert item.image_ids == []


def test_flags_merge_keeps_unmentioned_fields():
    flags = ProductFlags(is_new=True, ribbon_type="new")
    merged = flags.merged_with({"pinToTop": True})

    assert merged.is_new is True
    assert merged.pin_to_top is True
    assert merged.ribbon_type == "new"


@pytest.mark.parametrize("value, expected", [
    (3, 3),
    ("4", 4),
    (" -2 ", -2),
    ("4.0", 4),
    (2.5, None),
    ("abc", None),
    (None, None),
    (False, None),
    ("nan", None),
])
def test_parse_quantity(value, expected):
    assert parse_quantity(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("300", 300.0),
    ("0", 42.0),
    ("-5", 42.0),
    ("soon", 42.0),
])
def test_validate_positive_seconds(value, expected):
    assert validate_positive_seconds(value, default=42.0) == expected
