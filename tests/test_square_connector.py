"""
Tests for the Square connector against a recorded-response session.
"""
import asyncio
import json

import pytest
import requests

from sugarplum_catalog.data.connectors.square_connector import SquareConnector
from sugarplum_catalog.data.models.vendor import VendorInventoryUpdate
from sugarplum_catalog.exceptions import VendorError

CONFIG = {
    "access_token": "token",
    "environment": "sandbox",
    "base_url": "https://connect.squareupsandbox.com/v2",
    "location_id": "LOC_1",
    "api_version": "2024-01-18",
    "timeout": 5,
}


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._text = text if text is not None else json.dumps(payload if payload is not None else {})
        self.content = self._text.encode("utf-8")

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return json.loads(self._text)


class FakeSession:

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "json": json})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        pass


def _connector(*responses):
    connector = SquareConnector(config=dict(CONFIG))
    connector.session = FakeSession(responses)
    return connector


def test_list_catalog_page_keeps_items_only():
    connector = _connector(FakeResponse(payload={
        "objects": [
            {
                "type": "ITEM",
                "id": "I1",
                "item_data": {
                    "name": "Graphic Tee",
                    "image_ids": ["IMG1"],
                    "variations": [
                        {
                            "id": "V1",
                            "item_variation_data": {
                                "name": "Black / S",
                                "sku": "GT-S",
                                "price_money": {"amount": 2500, "currency": "USD"},
                            },
                        },
                        {"id": "V2", "item_variation_data": {"name": "Black / M"}},
                    ],
                },
            },
            {"type": "CATEGORY", "id": "C1", "category_data": {"name": "Tees"}},
        ],
        "cursor": "NEXT",
    }))

    page = asyncio.run(connector.list_catalog_page())

    assert page.next_cursor == "NEXT"
    assert [item.id for item in page.items] == ["I1"]
    item = page.items[0]
    assert item.image_ids == ["IMG1"]
    assert item.description == ""
    assert item.variations[0].price_cents == 2500
    assert item.variations[0].sku == "GT-S"
    assert item.variations[1].price_cents == 0
    assert item.variations[1].sku is None

    sent = connector.session.requests[0]
    assert sent["url"].endswith("/catalog/list")
    assert sent["params"] == {"types": "ITEM"}


def test_last_page_has_no_cursor():
    connector = _connector(FakeResponse(payload={}))
    page = asyncio.run(connector.list_catalog_page("ABC"))

    assert page.items == []
    assert page.next_cursor is None
    assert connector.session.requests[0]["params"]["cursor"] == "ABC"


def test_retrieve_image():
    connector = _connector(FakeResponse(payload={"object": {"image_data": {"url": "https://img/1.png"}}}))
    assert asyncio.run(connector.retrieve_image("IMG1")) == "https://img/1.png"


def test_inventory_counts_follow_cursor():
    connector = _connector(
        FakeResponse(payload={
            "counts": [{"catalog_object_id": "V1", "quantity": "3", "state": "IN_STOCK"}],
            "cursor": "MORE",
        }),
        FakeResponse(payload={"counts": [{"catalog_object_id": "V1", "quantity": "2"}]}),
    )

    counts = asyncio.run(connector.batch_get_inventory_counts(["V1", "V2"]))

    assert [(c.variation_id, c.quantity) for c in counts] == [("V1", "3"), ("V1", "2")]
    assert connector.session.requests[1]["json"]["cursor"] == "MORE"


def test_adjust_inventory_builds_changes():
    connector = _connector(FakeResponse(payload={"counts": [{"catalog_object_id": "V1", "quantity": "4"}]}))

    result = asyncio.run(connector.adjust_inventory([
        VendorInventoryUpdate(variation_id="V1", delta=2),
        VendorInventoryUpdate(variation_id="V2", delta=-1),
        VendorInventoryUpdate(variation_id="V3", absolute=7),
    ]))

    assert result == {"counts": [{"catalog_object_id": "V1", "quantity": "4"}]}
    body = connector.session.requests[0]["json"]
    assert body["idempotency_key"]
    receive, write_off, count = body["changes"]
    assert receive["adjustment"]["from_state"] == "NONE"
    assert receive["adjustment"]["to_state"] == "IN_STOCK"
    assert receive["adjustment"]["quantity"] == "2"
    assert write_off["adjustment"]["from_state"] == "IN_STOCK"
    assert write_off["adjustment"]["to_state"] == "WASTE"
    assert write_off["adjustment"]["quantity"] == "1"
    assert count["type"] == "PHYSICAL_COUNT"
    assert count["physical_count"]["quantity"] == "7"
    assert count["physical_count"]["location_id"] == "LOC_1"


def test_adjust_requires_location():
    connector = _connector()
    connector.config["location_id"] = ""

    with pytest.raises(VendorError):
        asyncio.run(connector.adjust_inventory([VendorInventoryUpdate(variation_id="V1", delta=1)]))


def test_http_error_keeps_vendor_errors():
    errors = [{"category": "INVALID_REQUEST_ERROR", "code": "NOT_FOUND", "detail": "Object not found"}]
    connector = _connector(FakeResponse(status_code=404, payload={"errors": errors}))

    with pytest.raises(VendorError) as excinfo:
        asyncio.run(connector.retrieve_image("MISSING"))

    assert excinfo.value.status_code == 404
    assert excinfo.value.errors == errors


def test_transport_error_wrapped():
    connector = _connector(requests.ConnectionError("connection reset"))

    with pytest.raises(VendorError):
        asyncio.run(connector.list_catalog_page())


def test_non_json_body():
    connector = _connector(FakeResponse(status_code=502, text="<html>Bad Gateway</html>"))

    with pytest.raises(VendorError) as excinfo:
        asyncio.run(connector.list_catalog_page())
    assert excinfo.value.status_code == 502


def test_adjust_failure_reports_changes_already_applied():
    errors = [{"category": "INVALID_REQUEST_ERROR", "code": "INVALID_VALUE"}]
    connector = _connector(
        FakeResponse(payload={"counts": [{"catalog_object_id": "V0", "quantity": "1"}]}),
        FakeResponse(status_code=400, payload={"errors": errors}),
    )
    updates = [VendorInventoryUpdate(variation_id=f"V{i}", delta=1) for i in range(150)]

    with pytest.raises(VendorError) as excinfo:
        asyncio.run(connector.adjust_inventory(updates))

    assert len(connector.session.requests) == 2
    assert len(connector.session.requests[0]["json"]["changes"]) == 100
    assert len(connector.session.requests[1]["json"]["changes"]) == 50
    assert excinfo.value.errors == errors
    assert excinfo.value.applied_changes == 100
    assert excinfo.value.applied_counts == [{"catalog_object_id": "V0", "quantity": "1"}]


def test_adjust_failure_on_first_batch_applied_nothing():
    connector = _connector(FakeResponse(status_code=500, payload={"errors": []}))

    with pytest.raises(VendorError) as excinfo:
        asyncio.run(connector.adjust_inventory([VendorInventoryUpdate(variation_id="V1", delta=1)]))

    assert excinfo.value.applied_changes == 0
