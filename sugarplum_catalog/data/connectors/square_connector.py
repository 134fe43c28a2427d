"""
Square commerce platform connector implementation.
"""
import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import requests

from sugarplum_catalog.config.vendor_config import get_square_config
from sugarplum_catalog.data.connectors.base_connector import BaseVendorConnector
from sugarplum_catalog.data.models.vendor import (
    CatalogPage,
    InventoryCount,
    VendorCatalogItem,
    VendorInventoryUpdate
)
from sugarplum_catalog.exceptions import VendorError
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)

# Request size limits of the batch endpoints
INVENTORY_LOOKUP_BATCH_SIZE = 1000
INVENTORY_CHANGE_BATCH_SIZE = 100


def _chunks(values: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [values[i:i + size] for i in range(0, len(values), size)]


class SquareConnector(BaseVendorConnector):
    """
    Connector for the Square catalog and inventory APIs.

    ``requests`` is blocking, so every call runs in a worker thread through
    ``asyncio.to_thread`` and the event loop stays free for readers.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the Square connector.

        Args:
            config (Optional[Dict[str, Any]]): Square configuration.
                                              If None, uses get_square_config()
        """
        self.config = config if config is not None else get_square_config()
        self.session = None

    def connect(self) -> requests.Session:
        """
        Create the HTTP session.

        Returns:
            requests.Session: The authenticated session
        """
        if self.session is None:
            self.session = requests.Session()
            self.session.headers.update({
                "Authorization": f"Bearer {self.config['access_token']}",
                "Square-Version": self.config["api_version"],
                "Content-Type": "application/json",
                "Accept": "application/json",
            })
            logger.info(f"Square session created ({self.config['environment']}).")

        return self.session

    def disconnect(self) -> None:
        """
        Close the HTTP session.
        """
        if self.session is not None:
            self.session.close()
            self.session = None
            logger.info("Square session closed.")

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Args:
            method (str): HTTP method
            path (str): Path below the API base URL
            params (Optional[Dict[str, Any]]): Query parameters
            body (Optional[Dict[str, Any]]): JSON body

        Returns:
            Dict[str, Any]: The response body

        Raises:
            VendorError: On transport errors, non-2xx responses or a non-JSON body
        """
        session = self.connect()
        url = f"{self.config['base_url']}{path}"

        try:
            response = session.request(
                method, url, params=params, json=body, timeout=self.config["timeout"]
            )
        except requests.RequestException as e:
            logger.error(f"Square request failed: {method} {path}: {str(e)}")
            raise VendorError(f"Square request failed: {str(e)}") from e

        try:
            payload = response.json() if response.content else {}
        except ValueError as e:
            raise VendorError(
                f"Square returned a non-JSON response for {path}", status_code=response.status_code
            ) from e

        if not response.ok:
            errors = payload.get("errors", []) if isinstance(payload, dict) else []
            logger.error(f"Square error {response.status_code} on {method} {path}: {errors}")
            raise VendorError(
                f"Square returned HTTP {response.status_code} for {path}",
                status_code=response.status_code,
                errors=errors,
            )

        return payload

    async def list_catalog_page(self, cursor: Optional[str] = None) -> CatalogPage:
        params = {"types": "ITEM"}
        if cursor:
            params["cursor"] = cursor
        payload = await asyncio.to_thread(self._request, "GET", "/catalog/list", params=params)

        items = [
            VendorCatalogItem.from_square(obj)
            for obj in payload.get("objects") or []
            if obj.get("type") == "ITEM"
        ]
        return CatalogPage(items=items, next_cursor=payload.get("cursor") or None)

    async def retrieve_image(self, image_id: str) -> Optional[str]:
        payload = await asyncio.to_thread(self._request, "GET", f"/catalog/object/{image_id}")
        image_data = (payload.get("object") or {}).get("image_data") or {}
        return image_data.get("url") or None

    async def batch_get_inventory_counts(self, variation_ids: Sequence[str]) -> List[InventoryCount]:
        counts: List[InventoryCount] = []
        for chunk in _chunks(list(variation_ids), INVENTORY_LOOKUP_BATCH_SIZE):
            cursor = None
            while True:
                body = {"catalog_object_ids": list(chunk)}
                if cursor:
                    body["cursor"] = cursor
                payload = await asyncio.to_thread(
                    self._request, "POST", "/inventory/counts/batch-retrieve", body=body
                )
                for row in payload.get("counts") or []:
                    counts.append(InventoryCount(
                        variation_id=row.get("catalog_object_id") or "",
                        quantity=row.get("quantity", 0),
                    ))
                cursor = payload.get("cursor")
                if not cursor:
                    break
        return counts

    def _build_change(self, update: VendorInventoryUpdate, occurred_at: str) -> Dict[str, Any]:
        location_id = self.config["location_id"]
        if update.absolute is not None:
            return {
                "type": "PHYSICAL_COUNT",
                "physical_count": {
                    "catalog_object_id": update.variation_id,
                    "location_id": location_id,
                    "state": "IN_STOCK",
                    "quantity": str(update.absolute),
                    "occurred_at": occurred_at,
                },
            }

        # Positive deltas receive stock, negative deltas write it off
        if update.delta > 0:
            from_state, to_state = "NONE", "IN_STOCK"
        else:
            from_state, to_state = "IN_STOCK", "WASTE"
        return {
            "type": "ADJUSTMENT",
            "adjustment": {
                "catalog_object_id": update.variation_id,
                "location_id": location_id,
                "from_state": from_state,
                "to_state": to_state,
                "quantity": str(abs(update.delta)),
                "occurred_at": occurred_at,
            },
        }

    async def adjust_inventory(self, updates: Sequence[VendorInventoryUpdate]) -> Dict[str, Any]:
        if not self.config.get("location_id"):
            raise VendorError("SQUARE_LOCATION_ID is not configured")

        occurred_at = datetime.now(timezone.utc).isoformat()
        changes = [self._build_change(u, occurred_at) for u in updates]

        result_counts: List[Dict[str, Any]] = []
        sent = 0
        for chunk in _chunks(changes, INVENTORY_CHANGE_BATCH_SIZE):
            body = {
                "idempotency_key": str(uuid.uuid4()),
                "changes": list(chunk),
                "ignore_unchanged_counts": True,
            }
            try:
                payload = await asyncio.to_thread(
                    self._request, "POST", "/inventory/changes/batch-create", body=body
                )
            except VendorError as e:
                if sent:
                    logger.error(
                        f"Square rejected inventory changes {sent + 1}-{sent + len(chunk)} of {len(changes)}; "
                        f"the first {sent} change(s) were already applied."
                    )
                e.applied_changes = sent
                e.applied_counts = result_counts
                raise
            sent += len(chunk)
            result_counts.extend(payload.get("counts") or [])

        logger.info(f"Sent {len(changes)} inventory changes to Square.")
        return {"counts": result_counts}
