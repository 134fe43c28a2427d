"""
Forwards counted inventory changes to the vendor.
"""
from collections import OrderedDict
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from sugarplum_catalog.cache.catalog_cache import CatalogCache
from sugarplum_catalog.data.models.catalog import CatalogItem, CatalogSnapshot, Variation
from sugarplum_catalog.data.models.inventory import DeltaApplyResult, InventoryDeltaRequest, RejectedDelta
from sugarplum_catalog.data.models.vendor import VendorInventoryUpdate
from sugarplum_catalog.data.repositories.inventory_repository import InventoryRepository
from sugarplum_catalog.exceptions import EmptyDeltaBatchError
from sugarplum_catalog.services.availability_guard import resolve_variation
from sugarplum_catalog.utils.logging_config import get_logger
from sugarplum_catalog.utils.validation import parse_quantity

# Set up logging
logger = get_logger(__name__)


def coerce_request(raw: Union[InventoryDeltaRequest, Mapping[str, Any]]) -> InventoryDeltaRequest:
    """
    Build a delta request from admin input.

    Accepts the count screen's {"sku": ..., "newQty": delta} shape as well
    as {"identifier"|"variation_id": ..., "delta"|"absolute": ...}.
    """
    if isinstance(raw, InventoryDeltaRequest):
        return raw

    identifier = raw.get("identifier") or raw.get("variation_id") or raw.get("sku") or ""
    delta = raw.get("delta", raw.get("newQty"))
    return InventoryDeltaRequest(
        identifier=str(identifier).strip(),
        delta=delta,
        absolute=raw.get("absolute"),
        item_id=raw.get("item_id"),
        color=raw.get("color"),
        size=raw.get("size"),
    )


class InventoryDeltaApplier:
    """
    Validates a batch of stock changes and sends the resolvable ones to the vendor.

    Unlike the availability guard, a batch may partially succeed: entries
    that cannot be resolved are rejected with a reason and the rest proceed.
    The cache is not refreshed here; the caller must refresh inventory once
    the vendor accepts the batch.
    """

    def __init__(self, cache: CatalogCache, inventory_repository: InventoryRepository):
        """
        Initialize the applier.

        Args:
            cache (CatalogCache): Cache used to resolve identifiers
            inventory_repository (InventoryRepository): Repository that talks to the vendor
        """
        self.cache = cache
        self.inventory_repository = inventory_repository

    @staticmethod
    def _validate_amount(request: InventoryDeltaRequest) -> Tuple[Optional[VendorInventoryUpdate], Optional[str]]:
        has_delta = request.delta is not None
        has_absolute = request.absolute is not None
        if has_delta == has_absolute:
            return None, "exactly one of delta or absolute quantity is required"

        if has_delta:
            delta = parse_quantity(request.delta)
            if delta is None:
                return None, f"delta must be a whole number, got {request.delta!r}"
            if delta == 0:
                return None, "delta is zero"
            return VendorInventoryUpdate(variation_id="", delta=delta), None

        absolute = parse_quantity(request.absolute)
        if absolute is None or absolute < 0:
            return None, f"absolute quantity must be a non-negative whole number, got {request.absolute!r}"
        return VendorInventoryUpdate(variation_id="", absolute=absolute), None

    @staticmethod
    def _resolve(snapshot: CatalogSnapshot, request: InventoryDeltaRequest) -> Optional[Tuple[CatalogItem, Variation]]:
        found = resolve_variation(
            snapshot,
            variation_id=request.identifier,
            item_id=request.item_id,
            color=request.color,
            size=request.size,
        )
        if found is None and request.identifier:
            found = snapshot.find_by_sku(request.identifier)
        return found

    @staticmethod
    def deduplicate(requests: List[InventoryDeltaRequest]) -> List[InventoryDeltaRequest]:
        """Keep the last request for each identifier, in first-seen order."""
        latest = OrderedDict()
        for request in requests:
            key = request.identifier or (
                request.item_id,
                (request.color or "").casefold(),
                (request.size or "").casefold(),
            )
            latest[key] = request
        return list(latest.values())

    async def apply_deltas(
        self,
        updates: Iterable[Union[InventoryDeltaRequest, Mapping[str, Any]]]
    ) -> DeltaApplyResult:
        """
        Resolve and forward a batch of inventory changes.

        Args:
            updates (Iterable[Union[InventoryDeltaRequest, Mapping[str, Any]]]): Requested changes

        Returns:
            DeltaApplyResult: Applied updates, rejected entries and the vendor's response

        Raises:
            EmptyDeltaBatchError: If the batch is empty
            VendorError: If the vendor rejects the adjustment (surfaced verbatim)
        """
        requests = [coerce_request(u) for u in updates or []]
        if not requests:
            raise EmptyDeltaBatchError("No inventory updates provided")

        snapshot = await self.cache.ensure_inventory_initialized()

        resolved = OrderedDict()
        rejected = []
        for request in self.deduplicate(requests):
            amount, reason = self._validate_amount(request)
            if amount is None:
                rejected.append(RejectedDelta(request=request, reason=reason))
                continue

            match = self._resolve(snapshot, request)
            if match is None:
                rejected.append(RejectedDelta(request=request, reason=f"unknown variation or SKU: {request.identifier!r}"))
                continue

            _, variation = match
            # Two identifiers for the same variation: the later one wins
            resolved.pop(variation.id, None)
            resolved[variation.id] = VendorInventoryUpdate(
                variation_id=variation.id, delta=amount.delta, absolute=amount.absolute
            )

        for entry in rejected:
            logger.warning(f"Rejected inventory update {entry.request.identifier!r}: {entry.reason}")

        if not resolved:
            logger.warning("No resolvable inventory updates; nothing sent to the vendor.")
            return DeltaApplyResult(rejected=tuple(rejected))

        applied = tuple(resolved.values())
        vendor_result = await self.inventory_repository.adjust(applied)
        logger.info(f"Applied {len(applied)} inventory update(s); rejected {len(rejected)}.")
        return DeltaApplyResult(applied=applied, rejected=tuple(rejected), vendor_result=vendor_result)
