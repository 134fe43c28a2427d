"""
Checkout-time stock sufficiency check.
"""
from collections import OrderedDict
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from sugarplum_catalog.cache.catalog_cache import CatalogCache
from sugarplum_catalog.classification.classifier import normalize_size
from sugarplum_catalog.data.models.catalog import CatalogItem, CatalogSnapshot, Variation
from sugarplum_catalog.data.models.inventory import (
    INSUFFICIENT_STOCK,
    OUT_OF_STOCK,
    UNRESOLVED,
    AvailabilityResult,
    CartLine,
    LineConflict
)
from sugarplum_catalog.exceptions import InvalidCartError
from sugarplum_catalog.utils.logging_config import get_logger
from sugarplum_catalog.utils.validation import parse_quantity

# Set up logging
logger = get_logger(__name__)


def _same_text(left: Optional[str], right: Optional[str]) -> bool:
    return (left or "").strip().casefold() == (right or "").strip().casefold()


def _same_size(variation_size: Optional[str], requested: Optional[str]) -> bool:
    if _same_text(variation_size, requested):
        return True
    return _same_text(variation_size, normalize_size(requested))


def resolve_variation(
    snapshot: CatalogSnapshot,
    variation_id: Optional[str] = None,
    item_id: Optional[str] = None,
    color: Optional[str] = None,
    size: Optional[str] = None
) -> Optional[Tuple[CatalogItem, Variation]]:
    """
    Find the variation a cart line or delta refers to.

    An exact variation id match wins. Otherwise the color and size are
    matched case-insensitively within the item given by ``item_id``.

    Args:
        snapshot (CatalogSnapshot): Snapshot to search
        variation_id (Optional[str]): Vendor variation id
        item_id (Optional[str]): Parent item id for the fallback match
        color (Optional[str]): Color for the fallback match
        size (Optional[str]): Size for the fallback match

    Returns:
        Optional[Tuple[CatalogItem, Variation]]: The match, or None
    """
    if variation_id:
        found = snapshot.find_variation(variation_id)
        if found is not None:
            return found

    if not item_id or not (color or size):
        return None
    item = snapshot.get_item(item_id)
    if item is None:
        return None

    for variation in item.variations:
        if _same_text(variation.color, color) and _same_size(variation.size, size):
            return item, variation
    return None


class AvailabilityGuard:
    """
    Rejects orders the freshest obtainable inventory cannot satisfy.

    The guard reserves nothing: stock is decremented by the vendor when the
    order is placed there, so two checkouts passing the guard at the same
    moment can still compete for the last unit.
    """

    def __init__(self, cache: CatalogCache):
        """
        Initialize the guard.

        Args:
            cache (CatalogCache): The catalog/inventory cache
        """
        self.cache = cache

    @staticmethod
    def coerce_lines(cart_lines: Iterable[Union[CartLine, Mapping[str, Any]]]) -> List[CartLine]:
        """
        Validate cart input and convert it to CartLine objects.

        Raises:
            InvalidCartError: If the cart is empty or a quantity is not a positive whole number
        """
        lines = []
        for index, raw in enumerate(cart_lines or []):
            line = raw if isinstance(raw, CartLine) else CartLine.from_dict(raw)
            quantity = parse_quantity(line.quantity)
            if quantity is None or quantity < 1:
                raise InvalidCartError(f"Cart line {index} has an invalid quantity: {line.quantity!r}")
            if quantity != line.quantity:
                line = CartLine(
                    quantity=quantity,
                    variation_id=line.variation_id,
                    item_id=line.item_id,
                    color=line.color,
                    size=line.size,
                )
            lines.append(line)

        if not lines:
            raise InvalidCartError("Cart is empty")
        return lines

    @staticmethod
    def check_against(snapshot: CatalogSnapshot, lines: List[CartLine]) -> AvailabilityResult:
        """
        Compare requested quantities with a snapshot's quantities.

        Lines resolving to the same variation are summed before comparing.
        Unresolvable lines count as zero available. Any conflict rejects the
        whole order.

        Args:
            snapshot (CatalogSnapshot): Snapshot carrying quantities
            lines (List[CartLine]): Validated cart lines

        Returns:
            AvailabilityResult: ok, or the per-variation conflicts
        """
        requested = OrderedDict()
        conflicts = []

        for index, line in enumerate(lines):
            match = resolve_variation(
                snapshot,
                variation_id=line.variation_id,
                item_id=line.item_id,
                color=line.color,
                size=line.size,
            )
            if match is None:
                conflicts.append(LineConflict(
                    line_indexes=(index,),
                    variation_id=line.variation_id,
                    requested=line.quantity,
                    available=0,
                    reason=UNRESOLVED,
                ))
                continue

            item, variation = match
            entry = requested.setdefault(variation.id, {"item": item, "variation": variation, "quantity": 0, "lines": []})
            entry["quantity"] += line.quantity
            entry["lines"].append(index)

        for variation_id, entry in requested.items():
            available = entry["variation"].quantity or 0
            if available > 0 and entry["quantity"] <= available:
                continue
            conflicts.append(LineConflict(
                line_indexes=tuple(entry["lines"]),
                variation_id=variation_id,
                requested=entry["quantity"],
                available=available,
                reason=OUT_OF_STOCK if available == 0 else INSUFFICIENT_STOCK,
                item_name=entry["item"].name,
            ))

        conflicts.sort(key=lambda c: c.line_indexes[0])
        return AvailabilityResult(ok=not conflicts, conflicts=tuple(conflicts), checked_at=snapshot.fetched_at)

    async def validate_and_reserve_none(
        self,
        cart_lines: Iterable[Union[CartLine, Mapping[str, Any]]]
    ) -> AvailabilityResult:
        """
        Check a cart against freshly fetched inventory.

        The inventory is always refreshed from the vendor first, bypassing the
        TTL. Refresh failures propagate to the caller; they are never treated
        as "available".

        Args:
            cart_lines (Iterable[Union[CartLine, Mapping[str, Any]]]): Requested lines

        Returns:
            AvailabilityResult: ok, or the conflicts to show the shopper

        Raises:
            InvalidCartError: If the cart is malformed
        """
        lines = self.coerce_lines(cart_lines)

        # A lookup already running read stock before this checkout began
        earlier_lookup_running = self.cache.inventory_refreshing

        await self.cache.ensure_catalog_fresh()
        previous = self.cache.inventory_snapshot
        snapshot = await self.cache.ensure_inventory_initialized()
        if snapshot is previous or earlier_lookup_running:
            snapshot = await self.cache.refresh_inventory(after_in_flight=True)

        result = self.check_against(snapshot, lines)
        if result.ok:
            logger.info(f"Availability check passed for {len(lines)} cart line(s).")
        else:
            logger.info(
                f"Availability check rejected cart: {len(result.conflicts)} conflict(s) "
                f"across {len(lines)} line(s)."
            )
        return result
