"""
Checkout availability and inventory adjustment models.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from sugarplum_catalog.data.models.vendor import VendorInventoryUpdate

# Conflict reasons
OUT_OF_STOCK = "out_of_stock"
INSUFFICIENT_STOCK = "insufficient_stock"
UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class CartLine:
    """
    One requested checkout line.
    
    ``variation_id`` is preferred; ``item_id`` with ``color``/``size`` is the
    fallback used when the variation id is missing or no longer exists.
    """
    quantity: int
    variation_id: Optional[str] = None
    item_id: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    
    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CartLine":
        quantity = raw.get("quantity", raw.get("qty", 1))
        return cls(
            quantity=quantity,
            variation_id=raw.get("variation_id") or raw.get("variationId") or None,
            item_id=raw.get("item_id") or raw.get("itemId") or raw.get("id") or None,
            color=raw.get("color") or None,
            size=raw.get("size") or None,
        )


@dataclass(frozen=True)
class LineConflict:
    """
    A requested quantity the current stock cannot satisfy.
    
    When several cart lines resolve to the same variation their requested
    quantities are summed and all their positions are listed.
    """
    line_indexes: Tuple[int, ...]
    variation_id: Optional[str]
    requested: int
    available: int
    reason: str
    item_name: Optional[str] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "lines": list(self.line_indexes),
            "variation_id": self.variation_id,
            "item_name": self.item_name,
            "requested": self.requested,
            "available": self.available,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class AvailabilityResult:
    """
    Outcome of a checkout availability check. Nothing is reserved.
    """
    ok: bool
    conflicts: Tuple[LineConflict, ...] = ()
    checked_at: Optional[datetime] = None
    
    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "conflicts": [c.to_dict() for c in self.conflicts]}


@dataclass(frozen=True)
class InventoryDeltaRequest:
    """
    A requested stock adjustment from a manual count or barcode scan.
    
    ``identifier`` is a variation id or a SKU. Exactly one of ``delta`` and
    ``absolute`` must be given. ``item_id`` with ``color``/``size`` is the
    fallback match when the identifier does not resolve.
    """
    identifier: str
    delta: Optional[int] = None
    absolute: Optional[int] = None
    item_id: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None


@dataclass(frozen=True)
class RejectedDelta:
    request: InventoryDeltaRequest
    reason: str


@dataclass(frozen=True)
class DeltaApplyResult:
    """
    Outcome of forwarding a delta batch to the vendor.
    
    The inventory cache is not refreshed automatically; callers must
    trigger a refresh once the vendor accepts the batch.
    """
    applied: Tuple[VendorInventoryUpdate, ...] = ()
    rejected: Tuple[RejectedDelta, ...] = ()
    vendor_result: Any = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": [
                {"variation_id": u.variation_id, "delta": u.delta, "absolute": u.absolute}
                for u in self.applied
            ],
            "rejected": [
                {"identifier": r.request.identifier, "reason": r.reason} for r in self.rejected
            ],
            "vendor_result": self.vendor_result,
        }
