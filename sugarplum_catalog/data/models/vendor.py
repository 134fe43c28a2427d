"""
Adapter types for vendor catalog and inventory responses.

Every optional field is defaulted here, at the boundary, so the rest of the
package never re-checks vendor payloads for missing keys.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class VendorVariation:
    """
    One variation of a vendor catalog item, as returned by the vendor.
    """
    id: str
    name: str = ""
    sku: Optional[str] = None
    price_cents: int = 0
    
    @classmethod
    def from_square(cls, obj: Dict[str, Any]) -> "VendorVariation":
        data = obj.get("item_variation_data") or {}
        price_money = data.get("price_money") or {}
        amount = price_money.get("amount")
        try:
            price_cents = max(0, int(amount)) if amount is not None else 0
        except (TypeError, ValueError):
            price_cents = 0
        return cls(
            id=obj.get("id") or "",
            name=data.get("name") or "",
            sku=data.get("sku") or None,
            price_cents=price_cents,
        )


@dataclass(frozen=True)
class VendorCatalogItem:
    """
    A raw vendor catalog item before classification.
    """
    id: str
    name: str = ""
    description: str = ""
    image_url: Optional[str] = None
    image_ids: List[str] = field(default_factory=list)
    variations: List[VendorVariation] = field(default_factory=list)
    
    @property
    def variation_names(self) -> List[str]:
        return [v.name for v in self.variations]
    
    @classmethod
    def from_square(cls, obj: Dict[str, Any]) -> "VendorCatalogItem":
        data = obj.get("item_data") or {}
        return cls(
            id=obj.get("id") or "",
            name=data.get("name") or "",
            description=data.get("description") or "",
            image_url=data.get("image_url") or None,
            image_ids=list(data.get("image_ids") or []),
            variations=[VendorVariation.from_square(v) for v in data.get("variations") or []],
        )


@dataclass(frozen=True)
class CatalogPage:
    """
    One page of the vendor catalog listing.
    """
    items: List[VendorCatalogItem]
    next_cursor: Optional[str] = None


@dataclass(frozen=True)
class InventoryCount:
    """
    One inventory count row. A variation may appear in several rows
    (one per location or state); callers must sum them.
    """
    variation_id: str
    quantity: Any = 0


@dataclass(frozen=True)
class VendorInventoryUpdate:
    """
    A resolved inventory change to send to the vendor.
    
    Exactly one of ``delta`` and ``absolute`` is set.
    """
    variation_id: str
    delta: Optional[int] = None
    absolute: Optional[int] = None
