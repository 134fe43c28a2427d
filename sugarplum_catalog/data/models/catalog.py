"""
Catalog data models.

Items and variations are frozen: a snapshot is replaced as a whole on refresh
and never mutated in place.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

GARMENT_TYPES = ("T-Shirt", "Hoodie", "Sweatshirt", "Long Sleeve", "Tank")
AUDIENCES = ("Men/Unisex", "Women", "Kids")


@dataclass(frozen=True)
class Variation:
    """
    One purchasable unit within a catalog item.
    """
    id: str
    name: str
    price_cents: int
    size: Optional[str] = None
    color: Optional[str] = None
    sku: Optional[str] = None
    print_location: Optional[str] = None
    quantity: Optional[int] = None  # None until an inventory build has run
    
    def __post_init__(self):
        if self.price_cents < 0:
            raise ValueError(f"Variation {self.id} has a negative price")
        if self.quantity is not None and (not isinstance(self.quantity, int) or self.quantity < 0):
            raise ValueError(f"Variation {self.id} has an invalid quantity: {self.quantity!r}")
    
    @property
    def price(self) -> Decimal:
        """Unit price in major currency units."""
        return Decimal(self.price_cents) / 100
    
    def with_quantity(self, quantity: int) -> "Variation":
        return replace(self, quantity=quantity)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "size": self.size,
            "color": self.color,
            "price_cents": self.price_cents,
            "price": str(self.price),
            "print_location": self.print_location,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class CatalogItem:
    """
    A sellable product definition, independent of stock level.
    """
    id: str
    name: str
    variations: Tuple[Variation, ...]
    description: str = ""
    image_url: Optional[str] = None
    garment_type: str = "T-Shirt"
    audience: Tuple[str, ...] = ()
    subcategory: Optional[str] = None
    
    def __post_init__(self):
        if not self.variations:
            raise ValueError(f"Catalog item {self.id} has no variations")
        ids = [v.id for v in self.variations]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Catalog item {self.id} has duplicate variation ids")
        if self.garment_type not in GARMENT_TYPES:
            raise ValueError(f"Catalog item {self.id} has an unknown garment type: {self.garment_type!r}")
    
    @property
    def total_quantity(self) -> int:
        return sum(v.quantity or 0 for v in self.variations)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.garment_type,
            "audience": list(self.audience),
            "subcategory": self.subcategory,
            "image": self.image_url,
            "variations": [v.to_dict() for v in self.variations],
        }


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    A point-in-time, inventory-agnostic view of the catalog.
    """
    items: Tuple[CatalogItem, ...]
    fetched_at: datetime
    _index: Dict[str, Tuple[CatalogItem, Variation]] = field(
        default=None, init=False, repr=False, compare=False
    )
    _items_by_id: Dict[str, CatalogItem] = field(
        default=None, init=False, repr=False, compare=False
    )
    
    def __post_init__(self):
        index = {}
        for item in self.items:
            for variation in item.variations:
                index[variation.id] = (item, variation)
        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_items_by_id", {item.id: item for item in self.items})
    
    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self.items)
    
    def __len__(self) -> int:
        return len(self.items)
    
    @property
    def variation_ids(self) -> List[str]:
        return list(self._index)
    
    def get_item(self, item_id: str) -> Optional[CatalogItem]:
        return self._items_by_id.get(item_id)
    
    def find_variation(self, variation_id: str) -> Optional[Tuple[CatalogItem, Variation]]:
        """Look up a variation and its parent item by variation id."""
        return self._index.get(variation_id)
    
    def find_by_sku(self, sku: str) -> Optional[Tuple[CatalogItem, Variation]]:
        for item, variation in self._index.values():
            if variation.sku and variation.sku == sku:
                return item, variation
        return None


@dataclass(frozen=True)
class InventorySnapshot(CatalogSnapshot):
    """
    A catalog snapshot whose variations all carry a quantity.
    
    ``catalog_fetched_at`` records which catalog snapshot it was built from.
    """
    catalog_fetched_at: Optional[datetime] = None
    
    @classmethod
    def build(
        cls,
        catalog: CatalogSnapshot,
        quantities: Mapping[str, int],
        fetched_at: datetime
    ) -> "InventorySnapshot":
        """
        Merge quantities onto every variation of a catalog snapshot.
        
        Args:
            catalog (CatalogSnapshot): The catalog to merge onto
            quantities (Mapping[str, int]): Summed quantities by variation id
            fetched_at (datetime): When the counts were fetched
        
        Returns:
            InventorySnapshot: A new snapshot; variations missing from
            ``quantities`` get 0
        """
        items = tuple(
            replace(
                item,
                variations=tuple(
                    v.with_quantity(quantities.get(v.id, 0)) for v in item.variations
                ),
            )
            for item in catalog.items
        )
        return cls(items=items, fetched_at=fetched_at, catalog_fetched_at=catalog.fetched_at)
