"""
Administrative product flag models.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

RIBBON_TYPES = ("none", "new", "featured", "custom")

# Stored keys use the storefront's camelCase names
_FIELD_KEYS = {
    "is_new": "isNew",
    "is_featured": "isFeatured",
    "pin_to_top": "pinToTop",
    "hide_online": "hideOnline",
    "hide_kiosk": "hideKiosk",
    "ribbon_type": "ribbonType",
    "ribbon_custom_text": "ribbonCustomText",
}


@dataclass(frozen=True)
class ProductFlags:
    """
    Per-item administrative overrides.
    """
    is_new: bool = False
    is_featured: bool = False
    pin_to_top: bool = False
    hide_online: bool = False
    hide_kiosk: bool = False
    ribbon_type: str = "none"
    ribbon_custom_text: str = ""
    
    @classmethod
    def normalize(cls, raw: Optional[Mapping[str, Any]] = None) -> "ProductFlags":
        """
        Build flags from a stored or submitted mapping.
        
        Both camelCase (stored) and snake_case keys are accepted. Booleans are
        coerced by truthiness, unknown ribbon types become "none" and a
        non-string custom text becomes "".
        
        Args:
            raw (Optional[Mapping[str, Any]]): Raw flag values
        
        Returns:
            ProductFlags: Normalized flags
        """
        raw = raw or {}
        
        def pick(field_name):
            if field_name in raw:
                return raw[field_name]
            return raw.get(_FIELD_KEYS[field_name])
        
        ribbon_type = pick("ribbon_type")
        if ribbon_type not in RIBBON_TYPES:
            ribbon_type = "none"
        
        custom_text = pick("ribbon_custom_text")
        if not isinstance(custom_text, str):
            custom_text = ""
        
        return cls(
            is_new=bool(pick("is_new")),
            is_featured=bool(pick("is_featured")),
            pin_to_top=bool(pick("pin_to_top")),
            hide_online=bool(pick("hide_online")),
            hide_kiosk=bool(pick("hide_kiosk")),
            ribbon_type=ribbon_type,
            ribbon_custom_text=custom_text,
        )
    
    def merged_with(self, incoming: Mapping[str, Any]) -> "ProductFlags":
        """Overlay a partial update on these flags."""
        combined = self.to_dict()
        for field_name, key in _FIELD_KEYS.items():
            if key in incoming:
                combined[key] = incoming[key]
            elif field_name in incoming:
                combined[key] = incoming[field_name]
        return ProductFlags.normalize(combined)
    
    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the stored camelCase keys."""
        return {_FIELD_KEYS[name]: value for name, value in asdict(self).items()}
