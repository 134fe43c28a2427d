"""
Product flag repository backed by a JSON file.
"""
import json
import os
import tempfile
import threading
from typing import Any, Dict, Iterable, Mapping, Optional
from sugarplum_catalog.config.app_config import PRODUCT_FLAGS_PATH
from sugarplum_catalog.data.models.flags import ProductFlags
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)


class ProductFlagRepository:
    """
    Stores administrative flags per catalog item id.
    
    Flags are created on the first admin edit, merged on later edits and
    never expire. They live outside the catalog cache and survive refreshes.
    """
    
    def __init__(self, path: Optional[str] = None):
        """
        Initialize the repository and load any stored flags.
        
        Args:
            path (Optional[str]): JSON file path (default: PRODUCT_FLAGS_PATH)
        """
        self.path = path or PRODUCT_FLAGS_PATH
        self._flags: Dict[str, ProductFlags] = {}
        self._lock = threading.Lock()
        self.load()
    
    def load(self) -> None:
        """
        Load flags from disk. A missing or unreadable file yields an empty store.
        """
        flags = {}
        try:
            if os.path.exists(self.path):
                with open(self.path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
                if not isinstance(raw, dict):
                    raise ValueError("top-level JSON value must be an object")
                flags = {
                    str(item_id): ProductFlags.normalize(value if isinstance(value, dict) else {})
                    for item_id, value in raw.items()
                }
        except (OSError, ValueError) as e:
            logger.error(f"Error loading product flags from {self.path}: {str(e)}")
            flags = {}
        
        with self._lock:
            self._flags = flags
        logger.debug(f"Loaded flags for {len(flags)} product(s).")
    
    def _save(self, flags: Dict[str, ProductFlags]) -> None:
        data = {item_id: item_flags.to_dict() for item_id, item_flags in flags.items()}
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".flags-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
    
    def get(self, item_id: str) -> ProductFlags:
        """Get the flags for an item; defaults when none were ever set."""
        return self._flags.get(item_id, ProductFlags())
    
    def get_all(self) -> Dict[str, ProductFlags]:
        return dict(self._flags)
    
    def update_many(self, updates: Iterable[Mapping[str, Any]]) -> Dict[str, ProductFlags]:
        """
        Merge partial flag updates and persist them.
        
        Args:
            updates (Iterable[Mapping[str, Any]]): Entries of the form
                {"id": item_id, "flags": {...partial flags...}}; entries
                without an id are ignored
        
        Returns:
            Dict[str, ProductFlags]: All flags after the update

        Raises:
            OSError: If the file cannot be written; the in-memory flags are unchanged
        """
        with self._lock:
            merged = dict(self._flags)
            for update in updates:
                if not update or not update.get("id"):
                    continue
                item_id = str(update["id"])
                existing = merged.get(item_id, ProductFlags())
                merged[item_id] = existing.merged_with(update.get("flags") or {})
            
            self._save(merged)
            self._flags = merged
            logger.info(f"Saved product flags ({len(merged)} product(s)).")
            return dict(merged)
