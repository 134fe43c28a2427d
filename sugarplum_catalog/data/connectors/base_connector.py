"""
Base vendor platform connector interface.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence
from sugarplum_catalog.data.models.vendor import CatalogPage, InventoryCount, VendorInventoryUpdate


class BaseVendorConnector(ABC):
    """
    Abstract base class for commerce platform connections.
    
    Every method that talks to the vendor is a coroutine; each call is a
    suspension point for the cache.
    """
    
    def connect(self) -> Any:
        """
        Prepare the underlying client. The default does nothing.
        
        Returns:
            Any: The client/session object, if any
        """
        return None
    
    def disconnect(self) -> None:
        """
        Release the underlying client. The default does nothing.
        """
        return None
    
    @abstractmethod
    async def list_catalog_page(self, cursor: Optional[str] = None) -> CatalogPage:
        """
        Fetch one page of catalog items.
        
        Args:
            cursor (Optional[str]): Continuation cursor from the previous page
            
        Returns:
            CatalogPage: The page's items and the next cursor (None when exhausted)
        """
        pass
    
    @abstractmethod
    async def retrieve_image(self, image_id: str) -> Optional[str]:
        """
        Resolve an image object to its URL.
        
        Args:
            image_id (str): The vendor image object id
            
        Returns:
            Optional[str]: The image URL, or None if the object has none
        """
        pass
    
    @abstractmethod
    async def batch_get_inventory_counts(self, variation_ids: Sequence[str]) -> List[InventoryCount]:
        """
        Fetch inventory counts for the given variations.
        
        Args:
            variation_ids (Sequence[str]): Variation ids to look up
            
        Returns:
            List[InventoryCount]: Count rows; an id may appear more than once
        """
        pass
    
    @abstractmethod
    async def adjust_inventory(self, updates: Sequence[VendorInventoryUpdate]) -> Dict[str, Any]:
        """
        Apply stock changes on the vendor side.
        
        Args:
            updates (Sequence[VendorInventoryUpdate]): Resolved deltas/absolutes
            
        Returns:
            Dict[str, Any]: The vendor's response body
        """
        pass
    
    def __enter__(self):
        """
        Context manager entry point.
        
        Returns:
            BaseVendorConnector: The connector instance
        """
        self.connect()
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Context manager exit point.
        
        Args:
            exc_type: Exception type if an exception was raised in the context
            exc_val: Exception value if an exception was raised
            exc_tb: Exception traceback if an exception was raised
        """
        self.disconnect()
