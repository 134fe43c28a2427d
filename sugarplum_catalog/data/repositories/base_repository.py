"""
Base repository interface for vendor data access.
"""
from abc import ABC, abstractmethod
from typing import Generic, List, TypeVar
from sugarplum_catalog.data.connectors.base_connector import BaseVendorConnector

# Generic type for repository entities
T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for repositories that read from the vendor platform.
    """
    
    def __init__(self, connector: BaseVendorConnector):
        """
        Initialize the repository with a vendor connector.
        
        Args:
            connector (BaseVendorConnector): The vendor connector to use
        """
        self.connector = connector
    
    @abstractmethod
    async def get_all(self, *args, **kwargs) -> List[T]:
        """
        Get all entities that match the specified criteria.
        
        Returns:
            List[T]: A list of entity objects
        """
        pass
