"""
Catalog repository: pages through the vendor catalog and classifies items.
"""
from typing import List, Optional
from sugarplum_catalog.classification.classifier import classify_item, is_in_domain
from sugarplum_catalog.data.models.catalog import CatalogItem
from sugarplum_catalog.data.models.vendor import VendorCatalogItem
from sugarplum_catalog.data.repositories.base_repository import BaseRepository
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)


class CatalogRepository(BaseRepository[CatalogItem]):
    """
    Repository for the shop's apparel catalog.
    """
    
    async def get_raw_items(self) -> List[VendorCatalogItem]:
        """
        Fetch every vendor catalog item, following cursors until exhausted.
        
        Returns:
            List[VendorCatalogItem]: All raw items across all pages
        """
        items: List[VendorCatalogItem] = []
        cursor = None
        pages = 0
        
        while True:
            page = await self.connector.list_catalog_page(cursor)
            items.extend(page.items)
            pages += 1
            cursor = page.next_cursor
            if not cursor:
                break
        
        logger.info(f"Fetched {len(items)} catalog items across {pages} page(s).")
        return items
    
    async def resolve_image(self, item: VendorCatalogItem) -> Optional[str]:
        """
        Find an item's image URL, looking up its first image object if needed.
        
        A failed lookup is logged and yields None; it never aborts a refresh.
        
        Args:
            item (VendorCatalogItem): The raw vendor item
        
        Returns:
            Optional[str]: The image URL or None
        """
        if item.image_url:
            return item.image_url
        if not item.image_ids:
            return None
        
        image_id = item.image_ids[0]
        try:
            return await self.connector.retrieve_image(image_id)
        except Exception as e:
            logger.error(f"Error retrieving image {image_id} for {item.name!r}: {str(e)}")
            return None
    
    async def get_all(self) -> List[CatalogItem]:
        """
        Get every in-domain catalog item, classified and with images resolved.
        
        Returns:
            List[CatalogItem]: Catalog items in vendor order, without quantities
        """
        raw_items = await self.get_raw_items()
        
        catalog_items = []
        for raw in raw_items:
            if not is_in_domain(raw):
                continue
            image_url = await self.resolve_image(raw)
            item = classify_item(raw, image_url=image_url)
            if item is not None:
                catalog_items.append(item)
        
        logger.info(f"Classified {len(catalog_items)} apparel items (skipped {len(raw_items) - len(catalog_items)}).")
        return catalog_items
