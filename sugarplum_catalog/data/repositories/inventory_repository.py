"""
Inventory repository for accessing and adjusting stock counts.
"""
from typing import Any, Dict, List, Sequence
import pandas as pd
from sugarplum_catalog.data.models.vendor import InventoryCount, VendorInventoryUpdate
from sugarplum_catalog.data.repositories.base_repository import BaseRepository
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)


class InventoryRepository(BaseRepository[InventoryCount]):
    """
    Repository for vendor inventory counts.
    """
    
    async def get_all(self, variation_ids: Sequence[str]) -> List[InventoryCount]:
        """
        Get the raw count rows for the given variations.
        
        Args:
            variation_ids (Sequence[str]): Variation ids to look up
        
        Returns:
            List[InventoryCount]: Raw count rows (possibly several per id)
        """
        if not variation_ids:
            return []
        counts = await self.connector.batch_get_inventory_counts(list(variation_ids))
        logger.debug(f"Inventory lookup returned {len(counts)} count rows for {len(variation_ids)} variations.")
        return counts
    
    async def get_raw_data(self, variation_ids: Sequence[str]) -> pd.DataFrame:
        """
        Get the raw count rows as a DataFrame.
        
        Returns:
            pd.DataFrame: Columns VARIATION_ID and QUANTITY
        """
        counts = await self.get_all(variation_ids)
        return pd.DataFrame(
            [{"VARIATION_ID": c.variation_id, "QUANTITY": c.quantity} for c in counts],
            columns=["VARIATION_ID", "QUANTITY"],
        )
    
    async def get_quantities(self, variation_ids: Sequence[str]) -> Dict[str, int]:
        """
        Get the on-hand quantity per variation.
        
        Every count row for a variation is summed. Unparseable quantities
        count as 0, fractional totals are floored and negative totals are
        clamped to 0 so every result is a non-negative integer.
        
        Args:
            variation_ids (Sequence[str]): Variation ids to look up
        
        Returns:
            Dict[str, int]: Quantity by variation id (ids with no rows are absent)
        """
        df = await self.get_raw_data(variation_ids)
        return self.sum_quantities(df)
    
    @staticmethod
    def sum_quantities(df: pd.DataFrame) -> Dict[str, int]:
        if df.empty:
            return {}
        
        df = df[df["VARIATION_ID"].astype(bool)].copy()
        df["QUANTITY"] = pd.to_numeric(df["QUANTITY"], errors="coerce").fillna(0)
        totals = df.groupby("VARIATION_ID", sort=False)["QUANTITY"].sum()
        totals = totals.clip(lower=0) // 1
        
        return {str(variation_id): int(quantity) for variation_id, quantity in totals.items()}
    
    async def adjust(self, updates: Sequence[VendorInventoryUpdate]) -> Dict[str, Any]:
        """
        Forward resolved stock changes to the vendor.
        
        Args:
            updates (Sequence[VendorInventoryUpdate]): Changes to apply
        
        Returns:
            Dict[str, Any]: The vendor's response
        """
        logger.info(f"Adjusting vendor inventory for {len(updates)} variation(s).")
        return await self.connector.adjust_inventory(list(updates))
