"""
Base exporter interface for exporting inventory snapshots.
"""
from abc import ABC, abstractmethod
import pandas as pd
from sugarplum_catalog.data.models.catalog import CatalogSnapshot


class BaseExporter(ABC):
    """
    Abstract base class for exporters that handle exporting inventory data.
    """
    
    @abstractmethod
    def export(self, snapshot: CatalogSnapshot, output_dir: str) -> str:
        """
        Export a snapshot to a specified format.
        
        Args:
            snapshot (CatalogSnapshot): The snapshot to export
            output_dir (str): Base directory for output files
        
        Returns:
            str: Path to the exported data
        """
        pass
    
    def prepare_dataframe(self, snapshot: CatalogSnapshot) -> pd.DataFrame:
        """
        Flatten a snapshot into one row per variation.
        
        Args:
            snapshot (CatalogSnapshot): The snapshot to flatten
        
        Returns:
            pd.DataFrame: Variation rows; QUANTITY is empty for catalog-only snapshots
        """
        columns = [
            'ITEM_ID', 'ITEM_NAME', 'TYPE', 'SUBCATEGORY', 'AUDIENCE',
            'VARIATION_ID', 'SKU', 'SIZE', 'COLOR', 'PRICE', 'QUANTITY'
        ]
        
        data = []
        for item in snapshot:
            for variation in item.variations:
                data.append({
                    'ITEM_ID': item.id,
                    'ITEM_NAME': item.name,
                    'TYPE': item.garment_type,
                    'SUBCATEGORY': item.subcategory or '',
                    'AUDIENCE': ', '.join(item.audience),
                    'VARIATION_ID': variation.id,
                    'SKU': variation.sku or '',
                    'SIZE': variation.size or '',
                    'COLOR': variation.color or '',
                    'PRICE': float(variation.price),
                    'QUANTITY': variation.quantity,
                })
        
        return pd.DataFrame(data, columns=columns)
