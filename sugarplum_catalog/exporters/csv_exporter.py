"""
CSV exporter for inventory count sheets.
"""
import os
import pandas as pd
from sugarplum_catalog.data.models.catalog import CatalogSnapshot
from sugarplum_catalog.exporters.base_exporter import BaseExporter
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)


class CSVExporter(BaseExporter):
    """
    Exporter for inventory snapshots to CSV files.
    """
    
    def export(self, snapshot: CatalogSnapshot, output_dir: str) -> str:
        """
        Export a count sheet and a per-subcategory stock summary.
        
        Args:
            snapshot (CatalogSnapshot): The snapshot to export
            output_dir (str): Directory for output files
        
        Returns:
            str: Path to the directory holding the CSV files
        """
        stamp = snapshot.fetched_at.strftime("%Y%m%d_%H%M%S")
        export_dir = os.path.join(output_dir, f"inventory_{stamp}")
        os.makedirs(export_dir, exist_ok=True)
        
        df = self.prepare_dataframe(snapshot)
        count_sheet_path = os.path.join(export_dir, "count_sheet.csv")
        df.to_csv(count_sheet_path, index=False)
        logger.info(f"Exported {len(df)} variation rows to {count_sheet_path}")
        
        self.export_subcategory_summary(df, export_dir)
        
        return export_dir
    
    def export_subcategory_summary(self, df: pd.DataFrame, output_dir: str) -> pd.DataFrame:
        """
        Export item, variation and unit totals per subcategory.
        
        Args:
            df (pd.DataFrame): Count sheet rows
            output_dir (str): Output directory
        
        Returns:
            pd.DataFrame: Summary dataframe, largest stock first
        """
        if df.empty:
            return pd.DataFrame()
        
        summary_source = df.copy()
        summary_source['SUBCATEGORY'] = summary_source['SUBCATEGORY'].replace('', 'Uncategorized')
        summary_source['QUANTITY'] = pd.to_numeric(summary_source['QUANTITY'], errors='coerce').fillna(0)
        
        summary_df = (
            summary_source.groupby('SUBCATEGORY')
            .agg(
                item_count=('ITEM_ID', 'nunique'),
                variation_count=('VARIATION_ID', 'count'),
                units_on_hand=('QUANTITY', 'sum'),
            )
            .reset_index()
            .sort_values(['units_on_hand', 'SUBCATEGORY'], ascending=[False, True])
        )
        summary_df['units_on_hand'] = summary_df['units_on_hand'].astype(int)
        
        summary_path = os.path.join(output_dir, "subcategory_summary.csv")
        summary_df.to_csv(summary_path, index=False)
        logger.info(f"Exported subcategory summary to {summary_path}")
        
        return summary_df
