"""
Exporters for inventory snapshots.
"""
