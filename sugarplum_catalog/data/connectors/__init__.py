"""
Vendor platform connectors.
"""
