"""
Repositories for catalog, inventory and product-flag data.
"""
