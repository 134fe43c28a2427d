"""
Command-line interface for the catalog service.
"""
