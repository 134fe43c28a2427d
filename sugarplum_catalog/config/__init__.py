"""
Configuration package for the catalog service.
"""
