"""
Data access package: vendor connectors, models and repositories.
"""
