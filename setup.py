#!/usr/bin/env python3
"""
Setup script for Sugarplum Catalog.
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="sugarplum-catalog",
    version="1.0.0",
    author="Sugarplum Shop",
    description="Cached apparel catalog and inventory layer for a shop on the Square platform",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pandas",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "catalog-cli=sugarplum_catalog.cli.catalog_cli:main",
        ],
    },
)
