"""
CLI tools for the pets data layer.

This module provides command-line tools for:
- catalog: List, add, update and delete pets in a database file

Invariants:
    - Tools work on a local database file; nothing else is required
    - Writes go through the provider and are validated
"""

from .catalog_cli import CatalogCLI

__all__ = ["CatalogCLI"]
