"""
Store module for the pets data layer.

This module handles:
- The pets SQLite database file (schema, versioning, upgrades)
- Parameterized CRUD statements
- Lazy, restartable row cursors

Invariants:
    - The database file is opened once per store
    - Writes are serialized; reads may run in parallel with reads
    - I/O failures surface as StoreIOError; the store never retries

How to change safely:
    - Register an upgrade step for every schema version bump
    - Use transactions for all write statements
"""

from .cursor import Cursor, PetRow
from .locks import ReadWriteLock
from .pet_store import (
    DATABASE_NAME,
    DATABASE_VERSION,
    DEFAULT_SORT_ORDER,
    UPGRADES,
    PetStore,
    UpgradeStep,
)

__all__ = [
    "Cursor",
    "PetRow",
    "ReadWriteLock",
    "PetStore",
    "UpgradeStep",
    "UPGRADES",
    "DATABASE_NAME",
    "DATABASE_VERSION",
    "DEFAULT_SORT_ORDER",
]
