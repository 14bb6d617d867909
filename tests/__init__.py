"""
Pets data layer test suite.

This package contains:
- unit/: Unit tests (contract, validator, store, cursors, observers, settings)
- integration/: Integration tests (provider, loader, catalog and CLI over SQLite files)
"""
