"""
Catalog actions and list adapter.

Headless counterparts of the catalog screen:
- insert_dummy_pet / delete_all_pets: the catalog's menu actions
- PetCursorAdapter: binds cursor rows to (name, summary) list items
- CatalogLoaderCallbacks: feeds a CursorLoader's results into an adapter
"""

from __future__ import annotations

import logging
from typing import Optional

from .contract import Gender, PetEntry, with_appended_id
from .loader import QuerySpec
from .provider import PetProvider
from .store import Cursor

logger = logging.getLogger(__name__)

# Columns the catalog list needs
CATALOG_PROJECTION = (
    PetEntry._ID,
    PetEntry.COLUMN_PET_NAME,
    PetEntry.COLUMN_PET_BREED,
)

UNKNOWN_BREED = "Unknown breed"


def insert_dummy_pet(provider: PetProvider) -> str:
    """Insert Toto, a hardcoded pet for trying out the catalog.

    Returns:
        Content URI of the new pet
    """
    values = {
        PetEntry.COLUMN_PET_NAME: "Toto",
        PetEntry.COLUMN_PET_BREED: "Terrier",
        PetEntry.COLUMN_PET_GENDER: Gender.MALE,
        PetEntry.COLUMN_PET_WEIGHT: 7,
    }
    return provider.insert(PetEntry.CONTENT_URI, values)


def delete_all_pets(provider: PetProvider) -> int:
    """Delete every pet and return how many were removed."""
    rows_deleted = provider.delete(PetEntry.CONTENT_URI)
    logger.info(f"{rows_deleted} rows deleted from pet database")
    return rows_deleted


class PetCursorAdapter:
    """List adapter over a pets cursor.

    The adapter never closes cursors; whoever swaps them in owns them.
    """

    def __init__(self, cursor: Optional[Cursor] = None) -> None:
        self._cursor = cursor

    @property
    def cursor(self) -> Optional[Cursor]:
        return self._cursor

    def swap_cursor(self, cursor: Optional[Cursor]) -> Optional[Cursor]:
        """Replace the cursor, returning the previous one."""
        previous = self._cursor
        self._cursor = cursor
        return previous

    def get_count(self) -> int:
        return 0 if self._cursor is None else self._cursor.get_count()

    @property
    def is_empty(self) -> bool:
        return self.get_count() == 0

    def _move(self, position: int) -> Cursor:
        cursor = self._cursor
        if cursor is None or not cursor.move_to_position(position):
            raise IndexError(f"No pet at position {position}")
        return cursor

    def get_item_id(self, position: int) -> int:
        cursor = self._move(position)
        return cursor.get_int(cursor.get_column_index_or_throw(PetEntry._ID))

    def get_item_uri(self, position: int) -> str:
        """Content URI of the pet at position, as opened by the editor."""
        return with_appended_id(PetEntry.CONTENT_URI, self.get_item_id(position))

    def get_item(self, position: int) -> tuple[str, str]:
        """(name, summary) of the pet at position.

        The summary is the breed, or UNKNOWN_BREED when it is empty.
        """
        cursor = self._move(position)
        name = cursor.get_string(cursor.get_column_index_or_throw(PetEntry.COLUMN_PET_NAME)) or ""
        breed = cursor.get_string(cursor.get_column_index_or_throw(PetEntry.COLUMN_PET_BREED))
        return name, breed or UNKNOWN_BREED

    def items(self) -> list[tuple[str, str]]:
        return [self.get_item(position) for position in range(self.get_count())]


class CatalogLoaderCallbacks:
    """Loader callbacks that keep a PetCursorAdapter current."""

    def __init__(self, adapter: PetCursorAdapter) -> None:
        self.adapter = adapter

    def on_create_query(self) -> QuerySpec:
        return QuerySpec(uri=PetEntry.CONTENT_URI, projection=CATALOG_PROJECTION)

    def on_query_finished(self, cursor: Cursor) -> None:
        self.adapter.swap_cursor(cursor)

    def on_reset(self) -> None:
        self.adapter.swap_cursor(None)
