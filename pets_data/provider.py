"""
Content provider for pets.

The provider is the sole public entry to the data layer. It dispatches
content URIs onto the store, runs the validator before every write and
notifies observers after every committed change.

URI shapes:
    content://com.example.android.pets/pets        DIR
    content://com.example.android.pets/pets/<id>   ITEM

Invariants:
    - Values are validated before they reach the store
    - Notifications are emitted only after the write is committed
    - Zero-row outcomes return 0 and emit nothing
    - The provider holds no per-request state

How to change safely:
    - Keep URI strings in the contract module, never here
    - A new write path must validate, write, then notify, in that order
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from .config import Settings
from .contract import MatchCode, MimeKind, PetEntry, UriMatch, UriMatcher, with_appended_id
from .errors import InsertionNotSupportedError, ProviderStateError
from .observer import ObserverBus
from .store import Cursor, PetStore
from .validate import Operation, validate_values

logger = logging.getLogger(__name__)

# Process-wide provider instance
_provider: Optional[PetProvider] = None
_provider_lock = threading.Lock()


class PetProvider:
    """URI-addressed CRUD over the pets store.

    Attributes:
        store: The durable store
        bus: Observer bus notified after each change

    Thread safety:
        Stateless apart from the store and bus, both thread-safe.
        Every method may block on I/O.

    Example:
        >>> provider = PetProvider.open(Settings(database_path="shelter.db"))
        >>> uri = provider.insert(PetEntry.CONTENT_URI, {"name": "Toto"})
        >>> uri
        'content://com.example.android.pets/pets/1'
    """

    def __init__(self, store: PetStore, bus: Optional[ObserverBus] = None) -> None:
        self.store = store
        self.bus = bus or ObserverBus()
        self._matcher = UriMatcher()

    @classmethod
    def open(cls, settings: Optional[Settings] = None) -> PetProvider:
        """Open a provider over the store described by settings."""
        settings = settings or Settings()
        store = PetStore.open(
            settings.database_path,
            settings.database_version,
            wal_mode=settings.wal_mode,
            busy_timeout_ms=settings.busy_timeout_ms,
        )
        return cls(store)

    def close(self) -> None:
        self.store.close()

    @staticmethod
    def _item_selection(
        match: UriMatch,
        selection: Optional[str],
        selection_args: Optional[Sequence[Any]],
    ) -> tuple[str, list[Any]]:
        clause = f"{PetEntry._ID} = ?"
        args: list[Any] = [match.pet_id]
        if selection:
            clause = f"{clause} AND ({selection})"
            args.extend(selection_args or ())
        return clause, args

    def query(
        self,
        uri: str,
        projection: Optional[Sequence[str]] = None,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
        sort_order: Optional[str] = None,
    ) -> Cursor:
        """Query the rows addressed by uri.

        Item URIs restrict the selection to their row, AND-combined with
        any caller selection. The cursor is tagged with the canonical form
        of uri so observers registered through it hear about later changes.

        Raises:
            UnknownUriError: If uri has neither shape
        """
        match = self._matcher.match_or_raise(uri)
        if match.code is MatchCode.ITEM:
            selection, selection_args = self._item_selection(match, selection, selection_args)

        cursor = self.store.query(projection, selection, selection_args, sort_order)
        cursor.set_notification_uri(self.bus, self._canonical_uri(match))
        return cursor

    def insert(self, uri: str, values: Mapping[str, Any]) -> str:
        """Insert a pet into the directory.

        Returns:
            Content URI of the new pet

        Raises:
            UnknownUriError: If uri has neither shape
            InsertionNotSupportedError: If uri addresses a single pet
            ValidationError: If values break a pet invariant
            StoreIOError: On storage failure
        """
        match = self._matcher.match_or_raise(uri)
        if match.code is not MatchCode.DIR:
            raise InsertionNotSupportedError(uri)

        normalized = validate_values(Operation.INSERT, values)
        new_id = self.store.insert(normalized)
        new_uri = with_appended_id(PetEntry.CONTENT_URI, new_id)

        logger.debug("Inserted pet", extra={"uri": new_uri})
        self.bus.notify_change(PetEntry.CONTENT_URI)
        return new_uri

    def update(
        self,
        uri: str,
        values: Mapping[str, Any],
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """Update the pets addressed by uri.

        Absent fields are left untouched. An update with nothing to write
        returns 0 without touching the store.

        Returns:
            Number of rows updated

        Raises:
            UnknownUriError: If uri has neither shape
            ValidationError: If values break a pet invariant
            StoreIOError: On storage failure
        """
        match = self._matcher.match_or_raise(uri)
        normalized = validate_values(Operation.UPDATE, values)
        if not normalized:
            return 0

        if match.code is MatchCode.ITEM:
            selection, selection_args = self._item_selection(match, selection, selection_args)

        count = self.store.update(normalized, selection, selection_args)
        if count:
            self._notify(match)
        return count

    def delete(
        self,
        uri: str,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """Delete the pets addressed by uri.

        A directory delete with no selection removes every pet.

        Returns:
            Number of rows deleted

        Raises:
            UnknownUriError: If uri has neither shape
            StoreIOError: On storage failure
        """
        match = self._matcher.match_or_raise(uri)
        if match.code is MatchCode.ITEM:
            selection, selection_args = self._item_selection(match, selection, selection_args)

        count = self.store.delete(selection, selection_args)
        if count:
            self._notify(match)
        return count

    def get_type(self, uri: str) -> MimeKind:
        """Kind of data addressed by uri.

        Raises:
            UnknownUriError: If uri has neither shape
        """
        match = self._matcher.match_or_raise(uri)
        return MimeKind.DIRECTORY if match.code is MatchCode.DIR else MimeKind.ITEM

    @staticmethod
    def _canonical_uri(match: UriMatch) -> str:
        # pets/01 and pets/1/ both address pets/1
        if match.code is MatchCode.ITEM and match.pet_id is not None:
            return with_appended_id(PetEntry.CONTENT_URI, match.pet_id)
        return PetEntry.CONTENT_URI

    def _notify(self, match: UriMatch) -> None:
        if match.code is MatchCode.ITEM:
            self.bus.notify_change(self._canonical_uri(match), PetEntry.CONTENT_URI)
        else:
            self.bus.notify_change(PetEntry.CONTENT_URI)


def init_provider(settings: Optional[Settings] = None) -> PetProvider:
    """Open the process-wide provider.

    Raises:
        ProviderStateError: If the provider is already initialized
        StoreIOError: If the store cannot be opened
    """
    global _provider
    with _provider_lock:
        if _provider is not None:
            raise ProviderStateError("Pet provider is already initialized")
        _provider = PetProvider.open(settings)
        logger.info("Pet provider initialized")
        return _provider


def get_provider() -> PetProvider:
    """Return the process-wide provider.

    Raises:
        ProviderStateError: If init_provider() has not been called
    """
    with _provider_lock:
        if _provider is None:
            raise ProviderStateError("Pet provider is not initialized")
        return _provider


def shutdown_provider() -> None:
    """Close the process-wide provider. No-op if not initialized."""
    global _provider
    with _provider_lock:
        if _provider is None:
            return
        _provider.close()
        _provider = None
    logger.info("Pet provider shut down")
