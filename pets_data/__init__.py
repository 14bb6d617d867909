"""
Pets data layer - local persistence for a pet shelter catalog.

This package stores pet records in a local SQLite file and exposes them
through URI-addressed CRUD:
- Contract: authority, content URIs, table and column names
- PetStore: durable SQLite store with schema versioning
- Validator: rejects values that break pet invariants
- PetProvider: dispatches content URIs onto the store
- ObserverBus: notifies observers after committed changes
- CursorLoader: keeps a consumer supplied with fresh cursors

Example:
    >>> from pets_data import PetEntry, PetProvider, Settings
    >>>
    >>> provider = PetProvider.open(Settings(database_path="shelter.db"))
    >>> uri = provider.insert(PetEntry.CONTENT_URI, {"name": "Toto", "weight": 7})
    >>> with provider.query(uri) as cursor:
    ...     cursor.to_pets()
    [Pet(id=1, name='Toto', breed='', gender=<Gender.UNKNOWN: 0>, weight=7)]
    >>> provider.close()

Invariants:
    - Every stored pet has a non-empty name, a valid gender and weight >= 0
    - Writes are validated before they reach the store
    - Observers hear about a change only after it is committed

Version: 1.0.0
"""

__version__ = "1.0.0"

from .catalog import (
    CATALOG_PROJECTION,
    UNKNOWN_BREED,
    CatalogLoaderCallbacks,
    PetCursorAdapter,
    delete_all_pets,
    insert_dummy_pet,
)
from .config import Settings
from .contract import (
    CONTENT_AUTHORITY,
    Gender,
    MatchCode,
    MimeKind,
    Pet,
    PetEntry,
    UriMatcher,
    with_appended_id,
)
from .errors import (
    InsertionNotSupportedError,
    InvalidGenderError,
    InvalidWeightError,
    MissingNameError,
    PetDataError,
    ProviderStateError,
    StoreFullError,
    StoreIOError,
    UnknownColumnError,
    UnknownUriError,
    ValidationError,
)
from .loader import CursorLoader, LoaderCallbacks, QuerySpec
from .observer import ContentObserver, ObserverBus
from .provider import PetProvider, get_provider, init_provider, shutdown_provider
from .store import Cursor, PetRow, PetStore
from .validate import Operation, validate_values

__all__ = [
    # Contract
    "CONTENT_AUTHORITY",
    "Gender",
    "MatchCode",
    "MimeKind",
    "Pet",
    "PetEntry",
    "UriMatcher",
    "with_appended_id",
    # Errors
    "PetDataError",
    "ValidationError",
    "MissingNameError",
    "InvalidGenderError",
    "InvalidWeightError",
    "UnknownColumnError",
    "UnknownUriError",
    "InsertionNotSupportedError",
    "StoreIOError",
    "StoreFullError",
    "ProviderStateError",
    # Store
    "PetStore",
    "Cursor",
    "PetRow",
    # Validation
    "Operation",
    "validate_values",
    # Observers
    "ContentObserver",
    "ObserverBus",
    # Provider
    "PetProvider",
    "init_provider",
    "get_provider",
    "shutdown_provider",
    # Loader
    "CursorLoader",
    "LoaderCallbacks",
    "QuerySpec",
    # Catalog
    "CATALOG_PROJECTION",
    "UNKNOWN_BREED",
    "CatalogLoaderCallbacks",
    "PetCursorAdapter",
    "delete_all_pets",
    "insert_dummy_pet",
    # Config
    "Settings",
]
