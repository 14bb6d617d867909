"""
Contract module for the pets data layer.

This module is the single source of truth for every string shared by
the store, validator and provider:
- Authority, scheme and content URIs
- Table and column names
- Gender encoding and MIME kinds
- The URI matcher for the DIR and ITEM shapes

Invariants:
    - Column names and gender codes are persisted and never change
    - The authority is fixed at build time
    - Only two URI shapes exist: pets and pets/<id>
"""

from .types import (
    BASE_CONTENT_URI,
    CONTENT_AUTHORITY,
    MAX_INTEGER,
    PATH_PETS,
    SCHEME,
    Gender,
    MimeKind,
    Pet,
    PetEntry,
    is_valid_gender,
)
from .uris import (
    MAX_ID,
    MatchCode,
    UriMatch,
    UriMatcher,
    is_descendant_or_self,
    parse_id,
    split_uri,
    with_appended_id,
)

__all__ = [
    # Types
    "SCHEME",
    "CONTENT_AUTHORITY",
    "BASE_CONTENT_URI",
    "PATH_PETS",
    "MAX_INTEGER",
    "Gender",
    "MimeKind",
    "Pet",
    "PetEntry",
    "is_valid_gender",
    # URIs
    "MAX_ID",
    "MatchCode",
    "UriMatch",
    "UriMatcher",
    "is_descendant_or_self",
    "parse_id",
    "split_uri",
    "with_appended_id",
]
