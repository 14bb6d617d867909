"""
Content URI matching for the pets provider.

Two URI shapes are recognized:
    content://<authority>/pets          DIR   (the whole collection)
    content://<authority>/pets/<id>     ITEM  (a single row)

<id> must be a decimal unsigned integer no larger than the largest SQLite
rowid (2^63 - 1). Anything else, including a foreign scheme or authority,
does not match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from ..errors import UnknownUriError
from .types import CONTENT_AUTHORITY, MAX_INTEGER, PATH_PETS, SCHEME

# SQLite rowids are signed 64-bit
MAX_ID = MAX_INTEGER

_DECIMAL = re.compile(r"[0-9]+")


class MatchCode(Enum):
    """Result codes of the URI matcher."""

    DIR = 100
    ITEM = 101


@dataclass(frozen=True)
class UriMatch:
    """A successfully matched content URI.

    Attributes:
        code: DIR or ITEM
        uri: The URI as given
        pet_id: Row id for ITEM matches, None for DIR
    """

    code: MatchCode
    uri: str
    pet_id: Optional[int] = None


def split_uri(uri: str) -> tuple[str, str, tuple[str, ...]]:
    """Split a URI into (scheme, authority, path segments).

    Empty segments are dropped, so a trailing slash is ignored.
    """
    parts = urlsplit(uri)
    segments = tuple(s for s in parts.path.split("/") if s)
    return parts.scheme, parts.netloc, segments


def with_appended_id(base_uri: str, row_id: int) -> str:
    """Append a row id to a directory URI.

    Raises:
        ValueError: If row_id is negative
    """
    if row_id < 0:
        raise ValueError(f"Row id must be non-negative, got {row_id}")
    return f"{base_uri.rstrip('/')}/{row_id}"


def is_descendant_or_self(parent: str, child: str) -> bool:
    """Whether parent equals child or is a path-segment prefix of it.

    content://a/pets is a prefix of content://a/pets/1; content://a/pets/1
    is not a prefix of content://a/pets/10.
    """
    p_scheme, p_auth, p_segs = split_uri(parent)
    c_scheme, c_auth, c_segs = split_uri(child)
    if (p_scheme, p_auth) != (c_scheme, c_auth):
        return False
    return c_segs[: len(p_segs)] == p_segs


class UriMatcher:
    """Matches content URIs against the provider's two shapes.

    Example:
        >>> matcher = UriMatcher()
        >>> matcher.match("content://com.example.android.pets/pets/3")
        UriMatch(code=<MatchCode.ITEM: 101>, uri='...', pet_id=3)
    """

    def __init__(self, authority: str = CONTENT_AUTHORITY, path: str = PATH_PETS) -> None:
        self.authority = authority
        self.path = path

    def match(self, uri: str) -> Optional[UriMatch]:
        """Match a URI, returning None if it has neither shape."""
        scheme, authority, segments = split_uri(uri)
        if scheme != SCHEME or authority != self.authority:
            return None
        if not segments or segments[0] != self.path:
            return None

        if len(segments) == 1:
            return UriMatch(code=MatchCode.DIR, uri=uri)

        if len(segments) == 2 and _DECIMAL.fullmatch(segments[1]):
            pet_id = int(segments[1])
            if pet_id <= MAX_ID:
                return UriMatch(code=MatchCode.ITEM, uri=uri, pet_id=pet_id)

        return None

    def match_or_raise(self, uri: str) -> UriMatch:
        """Match a URI.

        Raises:
            UnknownUriError: If the URI has neither shape
        """
        result = self.match(uri)
        if result is None:
            raise UnknownUriError(uri)
        return result


def parse_id(uri: str) -> int:
    """Return the row id of an item URI.

    Raises:
        UnknownUriError: If uri is not an item URI
    """
    result = UriMatcher().match(uri)
    if result is None or result.pet_id is None:
        raise UnknownUriError(uri)
    return result.pet_id
