"""
Core type definitions for the pets contract.

This module defines the single entity stored by the data layer:
- PetEntry: Table name, column names and content URIs
- Gender: Persisted gender encoding
- MimeKind: Kind markers returned by the provider's get_type
- Pet: Typed record of one stored row

Invariants:
    - Column names and the gender encoding are persisted; never change them
    - _id is assigned by the store, never by callers
    - Every row is addressable by CONTENT_URI + "/" + _id

How to change safely:
    - Add new columns at the end of COLUMNS and bump DATABASE_VERSION
    - Add new gender values at the end; never renumber existing ones
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

SCHEME = "content"

# Authority is fixed at build time and unique to this provider
CONTENT_AUTHORITY = "com.example.android.pets"

BASE_CONTENT_URI = f"{SCHEME}://{CONTENT_AUTHORITY}"

PATH_PETS = "pets"

# Largest value an SQLite INTEGER column can hold
MAX_INTEGER = 2**63 - 1


class Gender(IntEnum):
    """Possible values for the gender of a pet."""

    UNKNOWN = 0
    MALE = 1
    FEMALE = 2


def is_valid_gender(value: Any) -> bool:
    """Return True if value is one of the persisted gender codes.

    bool is rejected even though it is an int subclass.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value in (Gender.UNKNOWN, Gender.MALE, Gender.FEMALE)


class PetEntry:
    """Constants for the pets table.

    Each row of the table represents a single pet.
    """

    TABLE_NAME = "pets"

    CONTENT_URI = f"{BASE_CONTENT_URI}/{PATH_PETS}"

    _ID = "_id"
    COLUMN_PET_NAME = "name"
    COLUMN_PET_BREED = "breed"
    COLUMN_PET_GENDER = "gender"
    COLUMN_PET_WEIGHT = "weight"

    # Storage order
    COLUMNS = (
        _ID,
        COLUMN_PET_NAME,
        COLUMN_PET_BREED,
        COLUMN_PET_GENDER,
        COLUMN_PET_WEIGHT,
    )

    # Columns callers may write; _id is store-assigned
    WRITABLE_COLUMNS = COLUMNS[1:]

    GENDER_UNKNOWN = Gender.UNKNOWN
    GENDER_MALE = Gender.MALE
    GENDER_FEMALE = Gender.FEMALE


class MimeKind(Enum):
    """Kind of data addressed by a content URI."""

    DIRECTORY = "directory-of-pets"
    ITEM = "single-pet"

    @property
    def mime_type(self) -> str:
        """Full MIME type string for this kind."""
        prefix = "vnd.android.cursor.dir" if self is MimeKind.DIRECTORY else "vnd.android.cursor.item"
        return f"{prefix}/{CONTENT_AUTHORITY}/{PATH_PETS}"


@dataclass(frozen=True)
class Pet:
    """A stored pet.

    Attributes:
        id: Store-assigned row id
        name: Non-empty, trimmed name
        breed: Breed, empty string when unknown
        gender: Gender code
        weight: Weight in kilograms, never negative
    """

    id: int
    name: str
    breed: str
    gender: Gender
    weight: int

    @property
    def uri(self) -> str:
        """Canonical content URI of this pet."""
        return f"{PetEntry.CONTENT_URI}/{self.id}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a column-keyed dictionary."""
        return {
            PetEntry._ID: self.id,
            PetEntry.COLUMN_PET_NAME: self.name,
            PetEntry.COLUMN_PET_BREED: self.breed,
            PetEntry.COLUMN_PET_GENDER: int(self.gender),
            PetEntry.COLUMN_PET_WEIGHT: self.weight,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pet:
        """Create from a column-keyed dictionary."""
        return cls(
            id=int(data[PetEntry._ID]),
            name=data[PetEntry.COLUMN_PET_NAME],
            breed=data[PetEntry.COLUMN_PET_BREED] or "",
            gender=Gender(data[PetEntry.COLUMN_PET_GENDER]),
            weight=int(data[PetEntry.COLUMN_PET_WEIGHT]),
        )
