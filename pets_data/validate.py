"""
Value validation for the pets data layer.

This module checks and normalizes caller-supplied values before they are
written by the store:
- Unknown or store-assigned columns are rejected with suggestions
- Name, gender and weight invariants are enforced
- Insert defaults are filled in; update leaves absent fields untouched

Invariants:
    - Validation is pure: no I/O, the input mapping is never mutated
    - Rules run in a fixed order; the first failure wins
    - Normalized values only contain writable columns
"""

from __future__ import annotations

from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .contract import MAX_INTEGER, Gender, PetEntry, is_valid_gender
from .errors import (
    InvalidGenderError,
    InvalidWeightError,
    MissingNameError,
    UnknownColumnError,
)

_MISSING = object()


class Operation(Enum):
    """Write operation being validated."""

    INSERT = "insert"
    UPDATE = "update"


def _as_int(value: Any) -> Optional[int]:
    """Coerce a value to int the way content values are read.

    Returns None when the value has no integer reading.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _normalize_text(value: Any) -> str:
    return str(value).strip()


def check_columns(values: Mapping[str, Any]) -> None:
    """Reject keys that are not writable pet columns.

    Raises:
        UnknownColumnError: For _id or any unknown column
    """
    known = list(PetEntry.WRITABLE_COLUMNS)
    for column in values:
        if column == PetEntry._ID:
            raise UnknownColumnError(column, reason="Column '_id' is assigned by the store")
        if column not in known:
            raise UnknownColumnError(column, get_close_matches(column, known, n=3))


def validate_values(operation: Operation, values: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate and normalize values for an insert or update.

    Args:
        operation: INSERT or UPDATE
        values: Column-keyed values supplied by the caller

    Returns:
        Normalized values. For INSERT every writable column is present;
        for UPDATE only the columns supplied by the caller.

    Raises:
        UnknownColumnError: If a key is not a writable column
        MissingNameError: If name is missing on insert or cleared on update
        InvalidGenderError: If gender is not 0, 1 or 2
        InvalidWeightError: If weight is negative, too large to store or not an integer
    """
    check_columns(values)

    name = values.get(PetEntry.COLUMN_PET_NAME, _MISSING)
    breed = values.get(PetEntry.COLUMN_PET_BREED, _MISSING)
    gender = values.get(PetEntry.COLUMN_PET_GENDER, _MISSING)
    weight = values.get(PetEntry.COLUMN_PET_WEIGHT, _MISSING)

    if operation is Operation.INSERT:
        if name is _MISSING or name is None or not _normalize_text(name):
            raise MissingNameError()

    gender_code: Optional[int] = None
    if gender is not _MISSING:
        gender_code = _as_int(gender)
        if gender_code is None or not is_valid_gender(gender_code):
            raise InvalidGenderError(gender)

    weight_kg: Optional[int] = None
    if weight is not _MISSING:
        # An explicit null weight reads as 0
        weight_kg = 0 if weight is None else _as_int(weight)
        if weight_kg is None or not 0 <= weight_kg <= MAX_INTEGER:
            raise InvalidWeightError(weight)

    if operation is Operation.INSERT:
        return {
            PetEntry.COLUMN_PET_NAME: _normalize_text(name),
            PetEntry.COLUMN_PET_BREED: "" if breed in (_MISSING, None) else _normalize_text(breed),
            PetEntry.COLUMN_PET_GENDER: int(Gender.UNKNOWN) if gender_code is None else gender_code,
            PetEntry.COLUMN_PET_WEIGHT: 0 if weight_kg is None else weight_kg,
        }

    normalized: Dict[str, Any] = {}
    if name is not _MISSING:
        if name is None or not _normalize_text(name):
            raise MissingNameError("Pet name cannot be cleared")
        normalized[PetEntry.COLUMN_PET_NAME] = _normalize_text(name)
    if breed is not _MISSING:
        normalized[PetEntry.COLUMN_PET_BREED] = "" if breed is None else _normalize_text(breed)
    if gender_code is not None:
        normalized[PetEntry.COLUMN_PET_GENDER] = gender_code
    if weight_kg is not None:
        normalized[PetEntry.COLUMN_PET_WEIGHT] = weight_kg
    return normalized
