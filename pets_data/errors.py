"""
Error types for the pets data layer.

This module defines every exception raised by the data layer:
- PetDataError: Base exception
- ValidationError: Values rejected before reaching the store
- UnknownUriError: URI matches neither the directory nor an item
- InsertionNotSupportedError: Insert addressed to an item URI
- StoreIOError: Underlying SQLite failure

Invariants:
    - All errors inherit from PetDataError
    - Errors carry a stable code for programmatic handling
    - Zero-row outcomes are never errors
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class PetDataError(Exception):
    """Base exception for all pets data layer errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "PETS_ERROR"
        self.details = details or {}


class ValidationError(PetDataError):
    """Values failed validation.

    Raised when:
    - A required name is missing or blank
    - Gender is not a recognized value
    - Weight is negative or not an integer
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        code: Optional[str] = None,
        value: Any = None,
    ) -> None:
        super().__init__(
            message,
            code=code or "VALIDATION_ERROR",
            details={"field": field_name, "value": value},
        )
        self.field_name = field_name
        self.value = value


class MissingNameError(ValidationError):
    """Insert without a name, or update that clears it."""

    def __init__(self, message: str = "Pet requires a name") -> None:
        super().__init__(message, field_name="name", code="MISSING_NAME")


class InvalidGenderError(ValidationError):
    """Gender is not one of Unknown (0), Male (1) or Female (2)."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Pet requires valid gender, got {value!r}",
            field_name="gender",
            code="INVALID_GENDER",
            value=value,
        )


class InvalidWeightError(ValidationError):
    """Weight is negative, too large to store or not an integer."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Pet requires valid weight, got {value!r}",
            field_name="weight",
            code="INVALID_WEIGHT",
            value=value,
        )


class UnknownColumnError(ValidationError):
    """Column not writable or not part of the pets table.

    Includes suggestions for similar column names.

    Attributes:
        column: The offending column name
        suggestions: Similar column names
    """

    def __init__(
        self,
        column: str,
        suggestions: Optional[List[str]] = None,
        reason: Optional[str] = None,
    ) -> None:
        suggestions = suggestions or []
        msg = reason or f"Unknown column '{column}'"
        if suggestions:
            msg += f". Did you mean: {', '.join(suggestions)}?"
        super().__init__(msg, field_name=column, code="UNKNOWN_COLUMN")
        self.column = column
        self.suggestions = suggestions
        self.details["suggestions"] = suggestions


class UnknownUriError(PetDataError):
    """URI does not address the pets directory or a single pet."""

    def __init__(self, uri: str) -> None:
        super().__init__(
            f"Unknown URI {uri}",
            code="UNKNOWN_URI",
            details={"uri": uri},
        )
        self.uri = uri


class InsertionNotSupportedError(PetDataError):
    """Insertion is only supported on the directory URI."""

    def __init__(self, uri: str) -> None:
        super().__init__(
            f"Insertion is not supported for {uri}",
            code="INSERTION_NOT_SUPPORTED",
            details={"uri": uri},
        )
        self.uri = uri


class StoreIOError(PetDataError):
    """The underlying storage failed.

    Raised when:
    - The database file cannot be opened or written
    - A statement is rejected by SQLite
    - The stored schema version is newer than the requested one
    """

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message, code=code or "IO_ERROR")


class StoreFullError(StoreIOError):
    """The database or disk is full."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="STORE_FULL")


class ProviderStateError(PetDataError):
    """Process-wide provider used before init or initialized twice."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="PROVIDER_STATE")
