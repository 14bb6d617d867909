"""
Unit tests for data layer errors.

Tests cover:
- Error hierarchy
- Codes and details
- Message formatting
"""

import pytest

from pets_data.errors import (
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


class TestErrorHierarchy:
    """Tests for exception classes."""

    @pytest.mark.parametrize(
        "error",
        [
            MissingNameError(),
            InvalidGenderError(5),
            InvalidWeightError(-1),
            UnknownColumnError("color"),
            UnknownUriError("content://x/y"),
            InsertionNotSupportedError("content://x/y/1"),
            StoreIOError("disk"),
            StoreFullError("full"),
            ProviderStateError("state"),
        ],
    )
    def test_all_are_pet_data_errors(self, error):
        assert isinstance(error, PetDataError)
        assert error.code
        assert str(error) == error.message

    def test_validation_subclasses(self):
        for error in (MissingNameError(), InvalidGenderError(5), InvalidWeightError(-1)):
            assert isinstance(error, ValidationError)

    def test_store_full_is_io_error(self):
        error = StoreFullError("database or disk is full")
        assert isinstance(error, StoreIOError)
        assert error.code == "STORE_FULL"


class TestErrorDetails:
    """Tests for codes, messages and details."""

    def test_default_code(self):
        assert PetDataError("x").code == "PETS_ERROR"
        assert PetDataError("x").details == {}

    def test_missing_name(self):
        error = MissingNameError()
        assert error.message == "Pet requires a name"
        assert error.code == "MISSING_NAME"
        assert error.details["field"] == "name"

    def test_invalid_gender(self):
        error = InvalidGenderError(7)
        assert error.code == "INVALID_GENDER"
        assert error.value == 7
        assert "7" in error.message

    def test_invalid_weight(self):
        error = InvalidWeightError(-2)
        assert error.code == "INVALID_WEIGHT"
        assert error.details == {"field": "weight", "value": -2}

    def test_unknown_column_with_suggestions(self):
        error = UnknownColumnError("nam", suggestions=["name"])
        assert error.message == "Unknown column 'nam'. Did you mean: name?"
        assert error.details["suggestions"] == ["name"]

    def test_unknown_column_reason(self):
        error = UnknownColumnError("_id", reason="Column '_id' is assigned by the store")
        assert error.message == "Column '_id' is assigned by the store"
        assert error.suggestions == []

    def test_unknown_uri(self):
        error = UnknownUriError("content://x/y")
        assert error.message == "Unknown URI content://x/y"
        assert error.uri == "content://x/y"
        assert error.details == {"uri": "content://x/y"}

    def test_insertion_not_supported(self):
        error = InsertionNotSupportedError("content://x/pets/1")
        assert error.code == "INSERTION_NOT_SUPPORTED"
        assert "content://x/pets/1" in error.message
