"""
Unit tests for the pets contract.

Tests cover:
- Content URIs and column names
- Gender encoding
- URI matching for the DIR and ITEM shapes
- Pet record conversion
"""

import pytest

from pets_data.contract import (
    CONTENT_AUTHORITY,
    Gender,
    MatchCode,
    MimeKind,
    Pet,
    PetEntry,
    UriMatcher,
    is_descendant_or_self,
    is_valid_gender,
    parse_id,
    split_uri,
    with_appended_id,
)
from pets_data.contract.uris import MAX_ID
from pets_data.errors import UnknownUriError


class TestPetEntry:
    """Tests for table and URI constants."""

    def test_content_uri(self):
        """Directory URI is scheme + authority + pets."""
        assert PetEntry.CONTENT_URI == "content://com.example.android.pets/pets"
        assert CONTENT_AUTHORITY == "com.example.android.pets"

    def test_columns(self):
        """Columns are in storage order; _id is not writable."""
        assert PetEntry.COLUMNS == ("_id", "name", "breed", "gender", "weight")
        assert PetEntry.WRITABLE_COLUMNS == ("name", "breed", "gender", "weight")

    def test_gender_codes(self):
        """Gender codes are persisted integers."""
        assert PetEntry.GENDER_UNKNOWN == 0
        assert PetEntry.GENDER_MALE == 1
        assert PetEntry.GENDER_FEMALE == 2

    def test_mime_types(self):
        """MIME kinds render the cursor dir/item types."""
        assert MimeKind.DIRECTORY.mime_type == "vnd.android.cursor.dir/com.example.android.pets/pets"
        assert MimeKind.ITEM.mime_type == "vnd.android.cursor.item/com.example.android.pets/pets"


class TestGender:
    """Tests for is_valid_gender."""

    @pytest.mark.parametrize("value", [0, 1, 2, Gender.MALE])
    def test_valid(self, value):
        assert is_valid_gender(value)

    @pytest.mark.parametrize("value", [-1, 3, 99, True, False, "1", 1.0, None])
    def test_invalid(self, value):
        """Out-of-range codes, bools and non-ints are rejected."""
        assert not is_valid_gender(value)


class TestUriMatcher:
    """Tests for UriMatcher."""

    @pytest.fixture
    def matcher(self):
        return UriMatcher()

    def test_match_directory(self, matcher):
        result = matcher.match(PetEntry.CONTENT_URI)

        assert result is not None
        assert result.code is MatchCode.DIR
        assert result.pet_id is None

    def test_match_directory_trailing_slash(self, matcher):
        """A trailing slash still addresses the directory."""
        result = matcher.match(PetEntry.CONTENT_URI + "/")
        assert result is not None
        assert result.code is MatchCode.DIR

    def test_match_item(self, matcher):
        result = matcher.match(f"{PetEntry.CONTENT_URI}/42")

        assert result is not None
        assert result.code is MatchCode.ITEM
        assert result.pet_id == 42

    def test_match_item_max_id(self, matcher):
        """Ids up to the largest SQLite rowid match; larger ones do not."""
        assert MAX_ID == 2**63 - 1
        assert matcher.match(f"{PetEntry.CONTENT_URI}/{MAX_ID}").pet_id == MAX_ID
        assert matcher.match(f"{PetEntry.CONTENT_URI}/{MAX_ID + 1}") is None
        assert matcher.match(f"{PetEntry.CONTENT_URI}/{2**64 - 1}") is None

    @pytest.mark.parametrize(
        "uri",
        [
            "content://com.example.android.pets/pets/abc",
            "content://com.example.android.pets/pets/-1",
            "content://com.example.android.pets/pets/1.5",
            "content://com.example.android.pets/pets/1/2",
            "content://com.example.android.pets/dogs",
            "content://com.example.android.pets",
            "content://other.authority/pets",
            "http://com.example.android.pets/pets",
            "",
        ],
    )
    def test_no_match(self, matcher, uri):
        """URIs of any other shape do not match."""
        assert matcher.match(uri) is None

    def test_match_or_raise(self, matcher):
        with pytest.raises(UnknownUriError) as exc_info:
            matcher.match_or_raise("content://com.example.android.pets/dogs")

        assert exc_info.value.code == "UNKNOWN_URI"
        assert "content://com.example.android.pets/dogs" in str(exc_info.value)


class TestUriHelpers:
    """Tests for URI helper functions."""

    def test_split_uri(self):
        assert split_uri("content://a.b/pets/3") == ("content", "a.b", ("pets", "3"))

    def test_with_appended_id(self):
        assert with_appended_id(PetEntry.CONTENT_URI, 7) == f"{PetEntry.CONTENT_URI}/7"
        assert with_appended_id(PetEntry.CONTENT_URI + "/", 7) == f"{PetEntry.CONTENT_URI}/7"

    def test_with_appended_id_negative(self):
        with pytest.raises(ValueError):
            with_appended_id(PetEntry.CONTENT_URI, -1)

    def test_parse_id(self):
        assert parse_id(f"{PetEntry.CONTENT_URI}/9") == 9

    def test_parse_id_leading_zero(self):
        assert parse_id(f"{PetEntry.CONTENT_URI}/007") == 7

    def test_parse_id_directory(self):
        """The directory URI has no id."""
        with pytest.raises(UnknownUriError):
            parse_id(PetEntry.CONTENT_URI)

    def test_descendant_or_self(self):
        base = PetEntry.CONTENT_URI
        assert is_descendant_or_self(base, base)
        assert is_descendant_or_self(base, f"{base}/1")
        assert not is_descendant_or_self(f"{base}/1", base)

    def test_descendant_is_segment_based(self):
        """pets/1 is not a prefix of pets/10."""
        base = PetEntry.CONTENT_URI
        assert not is_descendant_or_self(f"{base}/1", f"{base}/10")

    def test_descendant_other_authority(self):
        assert not is_descendant_or_self(PetEntry.CONTENT_URI, "content://other/pets/1")


class TestPet:
    """Tests for the Pet record."""

    def test_round_trip(self):
        pet = Pet(id=3, name="Toto", breed="Terrier", gender=Gender.MALE, weight=7)

        data = pet.to_dict()

        assert data == {"_id": 3, "name": "Toto", "breed": "Terrier", "gender": 1, "weight": 7}
        assert Pet.from_dict(data) == pet

    def test_uri(self):
        pet = Pet(id=3, name="Toto", breed="", gender=Gender.UNKNOWN, weight=0)
        assert pet.uri == f"{PetEntry.CONTENT_URI}/3"

    def test_from_dict_null_breed(self):
        """A null breed reads as empty."""
        pet = Pet.from_dict({"_id": 1, "name": "Rex", "breed": None, "gender": 2, "weight": 4})
        assert pet.breed == ""
        assert pet.gender is Gender.FEMALE
