"""
Catalog CLI for inspecting and editing a pets database.

Commands:
- list: Print every pet, one per line
- show: Print a single pet
- add / update: Write a pet through the provider (validated)
- delete / delete-all: Remove one pet or all of them
- insert-dummy: Insert the sample pet Toto

Usage:
    pets --db shelter.db list
    pets add --name Toto --breed Terrier --gender male --weight 7
    pets update 1 --weight 8
    pets delete-all

Invariants:
    - Every write goes through the provider, never the store directly
    - Data-layer errors exit with status 1 and a message on stderr
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, TextIO

from ..catalog import delete_all_pets, insert_dummy_pet
from ..config import Settings
from ..contract import MAX_ID, Gender, PetEntry, with_appended_id
from ..errors import PetDataError
from ..provider import PetProvider, init_provider, shutdown_provider

logger = logging.getLogger(__name__)

_GENDER_CHOICES = {
    "unknown": Gender.UNKNOWN,
    "male": Gender.MALE,
    "female": Gender.FEMALE,
}


def _gender(value: str) -> int:
    """Parse a gender name or code."""
    key = value.strip().lower()
    if key in _GENDER_CHOICES:
        return int(_GENDER_CHOICES[key])
    # Codes are passed through so the validator reports bad ones
    return int(key) if key.lstrip("-").isdigit() else -1


def _row_id(value: str) -> int:
    """Parse a pet id; ids are non-negative decimal integers."""
    try:
        row_id = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid pet id: {value!r}") from None
    if not 0 <= row_id <= MAX_ID:
        raise argparse.ArgumentTypeError(f"pet id out of range: {value}")
    return row_id


class CatalogCLI:
    """Command implementations over a provider.

    Example:
        >>> cli = CatalogCLI(provider)
        >>> cli.insert_dummy()
        'content://com.example.android.pets/pets/1'
        >>> cli.list_pets()
    """

    def __init__(self, provider: PetProvider, out: TextIO = sys.stdout) -> None:
        self.provider = provider
        self.out = out

    def _print(self, line: str) -> None:
        print(line, file=self.out)

    @staticmethod
    def _format(pet: dict[str, Any]) -> str:
        return " - ".join(str(pet[column]) for column in PetEntry.COLUMNS)

    def list_pets(self) -> int:
        """Print the pets table; return the number of pets."""
        with self.provider.query(PetEntry.CONTENT_URI) as cursor:
            self._print(f"The pets table contains {cursor.get_count()} pets.")
            self._print(" - ".join(PetEntry.COLUMNS))
            for row in cursor:
                self._print(self._format(row.as_dict()))
            return cursor.get_count()

    def show(self, pet_id: int) -> bool:
        """Print one pet; return False if it does not exist."""
        with self.provider.query(with_appended_id(PetEntry.CONTENT_URI, pet_id)) as cursor:
            if not cursor.move_to_first():
                self._print(f"No pet with id {pet_id}")
                return False
            self._print(self._format(cursor.get_row().as_dict()))
            return True

    def add(self, values: dict[str, Any]) -> str:
        uri = self.provider.insert(PetEntry.CONTENT_URI, values)
        self._print(uri)
        return uri

    def update(self, pet_id: int, values: dict[str, Any]) -> int:
        count = self.provider.update(with_appended_id(PetEntry.CONTENT_URI, pet_id), values)
        self._print(f"{count} rows updated")
        return count

    def delete(self, pet_id: int) -> int:
        count = self.provider.delete(with_appended_id(PetEntry.CONTENT_URI, pet_id))
        self._print(f"{count} rows deleted")
        return count

    def delete_all(self) -> int:
        count = delete_all_pets(self.provider)
        self._print(f"{count} rows deleted")
        return count

    def insert_dummy(self) -> str:
        uri = insert_dummy_pet(self.provider)
        self._print(uri)
        return uri


def _add_value_arguments(parser: argparse.ArgumentParser, name_required: bool) -> None:
    parser.add_argument("--name", required=name_required, help="Pet name")
    parser.add_argument("--breed", help="Pet breed")
    parser.add_argument("--gender", type=_gender, help="unknown, male, female or 0-2")
    parser.add_argument("--weight", type=int, help="Weight in kg")


def _values(args: argparse.Namespace) -> dict[str, Any]:
    columns = (
        PetEntry.COLUMN_PET_NAME,
        PetEntry.COLUMN_PET_BREED,
        PetEntry.COLUMN_PET_GENDER,
        PetEntry.COLUMN_PET_WEIGHT,
    )
    return {column: getattr(args, column) for column in columns if getattr(args, column) is not None}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pets", description="Pets catalog tool")
    parser.add_argument("--db", help="Database file (default: PETS_DATABASE_PATH or shelter.db)")
    parser.add_argument("--log-level", help="Log level (default: PETS_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List all pets")

    show_parser = subparsers.add_parser("show", help="Show one pet")
    show_parser.add_argument("pet_id", type=_row_id)

    add_parser = subparsers.add_parser("add", help="Add a pet")
    _add_value_arguments(add_parser, name_required=True)

    update_parser = subparsers.add_parser("update", help="Update a pet")
    update_parser.add_argument("pet_id", type=_row_id)
    _add_value_arguments(update_parser, name_required=False)

    delete_parser = subparsers.add_parser("delete", help="Delete a pet")
    delete_parser.add_argument("pet_id", type=_row_id)

    subparsers.add_parser("delete-all", help="Delete all pets")
    subparsers.add_parser("insert-dummy", help="Insert the sample pet Toto")

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, overridden by command-line flags."""
    overrides: dict[str, Any] = {}
    if args.db:
        overrides["database_path"] = args.db
    if args.log_level:
        overrides["log_level"] = args.log_level
    return Settings(**overrides)


def run(cli: CatalogCLI, args: argparse.Namespace) -> int:
    """Dispatch a parsed command; return the exit status."""
    if args.command == "list":
        cli.list_pets()
    elif args.command == "show":
        return 0 if cli.show(args.pet_id) else 1
    elif args.command == "add":
        cli.add(_values(args))
    elif args.command == "update":
        cli.update(args.pet_id, _values(args))
    elif args.command == "delete":
        cli.delete(args.pet_id)
    elif args.command == "delete-all":
        cli.delete_all()
    elif args.command == "insert-dummy":
        cli.insert_dummy()
    return 0


def execute(settings: Settings, args: argparse.Namespace, out: TextIO = sys.stdout) -> int:
    """Run a parsed command against the configured database.

    Returns:
        Exit status: 0 on success, 1 on a data-layer error
    """
    try:
        provider = init_provider(settings)
        try:
            return run(CatalogCLI(provider, out), args)
        finally:
            shutdown_provider()
    except PetDataError as e:
        logger.debug("Command failed", extra={"code": e.code})
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
