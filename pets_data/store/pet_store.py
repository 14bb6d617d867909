"""
Durable SQLite store for pets.

This module owns the on-disk database file holding the pets table:
- Opens or creates the file and applies the schema
- Tracks the schema version in PRAGMA user_version and runs upgrades
- Executes parameterized query/insert/update/delete statements

The store performs no semantic validation; callers validate values first.
It only checks column names so that no identifier reaches SQL unchecked.

Invariants:
    - One connection per store, opened once
    - Writes are serialized and run in a single IMMEDIATE transaction
    - Reads run in parallel with reads, never alongside a write
    - _id is AUTOINCREMENT: ids are never reused, even after delete
    - Every sqlite3 error surfaces as StoreIOError (StoreFullError when full)
    - Unknown column names are rejected before SQL is built

How to change safely:
    - Bump DATABASE_VERSION and register an upgrade step for the new version
    - Never edit the CREATE TABLE statement of a released version in place
    - Upgrades are monotonic; downgrades are refused

Table schema:
    pets:
        - _id INTEGER PRIMARY KEY AUTOINCREMENT
        - name TEXT NOT NULL
        - breed TEXT NOT NULL DEFAULT ''
        - gender INTEGER NOT NULL DEFAULT 0
        - weight INTEGER NOT NULL DEFAULT 0
"""

from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from difflib import get_close_matches
from pathlib import Path
from typing import Any, Optional

from ..contract import PetEntry
from ..errors import StoreFullError, StoreIOError, UnknownColumnError
from .cursor import Cursor
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)

DATABASE_NAME = "shelter.db"

DATABASE_VERSION = 1

DEFAULT_SORT_ORDER = f"{PetEntry._ID} ASC"

# Upgrade steps keyed by the version they upgrade to
UpgradeStep = Callable[[sqlite3.Connection], None]
UPGRADES: dict[int, UpgradeStep] = {}

_SORT_TERM = re.compile(r"\s*(\w+)(?:\s+(ASC|DESC))?\s*", re.IGNORECASE)

_CREATE_PETS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {PetEntry.TABLE_NAME} (
        {PetEntry._ID} INTEGER PRIMARY KEY AUTOINCREMENT,
        {PetEntry.COLUMN_PET_NAME} TEXT NOT NULL,
        {PetEntry.COLUMN_PET_BREED} TEXT NOT NULL DEFAULT '',
        {PetEntry.COLUMN_PET_GENDER} INTEGER NOT NULL DEFAULT 0,
        {PetEntry.COLUMN_PET_WEIGHT} INTEGER NOT NULL DEFAULT 0
    )
"""


class PetStore:
    """SQLite store for the pets table.

    Thread safety:
        The single connection is shared across threads and guarded by a
        readers-writer lock. Any thread may call any method.

    Example:
        >>> store = PetStore.open("/data/shelter.db")
        >>> pet_id = store.insert({"name": "Toto", "breed": "Terrier", "gender": 1, "weight": 7})
        >>> with store.query(selection="_id = ?", selection_args=[pet_id]) as cursor:
        ...     cursor.get_count()
        1
        >>> store.close()
    """

    def __init__(
        self,
        path: str | Path,
        version: int = DATABASE_VERSION,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        upgrades: Optional[Mapping[int, UpgradeStep]] = None,
    ) -> None:
        """Configure the store without touching the file.

        Args:
            path: Database file path (":memory:" for a private in-memory store)
            version: Schema version the caller expects
            wal_mode: Enable SQLite WAL journal mode
            busy_timeout_ms: SQLite busy timeout
            upgrades: Upgrade steps keyed by target version
        """
        if version < 1:
            raise ValueError(f"Schema version must be >= 1, got {version}")
        self.path = path if str(path) == ":memory:" else Path(path)
        self.version = version
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self.upgrades: Mapping[int, UpgradeStep] = UPGRADES if upgrades is None else upgrades
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = ReadWriteLock()

    @classmethod
    def open(
        cls,
        path: str | Path,
        version: int = DATABASE_VERSION,
        **options: Any,
    ) -> PetStore:
        """Open (creating if needed) the store at path.

        Raises:
            StoreIOError: If the file cannot be opened or is newer than version
        """
        store = cls(path, version, **options)
        store._open()
        return store

    # Connection management

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            if getattr(exc, "sqlite_errorcode", None) == sqlite3.SQLITE_FULL:
                raise StoreFullError(str(exc)) from exc
            raise StoreIOError(str(exc)) from exc
        except OverflowError as exc:
            # Integers outside the signed 64-bit range cannot be bound
            raise StoreIOError(str(exc)) from exc

    def _open(self) -> None:
        if isinstance(self.path, Path):
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StoreIOError(f"Cannot create directory for {self.path}: {exc}") from exc

        with self._translate_errors():
            conn = sqlite3.connect(
                str(self.path),
                timeout=self.busy_timeout_ms / 1000.0,
                isolation_level=None,  # Autocommit by default, explicit transactions
                check_same_thread=False,
            )
            try:
                conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
                if self.wal_mode:
                    conn.execute("PRAGMA journal_mode = WAL")
                conn.execute("PRAGMA synchronous = NORMAL")
                self._conn = conn
                with self._write_transaction() as tx:
                    self._apply_schema(tx)
            except BaseException:
                self._conn = None
                conn.close()
                raise

        logger.info(f"Opened pets database: {self.path} (version {self.version})")

    def _apply_schema(self, conn: sqlite3.Connection) -> None:
        current = conn.execute("PRAGMA user_version").fetchone()[0]

        if current == 0:
            conn.execute(_CREATE_PETS_TABLE)
            logger.info(f"Created pets schema at version {self.version}")
        elif current < self.version:
            for target in range(current + 1, self.version + 1):
                step = self.upgrades.get(target)
                if step is not None:
                    step(conn)
            logger.info(f"Upgraded pets database from version {current} to {self.version}")
        elif current > self.version:
            raise StoreIOError(
                f"Can't downgrade database from version {current} to {self.version}"
            )
        else:
            return

        conn.execute(f"PRAGMA user_version = {int(self.version)}")

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreIOError(f"Pets database is closed: {self.path}")
        return self._conn

    @contextmanager
    def _write_transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock.write_locked(), self._translate_errors():
            conn = self._require_open()
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def schema_version(self) -> int:
        """Schema version stored in the database file."""
        with self._lock.read_locked(), self._translate_errors():
            return self._require_open().execute("PRAGMA user_version").fetchone()[0]

    def close(self) -> None:
        """Close the connection. Idempotent."""
        with self._lock.write_locked():
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info(f"Closed pets database: {self.path}")

    def __enter__(self) -> PetStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Statement helpers

    def _check_columns(self, columns: Sequence[str], allowed: Sequence[str]) -> list[str]:
        for column in columns:
            if column not in allowed:
                raise UnknownColumnError(
                    column,
                    get_close_matches(column, list(allowed), n=3),
                    reason=f"Table {PetEntry.TABLE_NAME} has no column named {column}",
                )
        return list(columns)

    def _check_sort_order(self, sort_order: Optional[str]) -> str:
        if not sort_order or not sort_order.strip():
            return DEFAULT_SORT_ORDER
        terms = []
        for term in sort_order.split(","):
            match = _SORT_TERM.fullmatch(term)
            if match is None:
                raise StoreIOError(f"Invalid sort order: {sort_order!r}")
            self._check_columns([match.group(1)], PetEntry.COLUMNS)
            direction = (match.group(2) or "ASC").upper()
            terms.append(f"{match.group(1)} {direction}")
        return ", ".join(terms)

    @staticmethod
    def _where(selection: Optional[str]) -> str:
        return f" WHERE {selection}" if selection else ""

    def _fetch(self, sql: str, params: Sequence[Any]) -> list[tuple[Any, ...]]:
        with self._lock.read_locked(), self._translate_errors():
            return self._require_open().execute(sql, params).fetchall()

    # CRUD

    def query(
        self,
        projection: Optional[Sequence[str]] = None,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
        sort_order: Optional[str] = None,
    ) -> Cursor:
        """Build a lazy cursor over matching rows.

        The statement runs when the cursor is first accessed.

        Args:
            projection: Columns to return (all columns if None)
            selection: SQL WHERE clause with ? placeholders
            selection_args: Values bound to the placeholders
            sort_order: Comma-separated "column [ASC|DESC]" terms
                (insertion order if None)

        Returns:
            Cursor over the matching rows

        Raises:
            UnknownColumnError: If the projection or sort order names an unknown column
            StoreIOError: If the sort order is malformed
        """
        self._require_open()
        columns = self._check_columns(projection or PetEntry.COLUMNS, PetEntry.COLUMNS)
        sql = (
            f"SELECT {', '.join(columns)} FROM {PetEntry.TABLE_NAME}"
            f"{self._where(selection)} ORDER BY {self._check_sort_order(sort_order)}"
        )
        params = list(selection_args or ())
        return Cursor(lambda: self._fetch(sql, params), columns)

    def insert(self, values: Mapping[str, Any]) -> int:
        """Insert a row and return its new id.

        Raises:
            StoreFullError: If the database or disk is full
            UnknownColumnError: If a key is not a writable column
            StoreIOError: On any other storage failure
        """
        columns = self._check_columns(list(values), PetEntry.WRITABLE_COLUMNS)
        if columns:
            sql = (
                f"INSERT INTO {PetEntry.TABLE_NAME} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})"
            )
        else:
            sql = f"INSERT INTO {PetEntry.TABLE_NAME} DEFAULT VALUES"

        with self._write_transaction() as conn:
            cursor = conn.execute(sql, [values[c] for c in columns])
            new_id = cursor.lastrowid

        logger.debug("Inserted pet", extra={"pet_id": new_id})
        return int(new_id)

    def update(
        self,
        values: Mapping[str, Any],
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """Update matching rows; return the number of rows changed.

        Empty values change nothing and do not touch the file.
        """
        columns = self._check_columns(list(values), PetEntry.WRITABLE_COLUMNS)
        if not columns:
            return 0
        assignments = ", ".join(f"{c} = ?" for c in columns)
        sql = f"UPDATE {PetEntry.TABLE_NAME} SET {assignments}{self._where(selection)}"
        params = [values[c] for c in columns] + list(selection_args or ())

        with self._write_transaction() as conn:
            count = conn.execute(sql, params).rowcount

        logger.debug("Updated pets", extra={"rows": count, "columns": columns})
        return count

    def delete(
        self,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """Delete matching rows (all rows if selection is None).

        Returns:
            Number of rows deleted
        """
        # "WHERE 1" keeps the row count exact when deleting everything
        sql = f"DELETE FROM {PetEntry.TABLE_NAME}{self._where(selection or '1')}"

        with self._write_transaction() as conn:
            count = conn.execute(sql, list(selection_args or ())).rowcount

        logger.debug("Deleted pets", extra={"rows": count})
        return count
