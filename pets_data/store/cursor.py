"""
Row cursors returned by store and provider queries.

A Cursor is a restartable lazy sequence of rows:
- The query runs on first access, not when the cursor is created
- Rows are materialized into the cursor's window once; iterating again
  restarts over the same window
- Closing a cursor before first access means the query never runs

Cursors expose two views of the same rows. Iteration yields PetRow records
with named and positional access; the position-based API (move_to_next,
get_int, get_string) serves adapters that bind widgets to column indexes.

Invariants:
    - A closed cursor rejects every access
    - Observer registrations made through a cursor end when it closes
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, Optional, Union

from ..contract import Pet, PetEntry
from ..errors import StoreIOError, UnknownColumnError

if TYPE_CHECKING:
    from ..observer import ContentObserver, ObserverBus


class PetRow:
    """One row of a query result.

    Values are addressable by column name or by index:
        >>> row["name"], row[1], row.get("breed")
    """

    __slots__ = ("_columns", "_values")

    def __init__(self, columns: tuple[str, ...], values: tuple[Any, ...]) -> None:
        self._columns = columns
        self._values = values

    def __getitem__(self, key: Union[int, str]) -> Any:
        if isinstance(key, str):
            try:
                return self._values[self._columns.index(key)]
            except ValueError:
                raise KeyError(key) from None
        return self._values[key]

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PetRow):
            return NotImplemented
        return self._columns == other._columns and self._values == other._values

    def __hash__(self) -> int:
        return hash((self._columns, self._values))

    def __repr__(self) -> str:
        return f"PetRow({self.as_dict()!r})"

    def get(self, column: str, default: Any = None) -> Any:
        try:
            return self[column]
        except KeyError:
            return default

    def keys(self) -> tuple[str, ...]:
        return self._columns

    def as_dict(self) -> dict[str, Any]:
        return dict(zip(self._columns, self._values))

    def to_pet(self) -> Pet:
        """Convert a full-width row to a Pet.

        Raises:
            UnknownColumnError: If the row lacks one of the pet columns
        """
        data = self.as_dict()
        for column in PetEntry.COLUMNS:
            if column not in data:
                raise UnknownColumnError(column, reason=f"Row has no column '{column}'")
        return Pet.from_dict(data)


class Cursor:
    """Restartable lazy sequence of rows with a positional API.

    Attributes:
        columns: Column names, in projection order

    Example:
        >>> with provider.query(PetEntry.CONTENT_URI) as cursor:
        ...     name_index = cursor.get_column_index(PetEntry.COLUMN_PET_NAME)
        ...     while cursor.move_to_next():
        ...         print(cursor.get_string(name_index))
    """

    def __init__(
        self,
        fetch: Callable[[], Sequence[tuple[Any, ...]]],
        columns: Sequence[str],
    ) -> None:
        self._fetch = fetch
        self.columns = tuple(columns)
        self._rows: Optional[list[PetRow]] = None
        self._position = -1
        self._closed = False
        self._bus: Optional[ObserverBus] = None
        self._notification_uri: Optional[str] = None
        self._observers: list[ContentObserver] = []

    # Window

    def _window(self) -> list[PetRow]:
        if self._closed:
            raise StoreIOError("Attempted to access a closed cursor")
        if self._rows is None:
            self._rows = [PetRow(self.columns, tuple(values)) for values in self._fetch()]
        return self._rows

    def fill(self) -> int:
        """Run the query if it has not run yet; return the row count."""
        return len(self._window())

    def get_count(self) -> int:
        return len(self._window())

    def __len__(self) -> int:
        return self.get_count()

    def __bool__(self) -> bool:
        # Truth testing must not run the query
        return True

    def __iter__(self) -> Iterator[PetRow]:
        return iter(list(self._window()))

    def to_pets(self) -> list[Pet]:
        """All rows as Pet records (requires a full-width projection)."""
        return [row.to_pet() for row in self._window()]

    # Positioning

    @property
    def position(self) -> int:
        return self._position

    def move_to_position(self, position: int) -> bool:
        """Move to an absolute position, clamped to [-1, count].

        Returns:
            True if the cursor now points at a row
        """
        count = self.get_count()
        self._position = min(max(position, -1), count)
        return 0 <= self._position < count

    def move_to_first(self) -> bool:
        return self.move_to_position(0)

    def move_to_last(self) -> bool:
        return self.move_to_position(self.get_count() - 1)

    def move_to_next(self) -> bool:
        return self.move_to_position(self._position + 1)

    def move_to_previous(self) -> bool:
        return self.move_to_position(self._position - 1)

    def is_before_first(self) -> bool:
        return self.get_count() == 0 or self._position == -1

    def is_after_last(self) -> bool:
        return self.get_count() == 0 or self._position == self.get_count()

    # Column access

    def get_column_names(self) -> list[str]:
        return list(self.columns)

    def get_column_index(self, column: str) -> int:
        """Index of column, or -1 if the projection does not include it."""
        try:
            return self.columns.index(column)
        except ValueError:
            return -1

    def get_column_index_or_throw(self, column: str) -> int:
        index = self.get_column_index(column)
        if index < 0:
            raise UnknownColumnError(column, reason=f"Cursor has no column '{column}'")
        return index

    def _current(self) -> PetRow:
        rows = self._window()
        if not 0 <= self._position < len(rows):
            raise IndexError(f"Index {self._position} requested, with a size of {len(rows)}")
        return rows[self._position]

    def get_row(self) -> PetRow:
        """Row at the current position."""
        return self._current()

    def is_null(self, column_index: int) -> bool:
        return self._current()[column_index] is None

    def get_int(self, column_index: int) -> int:
        """Integer value of a column; NULL reads as 0."""
        value = self._current()[column_index]
        return 0 if value is None else int(value)

    def get_string(self, column_index: int) -> Optional[str]:
        value = self._current()[column_index]
        return None if value is None else str(value)

    # Notification

    @property
    def notification_uri(self) -> Optional[str]:
        return self._notification_uri

    def set_notification_uri(self, bus: ObserverBus, uri: str) -> None:
        """Tag the cursor with the URI whose changes invalidate it."""
        self._bus = bus
        self._notification_uri = uri

    def register_content_observer(self, observer: ContentObserver) -> None:
        """Register observer on the cursor's notification URI.

        The cursor keeps the observer alive until it is unregistered or
        the cursor is closed.

        Raises:
            StoreIOError: If the cursor is closed or has no notification URI
        """
        if self._closed:
            raise StoreIOError("Attempted to register an observer on a closed cursor")
        if self._bus is None or self._notification_uri is None:
            raise StoreIOError("Cursor has no notification URI")
        self._bus.register_observer(self._notification_uri, observer)
        self._observers.append(observer)

    def unregister_content_observer(self, observer: ContentObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)
            if self._bus is not None:
                self._bus.unregister_observer(observer)

    # Lifecycle

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the window and observer registrations. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._rows = None
        for observer in self._observers:
            if self._bus is not None:
                self._bus.unregister_observer(observer)
        self._observers.clear()

    def __enter__(self) -> Cursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
