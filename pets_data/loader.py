"""
Asynchronous cursor loader.

The loader keeps a UI-side consumer supplied with a fresh cursor:
- The query runs on a worker thread, off the event loop
- The result is handed to the consumer on the event loop thread
- A change notification on the cursor's URI triggers a reload

Consumers implement LoaderCallbacks:
    on_create_query()        -> QuerySpec describing what to load
    on_query_finished(cursor)   new data is available; the previous
                                cursor is closed right after this returns
    on_reset()                  the loader is going away; drop references

Invariants:
    - At most one load runs at a time; reload requests that arrive during
      a load collapse into a single follow-up load
    - The observer is registered before the cursor's window is filled, so
      no committed change can be missed between the query and registration
    - Delivered cursors are closed by the loader, never by the consumer
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from .observer import ContentObserver
from .provider import PetProvider
from .store import Cursor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuerySpec:
    """Arguments of a provider query.

    Attributes:
        uri: Content URI to query
        projection: Columns to return (all if None)
        selection: SQL WHERE clause with ? placeholders
        selection_args: Values for the placeholders
        sort_order: Sort order (insertion order if None)
    """

    uri: str
    projection: Optional[Sequence[str]] = None
    selection: Optional[str] = None
    selection_args: Optional[Sequence[Any]] = None
    sort_order: Optional[str] = None


class LoaderCallbacks(Protocol):
    """Consumer side of a CursorLoader."""

    def on_create_query(self) -> QuerySpec: ...

    def on_query_finished(self, cursor: Cursor) -> None: ...

    def on_reset(self) -> None: ...


class _ForceLoadObserver(ContentObserver):
    """Forwards change notifications to the loader's event loop."""

    def __init__(self, loader: CursorLoader) -> None:
        super().__init__()
        self._loader = loader

    def on_change(self, uri: str) -> None:
        self._loader.on_content_changed()


class CursorLoader:
    """Loads cursors from a provider and reloads them on change.

    Thread safety:
        start(), wait_idle() and reset() run on the event loop.
        on_content_changed() may be called from any thread.

    Example:
        >>> loader = CursorLoader(provider, callbacks)
        >>> await loader.start()
        >>> provider.insert(PetEntry.CONTENT_URI, {"name": "Toto"})
        >>> await loader.wait_idle()   # callbacks got a fresh cursor
        >>> await loader.reset()
    """

    def __init__(
        self,
        provider: PetProvider,
        callbacks: LoaderCallbacks,
        executor: Optional[Executor] = None,
    ) -> None:
        """Initialize the loader.

        Args:
            provider: Provider to query
            callbacks: Consumer receiving cursors
            executor: Executor for queries (event loop default if None)
        """
        self.provider = provider
        self.callbacks = callbacks
        self._executor = executor
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._reload_requested = False
        self._cursor: Optional[Cursor] = None
        self._started = False
        self.load_count = 0

    @property
    def cursor(self) -> Optional[Cursor]:
        """Most recently delivered cursor."""
        return self._cursor

    @property
    def is_started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Start the loader and wait for the first delivery."""
        if self._started:
            return
        self._loop = asyncio.get_running_loop()
        self._started = True
        self._schedule_load()
        await self.wait_idle()

    def on_content_changed(self) -> None:
        """Request a reload. Safe to call from any thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._schedule_load)

    def _schedule_load(self) -> None:
        if not self._started:
            return
        if self._task is not None and not self._task.done():
            self._reload_requested = True
            return
        self._task = asyncio.get_running_loop().create_task(self._load_loop())

    async def _load_loop(self) -> None:
        while True:
            self._reload_requested = False
            await self._load_once()
            if not (self._started and self._reload_requested):
                return

    def _run_query(self, spec: QuerySpec) -> Cursor:
        cursor = self.provider.query(
            spec.uri,
            spec.projection,
            spec.selection,
            spec.selection_args,
            spec.sort_order,
        )
        try:
            # One observer per cursor: closing an old cursor must not
            # drop the registration of the current one
            cursor.register_content_observer(_ForceLoadObserver(self))
            cursor.fill()
        except BaseException:
            cursor.close()
            raise
        return cursor

    async def _load_once(self) -> None:
        spec = self.callbacks.on_create_query()
        loop = asyncio.get_running_loop()
        cursor = await loop.run_in_executor(self._executor, self._run_query, spec)

        if not self._started:
            cursor.close()
            return

        previous = self._cursor
        self._cursor = cursor
        self.load_count += 1
        logger.debug("Cursor loaded", extra={"uri": spec.uri, "rows": cursor.get_count()})
        self.callbacks.on_query_finished(cursor)
        if previous is not None and previous is not cursor:
            previous.close()

    async def wait_idle(self) -> None:
        """Wait until no load is running or scheduled.

        Re-raises the error of a failed load.
        """
        while True:
            # Let call_soon_threadsafe callbacks from notifying threads run
            await asyncio.sleep(0)
            task = self._task
            if task is None or task.done():
                if task is not None and not task.cancelled():
                    exc = task.exception()
                    if exc is not None:
                        self._task = None
                        raise exc
                return
            await asyncio.wait({task})

    async def reset(self) -> None:
        """Stop the loader, close its cursor and notify the consumer."""
        if not self._started:
            return
        self._started = False
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
        self.callbacks.on_reset()
