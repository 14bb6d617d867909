"""
Observer bus for content change notifications.

The bus keeps a registry of content observers keyed by URI and delivers
change notifications emitted by the provider after each committed write.

Invariants:
    - Registrations are weak: the bus never keeps an observer alive
    - An observer registered on U is notified for U and every URI below U
    - One notify_change() batch wakes each observer at most once
    - A pending notification for a URI is never duplicated before delivery
    - Delivery is FIFO per observer, unordered across observers

How to change safely:
    - Never call observers while holding the bus lock
    - Keep notify_change() cheap; it runs on the writer's thread
"""

from __future__ import annotations

import logging
import threading
import weakref
from concurrent.futures import Executor
from typing import Dict, List, Optional

from .contract import is_descendant_or_self

logger = logging.getLogger(__name__)


class ContentObserver:
    """Receives change notifications for a content URI.

    Subclasses override on_change(). Without an executor, notifications
    are delivered on the thread that called notify_change(); with one,
    delivery is submitted to the executor.

    Thread safety:
        dispatch_change() may be called from any thread. on_change() is
        never run concurrently for the same observer.

    Example:
        >>> class Printer(ContentObserver):
        ...     def on_change(self, uri):
        ...         print("changed", uri)
        >>> printer = Printer()
        >>> bus.register_observer(PetEntry.CONTENT_URI, printer)
    """

    def __init__(self, executor: Optional[Executor] = None) -> None:
        self._executor = executor
        # Insertion-ordered set of pending URIs
        self._pending: Dict[str, None] = {}
        self._draining = False
        self._lock = threading.Lock()

    def on_change(self, uri: str) -> None:
        """Called when data at or below the registered URI changed."""

    @property
    def pending(self) -> List[str]:
        """URIs queued for delivery."""
        with self._lock:
            return list(self._pending)

    def dispatch_change(self, uri: str) -> bool:
        """Queue a notification, coalescing with a pending one.

        Returns:
            True if queued, False if already pending for uri
        """
        with self._lock:
            if uri in self._pending:
                return False
            self._pending[uri] = None
            if self._draining:
                return True
            self._draining = True

        if self._executor is not None:
            self._executor.submit(self._drain)
        else:
            self._drain()
        return True

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._pending:
                    self._draining = False
                    return
                uri = next(iter(self._pending))
                del self._pending[uri]
            try:
                self.on_change(uri)
            except Exception:
                logger.exception("Content observer failed", extra={"uri": uri})


class ObserverBus:
    """Registry of content observers keyed by URI.

    Thread safety:
        All methods are safe to call from any thread.

    Example:
        >>> bus = ObserverBus()
        >>> bus.register_observer(PetEntry.CONTENT_URI, observer)
        >>> bus.notify_change(f"{PetEntry.CONTENT_URI}/1")  # wakes observer
    """

    def __init__(self) -> None:
        self._observers: Dict[str, weakref.WeakSet[ContentObserver]] = {}
        self._lock = threading.Lock()

    def register_observer(self, uri: str, observer: ContentObserver) -> None:
        """Register observer for changes at or below uri.

        Registering the same observer on the same URI twice is a no-op.
        """
        with self._lock:
            self._observers.setdefault(uri, weakref.WeakSet()).add(observer)
        logger.debug("Registered content observer", extra={"uri": uri})

    def unregister_observer(self, observer: ContentObserver) -> None:
        """Remove every registration of observer."""
        with self._lock:
            for uri in list(self._observers):
                observers = self._observers[uri]
                observers.discard(observer)
                if not observers:
                    del self._observers[uri]

    def observer_count(self, uri: Optional[str] = None) -> int:
        """Number of live registrations, optionally for a single URI."""
        with self._lock:
            if uri is not None:
                return len(self._observers.get(uri, ()))
            return sum(len(observers) for observers in self._observers.values())

    def notify_change(self, *uris: str) -> int:
        """Notify observers that data at the given URIs changed.

        All URIs form one batch: each matching observer is woken once,
        with the first URI of the batch it matches.

        Returns:
            Number of observers a notification was queued for
        """
        order = {uri: index for index, uri in enumerate(uris)}
        targets: Dict[ContentObserver, str] = {}
        with self._lock:
            for registered_uri, observers in list(self._observers.items()):
                if not observers:
                    del self._observers[registered_uri]
                    continue
                for uri in uris:
                    if is_descendant_or_self(registered_uri, uri):
                        for observer in observers:
                            current = targets.get(observer)
                            if current is None or order[uri] < order[current]:
                                targets[observer] = uri
                        break

        # Observers matched by an earlier URI of the batch go first
        queued = 0
        for observer, uri in sorted(targets.items(), key=lambda item: order[item[1]]):
            if observer.dispatch_change(uri):
                queued += 1

        logger.debug("Notified change", extra={"uris": list(uris), "observers": queued})
        return queued
