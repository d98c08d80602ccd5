"""
Live views: values kept current from the store's event stream.

A LiveView starts from a full read and then folds each relevant document
event into its snapshot with the schema's own reduce, one event at a
time, notifying observers after every fold.

States:
    Open    an event reader is attached and a task is consuming it
    Closed  no reader; the snapshot is frozen

Open -> Closed on close(), when the last observer unsubscribes, when the
stream ends, or when an event can't be handled (the error is kept on
LiveView.error). Closed -> Open when subscribe() is called on a closed
view. Reopening does not re-read the store: changes made while the view
was closed are not reflected until the affected documents change again.

Invariants:
    - Events are processed strictly in arrival order, never concurrently
    - The snapshot is only replaced after a fold completes
    - Only the view's own task mutates the snapshot
    - Views over the same path share nothing
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import itertools
import logging
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from .config import Settings, get_settings
from .errors import UnsupportedFormat
from .paths import split_path
from .schema.types import EsType, ReduceProps
from .store.base import Document, DocumentStore, EventKind, EventStream

logger = logging.getLogger(__name__)

T = TypeVar("T")

Observer = Callable[[Optional[T]], Any]
Unsubscribe = Callable[[], Awaitable[None]]


class LiveView(Generic[T]):
    """A materialized value that follows the store.

    Normally created through EsType.observe(). Must be used from within a
    running event loop.

    Observers are held by strong reference until they unsubscribe or the
    view closes; a bound method keeps its instance alive.

    Example:
        >>> live = await Post.observe(store, "/posts/1")
        >>> unsubscribe = live.subscribe(lambda value: print(value))
        >>> await Post.write(store, author, "/posts/1", {"title": "changed"})
        >>> await unsubscribe()
        >>> live.is_closed
        True
    """

    def __init__(
        self,
        schema: EsType[T, Any],
        store: DocumentStore,
        path: str,
        initial: Optional[T],
        events: Optional[EventStream] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """Start following the store.

        Args:
            schema: Schema used to fold documents into the snapshot
            store: Store to follow
            path: Path the value lives at
            initial: Snapshot to start from, normally a full read
            events: Already-open event reader to consume (opened if None)
            settings: Settings to take supported formats from
        """
        self._schema = schema
        self._store = store
        self.requested_path = path
        self.root_path = schema.content_root(path)
        self.content_prefix = schema.content_prefix(path)
        self._formats = frozenset((settings or get_settings()).supported_formats)

        self._value: Optional[T] = initial
        self._observers: Dict[int, Observer[T]] = {}
        self._tokens = itertools.count()
        self._events: Optional[EventStream] = None
        self._task: Optional[asyncio.Task[None]] = None
        self.error: Optional[Exception] = None

        self._open(events)

    def snapshot(self) -> Optional[T]:
        """The current value. Never blocks."""
        return self._value

    @property
    def is_closed(self) -> bool:
        return self._events is None

    def subscribe(self, on_change: Optional[Observer[T]] = None) -> Unsubscribe:
        """Register a callback for every future snapshot.

        Reopens a closed view, without refreshing its snapshot.

        Args:
            on_change: Called synchronously with each new snapshot

        Returns:
            An async function removing the callback; removing the last
            callback closes the view
        """
        token = next(self._tokens)
        self._observers[token] = on_change or _ignore

        if self.is_closed:
            self._open()

        async def unsubscribe() -> None:
            self._observers.pop(token, None)
            if not self._observers:
                await self.close()

        return unsubscribe

    async def close(self) -> None:
        """Stop following the store and drop all observers. Idempotent."""
        self._observers.clear()
        events, task = self._events, self._task
        self._events = None
        self._task = None
        if events is None:
            return

        await events.cancel()
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        logger.info("Live view closed", extra={"path": self.requested_path})

    async def __aenter__(self) -> LiveView[T]:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _open(self, events: Optional[EventStream] = None) -> None:
        if self._events is not None:
            raise RuntimeError("Live view is already open")

        self.error = None
        self._events = events if events is not None else self._store.get_event_stream()
        self._task = asyncio.get_running_loop().create_task(self._run(self._events))
        logger.info(
            "Live view opened",
            extra={"path": self.requested_path, "content_prefix": self.content_prefix},
        )

    async def _run(self, events: EventStream) -> None:
        try:
            while self._events is events:
                event = await events.read()
                if event is None:
                    logger.info("Event stream ended", extra={"path": self.requested_path})
                    break

                if event.kind not in (EventKind.SUCCESS, EventKind.EXPIRE) or event.doc is None:
                    continue

                doc = event.doc
                if doc.format not in self._formats:
                    raise UnsupportedFormat(doc.format, doc.path)

                if event.kind is EventKind.EXPIRE:
                    # An expired document no longer contributes anything
                    doc = dataclasses.replace(
                        doc, text="", attachment_hash=None, attachment_size=None
                    )

                await self._handle_doc(doc)
        except UnsupportedFormat as e:
            self.error = e
            logger.warning(
                "Live view stopped on unsupported document format",
                extra={"path": self.requested_path, "format": e.format, "doc_path": e.path},
            )
        except Exception as e:
            self.error = e
            logger.exception("Live view stopped on error", extra={"path": self.requested_path})
        finally:
            if self._events is events:
                self._events = None
                self._task = None
                await events.cancel()

    async def _handle_doc(self, doc: Document) -> None:
        if doc.path != self.root_path and not doc.path.startswith(self.content_prefix):
            return

        self._value = await self._schema.reduce(
            ReduceProps(
                doc=doc,
                path_components=tuple(split_path(doc.path[len(self.content_prefix):])),
                prev=self._value,
                store=self._store,
                requested_path=self.requested_path,
            )
        )

        for observer in list(self._observers.values()):
            observer(self._value)


def _ignore(_: Any) -> None:
    return None
