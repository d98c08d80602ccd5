"""
In-memory document store implementation for testing.

This module provides a simple in-memory DocumentStore for:
- Unit and integration tests
- Local development without a real replica
- Examples and demos

Invariants:
    - All data is lost on process exit
    - Only the latest document per path is kept (last write wins)
    - Events are published in the same order writes are applied
    - Deleted documents stay behind as empty-text tombstones

How to change safely:
    - This is test-only code, changes don't affect production stores
    - Keep interface compatible with the DocumentStore protocol
    - Add features to help with testing scenarios
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import re
import time
from typing import AsyncIterator, Callable, Dict, List, Optional, Set

from .base import (
    AttachmentSource,
    DocInput,
    Document,
    EventKind,
    QueryFilter,
    StoreEvent,
    WriteOutcome,
)

logger = logging.getLogger(__name__)

MAX_PATH_LENGTH = 512
_PATH_CHARS = re.compile(r"^[A-Za-z0-9'()\-_~!$&*+,.:=@%/]+$")

WritePolicy = Callable[[str, DocInput], Optional[str]]


def validate_path(path: str) -> Optional[str]:
    """Check a document path.

    Returns:
        None if the path is valid, otherwise the reason it isn't
    """
    if not path.startswith("/"):
        return "path must start with '/'"
    if path.endswith("/"):
        return "path must not end with '/'"
    if "//" in path:
        return "path must not contain empty segments"
    if len(path) > MAX_PATH_LENGTH:
        return f"path longer than {MAX_PATH_LENGTH} characters"
    if not _PATH_CHARS.match(path):
        return "path contains disallowed characters"
    return None


class InMemoryAttachment:
    """Attachment handle over bytes held in memory."""

    def __init__(self, body: bytes, chunk_size: int = 64 * 1024) -> None:
        self._body = body
        self._chunk_size = chunk_size

    async def bytes(self) -> bytes:
        return self._body

    async def stream(self) -> AsyncIterator[bytes]:
        for start in range(0, len(self._body), self._chunk_size):
            yield self._body[start:start + self._chunk_size]


class InMemoryEventStream:
    """Event reader backed by an asyncio queue.

    A None item on the queue marks the end of the stream.
    """

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store
        self._queue: asyncio.Queue[Optional[StoreEvent]] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _publish(self, event: Optional[StoreEvent]) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    async def read(self) -> Optional[StoreEvent]:
        if self._closed:
            return None
        event = await self._queue.get()
        if event is None or self._closed:
            self._closed = True
            return None
        return event

    async def cancel(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._streams.discard(self)
        # Wake a reader blocked in read()
        self._queue.put_nowait(None)

    async def __aiter__(self) -> AsyncIterator[StoreEvent]:
        while True:
            event = await self.read()
            if event is None:
                return
            yield event


class InMemoryDocumentStore:
    """In-memory implementation of DocumentStore for testing.

    Stores the latest document per path, attachments by content hash,
    and fans out every applied write to the open event streams.

    Attributes:
        read_only: Refuse every write
        write_policy: Optional hook returning a rejection reason for a write

    Thread safety:
        Uses an asyncio lock. Safe to use from multiple coroutines on one
        event loop.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> await store.set("@alice", DocInput(path="/posts/1", text="hello"))
        >>> doc = await store.get_latest_doc_at_path("/posts/1")
        >>> doc.text
        'hello'
    """

    def __init__(
        self,
        read_only: bool = False,
        write_policy: Optional[WritePolicy] = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            read_only: Refuse all writes with a failure outcome
            write_policy: Called with (author, input) before each write;
                a non-None return value rejects the write with that reason
        """
        self.read_only = read_only
        self.write_policy = write_policy
        self._docs: Dict[str, Document] = {}
        self._attachments: Dict[str, bytes] = {}
        self._streams: Set[InMemoryEventStream] = set()
        self._lock = asyncio.Lock()
        self._last_timestamp = 0

    async def get_latest_doc_at_path(self, path: str) -> Optional[Document]:
        return self._docs.get(path)

    async def query_docs(self, filter: QueryFilter) -> List[Document]:
        docs = sorted(
            (doc for doc in self._docs.values() if filter.matches(doc)),
            key=lambda doc: doc.path,
        )
        if filter.limit is not None:
            docs = docs[:filter.limit]
        return docs

    async def query_paths(self, filter: QueryFilter) -> List[str]:
        return [doc.path for doc in await self.query_docs(filter)]

    async def set(self, author: str, doc: DocInput) -> WriteOutcome:
        """Write a document.

        Args:
            author: Author address
            doc: Path, text and optional attachment

        Returns:
            WriteOutcome with the stored document, or a failure reason
        """
        reason = self._check_write(author, doc)
        if reason is not None:
            logger.debug(
                "Write rejected by in-memory store",
                extra={"path": doc.path, "reason": reason},
            )
            return WriteOutcome(kind=EventKind.FAILURE, reason=reason)

        body = None
        if doc.attachment is not None and doc.text != "":
            body = await _read_attachment(doc.attachment)

        async with self._lock:
            attachment_hash = None
            attachment_size = None
            if body is not None:
                attachment_hash = hashlib.sha256(body).hexdigest()
                attachment_size = len(body)
                self._attachments[attachment_hash] = body

            stored = Document(
                path=doc.path,
                text=doc.text,
                author=author,
                timestamp=self._next_timestamp(),
                attachment_size=attachment_size,
                attachment_hash=attachment_hash,
                delete_after=doc.delete_after,
            )
            self._docs[doc.path] = stored
            self._publish(StoreEvent(kind=EventKind.SUCCESS, doc=stored))

        logger.debug(
            "Document written to in-memory store",
            extra={"path": stored.path, "author": author, "deleted": stored.is_deleted},
        )
        return WriteOutcome(kind=EventKind.SUCCESS, doc=stored)

    async def wipe_doc_at_path(self, author: str, path: str) -> WriteOutcome:
        """Clear a document, leaving an empty-text tombstone.

        Wiping a path with no document, or one already wiped, changes
        nothing and succeeds.
        """
        existing = self._docs.get(path)
        if existing is None or (existing.is_deleted and not existing.has_attachment):
            return WriteOutcome(kind=EventKind.NOTHING_HAPPENED, doc=existing)
        return await self.set(author, DocInput(path=path, text=""))

    async def get_attachment(self, doc: Document) -> Optional[InMemoryAttachment]:
        if doc.attachment_hash is None:
            return None
        body = self._attachments.get(doc.attachment_hash)
        if body is None:
            return None
        return InMemoryAttachment(body)

    def get_event_stream(self) -> InMemoryEventStream:
        stream = InMemoryEventStream(self)
        self._streams.add(stream)
        return stream

    def _check_write(self, author: str, doc: DocInput) -> Optional[str]:
        if self.read_only:
            return "store is read-only"
        reason = validate_path(doc.path)
        if reason is not None:
            return reason
        if self.write_policy is not None:
            return self.write_policy(author, doc)
        return None

    def _next_timestamp(self) -> int:
        # Strictly increasing so two writes in the same microsecond still order
        now = int(time.time() * 1_000_000)
        self._last_timestamp = max(now, self._last_timestamp + 1)
        return self._last_timestamp

    def _publish(self, event: Optional[StoreEvent]) -> None:
        for stream in list(self._streams):
            stream._publish(event)

    # Testing helpers

    async def prune_expired(self, now: Optional[int] = None) -> int:
        """Drop documents whose delete_after has passed.

        Publishes an EXPIRE event for each dropped document.

        Args:
            now: Current time in microseconds (defaults to wall clock)

        Returns:
            Number of documents dropped
        """
        if now is None:
            now = int(time.time() * 1_000_000)

        async with self._lock:
            expired = [
                doc for doc in self._docs.values()
                if doc.delete_after is not None and doc.delete_after <= now
            ]
            for doc in sorted(expired, key=lambda d: d.path):
                del self._docs[doc.path]
                self._publish(StoreEvent(kind=EventKind.EXPIRE, doc=doc))

        if expired:
            logger.debug("Expired documents pruned", extra={"count": len(expired)})
        return len(expired)

    def end_streams(self) -> None:
        """Signal end-of-stream to every open event stream."""
        self._publish(None)
        self._streams.clear()

    def publish(self, event: StoreEvent) -> None:
        """Push an arbitrary event to open streams (testing helper)."""
        self._publish(event)

    def forget_attachment(self, doc: Document) -> None:
        """Drop an attachment body while keeping its document."""
        if doc.attachment_hash is not None:
            self._attachments.pop(doc.attachment_hash, None)

    def all_docs(self) -> List[Document]:
        """All stored documents in path order, tombstones included."""
        return sorted(self._docs.values(), key=lambda doc: doc.path)

    @property
    def open_stream_count(self) -> int:
        return len(self._streams)


async def _read_attachment(source: AttachmentSource) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    chunks = []
    async for chunk in source:
        chunks.append(bytes(chunk))
    return b"".join(chunks)
