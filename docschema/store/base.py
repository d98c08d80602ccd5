"""
Base protocol and types for the document store abstraction.

The schema layer does not own storage. It consumes a document store that
provides point lookups, prefix queries, idempotent writes, attachment
reads and an ordered change-event stream. This module defines that
contract as the DocumentStore protocol, together with the value types
that cross it.

Invariants:
    - A Document is immutable; a newer write at the same path supersedes it
    - text == "" is the store's sentinel for an absent/deleted document
    - Queries return documents and paths in ascending path order
    - An EventStream delivers events in the order the store applied them

How to change safely:
    - Protocol changes require updating all implementations
    - Add new optional fields with defaults so existing stores keep working
    - Keep DEFAULT_FORMAT in step with the formats the live view accepts
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Dict,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

DEFAULT_FORMAT = "es.5"


class EventKind(Enum):
    """Kinds of event emitted on a store's event stream."""

    SUCCESS = "success"
    EXPIRE = "expire"
    FAILURE = "failure"
    NOTHING_HAPPENED = "nothing_happened"


@dataclass(frozen=True)
class Document:
    """The latest version of a document at one path.

    Attributes:
        path: Absolute, slash-separated path
        text: Text payload; "" means the document was deleted
        author: Address of the author who wrote this version
        timestamp: Write time in microseconds since the epoch
        format: Document format identifier
        attachment_size: Size in bytes of the attachment, if any
        attachment_hash: Content hash of the attachment, if any
        delete_after: Expiry time in microseconds, for ephemeral documents
    """

    path: str
    text: str
    author: str = ""
    timestamp: int = 0
    format: str = DEFAULT_FORMAT
    attachment_size: Optional[int] = None
    attachment_hash: Optional[str] = None
    delete_after: Optional[int] = None

    @property
    def is_deleted(self) -> bool:
        """Whether this document is the empty-text deletion sentinel."""
        return self.text == ""

    @property
    def has_attachment(self) -> bool:
        """Whether this document claims a binary attachment."""
        return self.attachment_hash is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "text": self.text,
            "author": self.author,
            "timestamp": self.timestamp,
            "format": self.format,
        }
        if self.attachment_hash is not None:
            result["attachment_size"] = self.attachment_size
            result["attachment_hash"] = self.attachment_hash
        if self.delete_after is not None:
            result["delete_after"] = self.delete_after
        return result


AttachmentSource = Union[bytes, AsyncIterable[bytes]]


@dataclass
class DocInput:
    """A document write request.

    Attributes:
        path: Path to write
        text: Text payload ("" clears the document)
        attachment: Optional attachment body, as bytes or an async byte stream
        delete_after: Optional expiry time in microseconds
    """

    path: str
    text: str
    attachment: Optional[AttachmentSource] = None
    delete_after: Optional[int] = None


@dataclass(frozen=True)
class QueryFilter:
    """Filter for document and path queries.

    Unset attributes don't constrain the query. Deleted (empty-text)
    documents are included unless include_deleted is False.
    """

    path: Optional[str] = None
    path_starts_with: Optional[str] = None
    path_ends_with: Optional[str] = None
    author: Optional[str] = None
    limit: Optional[int] = None
    include_deleted: bool = True

    def matches(self, doc: Document) -> bool:
        """Whether a document satisfies every set constraint (limit aside)."""
        if self.path is not None and doc.path != self.path:
            return False
        if self.path_starts_with is not None and not doc.path.startswith(self.path_starts_with):
            return False
        if self.path_ends_with is not None and not doc.path.endswith(self.path_ends_with):
            return False
        if self.author is not None and doc.author != self.author:
            return False
        if not self.include_deleted and doc.is_deleted:
            return False
        return True


@dataclass(frozen=True)
class WriteOutcome:
    """Result of a store mutation.

    Attributes:
        kind: SUCCESS or FAILURE (NOTHING_HAPPENED for an ignored write)
        doc: The document as stored, on success
        reason: Why the write was refused, on failure
    """

    kind: EventKind
    doc: Optional[Document] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is not EventKind.FAILURE


@dataclass(frozen=True)
class StoreEvent:
    """An event from the store's change stream."""

    kind: EventKind
    doc: Optional[Document] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        path = self.doc.path if self.doc else None
        return f"StoreEvent(kind={self.kind.value}, path={path})"


@runtime_checkable
class DocAttachment(Protocol):
    """Readable handle on an attachment body."""

    @abstractmethod
    async def bytes(self) -> bytes:
        """Read the entire attachment."""
        ...

    @abstractmethod
    def stream(self) -> AsyncIterator[bytes]:
        """Iterate the attachment in chunks."""
        ...


@runtime_checkable
class EventStream(Protocol):
    """A cancellable, ordered reader over the store's events.

    Example:
        >>> events = store.get_event_stream()
        >>> event = await events.read()
        >>> await events.cancel()
    """

    @abstractmethod
    async def read(self) -> Optional[StoreEvent]:
        """Wait for the next event.

        Returns:
            The next StoreEvent, or None once the stream has ended
        """
        ...

    @abstractmethod
    async def cancel(self) -> None:
        """Release the reader. Pending and later reads return None."""
        ...

    def __aiter__(self) -> AsyncIterator[StoreEvent]:
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for document stores consumed by the schema layer.

    Conflict resolution, replication and authorship are the store's
    business; the schema layer only needs the capabilities below.
    """

    @abstractmethod
    async def get_latest_doc_at_path(self, path: str) -> Optional[Document]:
        """Return the latest document at exactly this path, if any."""
        ...

    @abstractmethod
    async def query_docs(self, filter: QueryFilter) -> List[Document]:
        """Return documents matching a filter, in ascending path order."""
        ...

    @abstractmethod
    async def query_paths(self, filter: QueryFilter) -> List[str]:
        """Return paths of documents matching a filter, without contents."""
        ...

    @abstractmethod
    async def set(self, author: str, doc: DocInput) -> WriteOutcome:
        """Write a document. Idempotent for identical input."""
        ...

    @abstractmethod
    async def wipe_doc_at_path(self, author: str, path: str) -> WriteOutcome:
        """Clear the document at a path, attachment included."""
        ...

    @abstractmethod
    async def get_attachment(self, doc: Document) -> Optional[DocAttachment]:
        """Return the attachment of a document.

        Returns:
            A readable handle, or None if the store doesn't hold the body

        Raises:
            Exception: Store-specific errors while looking up the body
        """
        ...

    @abstractmethod
    def get_event_stream(self) -> EventStream:
        """Open a reader over events applied from now on.

        The reader is registered before this returns, so no later event
        is missed.
        """
        ...
