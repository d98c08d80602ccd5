"""
docschema - typed schemas over a path-addressed document store.

Maps structured values (objects, collections, scalars, binary
attachments) onto a flat store of documents addressed by path, and
folds streams of documents back into structured values. Live views keep
a folded value current as new documents arrive.

Example:
    >>> from docschema import InMemoryDocumentStore, SELF, object_type, set_type, string
    >>>
    >>> Post = object_type({
    ...     SELF: string,
    ...     "title": string,
    ...     "related": set_type,
    ... })
    >>>
    >>> store = InMemoryDocumentStore()
    >>> await Post.write(store, "@alice", "/posts/2", {
    ...     SELF: "Post body",
    ...     "title": "Second",
    ...     "related": {"/posts/1": True},
    ... })
    >>> await Post.read(store, "/posts/2")
    {'@self': 'Post body', 'related': {'/posts/1': True}, 'title': 'Second'}

Invariants:
    - Writes are partial updates; None deletes a value and its subtree
    - Within one key, the last document folded wins
    - Empty objects and collections read as None
    - The store (storage, replication, conflict resolution) is external

Version: see _version.py.
"""

from ._version import __version__
from .config import Settings, get_settings, reset_settings, setup_logging
from .errors import (
    AttachmentUnavailable,
    DocSchemaError,
    InvalidSchemaUsage,
    UnsupportedFormat,
    WriteRejected,
)
from .live import LiveView
from .paths import NamedSubpath, SelfDocument, decode_key, encode_key, split_path
from .schema import (
    SELF,
    AppFormatType,
    ApplicationFormat,
    Atom,
    AttachmentType,
    Blob,
    BlobType,
    Codec,
    CollectionType,
    EsType,
    MetadataType,
    ObjectType,
    ReadableAttachment,
    ReduceProps,
    WritableAttachment,
    app_format,
    attachment,
    bigint,
    blob,
    boolean,
    date_time,
    dict_type,
    doc_author,
    doc_path,
    doc_slug,
    doc_timestamp,
    find_by_collection_key,
    metadata,
    number,
    object_type,
    set_type,
    string,
)
from .store import (
    DocInput,
    Document,
    DocumentStore,
    EventKind,
    EventStream,
    InMemoryDocumentStore,
    QueryFilter,
    StoreEvent,
    WriteOutcome,
)

__all__ = [
    # Version
    "__version__",
    # Schema nodes
    "EsType",
    "ReduceProps",
    "Atom",
    "Codec",
    "string",
    "number",
    "bigint",
    "boolean",
    "date_time",
    "ObjectType",
    "object_type",
    "SELF",
    "CollectionType",
    "set_type",
    "dict_type",
    "find_by_collection_key",
    "AttachmentType",
    "BlobType",
    "Blob",
    "ReadableAttachment",
    "WritableAttachment",
    "attachment",
    "blob",
    "MetadataType",
    "metadata",
    "doc_slug",
    "doc_path",
    "doc_author",
    "doc_timestamp",
    "ApplicationFormat",
    "AppFormatType",
    "app_format",
    # Live views
    "LiveView",
    # Store
    "DocumentStore",
    "EventStream",
    "Document",
    "DocInput",
    "QueryFilter",
    "StoreEvent",
    "EventKind",
    "WriteOutcome",
    "InMemoryDocumentStore",
    # Paths
    "split_path",
    "encode_key",
    "decode_key",
    "SelfDocument",
    "NamedSubpath",
    # Configuration
    "Settings",
    "get_settings",
    "reset_settings",
    "setup_logging",
    # Errors
    "DocSchemaError",
    "WriteRejected",
    "AttachmentUnavailable",
    "UnsupportedFormat",
    "InvalidSchemaUsage",
]
