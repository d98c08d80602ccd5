"""
Schema nodes mapping structured values onto path-addressed documents.

This package provides the node kinds a schema tree is built from:
- Atoms (string, number, bigint, boolean, date_time)
- Objects with a fixed set of fields
- Collections (set_type, dict_type) keyed by percent-encoded strings
- Attachments and blobs
- Read-only metadata
- Versioned application formats

Invariants:
    - Every node supports reduce/write; read/observe derive from them
    - None written anywhere deletes that value and everything below it
    - Empty composites read as None

How to change safely:
    - The path and key encoding is shared with other clients of the
      store; never change how an existing node lays out documents
    - New layouts belong behind a new ApplicationFormat version
"""

from .app_format import AppFormatType, ApplicationFormat, app_format
from .atoms import Atom, Codec, bigint, boolean, date_time, number, string
from .attachment import (
    AttachmentType,
    Blob,
    BlobType,
    ReadableAttachment,
    WritableAttachment,
    attachment,
    blob,
)
from .collection import CollectionType, dict_type, find_by_collection_key, set_type
from .metadata import MetadataType, doc_author, doc_path, doc_slug, doc_timestamp, metadata
from .object import SELF, ObjectType, object_type
from .types import (
    EsType,
    ReduceProps,
    require_write_success,
    settle_all,
    wipe_docs_under_path,
)

__all__ = [
    # Abstraction
    "EsType",
    "ReduceProps",
    "require_write_success",
    "settle_all",
    "wipe_docs_under_path",
    # Atoms
    "Atom",
    "Codec",
    "string",
    "number",
    "bigint",
    "boolean",
    "date_time",
    # Composites
    "ObjectType",
    "object_type",
    "SELF",
    "CollectionType",
    "set_type",
    "dict_type",
    "find_by_collection_key",
    # Attachments
    "AttachmentType",
    "BlobType",
    "Blob",
    "ReadableAttachment",
    "WritableAttachment",
    "attachment",
    "blob",
    # Metadata
    "MetadataType",
    "metadata",
    "doc_slug",
    "doc_path",
    "doc_author",
    "doc_timestamp",
    # Formats
    "ApplicationFormat",
    "AppFormatType",
    "app_format",
]
