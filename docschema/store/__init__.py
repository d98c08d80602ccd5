"""
Document store abstraction consumed by the schema layer.

The store is an external collaborator: storage, conflict resolution,
replication and authorship all live behind the DocumentStore protocol.
This package defines that protocol and ships an in-memory implementation
for tests and local development.

Invariants:
    - Queries return results in ascending path order
    - text == "" marks a deleted document
    - Event streams deliver events in apply order

How to change safely:
    - New stores must implement the DocumentStore protocol
    - Run the integration suite against any new store implementation
"""

from .base import (
    DEFAULT_FORMAT,
    DocAttachment,
    DocInput,
    Document,
    DocumentStore,
    EventKind,
    EventStream,
    QueryFilter,
    StoreEvent,
    WriteOutcome,
)
from .memory import InMemoryDocumentStore, validate_path

__all__ = [
    # Protocol and types
    "DocumentStore",
    "EventStream",
    "DocAttachment",
    "Document",
    "DocInput",
    "QueryFilter",
    "StoreEvent",
    "EventKind",
    "WriteOutcome",
    "DEFAULT_FORMAT",
    # Implementations
    "InMemoryDocumentStore",
    "validate_path",
]
