"""
Error types for docschema.

This module defines all exception types raised by the schema layer:
- DocSchemaError: Base exception
- WriteRejected: The document store refused a mutation
- AttachmentUnavailable: A document claims an attachment the store can't supply
- UnsupportedFormat: A document uses a format the reduction engine doesn't know
- InvalidSchemaUsage: Programmer error, e.g. writing through a read-only node

Invariants:
    - All errors inherit from DocSchemaError
    - Store I/O errors are never wrapped; they propagate unchanged
    - Nothing here is retried internally
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DocSchemaError(Exception):
    """Base exception for all docschema errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "DOCSCHEMA_ERROR"
        self.details = details or {}


class WriteRejected(DocSchemaError):
    """The document store refused a write or wipe.

    Raised when:
    - The path is invalid for the store
    - The store is read-only
    - The store's write policy rejects the document

    Sibling writes issued concurrently with the rejected one are not
    rolled back.
    """

    def __init__(self, reason: str, path: Optional[str] = None) -> None:
        message = f"Write rejected: {reason}"
        if path:
            message = f"Write to '{path}' rejected: {reason}"
        super().__init__(
            message,
            code="WRITE_REJECTED",
            details={"reason": reason, "path": path},
        )
        self.reason = reason
        self.path = path


class AttachmentUnavailable(DocSchemaError):
    """A document has an attachment but the store could not supply it."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Attachment for document '{path}' is not available",
            code="ATTACHMENT_UNAVAILABLE",
            details={"path": path},
        )
        self.path = path


class UnsupportedFormat(DocSchemaError):
    """A document uses a format this library cannot reduce."""

    def __init__(self, format: str, path: Optional[str] = None) -> None:
        super().__init__(
            f"Unsupported document format '{format}'",
            code="UNSUPPORTED_FORMAT",
            details={"format": format, "path": path},
        )
        self.format = format
        self.path = path


class InvalidSchemaUsage(DocSchemaError):
    """A schema node was used in a way it does not support."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="INVALID_SCHEMA_USAGE")
