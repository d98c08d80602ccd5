"""
Binary attachment types.

An attachment lives in one document: the document text carries a short
metadata string and the body travels through the store's attachment
channel. The blob type builds on it, using the metadata string as the
content type.

Invariants:
    - A deleted document (or one without an attachment) reads as None
    - A document that claims an attachment the store can't supply
      raises AttachmentUnavailable; it is never treated as absent
    - Metadata text must be non-empty, since "" marks deletion
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import get_settings
from ..errors import AttachmentUnavailable, InvalidSchemaUsage
from ..store.base import AttachmentSource, DocAttachment, DocInput, DocumentStore
from .types import EsType, ReduceProps, require_write_success

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WritableAttachment:
    """An attachment to write.

    Attributes:
        metadata: Short non-empty description stored as document text
        attachment: Body, as bytes or an async byte stream
    """

    metadata: str
    attachment: AttachmentSource


@dataclass(frozen=True)
class ReadableAttachment:
    """An attachment read back from the store.

    Attributes:
        metadata: Document text
        attachment: Handle for reading the body
    """

    metadata: str
    attachment: DocAttachment


@dataclass(frozen=True)
class Blob:
    """Binary data with a content type."""

    data: bytes
    content_type: str = ""


class AttachmentType(EsType[ReadableAttachment, WritableAttachment]):
    """A document carrying a binary attachment."""

    async def reduce(self, props: ReduceProps[ReadableAttachment]) -> Optional[ReadableAttachment]:
        doc = props.doc
        if props.path_components:
            return props.prev
        if doc.is_deleted or not doc.has_attachment:
            return None

        attachment = await props.store.get_attachment(doc)
        if attachment is None:
            raise AttachmentUnavailable(doc.path)

        return ReadableAttachment(metadata=doc.text, attachment=attachment)

    async def write(
        self,
        store: DocumentStore,
        author: str,
        path: str,
        data: Optional[WritableAttachment],
    ) -> None:
        if data is None:
            outcome = await store.wipe_doc_at_path(author, path)
            require_write_success(outcome, path)
            return

        if not data.metadata:
            raise InvalidSchemaUsage("Attachment metadata must not be empty")

        outcome = await store.set(
            author,
            DocInput(path=path, text=data.metadata, attachment=data.attachment),
        )
        require_write_success(outcome, path)
        logger.debug(
            "Attachment written",
            extra={"path": path, "size": outcome.doc.attachment_size if outcome.doc else None},
        )


class BlobType(EsType[Blob, Blob]):
    """Bytes plus a content type, stored as an attachment."""

    def __init__(self) -> None:
        self.inner = AttachmentType()

    async def reduce(self, props: ReduceProps[Blob]) -> Optional[Blob]:
        if props.path_components:
            return props.prev
        attachment = await self.inner.reduce(props.descend((), None))
        if attachment is None:
            return None
        return Blob(data=await attachment.attachment.bytes(), content_type=attachment.metadata)

    async def write(
        self,
        store: DocumentStore,
        author: str,
        path: str,
        data: Optional[Blob],
    ) -> None:
        if data is None:
            await self.inner.write(store, author, path, None)
            return

        content_type = data.content_type or get_settings().default_blob_type
        await self.inner.write(
            store,
            author,
            path,
            WritableAttachment(metadata=content_type, attachment=data.data),
        )


attachment = AttachmentType()
blob = BlobType()
