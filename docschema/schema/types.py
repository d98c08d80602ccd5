"""
Core schema node abstraction.

Every schema node (atoms, objects, collections, attachments, metadata,
format wrappers) implements two operations:
- reduce: fold one document into the value accumulated so far
- write: turn a value into the document mutations that store it

read() and observe() are defined once here in terms of reduce, so every
node gets them for free.

Invariants:
    - write is a pure function of (path, author, data) -> mutations;
      the only store read it may do is listing paths to wipe a subtree
    - data=None on write clears the node's document and everything under it
    - A composite write is a partial update: absent keys are untouched
    - reduce treats doc.text == "" as "clear what this document contributed"
    - Within one key the last reduced document wins; independent keys
      fold independently, so single-document updates are valid

How to change safely:
    - New node kinds subclass EsType and implement reduce and write
    - Do not override read/observe; override content_root/content_prefix
      instead if the node relocates its documents
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Awaitable, Generic, List, Optional, Sequence, TypeVar

from ..errors import WriteRejected
from ..paths import normalize_path, split_path
from ..store.base import Document, DocumentStore, QueryFilter, WriteOutcome

if TYPE_CHECKING:
    from ..live import LiveView

logger = logging.getLogger(__name__)

ReadT = TypeVar("ReadT")
WriteT = TypeVar("WriteT")


@dataclass(frozen=True)
class ReduceProps(Generic[ReadT]):
    """Arguments to a single reduce step.

    Attributes:
        doc: The document being folded in
        path_components: Segments of doc.path below this node's root
        prev: Value accumulated so far (None before the first document)
        store: Store the document came from, for follow-up lookups
        requested_path: The path originally passed to read/observe
    """

    doc: Document
    path_components: Sequence[str]
    prev: Optional[ReadT]
    store: DocumentStore
    requested_path: str = ""

    def descend(self, path_components: Sequence[str], prev: Any) -> ReduceProps[Any]:
        """Props for a child node: fewer path segments, the child's prior value."""
        return replace(self, path_components=tuple(path_components), prev=prev)


class EsType(ABC, Generic[ReadT, WriteT]):
    """A composable schema node.

    ReadT is the shape produced by reading, WriteT the shape accepted by
    writing. None stands for "absent" when reading and "delete" when
    writing.

    Example:
        >>> Post = object_type({"title": string, "tags": set_type})
        >>> await Post.write(store, author, "/posts/1", {"title": "Hi"})
        >>> await Post.read(store, "/posts/1")
        {'title': 'Hi'}
    """

    @abstractmethod
    async def reduce(self, props: ReduceProps[ReadT]) -> Optional[ReadT]:
        """Fold one document into the accumulated value.

        Args:
            props: The document, its relative path and the prior value

        Returns:
            The new accumulated value, or None if nothing remains

        Raises:
            AttachmentUnavailable: If a claimed attachment can't be fetched
        """
        ...

    @abstractmethod
    async def write(
        self,
        store: DocumentStore,
        author: str,
        path: str,
        data: Optional[WriteT],
    ) -> None:
        """Issue the document mutations that store a value.

        Args:
            store: Store to write to
            author: Author address passed through to the store
            path: Path this node is rooted at
            data: Value to write, or None to delete the whole subtree

        Raises:
            WriteRejected: If the store refuses any mutation. Sibling
                mutations may already have been applied.
            InvalidSchemaUsage: If the node cannot be written
        """
        ...

    def content_root(self, path: str) -> Optional[str]:
        """Path of the node's own document, or None if it has none."""
        return normalize_path(path) or None

    def content_prefix(self, path: str) -> str:
        """Prefix shared by every document strictly below the node."""
        return normalize_path(path) + "/"

    async def read(self, store: DocumentStore, path: str) -> Optional[ReadT]:
        """Read the value rooted at a path.

        Fetches the root document and every document under the content
        prefix concurrently, then folds them in order: root first, then
        the rest in the store's query order.

        Args:
            store: Store to read from
            path: Path the value was written at

        Returns:
            The materialized value, or None if nothing is stored there
        """
        root_path = self.content_root(path)
        prefix = self.content_prefix(path)

        root, contents = await asyncio.gather(
            _get_root(store, root_path),
            store.query_docs(QueryFilter(path_starts_with=prefix)),
        )

        result: Optional[ReadT] = None
        for doc in [root, *contents]:
            if doc is None:
                continue
            result = await self.reduce(
                ReduceProps(
                    doc=doc,
                    path_components=tuple(split_path(doc.path[len(prefix):])),
                    prev=result,
                    store=store,
                    requested_path=path,
                )
            )

        logger.debug(
            "Value read",
            extra={"path": path, "documents": len(contents) + (root is not None)},
        )
        return result

    async def observe(self, store: DocumentStore, path: str) -> LiveView[ReadT]:
        """Read a value and keep it current as the store changes.

        Args:
            store: Store to read from and subscribe to
            path: Path the value was written at

        Returns:
            An open LiveView seeded with the current value
        """
        from ..live import LiveView

        # Subscribe before reading so writes landing during the read are
        # folded in afterwards rather than lost.
        events = store.get_event_stream()
        try:
            initial = await self.read(store, path)
        except BaseException:
            await events.cancel()
            raise
        return LiveView(self, store, path, initial, events=events)


async def _get_root(store: DocumentStore, path: Optional[str]) -> Optional[Document]:
    if path is None:
        return None
    return await store.get_latest_doc_at_path(path)


async def settle_all(operations: Sequence[Awaitable[Any]]) -> List[Any]:
    """Run operations concurrently and wait for every one to finish.

    Raises the first failure, in argument order, only after all of them
    have settled. Nothing already applied is undone.
    """
    results = await asyncio.gather(*operations, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def require_write_success(outcome: WriteOutcome, path: Optional[str] = None) -> None:
    """Raise WriteRejected if the store refused a mutation."""
    if not outcome.ok:
        raise WriteRejected(outcome.reason or "unknown reason", path)


async def wipe_docs_under_path(store: DocumentStore, author: str, path: str) -> None:
    """Clear the document at a path and every document strictly below it.

    All wipes are issued concurrently; there is no rollback if one fails.

    Raises:
        WriteRejected: If the store refuses any wipe
    """
    path = normalize_path(path)
    subpaths = await store.query_paths(QueryFilter(path_starts_with=path + "/"))

    logger.debug("Wiping subtree", extra={"path": path, "documents": len(subpaths) + 1})

    targets = [*subpaths, path] if path else subpaths
    outcomes = await settle_all(
        [store.wipe_doc_at_path(author, target) for target in targets]
    )
    for target, outcome in zip(targets, outcomes):
        require_write_success(outcome, target)
