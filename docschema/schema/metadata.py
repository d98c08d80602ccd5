"""
Read-only metadata types.

Metadata nodes derive a value from the document itself (its path, its
author, its timestamp) rather than from a stored value. They can't be
written.

Example:
    >>> Item = object_type({
    ...     SELF: metadata({"slug": doc_slug, "path": doc_path, "text": string}),
    ... })
    >>> await Item.read(store, "/items/1")
    {'@self': {'slug': '1', 'path': '/items/1', 'text': 'hello'}}
"""

from __future__ import annotations

import asyncio
import inspect
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Mapping, NoReturn, Optional, TypeVar, Union

from ..errors import InvalidSchemaUsage
from ..paths import last_segment
from ..store.base import DocumentStore
from .types import EsType, ReduceProps

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MetadataFn = Callable[[ReduceProps[Any]], Union[T, Awaitable[T]]]


class MetadataType(EsType[T, None]):
    """A read-only value computed from a document.

    Deleted documents, and documents nested below the node's own path,
    don't produce metadata.
    """

    def __init__(self, fn: MetadataFn[T]) -> None:
        self._fn = fn

    async def reduce(self, props: ReduceProps[T]) -> Optional[T]:
        if props.path_components:
            return props.prev
        if props.doc.is_deleted:
            return None
        value = self._fn(props)
        if inspect.isawaitable(value):
            value = await value
        return value

    async def write(
        self,
        store: DocumentStore,
        author: str,
        path: str,
        data: None,
    ) -> NoReturn:
        raise InvalidSchemaUsage(f"Attempted to write to read-only metadata at '{path}'")


def metadata(shape: Mapping[str, EsType[Any, Any]]) -> MetadataType[Dict[str, Any]]:
    """Combine several read-only values taken from the same document.

    Every node in the shape reduces the same document; entries that
    reduce to None are left out.
    """

    async def combine(props: ReduceProps[Any]) -> Optional[Dict[str, Any]]:
        keys = list(shape)
        values = await asyncio.gather(*(
            shape[key].reduce(props.descend(props.path_components, None)) for key in keys
        ))
        result = {key: value for key, value in zip(keys, values) if value is not None}
        return result or None

    return MetadataType(combine)


doc_slug: MetadataType[str] = MetadataType(lambda props: last_segment(props.doc.path))
"""The last path segment of the document."""

doc_path: MetadataType[str] = MetadataType(lambda props: props.doc.path)
"""The full path of the document."""

doc_author: MetadataType[str] = MetadataType(lambda props: props.doc.author)
"""The address of the document's author."""

doc_timestamp: MetadataType[datetime] = MetadataType(
    lambda props: _EPOCH + timedelta(microseconds=props.doc.timestamp)
)
"""When the document was written, as an aware UTC datetime."""
