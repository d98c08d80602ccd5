"""
Collection types: dictionaries and sets keyed by arbitrary strings.

Keys are percent-encoded into a single path segment below the
collection's path; values are stored by the inner type under that
segment. A set is a collection whose inner value is a presence flag.

Writes are partial updates, so keys not included in the data are left
alone. Setting a key to None removes it.

Example:
    >>> Post = object_type({
    ...     "title": string,
    ...     "read_next": set_type,
    ... })
    >>> await Post.write(store, author, "/posts/2", {
    ...     "read_next": {"/posts/1": True},
    ... })

Invariants:
    - An empty collection reads as None, never as {}
    - Keys round-trip exactly through encode_key/decode_key
    - The encoded key format is shared with other clients of the store
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Optional, TypeVar

from ..errors import InvalidSchemaUsage
from ..paths import decode_key, encode_key, normalize_path
from ..store.base import DocumentStore, QueryFilter
from .atoms import Atom, Codec
from .types import EsType, ReduceProps, settle_all, wipe_docs_under_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionType(EsType[Dict[str, T], Dict[str, Optional[T]]]):
    """Dictionary mapping string keys to a common inner value type."""

    def __init__(self, value_type: EsType[T, Any]) -> None:
        self.value_type = value_type

    async def reduce(self, props: ReduceProps[Dict[str, T]]) -> Optional[Dict[str, T]]:
        if not props.path_components:
            # A document at the collection's own path holds no key
            return props.prev

        raw_key, *remaining = props.path_components
        key = decode_key(raw_key)
        prev = props.prev or {}

        value = await self.value_type.reduce(props.descend(remaining, prev.get(key)))

        next_value = dict(prev)
        if value is None:
            next_value.pop(key, None)
            return next_value or None

        next_value[key] = value
        return next_value

    async def write(
        self,
        store: DocumentStore,
        author: str,
        path: str,
        data: Optional[Dict[str, Optional[T]]],
    ) -> None:
        if data is None:
            await wipe_docs_under_path(store, author, path)
            return

        base = normalize_path(path)
        logger.debug("Writing collection entries", extra={"path": path, "keys": len(data)})
        await settle_all([
            self.value_type.write(store, author, f"{base}/{encode_key(key)}", value)
            for key, value in data.items()
        ])


set_type: CollectionType[bool] = CollectionType(
    Atom(Codec(encode=lambda x: "1" if x else "", decode=lambda _: True))
)
"""A set of string keys. Writing a key as False or None removes it."""


def dict_type(value_type: EsType[T, Any]) -> CollectionType[T]:
    """Declare a dictionary whose values share one schema.

    Useful for embedded objects, or for relationships that carry
    information which doesn't belong on the linked object.

    Args:
        value_type: Schema for the dictionary's values

    Returns:
        A CollectionType over value_type
    """
    return CollectionType(value_type)


async def find_by_collection_key(
    key: str,
    store: DocumentStore,
    collection_path_suffix: str = "",
    filter: Optional[QueryFilter] = None,
) -> List[str]:
    """Find the collections (or their owning objects) that contain a key.

    This finds the inverse of a relationship without a secondary index:
    it scans the store's paths for ones ending in the encoded key.

    Example:
        >>> await find_by_collection_key(
        ...     "/posts/1",
        ...     store,
        ...     collection_path_suffix="/read_next",
        ...     filter=QueryFilter(path_starts_with="/posts/"),
        ... )
        ['/posts/2', '/posts/3']

    Args:
        key: The key to look for
        store: Store to search
        collection_path_suffix: Path of the collection relative to its
            owning object (e.g. "/read_next"). When given, the returned
            paths point at the owning objects rather than the collections.
        filter: Extra constraints, typically a path_starts_with prefix

    Returns:
        Paths in ascending order

    Raises:
        InvalidSchemaUsage: If filter already sets path_ends_with
    """
    filter = filter or QueryFilter()
    if filter.path_ends_with is not None:
        raise InvalidSchemaUsage("find_by_collection_key sets path_ends_with itself")

    suffix = normalize_path(collection_path_suffix)
    if suffix and not suffix.startswith("/"):
        suffix = "/" + suffix
    ending = f"{suffix}/{encode_key(key)}"

    paths = await store.query_paths(
        dataclasses.replace(filter, path_ends_with=ending, include_deleted=False)
    )
    return [path[:-len(ending)] for path in paths]
