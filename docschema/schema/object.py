"""
Object (struct/record) type.

An object maps a fixed set of field keys onto document paths. Each field
lives one segment below the object's path, except the field declared
under SELF, which lives on the object's own document.

Example:
    >>> Post = object_type({
    ...     SELF: string,
    ...     "title": string,
    ...     "content": string,
    ... })
    >>> await Post.write(store, author, "/posts/1", {SELF: "hi", "title": "Hello"})

Invariants:
    - Documents under an undeclared key are ignored on read
    - A field that reduces to None is removed; an object with no fields
      left collapses to None
    - Writes only touch the fields present in the data
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import InvalidSchemaUsage
from ..paths import NamedSubpath, PathSegment, SelfDocument, child_path
from ..store.base import DocumentStore
from .types import EsType, ReduceProps, settle_all, wipe_docs_under_path

logger = logging.getLogger(__name__)

SELF = "@self"

ObjectValue = Dict[str, Any]


class ObjectType(EsType[ObjectValue, ObjectValue]):
    """Stores key/value pairs by mapping keys onto document paths."""

    def __init__(self, shape: Mapping[str, EsType[Any, Any]]) -> None:
        """Build an object type from a field shape.

        Args:
            shape: Map of field key to the field's schema node. The key
                SELF stores its field on the object's own document.

        Raises:
            InvalidSchemaUsage: If a field key can't be a path segment
        """
        self._fields: Dict[str, Tuple[PathSegment, EsType[Any, Any]]] = {}
        self._self_key: Optional[str] = None
        self._by_segment: Dict[str, str] = {}

        for key, schema in shape.items():
            if key == SELF:
                self._fields[key] = (SelfDocument(), schema)
                self._self_key = key
                continue
            if not key or "/" in key:
                raise InvalidSchemaUsage(f"Invalid object field key '{key}'")
            self._fields[key] = (NamedSubpath(key), schema)
            self._by_segment[key] = key

    @property
    def shape(self) -> Dict[str, EsType[Any, Any]]:
        return {key: schema for key, (_, schema) in self._fields.items()}

    def _field_for(self, path_components) -> Tuple[Optional[str], Tuple[str, ...]]:
        if not path_components:
            return self._self_key, ()
        head, *rest = path_components
        return self._by_segment.get(head), tuple(rest)

    async def reduce(self, props: ReduceProps[ObjectValue]) -> Optional[ObjectValue]:
        key, remaining = self._field_for(props.path_components)
        if key is None:
            return props.prev

        _, schema = self._fields[key]
        prev = props.prev or {}
        value = await schema.reduce(props.descend(remaining, prev.get(key)))

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
        data: Optional[ObjectValue],
    ) -> None:
        if data is None:
            await wipe_docs_under_path(store, author, path)
            return

        operations = [
            schema.write(store, author, child_path(path, segment), data[key])
            for key, (segment, schema) in self._fields.items()
            if key in data
        ]

        logger.debug(
            "Writing object fields",
            extra={"path": path, "fields": [key for key in self._fields if key in data]},
        )
        await settle_all(operations)


def object_type(shape: Mapping[str, EsType[Any, Any]]) -> ObjectType:
    """Declare an object type.

    Args:
        shape: Map of field key to value type

    Returns:
        An ObjectType for reading and writing values of that shape
    """
    return ObjectType(shape)
