"""
Application format wrapper.

Namespaces an application's documents and versions their layout:

    /<namespace>/<major>.<minor>/<prefix>/<path>

Writes always go to the current minor version. Reads cover every minor
version of the current major: documents from older minors are folded in
first (path order), documents from newer minors are ignored, since a
newer minor may use fields this version doesn't know how to read. A new
major version is a separate namespace and is never read.

Example:
    >>> Posts = app_format(
    ...     dict_type(Post),
    ...     format=ApplicationFormat(namespace="blog", major=1, minor=2),
    ...     prefix="/posts",
    ... )
    >>> await Posts.write(store, author, "", {"hello": {"title": "Hello"}})
    >>> # -> /blog/1.2/posts/hello/title

How to change safely:
    - Bump minor for additive changes that old readers can skip
    - Bump major for anything old readers would misread
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, TypeVar

from ..errors import InvalidSchemaUsage
from ..paths import join_path, split_path
from ..store.base import DocumentStore
from .types import EsType, ReduceProps

ReadT = TypeVar("ReadT")
WriteT = TypeVar("WriteT")


@dataclass(frozen=True)
class ApplicationFormat:
    """Name and version of an application's document layout.

    Attributes:
        namespace: First path segment for every document of the application
        major: Incompatible layout version
        minor: Compatible layout revision within the major version
    """

    namespace: str
    major: int
    minor: int

    def __post_init__(self) -> None:
        if not self.namespace or "/" in self.namespace:
            raise InvalidSchemaUsage(f"Invalid format namespace '{self.namespace}'")
        if self.major < 0 or self.minor < 0:
            raise InvalidSchemaUsage("Format versions must not be negative")

    @property
    def version_segment(self) -> str:
        return f"{self.major}.{self.minor}"

    def __str__(self) -> str:
        return f"{self.namespace}/{self.version_segment}"


class AppFormatType(EsType[ReadT, WriteT]):
    """Relocates an inner schema into a versioned namespace."""

    def __init__(
        self,
        schema: EsType[ReadT, WriteT],
        format: ApplicationFormat,
        prefix: str = "",
    ) -> None:
        self.schema = schema
        self.format = format
        self.prefix = prefix
        self._prefix_parts: List[str] = split_path(prefix)

    def content_root(self, path: str) -> Optional[str]:
        return None

    def content_prefix(self, path: str) -> str:
        return f"/{self.format.namespace}/{self.format.major}."

    async def reduce(self, props: ReduceProps[ReadT]) -> Optional[ReadT]:
        if not props.path_components:
            return props.prev

        minor_str, *rest = props.path_components
        if not minor_str.isdecimal() or int(minor_str) > self.format.minor:
            return props.prev

        expected = self._prefix_parts + split_path(props.requested_path)
        if rest[:len(expected)] != expected:
            return props.prev

        return await self.schema.reduce(props.descend(rest[len(expected):], props.prev))

    async def write(
        self,
        store: DocumentStore,
        author: str,
        path: str,
        data: Optional[WriteT],
    ) -> None:
        target = join_path(
            self.format.namespace,
            self.format.version_segment,
            self._prefix_parts,
            path,
        )
        await self.schema.write(store, author, target, data)


def app_format(
    schema: EsType[ReadT, WriteT],
    format: ApplicationFormat,
    prefix: str = "",
) -> AppFormatType[ReadT, WriteT]:
    """Wrap a schema in a versioned application namespace.

    Args:
        schema: The schema to relocate
        format: Namespace and version to write under
        prefix: Extra path placed between the version and the value's path

    Returns:
        An AppFormatType wrapping schema
    """
    return AppFormatType(schema, format, prefix)
