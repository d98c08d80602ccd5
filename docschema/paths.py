"""
Path utilities.

Pure functions for splitting, joining and encoding document paths, plus
the segment tags an object field maps onto.

Document paths are slash-separated and absolute ("/posts/1/title").
Collection keys are percent-encoded with the same rules as JavaScript's
encodeURIComponent so paths written by other clients resolve to the same
keys.

Invariants:
    - encode_key/decode_key are inverse for every str
    - split_path never returns empty segments
    - Nothing here touches the store
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Union
from urllib.parse import quote, unquote

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.~"
_KEY_SAFE = "!*'()"


@dataclass(frozen=True)
class SelfDocument:
    """The field lives on the object's own document."""


@dataclass(frozen=True)
class NamedSubpath:
    """The field lives one segment below the object's document."""

    segment: str


PathSegment = Union[SelfDocument, NamedSubpath]


def split_path(path: str) -> List[str]:
    """Split a path into its non-empty segments.

    Example:
        >>> split_path("/posts/1/")
        ['posts', '1']
    """
    return [part for part in path.split("/") if part]


def join_path(*parts: Union[str, Iterable[str]]) -> str:
    """Join path fragments into one absolute path.

    Each part may be a path string or an iterable of segments.
    """
    segments: List[str] = []
    for part in parts:
        if isinstance(part, str):
            segments.extend(split_path(part))
        else:
            for item in part:
                segments.extend(split_path(item))
    return "/" + "/".join(segments)


def normalize_path(path: str) -> str:
    """Strip trailing slashes. The store root normalizes to ""."""
    return path.rstrip("/")


def child_path(path: str, segment: PathSegment) -> str:
    """Resolve a field segment against its parent's path."""
    if isinstance(segment, SelfDocument):
        return path
    return normalize_path(path) + "/" + segment.segment


def encode_key(key: str) -> str:
    """Percent-encode a collection key into a single path segment."""
    return quote(key, safe=_KEY_SAFE)


def decode_key(segment: str) -> str:
    """Recover a collection key from its path segment.

    Raises:
        UnicodeDecodeError: If the escapes don't form valid UTF-8
    """
    return unquote(segment, errors="strict")


def last_segment(path: str) -> str:
    """Return the final segment of a path, or "" for the root."""
    return path.rsplit("/", 1)[-1]
