"""
Atomic value types.

An atom occupies exactly one document and has no children. Its value is
the document text run through a codec; the empty text sentinel reads as
None. Because the text is the whole value, reduce ignores prev, and
documents nested below the atom's path don't contribute.

Built-in atoms:
- string: text stored as-is
- number: int or float as decimal text ("12", "1.5", "NaN", "Infinity")
- bigint: arbitrary-precision int as decimal text
- boolean: "1" or "0"
- date_time: UTC ISO-8601 ("...T12:00:00.000Z"); sub-millisecond values keep
  all six fraction digits. Naive values are taken as UTC and read back as
  aware UTC datetimes.

Note that an empty string can't be stored: it is indistinguishable from
a deleted document and reads back as None.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Generic, Optional, TypeVar, Union

from ..store.base import DocInput, DocumentStore
from .types import EsType, ReduceProps, require_write_success

T = TypeVar("T")


@dataclass(frozen=True)
class Codec(Generic[T]):
    """A pair of functions mapping a value to document text and back."""

    encode: Callable[[T], str]
    decode: Callable[[str], T]


class Atom(EsType[T, T]):
    """A value stored in a single document."""

    def __init__(self, codec: Codec[T]) -> None:
        self.codec = codec

    async def reduce(self, props: ReduceProps[T]) -> Optional[T]:
        # Only the atom's own document counts, never one nested below it
        if props.path_components:
            return props.prev
        if props.doc.is_deleted:
            return None
        return self.codec.decode(props.doc.text)

    async def write(
        self,
        store: DocumentStore,
        author: str,
        path: str,
        data: Optional[T],
    ) -> None:
        text = "" if data is None else self.codec.encode(data)
        outcome = await store.set(author, DocInput(path=path, text=text))
        require_write_success(outcome, path)


def _encode_number(value: Union[int, float]) -> str:
    if isinstance(value, bool):
        raise TypeError("booleans are not numbers; use the boolean type")
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _decode_number(text: str) -> Union[int, float]:
    try:
        return int(text)
    except ValueError:
        return float(text)


def _encode_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    if value.microsecond % 1000 == 0:
        fraction = f"{value.microsecond // 1000:03d}"
    else:
        fraction = f"{value.microsecond:06d}"
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + fraction + "Z"


def _decode_datetime(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


string: Atom[str] = Atom(Codec(encode=lambda x: x, decode=lambda x: x))

number: Atom[Union[int, float]] = Atom(Codec(encode=_encode_number, decode=_decode_number))

bigint: Atom[int] = Atom(Codec(encode=str, decode=int))

boolean: Atom[bool] = Atom(
    Codec(encode=lambda x: "1" if x else "0", decode=lambda x: x == "1")
)

date_time: Atom[datetime] = Atom(Codec(encode=_encode_datetime, decode=_decode_datetime))
