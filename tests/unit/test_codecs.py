"""
Unit tests for atom codecs.

Tests cover:
- Number text conventions
- Date-time formatting
- Boolean and presence flags
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from docschema.schema.atoms import bigint, boolean, date_time, number, string
from docschema.schema.collection import set_type


class TestNumberCodec:
    """Numbers are stored as decimal text."""

    @pytest.mark.parametrize(
        "value,text",
        [
            (12, "12"),
            (0, "0"),
            (-7, "-7"),
            (1.5, "1.5"),
            (12.0, "12"),
            (float("inf"), "Infinity"),
            (float("-inf"), "-Infinity"),
        ],
    )
    def test_encode(self, value, text):
        assert number.codec.encode(value) == text

    def test_nan(self):
        assert number.codec.encode(float("nan")) == "NaN"
        assert math.isnan(number.codec.decode("NaN"))

    def test_decode_prefers_int(self):
        assert number.codec.decode("12") == 12
        assert isinstance(number.codec.decode("12"), int)
        assert number.codec.decode("1.5") == 1.5
        assert number.codec.decode("1e+21") == 1e21

    def test_booleans_rejected(self):
        with pytest.raises(TypeError):
            number.codec.encode(True)


class TestBigintCodec:
    def test_large_values(self):
        value = 10 ** 40 + 1
        assert bigint.codec.encode(value) == "1" + "0" * 39 + "1"
        assert bigint.codec.decode(bigint.codec.encode(-value)) == -value


class TestBooleanCodec:
    def test_encode(self):
        assert boolean.codec.encode(True) == "1"
        assert boolean.codec.encode(False) == "0"

    def test_decode_anything_but_one_is_false(self):
        assert boolean.codec.decode("1") is True
        assert boolean.codec.decode("0") is False
        assert boolean.codec.decode("true") is False


class TestDateTimeCodec:
    """Date-times are UTC ISO-8601 with millisecond precision."""

    def test_encode_utc(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        assert date_time.codec.encode(value) == "2024-01-02T03:04:05.678Z"

    def test_encode_keeps_microseconds(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        assert date_time.codec.encode(value) == "2024-01-02T03:04:05.678901Z"

    def test_decode_microseconds(self):
        value = date_time.codec.decode("2024-01-02T03:04:05.678901Z")
        assert value == datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)

    def test_encode_converts_to_utc(self):
        value = datetime(2024, 1, 2, 5, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert date_time.codec.encode(value) == "2024-01-02T03:00:00.000Z"

    def test_naive_is_utc(self):
        assert date_time.codec.encode(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_decode(self):
        value = date_time.codec.decode("2024-01-02T03:04:05.678Z")
        assert value == datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        assert value.tzinfo is not None

    def test_decode_offset(self):
        value = date_time.codec.decode("2024-01-02T05:00:00.000+02:00")
        assert value == datetime(2024, 1, 2, 3, tzinfo=timezone.utc)


class TestPresenceCodec:
    """Set membership is stored as '1'; anything written falsy clears it."""

    def test_set_flag(self):
        codec = set_type.value_type.codec
        assert codec.encode(True) == "1"
        assert codec.encode(False) == ""
        assert codec.decode("1") is True

    def test_string_passthrough(self):
        assert string.codec.encode("hello") == "hello"
        assert string.codec.decode("hello") == "hello"
