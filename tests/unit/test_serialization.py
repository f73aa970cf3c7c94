"""Tests for canonical value encoding and orjson response serialization."""

import math

import orjson
import pytest

from db_sqlite_mcp.errors import OperationFailed
from db_sqlite_mcp.utils import (
    StorageClass,
    Value,
    decode_value,
    dumps,
    encode_row,
    encode_value,
)


class TestValueClassification:
    """Test mapping of driver values onto storage classes."""

    @pytest.mark.parametrize(
        "native, storage_class",
        [
            (None, StorageClass.NULL),
            (0, StorageClass.INTEGER),
            (-7, StorageClass.INTEGER),
            (1.5, StorageClass.REAL),
            ("", StorageClass.TEXT),
            (b"", StorageClass.BLOB),
            (bytearray(b"\x01"), StorageClass.BLOB),
            (memoryview(b"\x02"), StorageClass.BLOB),
        ],
    )
    def test_from_native(self, native, storage_class):
        """Each driver type maps to exactly one storage class."""
        assert Value.from_native(native).storage_class is storage_class

    def test_blob_is_copied_to_bytes(self):
        """Blob payloads are stored as immutable bytes."""
        value = Value.from_native(bytearray(b"\xff\x00"))
        assert value.raw == b"\xff\x00"
        assert isinstance(value.raw, bytes)

    @pytest.mark.parametrize("native", [True, object(), [1, 2], {"a": 1}])
    def test_unsupported_types_fail(self, native):
        """Values outside the five storage classes are never coerced."""
        with pytest.raises(OperationFailed):
            Value.from_native(native)

    def test_values_are_immutable(self):
        """Value is frozen."""
        value = Value.from_native(1)
        with pytest.raises(AttributeError):
            value.raw = 2  # type: ignore[misc]


class TestCanonicalEncoding:
    """Test the canonical string form of each storage class."""

    def test_null(self):
        assert encode_value(None) == ""

    @pytest.mark.parametrize(
        "native, expected",
        [
            (0, "0"),
            (42, "42"),
            (-42, "-42"),
            (2**63 - 1, "9223372036854775807"),
            (-(2**63), "-9223372036854775808"),
        ],
    )
    def test_integer(self, native, expected):
        assert encode_value(native) == expected

    @pytest.mark.parametrize(
        "native, expected",
        [
            (0.1, "0.1"),
            (-2.5, "-2.5"),
            (1.0, "1.0"),
            (1e100, "1e+100"),
            (float("inf"), "inf"),
            (float("-inf"), "-inf"),
        ],
    )
    def test_real(self, native, expected):
        assert encode_value(native) == expected

    def test_real_nan(self):
        assert encode_value(float("nan")) == "nan"

    def test_text_is_verbatim(self):
        text = "  tab\there, quote ' \" newline\n ünïcødé 🚀 "
        assert encode_value(text) == text

    def test_blob_lowercase_hex(self):
        assert encode_value(b"\x00\x0f\xab\xff") == "000fabff"

    def test_empty_blob(self):
        assert encode_value(b"") == ""

    def test_encode_row(self):
        assert encode_row((None, 1, 2.5, "x", b"\x10")) == ["", "1", "2.5", "x", "10"]


class TestDecoding:
    """Test parsing canonical strings back by storage class."""

    @pytest.mark.parametrize(
        "native",
        [None, 0, -1, 2**63 - 1, -(2**63), 0.0, -0.0, 1 / 3, 5e-324, 1.7976931348623157e308,
         float("inf"), float("-inf"), "", "text", b"", bytes(range(256))],
    )
    def test_round_trip(self, native):
        """Encoding then decoding by type yields the original value."""
        original = Value.from_native(native)
        decoded = decode_value(original.encode(), original.storage_class)
        assert decoded == original

    def test_round_trip_preserves_float_bits(self):
        """Reals survive with their exact bit pattern, including signed zero."""
        decoded = decode_value(encode_value(-0.0), StorageClass.REAL)
        assert math.copysign(1.0, decoded.raw) == -1.0

    def test_round_trip_nan(self):
        """NaN decodes back to NaN."""
        decoded = decode_value(encode_value(float("nan")), StorageClass.REAL)
        assert math.isnan(decoded.raw)

    def test_every_byte_value(self):
        """A blob of every byte value encodes to 512 hex characters."""
        blob = bytes(range(256))
        encoded = encode_value(blob)
        assert len(encoded) == 512
        assert encoded == encoded.lower()
        assert bytes.fromhex(encoded) == blob

    def test_null_rejects_text(self):
        with pytest.raises(ValueError):
            decode_value("x", StorageClass.NULL)


class TestDumps:
    """Test orjson response serialization."""

    def test_dumps_round_trip(self):
        payload = {"columns": ["id"], "rows": [["1"]], "has_more": False}
        assert orjson.loads(dumps(payload)) == payload

    def test_dumps_indents(self):
        assert "\n" in dumps({"a": 1})
        assert "\n" not in dumps({"a": 1}, indent=False)

    def test_dumps_keeps_unicode(self):
        assert "ü" in dumps({"text": "ü"})
