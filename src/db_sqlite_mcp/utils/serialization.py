"""Canonical value encoding and JSON response serialization.

Every cell that leaves the database is converted to a single string form:

- NULL    → "" (empty string)
- INTEGER → decimal digits, sign preserved
- REAL    → shortest round-trip repr ("nan", "inf", "-inf" for non-finite)
- TEXT    → the string verbatim
- BLOB    → lowercase hex, two characters per byte

Type information is not carried per value; callers that need it read the
declared column types from the schema report.

Responses are serialized with orjson.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Union

import orjson

from db_sqlite_mcp.errors import OperationFailed

NativeValue = Union[None, int, float, str, bytes]


class StorageClass(str, Enum):
    """SQLite storage classes."""

    NULL = "NULL"
    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"
    BLOB = "BLOB"


@dataclass(frozen=True)
class Value:
    """One database cell tagged with its storage class."""

    storage_class: StorageClass
    raw: NativeValue = None

    @classmethod
    def from_native(cls, obj: Any) -> "Value":
        """
        Classify a value returned by the sqlite3 driver.

        Args:
            obj: Cell value as produced by the driver

        Returns:
            Tagged value

        Raises:
            OperationFailed: If the value is not one of the five storage classes
        """
        if obj is None:
            return cls(StorageClass.NULL)
        # bool is an int subclass; only custom converters produce it
        if isinstance(obj, bool):
            raise OperationFailed(f"Unsupported cell type: {type(obj).__name__}")
        if isinstance(obj, int):
            return cls(StorageClass.INTEGER, obj)
        if isinstance(obj, float):
            return cls(StorageClass.REAL, obj)
        if isinstance(obj, str):
            return cls(StorageClass.TEXT, obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls(StorageClass.BLOB, bytes(obj))
        raise OperationFailed(f"Unsupported cell type: {type(obj).__name__}")

    def encode(self) -> str:
        """Return the canonical string form of this value."""
        if self.storage_class is StorageClass.NULL:
            return ""
        if self.storage_class is StorageClass.INTEGER:
            return str(self.raw)
        if self.storage_class is StorageClass.REAL:
            return repr(self.raw)
        if self.storage_class is StorageClass.TEXT:
            return self.raw  # type: ignore[return-value]
        return self.raw.hex()  # type: ignore[union-attr]


def encode_value(obj: Any) -> str:
    """Encode a single driver value to its canonical string."""
    return Value.from_native(obj).encode()


def encode_row(row: Sequence[Any]) -> list[str]:
    """
    Encode every cell of a result row.

    Args:
        row: Sequence of driver values (a SQLAlchemy Row works)

    Returns:
        List of canonical strings, positionally aligned with the row
    """
    return [encode_value(cell) for cell in row]


def decode_value(text: str, storage_class: StorageClass) -> Value:
    """
    Parse a canonical string back into a tagged value.

    The encoding carries no type tag, so the storage class must be supplied.

    Args:
        text: Canonical string produced by ``encode_value``
        storage_class: Storage class the string was encoded from

    Returns:
        Tagged value equal to the one originally encoded

    Raises:
        ValueError: If the text is not a valid encoding for the class
    """
    if storage_class is StorageClass.NULL:
        if text:
            raise ValueError(f"NULL must encode as an empty string, got {text!r}")
        return Value(StorageClass.NULL)
    if storage_class is StorageClass.INTEGER:
        return Value(StorageClass.INTEGER, int(text))
    if storage_class is StorageClass.REAL:
        return Value(StorageClass.REAL, float(text))
    if storage_class is StorageClass.TEXT:
        return Value(StorageClass.TEXT, text)
    return Value(StorageClass.BLOB, bytes.fromhex(text))


def dumps(obj: Any, indent: Optional[bool] = True) -> str:
    """
    Serialize object to JSON string using orjson.

    Args:
        obj: Object to serialize (dicts, lists, pydantic ``model_dump()`` output)
        indent: Pretty-print with two-space indentation

    Returns:
        JSON string
    """
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(obj, option=option).decode("utf-8")
