"""Utility modules for the SQLite MCP server."""

from db_sqlite_mcp.utils.serialization import (
    StorageClass,
    Value,
    decode_value,
    dumps,
    encode_row,
    encode_value,
)

__all__ = [
    "StorageClass",
    "Value",
    "decode_value",
    "dumps",
    "encode_row",
    "encode_value",
]
