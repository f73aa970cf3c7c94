"""Pydantic models for configuration, results and schema reports."""

from .config import DatabaseConfig
from .database import DatabaseInfo
from .query import PaginatedQueryResult, QueryResult
from .table import ColumnInfo, TableInfo

__all__ = [
    "DatabaseConfig",
    "DatabaseInfo",
    "TableInfo",
    "ColumnInfo",
    "QueryResult",
    "PaginatedQueryResult",
]
