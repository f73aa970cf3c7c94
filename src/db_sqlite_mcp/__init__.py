"""
db_sqlite_mcp - SQLite MCP server

A Model Context Protocol (MCP) server that exposes statement execution,
paginated querying and schema introspection for one SQLite database.
"""

__version__ = "1.0.0"

from db_sqlite_mcp.errors import DatabaseError, InvalidConnection, OperationFailed
from db_sqlite_mcp.models.config import DatabaseConfig
from db_sqlite_mcp.models.database import DatabaseInfo
from db_sqlite_mcp.models.query import PaginatedQueryResult, QueryResult
from db_sqlite_mcp.models.table import ColumnInfo, TableInfo

__all__ = [
    "DatabaseConfig",
    "DatabaseInfo",
    "TableInfo",
    "ColumnInfo",
    "QueryResult",
    "PaginatedQueryResult",
    "DatabaseError",
    "InvalidConnection",
    "OperationFailed",
]
