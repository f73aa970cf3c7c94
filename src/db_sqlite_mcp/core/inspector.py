"""Database and table introspection through SQLite's reflection facilities."""

import logging

from sqlalchemy import Connection
from sqlalchemy.exc import SQLAlchemyError

from db_sqlite_mcp.errors import DatabaseError, OperationFailed
from db_sqlite_mcp.models.database import DatabaseInfo
from db_sqlite_mcp.models.table import ColumnInfo, TableInfo
from db_sqlite_mcp.utils import encode_row

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 10

# "_" is a LIKE wildcard, so the prefix is matched with an escape character
USER_TABLES_QUERY = (
    "SELECT name FROM sqlite_master "
    "WHERE type='table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'"
)


class MetadataInspector:
    """Builds size, table and column reports for the open database.

    Table names are read from ``sqlite_master`` and interpolated into the
    count, ``PRAGMA table_info`` and preview statements as-is, without quoting.

    Every method expects the caller to hold the connection lock.
    """

    def __init__(self, preview_rows: int = PREVIEW_ROWS):
        """
        Initialize metadata inspector.

        Args:
            preview_rows: Maximum number of preview rows per table
        """
        self.preview_rows = preview_rows

    def get_database_info(self, conn: Connection) -> DatabaseInfo:
        """
        Report database size and every user table.

        Args:
            conn: Open connection

        Returns:
            Database report with tables in catalog order

        Raises:
            OperationFailed: If size, table list, row count or column
                reflection fails. Preview failures never raise.
        """
        size_mb = self.get_database_size_mb(conn)
        table_names = self.get_table_names(conn)
        tables = [self.describe_table(conn, name) for name in table_names]

        return DatabaseInfo(
            total_tables=len(table_names),
            database_size_mb=size_mb,
            tables=tables,
        )

    def get_database_size_mb(self, conn: Connection) -> float:
        """Compute page_count * page_size in megabytes."""
        page_count = self._pragma_value(conn, "page_count")
        page_size = self._pragma_value(conn, "page_size")
        return (page_count * page_size) / (1024.0 * 1024.0)

    def get_table_names(self, conn: Connection) -> list[str]:
        """List user tables, excluding SQLite's internal ``sqlite_`` tables."""
        try:
            result = conn.exec_driver_sql(USER_TABLES_QUERY)
            return [row[0] for row in result]
        except SQLAlchemyError as e:
            raise OperationFailed.from_exception("Failed to list tables", e) from e

    def describe_table(self, conn: Connection, table_name: str) -> TableInfo:
        """
        Build the report for one table.

        Args:
            conn: Open connection
            table_name: Table name as stored in the catalog

        Returns:
            Table report; preview is empty if it could not be read
        """
        row_count = self.count_rows(conn, table_name)
        columns = self.get_columns(conn, table_name)
        preview = self.get_preview_or_empty(conn, table_name)

        return TableInfo(
            table_name=table_name,
            row_count=row_count,
            column_count=len(columns),
            schema=columns,
            preview_data=preview,
        )

    def count_rows(self, conn: Connection, table_name: str) -> int:
        """Count all rows of a table."""
        try:
            return conn.exec_driver_sql(
                f"SELECT COUNT(*) FROM {table_name}"
            ).scalar_one()
        except SQLAlchemyError as e:
            raise OperationFailed.from_exception(
                f"Failed to get row count for {table_name}", e
            ) from e

    def get_columns(self, conn: Connection, table_name: str) -> list[ColumnInfo]:
        """Read column metadata in declared order via PRAGMA table_info."""
        try:
            result = conn.exec_driver_sql(f"PRAGMA table_info({table_name})")
            # cid, name, type, notnull, dflt_value, pk
            return [
                ColumnInfo(
                    name=row[1],
                    data_type=row[2],
                    not_null=row[3] != 0,
                    primary_key=row[5] != 0,
                )
                for row in result
            ]
        except SQLAlchemyError as e:
            raise OperationFailed.from_exception(
                f"Failed to read schema for {table_name}", e
            ) from e

    def get_preview(self, conn: Connection, table_name: str) -> list[list[str]]:
        """
        Read the first rows of a table, canonically encoded.

        Raises:
            OperationFailed: If the preview cannot be read or encoded
        """
        try:
            result = conn.exec_driver_sql(
                f"SELECT * FROM {table_name} LIMIT {self.preview_rows}"
            )
            try:
                return [encode_row(row) for row in result]
            finally:
                result.close()
        except SQLAlchemyError as e:
            raise OperationFailed.from_exception(
                f"Failed to read preview for {table_name}", e
            ) from e

    def get_preview_or_empty(
        self, conn: Connection, table_name: str
    ) -> list[list[str]]:
        """Preview rows, or an empty preview if they cannot be read.

        This is the one place a failure is not propagated: a single unreadable
        table must not abort the whole database report.
        """
        try:
            return self.get_preview(conn, table_name)
        except DatabaseError as e:
            logger.warning(f"Preview query failed for {table_name}: {e}")
            return []

    def _pragma_value(self, conn: Connection, name: str) -> int:
        """Read a single integer PRAGMA value."""
        try:
            return int(conn.exec_driver_sql(f"PRAGMA {name}").scalar_one())
        except SQLAlchemyError as e:
            raise OperationFailed.from_exception(f"Failed to get {name}", e) from e
