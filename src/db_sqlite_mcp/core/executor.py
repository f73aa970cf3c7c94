"""Statement execution over the single serialized connection."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from db_sqlite_mcp.core.connection import DatabaseConnection
from db_sqlite_mcp.core.host import HostCounters
from db_sqlite_mcp.core.inspector import MetadataInspector
from db_sqlite_mcp.core.paginator import fetch_page
from db_sqlite_mcp.errors import OperationFailed
from db_sqlite_mcp.models.database import DatabaseInfo
from db_sqlite_mcp.models.query import PaginatedQueryResult, QueryResult
from db_sqlite_mcp.utils import encode_row

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Entry layer for every database operation.

    Each operation holds the connection lock from the first statement to the
    last encoded row, so at most one statement is in flight at any time.
    Caller SQL runs verbatim: there is no statement-type check and no
    injection defense.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        inspector: Optional[MetadataInspector] = None,
        counters: Optional[HostCounters] = None,
    ):
        """
        Initialize query executor.

        Args:
            connection: Database connection manager
            inspector: Schema introspector (default: MetadataInspector())
            counters: Host counters (default: HostCounters for the config)
        """
        self.connection = connection
        self.inspector = inspector or MetadataInspector()
        self.counters = counters or HostCounters(connection.config)

    def execute(self, sql: str) -> str:
        """
        Run a single statement that changes the database.

        Args:
            sql: INSERT/UPDATE/DELETE/DDL statement

        Returns:
            Summary of rows affected (DDL reports 0)

        Raises:
            OperationFailed: If the statement cannot be prepared or run
        """
        with self.connection.get_connection() as conn:
            try:
                result = conn.exec_driver_sql(sql)
                affected = max(result.rowcount, 0)
                result.close()
            except SQLAlchemyError as e:
                logger.debug(f"execute failed: {e}")
                raise OperationFailed.from_exception(
                    "Failed to execute statement", e
                ) from e

        return f"{affected} row(s) affected"

    def query(self, sql: str) -> QueryResult:
        """
        Run a read statement and return every row.

        Args:
            sql: SQL statement to run

        Returns:
            Column names and canonically encoded rows

        Raises:
            OperationFailed: If preparation, execution or any row fails;
                no partial result is returned
        """
        with self.connection.get_connection() as conn:
            try:
                result = conn.exec_driver_sql(sql)
            except SQLAlchemyError as e:
                logger.debug(f"query failed: {e}")
                raise OperationFailed.from_exception("Failed to execute query", e) from e

            if not result.returns_rows:
                result.close()
                return QueryResult(columns=[], rows=[])

            columns = list(result.keys())
            try:
                rows = [encode_row(row) for row in result]
            except SQLAlchemyError as e:
                raise OperationFailed.from_exception("Row iteration error", e) from e
            finally:
                result.close()

        return QueryResult(columns=columns, rows=rows)

    def query_paginated(
        self, sql: str, page: int = 0, page_size: int = 0
    ) -> PaginatedQueryResult:
        """
        Return one page of a read statement's rows plus the total count.

        Args:
            sql: SQL statement, may carry its own LIMIT/ORDER BY
            page: Zero-based page index
            page_size: Rows per page; 0 selects 100, values above 1000 are capped

        Returns:
            Paginated result

        Raises:
            OperationFailed: On invalid arguments, count or page failure
        """
        with self.connection.get_connection() as conn:
            return fetch_page(conn, sql, page, page_size)

    def query_paginated_update(
        self, sql: str, page: int = 0, page_size: int = 0
    ) -> PaginatedQueryResult:
        """Same as ``query_paginated``, for callers on the update path."""
        with self.connection.get_connection() as conn:
            return fetch_page(conn, sql, page, page_size)

    def get_database_info(self) -> DatabaseInfo:
        """Report database size, tables, columns and previews."""
        with self.connection.get_connection() as conn:
            return self.inspector.get_database_info(conn)

    def balance(self) -> int:
        """Free storage available to the database, in bytes."""
        return self.counters.balance()

    def instruction_counter(self) -> int:
        """CPU time consumed by the process, in nanoseconds."""
        return self.counters.instruction_counter()
