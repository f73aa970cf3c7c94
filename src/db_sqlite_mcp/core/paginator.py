"""Windowed retrieval over arbitrary caller-supplied SQL.

The caller's statement is never parsed. It is treated as an opaque relation:
the total is counted by wrapping it in ``SELECT COUNT(*) FROM (...)`` and the
window is applied either directly or around a subquery when the text already
carries its own LIMIT or ORDER BY.
"""

import logging

from sqlalchemy import Connection
from sqlalchemy.exc import SQLAlchemyError

from db_sqlite_mcp.errors import OperationFailed
from db_sqlite_mcp.models.query import PaginatedQueryResult
from db_sqlite_mcp.utils import encode_row

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


def validate_page_size(page_size: int) -> int:
    """Return the effective page size: 0 means default, otherwise capped."""
    if page_size < 0:
        raise OperationFailed(f"page_size must be >= 0, got {page_size}")
    if page_size == 0:
        return DEFAULT_PAGE_SIZE
    return min(page_size, MAX_PAGE_SIZE)


def normalize_sql(sql: str) -> str:
    """Strip surrounding whitespace and a single trailing semicolon."""
    cleaned = sql.strip()
    if cleaned.endswith(";"):
        cleaned = cleaned[:-1].rstrip()
    return cleaned


def needs_subquery(sql: str) -> bool:
    """Check whether the statement text mentions LIMIT or ORDER BY.

    Plain substring search, so a match inside a string literal, identifier or
    comment also counts. Wrapping in that case is harmless, only slightly slower.
    """
    upper = sql.upper()
    return "LIMIT" in upper or "ORDER BY" in upper


def build_count_sql(sql: str) -> str:
    """Count the rows of a normalized statement.

    The closing parenthesis goes on its own line so a trailing ``--`` comment
    in the caller's text cannot swallow it.
    """
    return f"SELECT COUNT(*) FROM ({sql}\n) AS count_subquery"


def build_page_sql(sql: str, page_size: int, offset: int) -> str:
    """Apply LIMIT/OFFSET to a normalized statement.

    The window clause always starts on a new line, after any trailing
    ``--`` comment.
    """
    if needs_subquery(sql):
        return f"SELECT * FROM ({sql}\n) AS subquery LIMIT {page_size} OFFSET {offset}"
    return f"{sql}\nLIMIT {page_size} OFFSET {offset}"


def fetch_page(
    conn: Connection, sql: str, page: int, page_size: int
) -> PaginatedQueryResult:
    """
    Return one page of a statement's rows plus its total row count.

    The caller must already hold the connection lock.

    Args:
        conn: Open connection
        sql: Read-only SQL statement, possibly with its own LIMIT/ORDER BY
        page: Zero-based page index
        page_size: Requested rows per page (0 selects the default)

    Returns:
        Paginated result with encoded rows

    Raises:
        OperationFailed: On invalid arguments, count failure or page failure
    """
    if page < 0:
        raise OperationFailed(f"page must be >= 0, got {page}")

    effective_size = validate_page_size(page_size)
    offset = page * effective_size
    cleaned_sql = normalize_sql(sql)

    try:
        total_count = conn.exec_driver_sql(build_count_sql(cleaned_sql)).scalar_one()
    except SQLAlchemyError as e:
        raise OperationFailed.from_exception("Failed to get count", e) from e

    paginated_sql = build_page_sql(cleaned_sql, effective_size, offset)
    logger.debug(f"Paginated SQL: {paginated_sql}")

    try:
        result = conn.exec_driver_sql(paginated_sql)
    except SQLAlchemyError as e:
        raise OperationFailed.from_exception(
            "Failed to execute paginated query", e
        ) from e

    columns = list(result.keys())
    try:
        rows = [encode_row(row) for row in result]
    except SQLAlchemyError as e:
        raise OperationFailed.from_exception("Row iteration error", e) from e
    finally:
        result.close()

    return PaginatedQueryResult(
        columns=columns,
        rows=rows,
        total_count=total_count,
        page=page,
        page_size=effective_size,
        has_more=(offset + effective_size) < total_count,
    )
