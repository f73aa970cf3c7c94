"""Single serialized SQLite connection managed through SQLAlchemy."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Connection, Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from db_sqlite_mcp.errors import InvalidConnection, OperationFailed, describe_exception
from db_sqlite_mcp.models.config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Owns exactly one open database connection and serializes access to it.

    The engine uses a ``StaticPool`` so SQLAlchemy never opens a second DBAPI
    connection. The connection is opened lazily on first use and kept for the
    life of the process; ``dispose()`` is only meant for shutdown.
    """

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database connection.

        Args:
            config: Database configuration with connection URL
        """
        self.config = config
        self.engine: Optional[Engine] = None
        self._conn: Optional[Connection] = None
        self._lock = threading.Lock()
        self._dialect = config.dialect
        self._driver = config.driver

    def initialize(self) -> None:
        """Create the engine. The connection itself is opened on first use."""
        if self.engine is not None:
            return  # Already initialized

        self.engine = create_engine(
            self.config.url,
            poolclass=StaticPool,
            connect_args={
                # Access is serialized by self._lock, not by thread affinity
                "check_same_thread": False,
                "timeout": self.config.busy_timeout,
            },
            # Each statement commits on completion
            isolation_level="AUTOCOMMIT",
            echo=self.config.echo_sql,
        )

    def dispose(self) -> None:
        """Close the connection and dispose of the engine."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
            if self.engine is not None:
                self.engine.dispose()
                self.engine = None

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """
        Hold the connection exclusively for the duration of the block.

        The lock is released on every exit path, including exceptions raised
        inside the block.

        Yields:
            The single open SQLAlchemy connection

        Raises:
            InvalidConnection: If not initialized, disposed, or unopenable
        """
        with self._lock:
            yield self._open()

    def _open(self) -> Connection:
        """Return the shared connection, opening it on first use."""
        if self.engine is None:
            raise InvalidConnection(
                "DatabaseConnection not initialized. Call initialize() first."
            )

        if self._conn is None or self._conn.closed:
            try:
                self._conn = self.engine.connect()
            except SQLAlchemyError as e:
                raise InvalidConnection(
                    f"Unable to open database: {describe_exception(e)}"
                ) from e
            logger.info(f"Opened SQLite database {self.config.database or ':memory:'}")

        return self._conn

    @property
    def dialect(self) -> str:
        """Get database dialect name."""
        return self._dialect

    @property
    def driver(self) -> str:
        """Get database driver name."""
        return self._driver

    @property
    def is_initialized(self) -> bool:
        """Check if engine is initialized."""
        return self.engine is not None

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.get_connection() as conn:
                conn.exec_driver_sql("SELECT 1")
            return True
        except (InvalidConnection, SQLAlchemyError):
            return False

    def get_version(self) -> str:
        """
        Get the SQLite library version string.

        Returns:
            Version string, e.g. "3.45.1"
        """
        with self.get_connection() as conn:
            try:
                row = conn.exec_driver_sql("SELECT sqlite_version()").fetchone()
            except SQLAlchemyError as e:
                raise OperationFailed.from_exception("Failed to read version", e) from e
            return str(row[0]) if row else "Unknown"

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.dispose()
