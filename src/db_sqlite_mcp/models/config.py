"""Database configuration model."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator
from sqlalchemy.engine.url import make_url


class DatabaseConfig(BaseModel):
    """Configuration for the single SQLite database connection."""

    url: str = Field(
        ...,
        description="SQLite connection URL (e.g., sqlite:///path/to/app.db, sqlite:// for in-memory)",
    )
    busy_timeout: float = Field(
        default=5.0,
        ge=0,
        le=600,
        description="Seconds to wait on a locked database file before failing",
    )
    echo_sql: bool = Field(
        default=False,
        description="Echo SQL statements through the SQLAlchemy logger",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        try:
            url = make_url(v)
        except Exception as e:
            raise ValueError(f"Invalid database URL: {e}")

        dialect = url.drivername.split("+")[0]
        if dialect != "sqlite":
            raise ValueError(
                f"Unsupported database dialect: {dialect}. Supported: sqlite"
            )
        return v

    @property
    def dialect(self) -> str:
        """Extract database dialect from URL."""
        return make_url(self.url).drivername.split("+")[0]

    @property
    def driver(self) -> str:
        """Extract driver name from URL (pysqlite when not given)."""
        parts = make_url(self.url).drivername.split("+")
        return parts[1] if len(parts) > 1 else "pysqlite"

    @property
    def database(self) -> Optional[str]:
        """Database file path, or None for an in-memory database."""
        database = make_url(self.url).database
        if not database or database == ":memory:":
            return None
        return database

    @property
    def is_memory(self) -> bool:
        """Whether the database lives only in memory."""
        return self.database is None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "sqlite:///data/app.db",
                    "busy_timeout": 5.0,
                    "echo_sql": False,
                }
            ]
        }
    }
