"""Database information model."""

from typing import Optional

from pydantic import BaseModel, Field

from db_sqlite_mcp.models.table import TableInfo


class DatabaseInfo(BaseModel):
    """Whole-database report: size and every user table."""

    total_tables: int = Field(..., ge=0, description="Number of user tables")
    database_size_mb: float = Field(
        ..., ge=0, description="page_count * page_size in megabytes"
    )
    tables: list[TableInfo] = Field(
        default_factory=list, description="Tables in catalog order"
    )

    @property
    def size_bytes(self) -> int:
        """Database size in bytes."""
        return round(self.database_size_mb * 1024 * 1024)

    def get_table(self, name: str) -> Optional[TableInfo]:
        """Get table report by name."""
        for table in self.tables:
            if table.table_name == name:
                return table
        return None
