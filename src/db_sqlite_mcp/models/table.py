"""Table and column information models."""

import warnings

from pydantic import BaseModel, Field

# Suppress the specific warning about field 'schema' shadowing
warnings.filterwarnings(
    "ignore",
    message='Field name "schema" in "TableInfo" shadows an attribute in parent',
    category=UserWarning,
)


class ColumnInfo(BaseModel):
    """Information about a table column."""

    name: str = Field(..., description="Column name")
    data_type: str = Field(
        ..., description="Declared type text as reported by PRAGMA table_info"
    )
    not_null: bool = Field(default=False, description="Whether column is NOT NULL")
    primary_key: bool = Field(
        default=False, description="Whether column is part of primary key"
    )


class TableInfo(BaseModel):
    """Row count, column layout and a short preview of one table."""

    table_name: str = Field(..., description="Table name")
    row_count: int = Field(..., ge=0, description="Total number of rows")
    column_count: int = Field(..., ge=0, description="Number of columns")
    schema: list[ColumnInfo] = Field(
        default_factory=list, description="Columns in declared order"
    )
    preview_data: list[list[str]] = Field(
        default_factory=list,
        description="Up to 10 canonically encoded rows (empty if unreadable)",
    )

    @property
    def primary_key_columns(self) -> list[str]:
        """Names of the primary key columns."""
        return [col.name for col in self.schema if col.primary_key]
