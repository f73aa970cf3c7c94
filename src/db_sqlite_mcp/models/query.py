"""Query result models."""

from pydantic import BaseModel, Field


class QueryResult(BaseModel):
    """Flat result of a read statement, every cell canonically encoded."""

    columns: list[str] = Field(..., description="Column names in statement order")
    rows: list[list[str]] = Field(
        ..., description="Rows of canonical strings aligned with columns"
    )

    @property
    def row_count(self) -> int:
        """Number of rows returned."""
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        """Check if result set is empty."""
        return not self.rows


class PaginatedQueryResult(QueryResult):
    """One window of a wrapped read statement plus its total size."""

    total_count: int = Field(
        ..., ge=0, description="Rows the unwrapped statement produces"
    )
    page: int = Field(..., ge=0, description="Zero-based page index")
    page_size: int = Field(
        ..., ge=1, description="Effective page size after defaulting and clamping"
    )
    has_more: bool = Field(..., description="Whether rows remain after this page")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "columns": ["id", "name"],
                    "rows": [["1", "a"], ["2", "b"]],
                    "total_count": 3,
                    "page": 0,
                    "page_size": 2,
                    "has_more": True,
                }
            ]
        }
    }
