"""Error taxonomy returned by every database operation."""

from typing import Optional

from sqlalchemy.exc import DBAPIError, SQLAlchemyError


class DatabaseError(Exception):
    """Base class for failures surfaced to callers."""

    kind: str = "DatabaseError"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Optional[str]]:
        """Wire form: a discriminant plus the free-text diagnostic."""
        return {"error": self.kind, "message": self.message or None}


class InvalidConnection(DatabaseError):
    """The connection handle cannot be used (not open, disposed, unopenable)."""

    kind = "InvalidConnection"

    def __init__(self, message: str = "Database connection is not available"):
        super().__init__(message)


class OperationFailed(DatabaseError):
    """Statement, iteration, count or reflection failure."""

    kind = "OperationFailed"

    @classmethod
    def from_exception(cls, stage: str, exc: BaseException) -> "OperationFailed":
        """
        Build an error that embeds the driver's native description.

        Args:
            stage: Short description of what was being attempted
            exc: The originating exception

        Returns:
            OperationFailed with message "<stage>: <native message>"
        """
        return cls(f"{stage}: {describe_exception(exc)}")


def describe_exception(exc: BaseException) -> str:
    """Return the most specific message available for an exception."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return f"{type(exc.orig).__name__}: {exc.orig}"
    if isinstance(exc, SQLAlchemyError):
        return f"{type(exc).__name__}: {exc}"
    return str(exc) or type(exc).__name__
