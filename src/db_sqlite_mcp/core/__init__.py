"""Core database operations layer."""

from .connection import DatabaseConnection
from .executor import QueryExecutor
from .host import HostCounters
from .inspector import MetadataInspector

__all__ = [
    "DatabaseConnection",
    "HostCounters",
    "MetadataInspector",
    "QueryExecutor",
]
