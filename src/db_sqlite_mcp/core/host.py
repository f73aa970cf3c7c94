"""Host resource counters exposed alongside the database operations."""

import os
import shutil
import time
from typing import Callable, Optional

from db_sqlite_mcp.models.config import DatabaseConfig


class HostCounters:
    """Pass-through accessors for resource counters of the hosting process.

    ``balance`` is the number of free bytes on the volume that holds the
    database file. ``instruction_counter`` is the CPU time the process has
    consumed, in nanoseconds. Both can be replaced for tests.
    """

    def __init__(
        self,
        config: DatabaseConfig,
        balance_fn: Optional[Callable[[], int]] = None,
        instruction_counter_fn: Optional[Callable[[], int]] = None,
    ):
        self.config = config
        self._balance_fn = balance_fn or self._free_bytes
        self._instruction_counter_fn = instruction_counter_fn or time.process_time_ns

    def balance(self) -> int:
        """Free storage available to the database, in bytes."""
        return max(int(self._balance_fn()), 0)

    def instruction_counter(self) -> int:
        """CPU time consumed by this process, in nanoseconds."""
        return max(int(self._instruction_counter_fn()), 0)

    def _free_bytes(self) -> int:
        database = self.config.database
        directory = os.path.dirname(os.path.abspath(database)) if database else os.getcwd()
        return shutil.disk_usage(directory).free
