"""SQLite MCP Server

A Model Context Protocol (MCP) server giving remote callers raw statement
execution, row retrieval, paginated retrieval and structural introspection
over one embedded SQLite database.
"""

import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Optional, TypeVar

from dotenv import load_dotenv
from mcp.server import Server
from mcp.types import TextContent, Tool

from db_sqlite_mcp.core import DatabaseConnection, QueryExecutor
from db_sqlite_mcp.errors import DatabaseError, OperationFailed
from db_sqlite_mcp.models.config import DatabaseConfig
from db_sqlite_mcp.utils import dumps

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

T = TypeVar("T")

PAGINATION_PROPERTIES = {
    "sql": {"type": "string", "description": "SQL query to paginate"},
    "page": {
        "type": "integer",
        "description": "Zero-based page index (default: 0)",
        "default": 0,
        "minimum": 0,
    },
    "page_size": {
        "type": "integer",
        "description": "Rows per page; 0 selects 100, capped at 1000 (default: 100)",
        "default": 100,
        "minimum": 0,
    },
}


def text_response(payload: Any) -> list[TextContent]:
    """Wrap a JSON-serializable payload as MCP text content."""
    return [TextContent(type="text", text=dumps(payload))]


def sql_argument(arguments: dict[str, Any]) -> str:
    """Read the required 'sql' argument."""
    sql = arguments.get("sql")
    if not isinstance(sql, str):
        raise OperationFailed(f"Invalid 'sql' argument: expected a string, got {sql!r}")
    return sql


def int_argument(arguments: dict[str, Any], name: str, default: int) -> int:
    """Read an optional integer argument, accepting numeric strings."""
    value = arguments.get(name, default)
    if isinstance(value, bool):
        raise OperationFailed(f"Invalid '{name}' argument: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise OperationFailed(
            f"Invalid '{name}' argument: expected an integer, got {value!r}"
        ) from e


class DatabaseMCPServer:
    """MCP server for a single SQLite database."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database MCP server.

        Args:
            config: Database configuration
        """
        self.config = config
        self.connection = DatabaseConnection(config)
        self.executor: Optional[QueryExecutor] = None
        self.server = Server("db-sqlite-mcp")

    async def initialize(self) -> None:
        """Initialize all components."""
        self.connection.initialize()
        self.executor = QueryExecutor(self.connection)

        version = await self._run(self.connection.get_version)
        logger.info(
            f"Initialized SQLite {version} MCP server "
            f"({self.config.database or ':memory:'})"
        )

    def register_handlers(self) -> None:
        """Register list_tools and call_tool with the MCP server."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """List available tools."""
            return self.list_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Handle tool calls."""
            return await self.call_tool(name, arguments)

    def list_tools(self) -> list[Tool]:
        """All tools exposed by this server."""
        return [
            self._create_execute_tool(),
            self._create_query_tool(),
            self._create_query_paginated_tool(),
            self._create_query_paginated_update_tool(),
            self._create_get_database_info_tool(),
            self._create_balance_tool(),
            self._create_instruction_counter_tool(),
        ]

    async def call_tool(
        self, name: str, arguments: Optional[dict[str, Any]]
    ) -> list[TextContent]:
        """
        Dispatch a tool call.

        Database failures are returned as an ``{"error", "message"}`` payload.

        Raises:
            ValueError: If the tool name is unknown
        """
        handlers: dict[
            str, Callable[[dict[str, Any]], Awaitable[list[TextContent]]]
        ] = {
            "execute": self.handle_execute,
            "query": self.handle_query,
            "query_paginated": self.handle_query_paginated,
            "query_paginated_update": self.handle_query_paginated_update,
            "get_database_info": self.handle_get_database_info,
            "balance": self.handle_balance,
            "instruction_counter": self.handle_instruction_counter,
        }

        handler = handlers.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")

        try:
            return await handler(arguments or {})
        except DatabaseError as e:
            logger.info(f"{name} failed: {e.kind}: {e.message}")
            return text_response(e.to_dict())

    def _create_execute_tool(self) -> Tool:
        """Create execute tool."""
        return Tool(
            name="execute",
            description="Execute a single SQL statement that modifies the database (INSERT, UPDATE, DELETE, DDL)",
            inputSchema={
                "type": "object",
                "properties": {
                    "sql": {"type": "string", "description": "SQL statement to execute"},
                },
                "required": ["sql"],
            },
        )

    def _create_query_tool(self) -> Tool:
        """Create query tool."""
        return Tool(
            name="query",
            description="Run a SQL query and return all rows as strings",
            inputSchema={
                "type": "object",
                "properties": {
                    "sql": {"type": "string", "description": "SQL query to run"},
                },
                "required": ["sql"],
            },
        )

    def _create_query_paginated_tool(self) -> Tool:
        """Create query_paginated tool."""
        return Tool(
            name="query_paginated",
            description="Run a SQL query and return one page of rows with the total row count",
            inputSchema={
                "type": "object",
                "properties": PAGINATION_PROPERTIES,
                "required": ["sql"],
            },
        )

    def _create_query_paginated_update_tool(self) -> Tool:
        """Create query_paginated_update tool."""
        return Tool(
            name="query_paginated_update",
            description="Same as query_paginated, for callers on the update path",
            inputSchema={
                "type": "object",
                "properties": PAGINATION_PROPERTIES,
                "required": ["sql"],
            },
        )

    def _create_get_database_info_tool(self) -> Tool:
        """Create get_database_info tool."""
        return Tool(
            name="get_database_info",
            description="Get database size and every table's row count, columns and preview rows",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": [],
            },
        )

    def _create_balance_tool(self) -> Tool:
        """Create balance tool."""
        return Tool(
            name="balance",
            description="Free storage available to the database, in bytes",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": [],
            },
        )

    def _create_instruction_counter_tool(self) -> Tool:
        """Create instruction_counter tool."""
        return Tool(
            name="instruction_counter",
            description="CPU time consumed by the server process, in nanoseconds",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": [],
            },
        )

    # Tool handlers
    async def handle_execute(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle execute request."""
        assert self.executor is not None

        message = await self._run(self.executor.execute, sql_argument(arguments))
        return text_response({"result": message})

    async def handle_query(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle query request."""
        assert self.executor is not None

        result = await self._run(self.executor.query, sql_argument(arguments))
        return text_response(result.model_dump())

    async def handle_query_paginated(
        self, arguments: dict[str, Any]
    ) -> list[TextContent]:
        """Handle query_paginated request."""
        assert self.executor is not None

        result = await self._run(
            self.executor.query_paginated,
            sql_argument(arguments),
            int_argument(arguments, "page", 0),
            int_argument(arguments, "page_size", 100),
        )
        return text_response(result.model_dump())

    async def handle_query_paginated_update(
        self, arguments: dict[str, Any]
    ) -> list[TextContent]:
        """Handle query_paginated_update request."""
        assert self.executor is not None

        result = await self._run(
            self.executor.query_paginated_update,
            sql_argument(arguments),
            int_argument(arguments, "page", 0),
            int_argument(arguments, "page_size", 100),
        )
        return text_response(result.model_dump())

    async def handle_get_database_info(
        self, arguments: dict[str, Any]
    ) -> list[TextContent]:
        """Handle get_database_info request."""
        assert self.executor is not None

        db_info = await self._run(self.executor.get_database_info)
        return text_response(db_info.model_dump())

    async def handle_balance(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle balance request."""
        assert self.executor is not None

        return text_response({"balance": self.executor.balance()})

    async def handle_instruction_counter(
        self, arguments: dict[str, Any]
    ) -> list[TextContent]:
        """Handle instruction_counter request."""
        assert self.executor is not None

        return text_response(
            {"instruction_counter": self.executor.instruction_counter()}
        )

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        """Run a blocking core call in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    async def cleanup(self) -> None:
        """Cleanup resources."""
        self.connection.dispose()
        logger.info("SQLite MCP server cleaned up")


async def main() -> None:
    """Main entry point for the MCP server."""
    # Get database URL from environment
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable must be set")

    # Create configuration
    config = DatabaseConfig(url=database_url)

    # Create and initialize server
    mcp_server = DatabaseMCPServer(config)

    try:
        await mcp_server.initialize()
        mcp_server.register_handlers()

        # Run the server
        from mcp.server.stdio import stdio_server

        async with stdio_server() as (read_stream, write_stream):
            await mcp_server.server.run(
                read_stream,
                write_stream,
                mcp_server.server.create_initialization_options(),
            )

    finally:
        await mcp_server.cleanup()


def cli_entry() -> None:
    """
    Synchronous entry point for console script.

    This function is called by the 'db-sqlite-mcp' console script.
    It sets up the event loop and runs the async main() function.
    """
    # Windows-specific event loop policy
    if os.name == "nt":
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())  # type: ignore[attr-defined]

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    cli_entry()
