"""
MCP Tool Registry.

Mounts the autocomplete server into a single FastMCP instance with prefix
namespacing. Configures logging and observability on startup.
"""

from fastmcp import FastMCP
from loguru import logger

from chained_autocomplete.config import settings
from chained_autocomplete.infrastructure.logging import configure_logging
from chained_autocomplete.infrastructure.observability import initialize_observability
from chained_autocomplete.servers.autocomplete_server import autocomplete_mcp


class McpServersRegistry:
    def __init__(self) -> None:
        self.registry = FastMCP("tool_registry")
        self._is_initialized = False

    async def initialize(self) -> None:
        """Import all MCP servers into the registry with namespaces."""
        if self._is_initialized:
            return

        configure_logging(settings.LOG_LEVEL)
        logger.info("Initializing MCP tool registry...")

        initialize_observability(
            service_name=settings.OTEL_SERVICE_NAME,
            enabled=settings.AGENT_OBSERVABILITY_ENABLED,
        )

        self.registry.mount(autocomplete_mcp, namespace="autocomplete")

        self._is_initialized = True

        all_tools = await self.registry.list_tools()
        tool_names = [t.name for t in all_tools]
        logger.info(f"Registry initialized with {len(all_tools)} tools: {tool_names}")

    def get_registry(self) -> FastMCP:
        return self.registry
