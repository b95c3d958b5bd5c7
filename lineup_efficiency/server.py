#!/usr/bin/env python3
"""
Lineup Efficiency Server

A FastMCP server that provides:
- Health endpoint (non-MCP REST endpoint)
- Optimal lineup tool (best lineup that could have been set for a team-week)
- Lineup efficiency tool (actual vs optimal score and biggest mistakes)
- Season tools (weekly breakdown per team, league-wide manager ranking)
"""

from fastmcp import FastMCP
from starlette.responses import JSONResponse

from . import tool_registry
from .config_manager import get_config_manager
from .logging_config import setup_logging
from .metrics import get_metrics_collector
import os, logging

logger = logging.getLogger(__name__)


def create_app() -> FastMCP:
    """Create and configure the FastMCP server application."""
    server_config = get_config_manager().config.server

    # Create FastMCP server instance
    mcp = FastMCP(
        name=server_config.name
    )

    # Register all tools from the tool registry
    for tool_func in tool_registry.get_all_tools():
        mcp.tool(tool_func)

    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request):
        """Health check endpoint for monitoring server status."""
        return JSONResponse({
            "status": "healthy",
            "service": server_config.name,
            "version": server_config.version,
            "metrics": get_metrics_collector().get_metrics()["counters"],
        })

    return mcp


def main():
    """Main entry point for the server."""
    server_config = get_config_manager().config.server

    # Configure logging with INFO level by default
    log_level = os.getenv("LINEUP_EFF_LOG_LEVEL", "INFO").upper()
    setup_logging(
        log_level=log_level,
        version=server_config.version,
        enable_file_logging=os.getenv("LINEUP_EFF_LOG_FILE") is not None,
        log_file_path=os.getenv("LINEUP_EFF_LOG_FILE"),
    )
    logger.info(f"Logging initialized at {log_level} level")

    app = create_app()

    # Get MCP HTTP app with /mcp path prefix
    mcp_http = app.http_app(path="/mcp")

    # Run with uvicorn
    import uvicorn
    logger.info(f"Starting {server_config.name} on {server_config.host}:{server_config.port}")
    uvicorn.run(mcp_http, host=server_config.host, port=server_config.port)


if __name__ == "__main__":
    main()
