"""MCP server for deeplucid using FastMCP.

Exposes the UCPF cognitive analysis tools and framework documents to any MCP
client. The session store is created once here and shared with every handler.

Tools:
- analyze_problem       Full UCPF analysis of a problem statement
- creative_exploration  Perspectives, connections and metaphors for a topic
- manage_state          Enable/disable/reset/inspect session state

Resources:
- ucpf://framework/overview
- ucpf://framework/cognitive-states
- ucpf://framework/knowledge-dimensions
- ucpf://session/{session_id}/analysis

Usage:
    # Start with stdio transport (default for MCP)
    python -m deeplucid.mcp.server

    # Or via CLI
    deeplucid mcp
    deeplucid mcp --transport http --port 8000
"""
from __future__ import annotations

import logging
import sys
from typing import Any

from fastmcp import FastMCP

from deeplucid.engine.creative import CreativePatterns
from deeplucid.engine.ucpf import UcpfCore
from deeplucid.mcp import tools
from deeplucid.resources import FRAMEWORK_DOCUMENTS, SESSION_ANALYSIS_TEMPLATE, FrameworkDocument, read_document
from deeplucid.results import is_tool_error
from deeplucid.session import SessionStore, SessionSweeper, create_session_store, resolve_session_config
from deeplucid.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr only (MCP uses stdout for JSON-RPC in stdio mode)."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        stream=sys.stderr,
    )


def _checked(tool_name: str, result: str | dict[str, Any]) -> str | dict[str, Any]:
    if is_tool_error(result):
        logger.warning("%s rejected call: %s (%s)", tool_name, result["error"], result["error_code"])
    return result


def _document_reader(doc: FrameworkDocument):
    def read() -> str:
        return read_document(doc.filename)

    read.__name__ = doc.filename.removesuffix(".md").replace("-", "_")
    read.__doc__ = doc.description
    return read


def create_server(
    store: SessionStore,
    core: UcpfCore | None = None,
    patterns: CreativePatterns | None = None,
    settings: Settings | None = None,
) -> FastMCP:
    """Build the FastMCP server around an explicitly owned session store."""
    services = tools.Services(
        store=store,
        core=core,
        patterns=patterns or CreativePatterns(),
    )
    name = settings.server.name if settings else "DeepLucid3D"
    mcp = FastMCP(name)

    # -----------------------------------------------------------------------
    # MCP Tools
    # -----------------------------------------------------------------------

    @mcp.tool()
    def analyze_problem(
        problem: str,
        session_id: str | None = None,
        enable_state: bool | None = None,
        detailed: bool = False,
    ) -> str | dict[str, Any]:
        """Process a problem statement through the full UCPF framework.

        Args:
            problem: The problem statement to analyze
            session_id: Optional session ID for maintaining state between calls
            enable_state: Turn state management on or off for this and later calls
            detailed: Include per-category structured perspectives

        Returns the Markdown analysis, or an error envelope on invalid input.
        """
        return _checked(
            "analyze_problem",
            tools.analyze_problem(services, problem, session_id, enable_state, detailed),
        )

    @mcp.tool()
    def creative_exploration(
        topic: str,
        constraints: list[str] | None = None,
        perspective_count: int = 3,
        include_metaphors: bool = True,
        session_id: str | None = None,
    ) -> str | dict[str, Any]:
        """Generate novel perspectives and connections for a topic.

        Args:
            topic: The topic or problem to explore creatively
            constraints: Optional constraints or parameters to consider
            perspective_count: Number of perspectives to generate (1-5, default 3)
            include_metaphors: Whether to include metaphorical thinking
            session_id: Optional session ID for maintaining state between calls
        """
        return _checked(
            "creative_exploration",
            tools.creative_exploration(
                services, topic, constraints, perspective_count, include_metaphors, session_id
            ),
        )

    @mcp.tool()
    def manage_state(action: str, session_id: str | None = None) -> str | dict[str, Any]:
        """Control the state management for UCPF processing.

        Args:
            action: One of enable, disable, reset, status
            session_id: Optional session ID to target a specific session
        """
        return _checked("manage_state", tools.manage_state(services, action, session_id))

    # -----------------------------------------------------------------------
    # MCP Resources
    # -----------------------------------------------------------------------

    for doc in FRAMEWORK_DOCUMENTS:
        mcp.resource(
            doc.uri,
            name=doc.name,
            description=doc.description,
            mime_type=doc.mime_type,
        )(_document_reader(doc))

    @mcp.resource(
        SESSION_ANALYSIS_TEMPLATE,
        name="Session Analysis",
        description="Analysis results for a specific session",
        mime_type="text/markdown",
    )
    def session_analysis(session_id: str) -> str:
        return tools.read_session_analysis(services, session_id)

    return mcp


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_server(
    transport: str | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Run the MCP server with stdio (default) or HTTP transport.

    Args:
        transport: 'stdio' for local clients, 'http' for a shared server.
            Defaults to the configured transport.
        host: Bind host for HTTP mode (ignored in stdio).
        port: Bind port for HTTP mode (ignored in stdio).
    """
    settings = load_settings()
    configure_logging(settings.server.log_level)

    session_cfg = resolve_session_config(settings.session)
    store = create_session_store(session_cfg)
    sweeper = SessionSweeper(store, interval=session_cfg.sweep_interval_seconds)
    mcp = create_server(store, settings=settings)

    transport = transport or settings.server.transport
    host = host or settings.server.host
    port = port or settings.server.port

    sweeper.start()
    try:
        if transport == "http":
            logger.info("Starting deeplucid MCP server (HTTP) at http://%s:%s/mcp", host, port)
            mcp.run(transport="http", host=host, port=port)
        else:
            logger.info("Starting deeplucid MCP server (stdio)...")
            mcp.run(show_banner=False)
    finally:
        sweeper.stop()


if __name__ == "__main__":
    run_server()
