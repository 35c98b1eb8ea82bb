"""MCP (Model Context Protocol) server for deeplucid using FastMCP.

Exposes the UCPF analysis tools and framework documents so any MCP client
(Cursor, Claude Desktop, other agents) can use them.
"""
from __future__ import annotations

from deeplucid.mcp.server import create_server, run_server

__all__ = ["create_server", "run_server", "server", "tools"]
