"""deeplucid CLI - run the MCP server and inspect configuration.

Commands:
- mcp     Start the MCP server (stdio or HTTP)
- config  Show the resolved session and server configuration
"""
from __future__ import annotations

import json
from dataclasses import asdict
from typing import Optional

import typer

from deeplucid.session import resolve_session_config
from deeplucid.settings import load_settings

app = typer.Typer(help="deeplucid CLI - UCPF cognitive analysis over MCP")


@app.command()
def mcp(
    transport: Optional[str] = typer.Option(
        None,
        "--transport",
        "-t",
        help="Transport: stdio (local clients) or http (shared server)",
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Bind host for HTTP transport"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port for HTTP transport"),
) -> None:
    """Start the deeplucid MCP server.

    Example:
        deeplucid mcp
        deeplucid mcp --transport http --port 8000
    """
    if transport is not None and transport not in ("stdio", "http"):
        typer.echo(f"❌ Unknown transport '{transport}' (use stdio or http)", err=True)
        raise typer.Exit(code=1)

    from deeplucid.mcp.server import run_server

    run_server(transport=transport, host=host, port=port)


@app.command()
def config(
    as_json: bool = typer.Option(False, "--json", help="Machine-readable output"),
) -> None:
    """Show resolved configuration (env vars > deeplucid_project.yaml > defaults).

    Example:
        deeplucid config
        deeplucid config --json
    """
    settings = load_settings()
    session = resolve_session_config(settings.session)

    if as_json:
        typer.echo(
            json.dumps(
                {
                    "project_root": str(settings.project_root),
                    "session": asdict(session),
                    "server": asdict(settings.server),
                },
                indent=2,
            )
        )
        return

    typer.echo(f"✓ Project root: {settings.project_root}")
    typer.echo(f"✓ Server: {settings.server.name} {settings.server.version} ({settings.server.transport})")
    if settings.server.transport == "http":
        typer.echo(f"  - Listening on {settings.server.host}:{settings.server.port}")
    typer.echo(f"✓ Log level: {settings.server.log_level}")
    typer.echo("\n🗂  Session state:")
    typer.echo(f"  - Enabled at startup: {session.enabled}")
    typer.echo(f"  - Expiry: {session.expiry_seconds:g}s")
    typer.echo(f"  - Max sessions: {session.max_sessions}")
    typer.echo(f"  - Sweep interval: {session.sweep_interval_seconds:g}s")


if __name__ == "__main__":
    app()
