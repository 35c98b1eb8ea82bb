"""deeplucid — UCPF cognitive analysis tools served over MCP.

File guide
----------
settings.py           Configuration (deeplucid_project.yaml, .env)
session.py            Bounded expiring session store + background sweeper
results.py            Tool error envelopes
engine/ucpf.py        UCPF core (cognitive state, knowledge categories, questions)
engine/creative.py    Creative patterns (perspectives, connections, metaphors)
tools/analysis.py     analyze_problem Markdown report
tools/exploration.py  creative_exploration Markdown report
resources/            Static framework documents served as MCP resources
mcp/server.py         FastMCP server wiring (tools, resources, entry point)
mcp/tools.py          Tool handlers operating on the shared services
cli.py                typer CLI (``deeplucid mcp``, ``deeplucid config``)

Public API
----------
- ``SessionStore``  — bounded LRU session store with expiry sweeping
- ``UcpfCore``      — framework analysis engine
- ``create_server`` — FastMCP server around an explicitly owned store
"""

from deeplucid.engine import CreativePatterns, UcpfCore
from deeplucid.session import SessionStore, SessionSweeper


def create_server(*args, **kwargs):  # noqa: D103
    from deeplucid.mcp.server import create_server as _create
    return _create(*args, **kwargs)


__all__ = ["CreativePatterns", "SessionStore", "SessionSweeper", "UcpfCore", "create_server"]
