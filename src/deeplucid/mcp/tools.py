"""MCP tool handlers for deeplucid.

All handlers operate on a ``Services`` bundle built once by the server entry
point: the session store, the UCPF core and the creative patterns. Handlers
validate arguments, call into the engine and renderers, and keep the session
store in sync.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from fastmcp.exceptions import ResourceError

from deeplucid.engine.creative import CreativePatterns
from deeplucid.engine.ucpf import UcpfCore
from deeplucid.results import INVALID_ACTION, INVALID_PARAMS, tool_error
from deeplucid.session import SessionStore
from deeplucid.tools.analysis import analyze_problem as _analyze_problem
from deeplucid.tools.exploration import explore_creatively

STATE_ACTIONS = ("enable", "disable", "reset", "status")
MIN_PERSPECTIVES = 1
MAX_PERSPECTIVES = 5


@dataclass
class Services:
    """Collaborators shared by every tool call.

    The core keeps its cached analyses in ``store``, so both are bounded and
    expired together.
    """

    store: SessionStore
    core: UcpfCore | None = None
    patterns: CreativePatterns = field(default_factory=CreativePatterns)

    def __post_init__(self) -> None:
        if self.core is None:
            self.core = UcpfCore(self.store)
        elif self.core.store is not self.store:
            raise ValueError("UcpfCore must share the session store it is served with")


def _remember(services: Services, session_id: str | None, **values: Any) -> None:
    """Merge ``values`` into the session payload when state is enabled."""
    if not session_id or not services.store.enabled:
        return
    payload = dict(services.store.get(session_id) or {})
    payload.update(values, timestamp=time.time())
    services.store.set(session_id, payload)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


def analyze_problem(
    services: Services,
    problem: str,
    session_id: str | None = None,
    enable_state: bool | None = None,
    detailed: bool = False,
) -> str | dict[str, Any]:
    """Run a problem through the UCPF framework and return the Markdown report.

    ``enable_state`` toggles session state when given; ``None`` leaves the
    current setting alone.
    """
    if not isinstance(problem, str) or not problem.strip():
        return tool_error("Required parameter 'problem' must be a non-empty string.", INVALID_PARAMS)

    if enable_state is not None and bool(enable_state) != services.store.enabled:
        services.store.set_enabled(bool(enable_state))

    analysis = _analyze_problem(
        problem,
        services.core,
        services.patterns,
        session_id=session_id,
        detailed=detailed,
    )
    _remember(services, session_id, analysis=analysis, problem=problem)
    return analysis


def creative_exploration(
    services: Services,
    topic: str,
    constraints: list[str] | None = None,
    perspective_count: int = 3,
    include_metaphors: bool = True,
    session_id: str | None = None,
) -> str | dict[str, Any]:
    """Generate perspectives, connections and metaphors for a topic."""
    if not isinstance(topic, str) or not topic.strip():
        return tool_error("Required parameter 'topic' must be a non-empty string.", INVALID_PARAMS)

    count = max(MIN_PERSPECTIVES, min(MAX_PERSPECTIVES, int(perspective_count)))
    exploration = explore_creatively(
        topic,
        [str(c) for c in constraints or []],
        services.patterns,
        perspective_count=count,
        include_metaphors=include_metaphors,
    )
    _remember(services, session_id, exploration=exploration, topic=topic)
    return exploration


def manage_state(
    services: Services,
    action: str,
    session_id: str | None = None,
) -> str | dict[str, Any]:
    """Enable, disable, reset or report on session state."""
    act = (action or "").strip().lower()
    if act not in STATE_ACTIONS:
        return tool_error(
            f"action must be one of {', '.join(STATE_ACTIONS)}, got '{action}'.",
            INVALID_ACTION,
        )

    store = services.store
    if act == "enable":
        store.set_enabled(True)
        return "State management has been enabled"

    if act == "disable":
        store.set_enabled(False)
        return "State management has been disabled"

    if act == "reset":
        if session_id:
            if store.clear(session_id):
                return f"Session '{session_id}' has been reset"
            return f"Session '{session_id}' was not found"
        store.clear_all()
        return "All sessions have been reset"

    lines = [
        f"State management is currently {'enabled' if store.enabled else 'disabled'}",
        f"Number of active sessions: {store.count()}",
    ]
    if session_id:
        lines.append(f"Session '{session_id}': {'exists' if store.has(session_id) else 'not found'}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


def read_session_analysis(services: Services, session_id: str) -> str:
    """Return the stored analysis for a session.

    Raises:
        ResourceError: If the session does not exist or holds no analysis.
    """
    if not services.store.has(session_id):
        raise ResourceError(f"No session found with ID: {session_id}")
    payload = services.store.get(session_id)
    analysis = (payload or {}).get("analysis")
    if not analysis:
        raise ResourceError(f"No analysis data found for session: {session_id}")
    return analysis
