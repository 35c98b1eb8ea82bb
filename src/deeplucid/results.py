"""Error envelopes returned by the MCP tools in place of a Markdown report."""
from __future__ import annotations

from typing import Any

INVALID_PARAMS = "INVALID_PARAMS"
INVALID_ACTION = "INVALID_ACTION"


def tool_error(message: str, error_code: str = INVALID_PARAMS) -> dict[str, Any]:
    """Envelope for a tool call that was rejected before doing any work."""
    return {"ok": False, "error": message, "error_code": error_code}


def is_tool_error(result: Any) -> bool:
    """True when a tool returned an error envelope rather than its report."""
    return isinstance(result, dict) and result.get("ok") is False and "error_code" in result
