"""Static UCPF framework documents served as MCP resources."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_RESOURCE_DIR = Path(__file__).resolve().parent

SESSION_ANALYSIS_TEMPLATE = "ucpf://session/{session_id}/analysis"


@dataclass(frozen=True)
class FrameworkDocument:
    uri: str
    name: str
    description: str
    filename: str
    mime_type: str = "text/markdown"


FRAMEWORK_DOCUMENTS: tuple[FrameworkDocument, ...] = (
    FrameworkDocument(
        uri="ucpf://framework/overview",
        name="UCPF Framework Overview",
        description="An overview of the Unified Cognitive Processing Framework",
        filename="overview.md",
    ),
    FrameworkDocument(
        uri="ucpf://framework/cognitive-states",
        name="Cognitive States Guide",
        description="Guide to the cognitive states in the UCPF framework",
        filename="cognitive-states.md",
    ),
    FrameworkDocument(
        uri="ucpf://framework/knowledge-dimensions",
        name="Knowledge Dimensions Reference",
        description="Reference for the knowledge dimensions in the UCPF framework",
        filename="knowledge-dimensions.md",
    ),
)


@lru_cache(maxsize=None)
def read_document(filename: str) -> str:
    """Read a framework document shipped with the package."""
    return (_RESOURCE_DIR / filename).read_text(encoding="utf-8").rstrip("\n")


__all__ = ["FRAMEWORK_DOCUMENTS", "FrameworkDocument", "SESSION_ANALYSIS_TEMPLATE", "read_document"]
