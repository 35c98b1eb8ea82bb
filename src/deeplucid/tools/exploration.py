"""explore_creatively: novel perspectives and connections for a topic."""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from deeplucid.engine.creative import CreativeConnection, CreativePatterns, CreativePerspective
from deeplucid.tools.markdown import bullets, labelled_list, section

KEY_INSIGHTS = (
    "Consider combining elements from different perspectives to create hybrid solutions",
    "Look for patterns that emerge across the different viewpoints",
    "Challenge your initial assumptions about the constraints of the problem",
)

_NON_WORD = re.compile(r"[^\w]")


@dataclass
class ExplorationResult:
    perspectives: list[CreativePerspective] = field(default_factory=list)
    connections: list[CreativeConnection] = field(default_factory=list)
    metaphors: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)


def extract_concepts(topic: str, constraints: list[str] | None = None) -> list[str]:
    """Unique words longer than three characters, punctuation stripped, first-seen order."""
    words = topic.split(" ") + " ".join(constraints or []).split(" ")
    concepts: dict[str, None] = {}
    for word in words:
        if len(word) <= 3:
            continue
        cleaned = _NON_WORD.sub("", word)
        if cleaned:
            concepts.setdefault(cleaned, None)
    return list(concepts)


def _format_perspective(p: CreativePerspective) -> str:
    text = f"### {p.viewpoint}\n**Rationale:** {p.rationale}\n"
    text += labelled_list("Implications", p.implications)
    if p.limiting_beliefs:
        text += "\n\n" + labelled_list("Limiting Beliefs to Challenge", p.limiting_beliefs)
    if p.potential_outcomes:
        text += "\n\n" + labelled_list("Potential Outcomes", p.potential_outcomes)
    return text


def _format_connection(c: CreativeConnection) -> str:
    return (
        f"### {c.type.capitalize()}: {c.source} ↔ {c.target}\n"
        f"{c.description}\n\n"
        f"**Insight:** {c.insight}"
    )


def format_exploration(result: ExplorationResult) -> str:
    """Render exploration results as Markdown. Empty parts are omitted."""
    output = ""
    if result.perspectives:
        output += section(
            "Alternative Perspectives",
            "\n\n".join(_format_perspective(p) for p in result.perspectives),
        )
    if result.connections:
        output += section(
            "Creative Connections",
            "\n\n".join(_format_connection(c) for c in result.connections),
        )
    if result.metaphors:
        output += section(
            "Metaphorical Thinking",
            "Consider these metaphors to spark new insights:\n\n" + bullets(result.metaphors),
        )
    if result.insights:
        output += section("Key Insights", bullets(result.insights))
    return output


def explore_creatively(
    topic: str,
    constraints: list[str] | None,
    patterns: CreativePatterns,
    perspective_count: int = 3,
    connection_count: int = 3,
    metaphor_count: int = 3,
    include_metaphors: bool = True,
) -> str:
    """Explore a topic creatively and return the Markdown report."""
    concepts = extract_concepts(topic, constraints)
    result = ExplorationResult(
        perspectives=patterns.generate_perspectives(topic, perspective_count),
        connections=patterns.generate_connections(concepts, connection_count),
        metaphors=patterns.generate_metaphors(topic, metaphor_count) if include_metaphors else [],
        insights=list(KEY_INSIGHTS),
    )
    return format_exploration(result)
