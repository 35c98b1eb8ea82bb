"""Creative patterns: perspectives, concept connections and metaphors."""
from __future__ import annotations

from dataclasses import dataclass, field, replace

from deeplucid.engine.ucpf import KnowledgeCategory, StructuredPerspective

CONNECTION_TYPES = ("metaphor", "analogy", "reframing", "combination", "inversion")

PERSPECTIVE_PATTERNS = (
    "Inversion (What if the opposite were true?)",
    "First Principles (What are the fundamental truths?)",
    "Analogical (How is this like something else?)",
    "Systems Thinking (How do the parts interact?)",
    "Temporal Shift (How will this look in the future?)",
)

METAPHORS = (
    "This problem is like a puzzle with missing pieces",
    "This situation resembles an ecosystem seeking balance",
    "The challenge is similar to navigating a maze with changing walls",
    "This process mirrors a chemical reaction needing a catalyst",
    "The situation is like a story with parallel plotlines",
)


@dataclass(frozen=True)
class CreativeConnection:
    type: str
    description: str
    source: str
    target: str
    insight: str


@dataclass
class CreativePerspective:
    viewpoint: str
    rationale: str
    implications: list[str] = field(default_factory=list)
    limiting_beliefs: list[str] = field(default_factory=list)
    potential_outcomes: list[str] = field(default_factory=list)


class CreativePatterns:
    """Generates creative perspectives, connections and metaphors from fixed patterns."""

    def generate_perspectives(self, text: str, count: int = 3) -> list[CreativePerspective]:
        return [
            CreativePerspective(
                viewpoint=pattern,
                rationale=f"Perspective based on {pattern.split(' ')[0]} thinking",
            )
            for pattern in PERSPECTIVE_PATTERNS[: max(count, 0)]
        ]

    def generate_connections(self, concepts: list[str], count: int = 3) -> list[CreativeConnection]:
        """Link neighbouring concepts, cycling through the connection types.

        Needs at least two concepts; never produces more connections than there
        are concept pairs.
        """
        n = len(concepts)
        if n < 2:
            return []
        total = min(count, n * (n - 1) // 2)
        connections = []
        for i in range(total):
            source = concepts[i % n]
            target = concepts[(i + 1) % n]
            kind = CONNECTION_TYPES[i % len(CONNECTION_TYPES)]
            connections.append(
                CreativeConnection(
                    type=kind,
                    description=f"A {kind} between concepts",
                    source=source,
                    target=target,
                    insight=f"Insight from connecting {source} and {target}",
                )
            )
        return connections

    def enhance_perspectives(
        self, perspectives: list[StructuredPerspective], text: str
    ) -> list[StructuredPerspective]:
        """Return copies of ``perspectives`` with category-specific insights appended."""
        return [
            replace(p, insights=[*p.insights, *self._insights_for_category(p.category)])
            for p in perspectives
        ]

    def generate_metaphors(self, text: str, count: int = 3) -> list[str]:
        return list(METAPHORS[: max(count, 0)])

    @staticmethod
    def _insights_for_category(category: KnowledgeCategory) -> list[str]:
        dim = category.dimension
        insights = []
        if dim.awareness == "Known" and dim.content == "Known":
            insights.append("Consider how established information might be recontextualized")
        elif dim.awareness == "Known":
            insights.append("Explore how identifying specific questions creates opportunities")
        elif dim.content == "Known":
            insights.append("Investigate potential implicit knowledge that could be surfaced")
        else:
            insights.append("Consider what completely novel discoveries might transform understanding")

        if dim.accessibility == "Knowable":
            insights.append("Explore methods to actively expand understanding in this area")
        else:
            insights.append("Consider how acknowledging fundamental limits creates new perspectives")
        return insights
