"""Unified Cognitive Processing Framework (UCPF) core.

Builds the structured analysis behind ``analyze_problem``: cognitive state,
the eight knowledge categories, recursive questions, structured perspectives,
decomposition and synthesis. Content comes from fixed framework data; the
input text only selects which session's cached sections are reused.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import product

from deeplucid.session import SessionStore

logger = logging.getLogger(__name__)

# Payload key holding the cached analysis inside a session.
ANALYSIS_STATE_KEY = "ucpf_analysis"


@dataclass(frozen=True)
class CognitiveState:
    type: str  # "Dark Inertia" | "Passion" | "Approaching Lucidity"
    description: str
    characteristics: tuple[str, ...]


@dataclass(frozen=True)
class KnowledgeDimension:
    awareness: str  # "Known" | "Unknown"
    content: str  # "Known" | "Unknown"
    accessibility: str  # "Knowable" | "Unknowable"


@dataclass(frozen=True)
class KnowledgeCategory:
    dimension: KnowledgeDimension
    label: str
    description: str
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class RecursiveQuestion:
    question: str
    purpose: str
    target_area: str


@dataclass
class StructuredPerspective:
    category: KnowledgeCategory
    perspectives: list[str] = field(default_factory=list)
    limitations: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)


@dataclass
class ProblemComponent:
    name: str
    description: str
    approach: str
    knowledge_dimensions: list[KnowledgeDimension] = field(default_factory=list)


@dataclass
class ComponentInteraction:
    source: str
    target: str
    relationship: str


@dataclass
class DecomposedProblem:
    components: list[ProblemComponent] = field(default_factory=list)
    interactions: list[ComponentInteraction] = field(default_factory=list)


@dataclass
class KnowledgeTransformation:
    source: KnowledgeCategory
    target: KnowledgeCategory
    opportunity: str


@dataclass
class Synthesis:
    insights: list[str] = field(default_factory=list)
    knowledge_transformations: list[KnowledgeTransformation] = field(default_factory=list)
    conclusions: list[str] = field(default_factory=list)
    confidence_level: float = 0.8
    uncertainties: list[str] = field(default_factory=list)


@dataclass
class UcpfAnalysis:
    cognitive_state: CognitiveState
    knowledge_mapping: list[KnowledgeCategory]
    recursive_questions: list[RecursiveQuestion]
    structured_perspectives: list[StructuredPerspective]
    problem_decomposition: DecomposedProblem
    synthesis: Synthesis


# ---------------------------------------------------------------------------
# Framework data
# ---------------------------------------------------------------------------

COGNITIVE_STATES: tuple[CognitiveState, ...] = (
    CognitiveState(
        type="Dark Inertia",
        description="A reactive, pattern-matching cognitive state with limited awareness",
        characteristics=(
            "Limited self-awareness",
            "Reliance on pattern matching",
            "Binary thinking",
            "Overconfidence in existing knowledge",
            "Resistance to contradictory information",
        ),
    ),
    CognitiveState(
        type="Passion",
        description="An engaged but potentially biased state with emotional investment",
        characteristics=(
            "Strong emotional engagement",
            "Potential for bias due to investment",
            "Heightened creativity",
            "Selective focus on certain aspects",
            "Openness to specific avenues of thought",
        ),
    ),
    CognitiveState(
        type="Approaching Lucidity",
        description="A clear, balanced understanding with high self-awareness",
        characteristics=(
            "High cognitive awareness",
            "Balance of rationality and intuition",
            "Comfort with uncertainty",
            "Integration of multiple perspectives",
            "Recognition of knowledge boundaries",
        ),
    ),
)

# Keyed by (awareness, content, accessibility)
_CATEGORY_DESCRIPTIONS: dict[tuple[str, str, str], str] = {
    ("Known", "Known", "Knowable"): "Information we are aware we have and can verify or expand upon",
    ("Known", "Known", "Unknowable"): "Information we are aware we have but cannot verify or expand further",
    ("Known", "Unknown", "Knowable"): "Questions we know exist and can potentially answer",
    ("Known", "Unknown", "Unknowable"): "Questions we know exist but cannot answer",
    ("Unknown", "Known", "Knowable"): "Information we have but are not aware of, which can be surfaced",
    ("Unknown", "Known", "Unknowable"): "Information we have but are not aware of, which cannot be surfaced",
    ("Unknown", "Unknown", "Knowable"): "Questions we don't know exist but could discover and answer",
    ("Unknown", "Unknown", "Unknowable"): "Questions we don't know exist and could never discover or answer",
}

RECURSIVE_QUESTIONS: tuple[RecursiveQuestion, ...] = (
    RecursiveQuestion(
        question="What assumptions am I making about this problem?",
        purpose="Identify implicit assumptions that may limit thinking",
        target_area="Assumptions",
    ),
    RecursiveQuestion(
        question="How would this appear from a completely different perspective?",
        purpose="Gain alternative viewpoints and challenge default framing",
        target_area="Framing",
    ),
    RecursiveQuestion(
        question="What cognitive biases might be influencing my analysis?",
        purpose="Recognize potential distortions in thinking",
        target_area="Biases",
    ),
    RecursiveQuestion(
        question="What knowledge categories am I neglecting?",
        purpose="Ensure comprehensive knowledge mapping",
        target_area="Knowledge Gaps",
    ),
    RecursiveQuestion(
        question="How can I transform knowledge between categories?",
        purpose="Identify opportunities for knowledge advancement",
        target_area="Knowledge Transformation",
    ),
)


def _build_categories() -> tuple[KnowledgeCategory, ...]:
    categories = []
    for awareness, content, accessibility in product(
        ("Known", "Unknown"), ("Known", "Unknown"), ("Knowable", "Unknowable")
    ):
        label = f"{accessibility} {awareness} {content}s"
        categories.append(
            KnowledgeCategory(
                dimension=KnowledgeDimension(awareness, content, accessibility),
                label=label,
                description=_CATEGORY_DESCRIPTIONS[(awareness, content, accessibility)],
            )
        )
    return tuple(categories)


KNOWLEDGE_CATEGORIES = _build_categories()


class UcpfCore:
    """Processes problem statements through the UCPF framework.

    When state is enabled, the analysis produced for a session is kept in that
    session's payload in the ``SessionStore`` and its sections are reused by
    later calls for the same session. The cached analysis therefore shares the
    store's capacity, eviction and expiry.
    """

    def __init__(self, store: SessionStore | None = None):
        self._store = store if store is not None else SessionStore()

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def state_enabled(self) -> bool:
        return self._store.enabled

    def reset_state(self, session_id: str | None = None) -> None:
        """Drop session state, for one session or all of them."""
        if session_id is None:
            self._store.clear_all()
        else:
            self._store.clear(session_id)

    def set_state_enabled(self, enabled: bool) -> None:
        self._store.set_enabled(enabled)

    def process_input(self, text: str, session_id: str | None = None) -> UcpfAnalysis:
        """Run ``text`` through the framework, reusing the session's cached analysis."""
        payload = None
        if session_id and self._store.enabled:
            payload = self._store.get(session_id)

        existing = (payload or {}).get(ANALYSIS_STATE_KEY)
        if existing is not None:
            logger.debug("Reusing cached UCPF analysis for session '%s'", session_id)
        analysis = existing or self._generate_analysis(text)

        if session_id and self._store.enabled:
            self._store.set(session_id, {**(payload or {}), ANALYSIS_STATE_KEY: analysis})
        return analysis

    def assess_cognitive_state(self, text: str) -> CognitiveState:
        # The server always reports from the lucid state.
        return COGNITIVE_STATES[2]

    def map_knowledge_dimensions(self, text: str) -> list[KnowledgeCategory]:
        return list(KNOWLEDGE_CATEGORIES)

    def generate_recursive_questions(self, text: str) -> list[RecursiveQuestion]:
        return list(RECURSIVE_QUESTIONS)

    def apply_structured_thinking(
        self, text: str, categories: list[KnowledgeCategory]
    ) -> list[StructuredPerspective]:
        return [StructuredPerspective(category=category) for category in categories]

    def decompose_problem(self, text: str) -> DecomposedProblem:
        return DecomposedProblem()

    def _generate_analysis(self, text: str) -> UcpfAnalysis:
        knowledge_mapping = self.map_knowledge_dimensions(text)
        return UcpfAnalysis(
            cognitive_state=self.assess_cognitive_state(text),
            knowledge_mapping=knowledge_mapping,
            recursive_questions=self.generate_recursive_questions(text),
            structured_perspectives=self.apply_structured_thinking(text, knowledge_mapping),
            problem_decomposition=self.decompose_problem(text),
            synthesis=Synthesis(),
        )
