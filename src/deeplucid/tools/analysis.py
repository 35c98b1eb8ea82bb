"""analyze_problem: run a problem statement through the full UCPF framework."""
from __future__ import annotations

from deeplucid.engine.creative import CreativePatterns, CreativePerspective
from deeplucid.engine.ucpf import StructuredPerspective, UcpfAnalysis, UcpfCore
from deeplucid.tools.markdown import bullets, labelled_list, section


def _format_perspective(p: CreativePerspective) -> str:
    text = f"### {p.viewpoint}\n**Rationale:** {p.rationale}\n"
    text += labelled_list("Implications", p.implications)
    if p.potential_outcomes:
        text += "\n\n" + labelled_list("Potential Outcomes", p.potential_outcomes)
    return text


def _format_structured(perspectives: list[StructuredPerspective]) -> str:
    blocks = []
    for p in perspectives:
        block = f"### {p.category.label}\n"
        block += bullets(p.insights) if p.insights else "*No specific insights identified.*"
        blocks.append(block)
    return "\n\n".join(blocks)


def format_analysis(
    analysis: UcpfAnalysis,
    creative_insights: list[CreativePerspective] | None = None,
    structured: list[StructuredPerspective] | None = None,
) -> str:
    """Render a UCPF analysis as Markdown.

    Args:
        analysis: Output of ``UcpfCore.process_input``
        creative_insights: Optional creative perspectives to include
        structured: Optional structured perspectives (detailed mode)
    """
    state = analysis.cognitive_state
    result = section(
        "Cognitive State Assessment",
        f"Current cognitive state: **{state.type}**\n\n"
        f"{state.description}\n\n"
        "**Characteristics:**\n" + bullets(state.characteristics),
    )

    categories = "\n\n".join(
        f"### {c.label}\n**Description:** {c.description}\n"
        + (f"**Examples:**\n{bullets(c.examples)}" if c.examples else "*No specific examples identified.*")
        for c in analysis.knowledge_mapping
    )
    result += section(
        "Knowledge Dimension Mapping",
        "The problem space has been mapped across the following knowledge dimensions:\n\n" + categories,
    )

    questions = "\n\n".join(
        f"### {q.question}\n**Purpose:** {q.purpose}\n**Target Area:** {q.target_area}"
        for q in analysis.recursive_questions
    )
    result += section(
        "Recursive Self-Questioning",
        "The following questions challenge initial assumptions and perspectives:\n\n" + questions,
    )

    if structured:
        result += section(
            "Structured Perspectives",
            "Insights for each knowledge category:\n\n" + _format_structured(structured),
        )

    if creative_insights:
        result += section(
            "Creative Perspectives",
            "These alternative viewpoints open new possibilities:\n\n"
            + "\n\n".join(_format_perspective(p) for p in creative_insights),
        )

    synthesis = analysis.synthesis
    insights = (
        bullets(synthesis.insights)
        if synthesis.insights
        else "- *Analysis indicates further exploration needed to generate specific insights.*"
    )
    uncertainties = (
        bullets(synthesis.uncertainties)
        if synthesis.uncertainties
        else "- *No specific uncertainties identified.*"
    )
    result += section(
        "Synthesis & Integration",
        f"**Key Insights:**\n{insights}"
        f"\n\n**Confidence Level:** {synthesis.confidence_level * 100:.0f}%"
        f"\n\n**Uncertainties:**\n{uncertainties}",
    )
    return result


def analyze_problem(
    problem: str,
    core: UcpfCore,
    patterns: CreativePatterns,
    session_id: str | None = None,
    detailed: bool = False,
) -> str:
    """Analyze a problem and return the Markdown report."""
    analysis = core.process_input(problem, session_id)
    creative_insights = patterns.generate_perspectives(problem, 3)
    structured = (
        patterns.enhance_perspectives(analysis.structured_perspectives, problem)
        if detailed
        else None
    )
    return format_analysis(analysis, creative_insights, structured)
