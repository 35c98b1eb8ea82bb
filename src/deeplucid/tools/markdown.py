"""Markdown building blocks shared by the tool renderers."""
from __future__ import annotations

from collections.abc import Iterable


def section(title: str, content: str) -> str:
    return f"## {title}\n\n{content}\n\n"


def bullets(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def labelled_list(label: str, items: list[str]) -> str:
    """``**Label:**`` followed by a bullet list, or empty when there are no items."""
    if not items:
        return ""
    return f"**{label}:**\n{bullets(items)}"
