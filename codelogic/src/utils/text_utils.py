"""
CodeLogic - Text Utilities
===========================
Stateless helpers for normalising user input before it reaches the
answer chain, and for rendering retrieved passages into the prompt.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import PurePosixPath

from langchain_core.documents import Document

# Each line break becomes one space; the rest of the text is untouched.
_NEWLINE_RE = re.compile(r"\r?\n")


def sanitize_question(question: str) -> str:
    """Trim the question and collapse every newline into a single space."""
    return _NEWLINE_RE.sub(" ", question.strip())


def is_blank(text: str | None) -> bool:
    return text is None or not text.strip()


def source_label(source: str) -> str:
    """Short display name for a source locator (its file name)."""
    return PurePosixPath(source.replace("\\", "/")).name or source


def format_documents(documents: Sequence[Document], empty: str = "") -> str:
    """
    Render passages into a numbered context block::

        [1] Source: International_Building_Code_2021.pdf
        <passage text>
    """
    if not documents:
        return empty

    blocks: list[str] = []
    for i, doc in enumerate(documents, 1):
        source = source_label(str(doc.metadata.get("source", "unknown")))
        blocks.append(f"[{i}] Source: {source}\n{doc.page_content}")

    return "\n\n".join(blocks)
