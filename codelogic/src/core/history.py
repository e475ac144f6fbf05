"""
CodeLogic - Conversation History Formatting
============================================
Serialises the caller-owned ``[(question, answer), ...]`` history into
the transcript the condense-question prompt expects::

    Human: <question 1>
    Assistant: <answer 1>
    Human: <question 2>
    Assistant: <answer 2>
"""

from __future__ import annotations

from collections.abc import Sequence

ChatTurn = tuple[str, str]


def format_chat_history(turns: Sequence[Sequence[str]], max_turns: int | None = None) -> str:
    """
    Render *turns* oldest first, one ``Human:``/``Assistant:`` pair each.

    ``max_turns`` keeps only the most recent N turns; ``None`` keeps all.
    """
    if max_turns is not None:
        turns = turns[-max_turns:] if max_turns > 0 else []

    return "\n".join(f"Human: {question}\nAssistant: {answer}" for question, answer in turns)
