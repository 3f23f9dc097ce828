"""
Token budget estimation and history trimming.

The assistant talks to several backends with different tokenizers, so token
counts use a conservative character heuristic: 1 token per 4 characters.
"""

from typing import Sequence

from tfassist.schemas.messages import Message

CHARS_PER_TOKEN = 4

# Approximate per-message framing cost in chat APIs
PER_MESSAGE_OVERHEAD = 4


def estimate(text: str) -> int:
    """
    Estimate the token count of a text string.

    Args:
        text: Input text

    Returns:
        len(text) // 4, but at least 1 for any non-empty text.
    """
    if not text:
        return 0
    return max(1, len(text) // CHARS_PER_TOKEN)


def estimate_messages(messages: Sequence[Message]) -> int:
    """Estimate the total token cost of a message sequence (role + content + overhead)."""
    total = 0
    for message in messages:
        total += PER_MESSAGE_OVERHEAD
        total += estimate(message.role)
        total += estimate(message.content)
    return total


def fits(messages: Sequence[Message], max_tokens: int) -> bool:
    """Whether the messages alone fit within max_tokens."""
    return estimate_messages(messages) <= max_tokens


def trim_history(
    fixed: Sequence[Message],
    history: Sequence[Message],
    max_tokens: int,
) -> list[Message]:
    """
    Drop history messages oldest-first until fixed + history fits the budget.

    Fixed messages (system prompt, knowledge, workspace, current user message)
    are never touched. If they alone exceed the budget the result is empty;
    callers should warn about that separately.

    Args:
        fixed: Messages that must be sent regardless of budget
        history: Prior conversation messages, oldest first
        max_tokens: Estimated token budget for the whole context

    Returns:
        A contiguous newest-biased suffix of history.
    """
    fixed_tokens = estimate_messages(fixed)
    # History is typically <= 20 messages; a linear scan is enough.
    start = 0
    remaining = estimate_messages(history)
    while start < len(history) and fixed_tokens + remaining > max_tokens:
        remaining -= estimate_messages([history[start]])
        start += 1
    return list(history[start:])
