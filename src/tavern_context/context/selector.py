"""Recent-history selection under a token budget."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tavern_context._math import clamp_int
from tavern_context.models.chat import ChatMessage
from tavern_context.models.provider import Provider
from tavern_context.models.results import MessageSelection
from tavern_context.tokens.estimator import MessageLike, count_message_tokens

logger = logging.getLogger(__name__)

MIN_RECENT_MESSAGES = 4
MAX_RECENT_MESSAGES = 100
DEFAULT_TOKENS_PER_MESSAGE = 150


def calculate_recent_message_count(
    budget_tokens: int, avg_tokens_per_message: int = DEFAULT_TOKENS_PER_MESSAGE
) -> int:
    """How many recent messages to fetch for a budget, clamped to [4, 100].

    The minimum keeps two full exchanges even under a tiny budget. A
    non-positive average is treated as one token per message.
    """
    average = max(1, avg_tokens_per_message)
    return clamp_int(budget_tokens // average, MIN_RECENT_MESSAGES, MAX_RECENT_MESSAGES)


def _as_chat_message(message: MessageLike) -> ChatMessage:
    if isinstance(message, ChatMessage):
        return message
    return ChatMessage(role=message.get("role", ""), content=message.get("content", ""))


def select_recent_messages(
    messages: Sequence[MessageLike],
    budget_tokens: int,
    provider: Provider | str | None = None,
) -> MessageSelection:
    """Select the longest suffix of *messages* that fits *budget_tokens*.

    Messages are walked newest first and the walk stops before the running
    total would exceed the budget. Non-empty input always yields at least the
    newest message, even when it alone is over budget. The selection keeps
    chronological order, and ``truncated`` is ``True`` only when older
    messages were dropped.
    """
    if not messages:
        return MessageSelection()

    selected: list[ChatMessage] = []
    total = 0
    for message in reversed(messages):
        cost = count_message_tokens(message, provider)
        if selected and total + cost > budget_tokens:
            break
        if not selected and cost > budget_tokens:
            logger.debug(
                "Newest message alone costs %d tokens, over the %d token budget; keeping it",
                cost,
                budget_tokens,
            )
            selected.append(_as_chat_message(message))
            total = cost
            break
        selected.append(_as_chat_message(message))
        total += cost

    selected.reverse()
    truncated = len(selected) < len(messages)
    if truncated:
        logger.debug(
            "Kept %d of %d messages (%d tokens, budget %d)",
            len(selected),
            len(messages),
            total,
            budget_tokens,
        )
    return MessageSelection(messages=selected, token_count=total, truncated=truncated)
