"""Render ranked memories into a budget-bounded context block."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tavern_context.models.chat import ScoredMemory
from tavern_context.models.provider import Provider
from tavern_context.models.results import MemoryContext
from tavern_context.tokens.estimator import ELLIPSIS, estimate_tokens, truncate_to_token_limit

logger = logging.getLogger(__name__)

MEMORY_HEADER = "## Relevant Memories"
LINE_PREFIX = "- "


def rank_memories(memories: Iterable[ScoredMemory]) -> list[ScoredMemory]:
    """Order memories by score, then importance, both descending.

    The sort is stable, so memories equal on both keys keep the order the
    retriever returned them in. Memories with no text are dropped.
    """
    return sorted(
        (memory for memory in memories if memory.text),
        key=lambda memory: (-memory.score, -memory.importance),
    )


def format_memories_for_context(
    memories: Iterable[ScoredMemory],
    budget_tokens: int,
    provider: Provider | str | None = None,
) -> MemoryContext:
    """Render the best-ranked memories that fit *budget_tokens*.

    Each memory becomes one ``- <text>`` line under :data:`MEMORY_HEADER`,
    using the memory's summary when it has one. Lines are added in rank
    order until the next one would overflow the budget. When the header
    fits but not even the top memory does, a truncated form of the top
    memory is used instead. The returned ``token_count`` never exceeds
    *budget_tokens*; if nothing useful fits, the result is empty.
    """
    ranked = rank_memories(memories)
    if not ranked:
        return MemoryContext()

    header_tokens = estimate_tokens(MEMORY_HEADER + "\n", provider)
    if header_tokens > budget_tokens:
        logger.debug("Memory header alone exceeds the %d token budget", budget_tokens)
        return MemoryContext()

    lines = [MEMORY_HEADER]
    used = header_tokens
    included: list[ScoredMemory] = []
    for memory in ranked:
        line = f"{LINE_PREFIX}{memory.text}"
        cost = estimate_tokens(line + "\n", provider)
        if used + cost > budget_tokens:
            break
        lines.append(line)
        used += cost
        included.append(memory)

    if not included:
        return _truncated_top_memory(ranked[0], budget_tokens, header_tokens, provider)

    content = "\n".join(lines)
    logger.debug("Included %d of %d memories", len(included), len(ranked))
    return MemoryContext(
        content=content,
        token_count=estimate_tokens(content, provider),
        memories_used=len(included),
        included=included,
    )


def _truncated_top_memory(
    memory: ScoredMemory,
    budget_tokens: int,
    header_tokens: int,
    provider: Provider | str | None,
) -> MemoryContext:
    available = budget_tokens - header_tokens - estimate_tokens(LINE_PREFIX, provider)
    if available <= estimate_tokens(ELLIPSIS, provider):
        return MemoryContext()

    text = truncate_to_token_limit(memory.text, available, provider)
    content = f"{MEMORY_HEADER}\n{LINE_PREFIX}{text}"
    token_count = estimate_tokens(content, provider)
    if token_count > budget_tokens:
        return MemoryContext()

    logger.debug("Top memory truncated to fit the %d token budget", budget_tokens)
    return MemoryContext(
        content=content,
        token_count=token_count,
        memories_used=1,
        included=[memory],
    )
