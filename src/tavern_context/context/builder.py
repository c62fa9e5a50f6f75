"""Request assembly: combine every context category under one budget."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from tavern_context.budget.allocator import AllocationPolicy, calculate_context_budget
from tavern_context.context.selector import select_recent_messages
from tavern_context.exceptions import TokenBudgetExceededError
from tavern_context.formatters.memories import format_memories_for_context, rank_memories
from tavern_context.formatters.prompt import build_system_prompt
from tavern_context.formatters.summary import format_summary_for_context
from tavern_context.models.chat import Character, ChatMessage, Persona, ScoredMemory
from tavern_context.models.provider import Provider
from tavern_context.models.results import BuiltContext, TokenUsage
from tavern_context.monitor.usage import should_summarize_conversation
from tavern_context.registry.capacity import ModelCapacityRegistry
from tavern_context.tokens.estimator import (
    CONVERSATION_OVERHEAD_TOKENS,
    MessageLike,
    count_message_tokens,
    count_messages_tokens,
    estimate_tokens,
    truncate_to_token_limit,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_MEMORIES = 10

SUMMARIZE_SUGGESTION = (
    "Conversation is getting long. Consider generating a summary for better "
    "context management."
)


def build_context(
    character: Character,
    history: Sequence[MessageLike],
    new_user_message: str,
    provider: Provider | str | None,
    model: str | None,
    *,
    persona: Persona | None = None,
    memories: Iterable[ScoredMemory] = (),
    summary: str | None = None,
    system_prompt_override: str | None = None,
    scenario: str | None = None,
    max_memories: int = DEFAULT_MAX_MEMORIES,
    policy: AllocationPolicy | None = None,
    registry: ModelCapacityRegistry | None = None,
    strict: bool = False,
) -> BuiltContext:
    """Assemble the message list for one model request.

    Steps, in order:

    1. Compute the :class:`~tavern_context.models.budget.ContextBudget`.
    2. Build the system prompt, truncating it to its budget if needed.
    3. Format up to *max_memories* of the best-ranked *memories*.
    4. Format the conversation *summary*.
    5. Select recent *history* within whatever the input limit has left
       after the wrapped system message, the new message and the
       per-conversation overhead, capped at the recent-messages budget.
    6. Suggest summarization when history was dropped and the conversation
       is long.

    The result holds one system message (prompt, memories and summary
    separated by blank lines), the selected history, then the new user
    message. ``token_usage.total`` equals
    ``count_messages_tokens(messages, provider)``.

    Raises:
        ValueError: If *max_memories* is negative.
        TokenBudgetExceededError: If *strict* is set and the assembled input
            exceeds the window minus the response reserve. This happens when
            the newest history message alone is over budget, or when the
            system and new messages leave no room at all.
    """
    if max_memories < 0:
        msg = f"max_memories must be non-negative, got {max_memories}"
        raise ValueError(msg)

    warnings: list[str] = []
    budget = calculate_context_budget(provider, model, policy=policy, registry=registry)

    system_prompt = build_system_prompt(
        character, persona, system_prompt_override, scenario=scenario
    )
    prompt_tokens = estimate_tokens(system_prompt, provider)
    if prompt_tokens > budget.system_prompt_budget:
        warning = (
            f"System prompt ({prompt_tokens} tokens) exceeds budget "
            f"({budget.system_prompt_budget}). Truncating."
        )
        logger.warning("%s", warning)
        warnings.append(warning)
        system_prompt = truncate_to_token_limit(
            system_prompt, budget.system_prompt_budget, provider
        )
        prompt_tokens = estimate_tokens(system_prompt, provider)

    top_memories = rank_memories(memories)[:max_memories]
    memory_context = format_memories_for_context(top_memories, budget.memory_budget, provider)
    summary_context = format_summary_for_context(summary, budget.summary_budget, provider)

    system_content = "\n\n".join(
        part for part in (system_prompt, memory_context.content, summary_context.content) if part
    )
    system_message = ChatMessage(role="system", content=system_content)
    system_tokens = count_message_tokens(system_message, provider)

    new_message = ChatMessage(role="user", content=new_user_message)
    new_message_tokens = count_message_tokens(new_message, provider)

    fixed = system_tokens + new_message_tokens + CONVERSATION_OVERHEAD_TOKENS
    history_budget = max(0, min(budget.recent_messages_budget, budget.input_limit - fixed))

    selection = select_recent_messages(history, history_budget, provider)
    if selection.truncated and should_summarize_conversation(
        len(history), count_messages_tokens(history, provider), budget.total_limit
    ):
        logger.info(
            "Dropped %d of %d history messages; suggesting a summary",
            len(history) - len(selection.messages),
            len(history),
        )
        warnings.append(SUMMARIZE_SUGGESTION)

    messages = [system_message]
    messages.extend(selection.messages)
    messages.append(new_message)

    sections = prompt_tokens + memory_context.token_count + summary_context.token_count
    usage = TokenUsage(
        system_prompt=prompt_tokens,
        memories=memory_context.token_count,
        summary=summary_context.token_count,
        recent_messages=selection.token_count,
        new_message=new_message_tokens,
        framing=system_tokens - sections + CONVERSATION_OVERHEAD_TOKENS,
    )
    if strict and usage.total > budget.input_limit:
        msg = (
            f"Assembled context ({usage.total} tokens) exceeds the input limit "
            f"({budget.input_limit}) for {Provider.parse(provider).value}/{model}"
        )
        raise TokenBudgetExceededError(
            msg, used_tokens=usage.total, budget_tokens=budget.input_limit
        )

    logger.debug(
        "Built context for %s/%s: %d tokens (%d history messages, %d memories)",
        Provider.parse(provider).value,
        model,
        usage.total,
        len(selection.messages),
        memory_context.memories_used,
    )
    return BuiltContext(
        messages=messages,
        token_usage=usage,
        budget=budget,
        system_prompt=system_prompt,
        included_summary=bool(summary_context.content),
        memories_included=memory_context.memories_used,
        messages_included=len(selection.messages),
        messages_truncated=selection.truncated,
        warnings=warnings,
    )
