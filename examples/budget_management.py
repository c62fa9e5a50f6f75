"""Example: Context Budget Management. Run with: python examples/budget_management.py

Demonstrates how the recommended allocation scales with the model's context
window, how a single chat request is assembled within that budget, and how
usage is reported back to the UI.
"""

from __future__ import annotations

from tavern_context import (
    Character,
    ChatMessage,
    Persona,
    ScoredMemory,
    build_context,
    format_token_count,
    get_context_status,
    get_recommended_context_allocation,
    will_exceed_context_limit,
)

# ---------------------------------------------------------------------------
# Example 1: Allocation across window sizes
# ---------------------------------------------------------------------------


def show_allocations() -> None:
    """Compare budgets for a small local model and a large hosted one."""
    print("=== Recommended Allocations ===")
    print()

    for provider, model in [
        ("ollama", "phi3:mini"),
        ("openai", "gpt-3.5-turbo"),
        ("anthropic", "claude-sonnet-4-5-20250929"),
    ]:
        allocation = get_recommended_context_allocation(provider, model)
        print(f"--- {provider}/{model} ({format_token_count(allocation.total_limit)}) ---")
        print(f"  System prompt:   {allocation.system_prompt}")
        print(f"  Memories:        {allocation.memories}")
        print(f"  Summary:         {allocation.conversation_summary}")
        print(f"  Recent messages: {allocation.recent_messages}")
        print(f"  Response:        {allocation.response_reserve}")
        print()


# ---------------------------------------------------------------------------
# Example 2: Assembling one request
# ---------------------------------------------------------------------------


def show_request_assembly() -> None:
    """Build the message list for a long conversation on a small model."""
    print("=== Request Assembly (ollama/phi3:mini) ===")
    print()

    character = Character(
        name="Aria",
        description="A wandering bard with a silver lute.",
        personality="Warm, witty and a little reckless.",
        scenario="A rainy night in a crowded tavern.",
    )
    persona = Persona(name="Sam", personality_traits="curious, cautious")
    memories = [
        ScoredMemory(content="Sam paid for Aria's room last winter.", score=0.92, importance=0.8),
        ScoredMemory(content="Aria is afraid of deep water.", score=0.41, importance=0.9),
        ScoredMemory(content="The innkeeper owes Aria three silver.", score=0.41, importance=0.3),
    ]
    history = [
        ChatMessage(
            role="user" if i % 2 == 0 else "assistant",
            content=f"Message {i}: " + "the story goes on and on " * 12,
        )
        for i in range(60)
    ]

    built = build_context(
        character,
        history,
        "Play us something cheerful!",
        "ollama",
        "phi3:mini",
        persona=persona,
        memories=memories,
        summary="Sam and Aria met at the door and argued about the weather.",
    )

    usage = built.token_usage
    print(f"  Messages sent:       {len(built.messages)}")
    print(f"  History kept:        {built.messages_included} of {len(history)}")
    print(f"  Memories included:   {built.memories_included}")
    print(f"  Token usage:         {usage.total} / {built.budget.input_limit}")
    for warning in built.warnings:
        print(f"  Warning: {warning}")
    print()

    status = get_context_status(usage.total, built.budget.total_limit)
    print(f"  Status: {status.level.value} ({status.percent_used}%) - {status.message}")
    print()


# ---------------------------------------------------------------------------
# Example 3: Pre-flight limit check
# ---------------------------------------------------------------------------


def show_limit_check() -> None:
    """Check whether a pasted document would overflow the model."""
    print("=== Limit Check ===")
    print()

    document = "A very long pasted document. " * 600
    for provider, model in [("ollama", "phi3:mini"), ("anthropic", "claude-sonnet-4-5-20250929")]:
        check = will_exceed_context_limit([], document, provider, model, response_reserve=1024)
        verdict = "exceeds" if check.will_exceed else "fits"
        print(
            f"  {provider}/{model}: {check.estimated_tokens} tokens {verdict} "
            f"the safe limit of {check.safe_limit} ({check.percent_used}%)"
        )
    print()


if __name__ == "__main__":
    show_allocations()
    show_request_assembly()
    show_limit_check()
