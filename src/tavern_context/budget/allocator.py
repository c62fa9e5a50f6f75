"""Budget allocation: split a model's context window into per-category budgets.

System prompt, memories, summary and the response reserve each get a share
of the window computed with a floor-and-scale rule::

    floor' = max(1, min(floor, int(total * floor_fraction)))
    budget = min(cap, max(floor', int(total * share)))

The cap bounds each category on very large windows; the floor is scaled
down on tiny ones. Recent messages receive whatever remains.

Allocation breakdown with the default policy:
    - System prompt: 5% (floor 512, cap 4000)
    - Memories: 4% (floor 256, cap 8000)
    - Conversation summary: 2% (floor 256, cap 4000)
    - Response reserve: 12.5% (floor 512, cap 8192)
    - Recent messages: remainder
"""

from __future__ import annotations

import logging
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tavern_context.models.budget import ContextAllocation, ContextBudget
from tavern_context.models.provider import Provider
from tavern_context.registry.capacity import ModelCapacityRegistry, get_model_context_limit

logger = logging.getLogger(__name__)


class ShareRule(BaseModel):
    """Floor-and-scale rule for one budget category."""

    model_config = ConfigDict(frozen=True)

    share: float = Field(gt=0.0, lt=1.0)
    floor: int = Field(ge=1)
    cap: int = Field(ge=1)

    @model_validator(mode="after")
    def validate_bounds(self) -> Self:
        if self.floor > self.cap:
            msg = f"floor ({self.floor}) must not exceed cap ({self.cap})"
            raise ValueError(msg)
        return self

    def apply(self, total_tokens: int, floor_fraction: float) -> int:
        """Budget for this category in a window of *total_tokens*."""
        floor = max(1, min(self.floor, int(total_tokens * floor_fraction)))
        return min(self.cap, max(floor, int(total_tokens * self.share)))


class AllocationPolicy(BaseModel):
    """Tunable constants for :func:`get_recommended_context_allocation`.

    The validator guarantees that the four fixed categories can never consume
    the whole window, so recent messages always keep a positive remainder.
    """

    model_config = ConfigDict(frozen=True)

    system_prompt: ShareRule = ShareRule(share=0.05, floor=512, cap=4000)
    memories: ShareRule = ShareRule(share=0.04, floor=256, cap=8000)
    conversation_summary: ShareRule = ShareRule(share=0.02, floor=256, cap=4000)
    response_reserve: ShareRule = ShareRule(share=0.125, floor=512, cap=8192)
    floor_fraction: float = Field(default=0.125, gt=0.0, le=0.2)

    @model_validator(mode="after")
    def validate_remainder(self) -> Self:
        worst_case = sum(
            max(rule.share, self.floor_fraction)
            for rule in (
                self.system_prompt,
                self.memories,
                self.conversation_summary,
                self.response_reserve,
            )
        )
        if worst_case >= 0.9:
            msg = (
                f"Fixed categories may take {worst_case:.0%} of the window; "
                "at least 10% must remain for recent messages"
            )
            raise ValueError(msg)
        return self


DEFAULT_ALLOCATION_POLICY = AllocationPolicy()


def get_recommended_context_allocation(
    provider: Provider | str | None,
    model: str | None,
    *,
    policy: AllocationPolicy | None = None,
    registry: ModelCapacityRegistry | None = None,
) -> ContextAllocation:
    """Recommend how to split the model's context window.

    Parameters:
        provider: Provider identifier; unknown values use fallback capacity.
        model: Model identifier; unknown values use the provider default.
        policy: Share/floor/cap constants. Defaults to
            :data:`DEFAULT_ALLOCATION_POLICY`.
        registry: Capacity registry. Defaults to the built-in tables.

    Returns:
        A ``ContextAllocation`` whose fields are all positive and sum to
        at most ``total_limit``. The registry guarantees a window of at least
        ``MIN_CONTEXT_TOKENS``, which leaves one token for each category.
    """
    policy = policy or DEFAULT_ALLOCATION_POLICY
    total = get_model_context_limit(provider, model, registry=registry)

    fraction = policy.floor_fraction
    system_prompt = policy.system_prompt.apply(total, fraction)
    memories = policy.memories.apply(total, fraction)
    summary = policy.conversation_summary.apply(total, fraction)
    reserve = policy.response_reserve.apply(total, fraction)
    recent = total - system_prompt - memories - summary - reserve

    logger.debug(
        "Allocated %d tokens for %s/%s: system=%d memories=%d summary=%d recent=%d reserve=%d",
        total,
        Provider.parse(provider).value,
        model,
        system_prompt,
        memories,
        summary,
        recent,
        reserve,
    )
    return ContextAllocation(
        provider=Provider.parse(provider),
        model=(model or "").strip(),
        total_limit=total,
        system_prompt=system_prompt,
        memories=memories,
        conversation_summary=summary,
        recent_messages=recent,
        response_reserve=reserve,
    )


def calculate_context_budget(
    provider: Provider | str | None,
    model: str | None,
    *,
    policy: AllocationPolicy | None = None,
    registry: ModelCapacityRegistry | None = None,
) -> ContextBudget:
    """Compute the :class:`ContextBudget` for one request to the model."""
    return get_recommended_context_allocation(
        provider, model, policy=policy, registry=registry
    ).to_budget()
