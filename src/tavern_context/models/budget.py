"""Context budget models."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .provider import Provider


class ContextBudget(BaseModel):
    """Per-request split of a model's context window into named sub-budgets.

    The five sub-budgets never sum to more than ``total_limit``.
    """

    model_config = ConfigDict(frozen=True)

    total_limit: int = Field(gt=0)
    system_prompt_budget: int = Field(gt=0)
    memory_budget: int = Field(gt=0)
    summary_budget: int = Field(gt=0)
    recent_messages_budget: int = Field(gt=0)
    response_reserve: int = Field(gt=0)

    @model_validator(mode="after")
    def validate_allocations(self) -> Self:
        if self.allocated_tokens > self.total_limit:
            msg = (
                f"Allocated tokens ({self.allocated_tokens}) exceed total limit "
                f"({self.total_limit})"
            )
            raise ValueError(msg)
        return self

    @property
    def allocated_tokens(self) -> int:
        """Sum of all sub-budgets including the response reserve."""
        return (
            self.system_prompt_budget
            + self.memory_budget
            + self.summary_budget
            + self.recent_messages_budget
            + self.response_reserve
        )

    @property
    def input_limit(self) -> int:
        """Tokens available for the prompt once the response reserve is taken out."""
        return self.total_limit - self.response_reserve


class ContextAllocation(BaseModel):
    """Recommended allocation for a specific provider and model."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    model: str
    total_limit: int = Field(gt=0)
    system_prompt: int = Field(gt=0)
    memories: int = Field(gt=0)
    conversation_summary: int = Field(gt=0)
    recent_messages: int = Field(gt=0)
    response_reserve: int = Field(gt=0)

    def to_budget(self) -> ContextBudget:
        """Convert the allocation into the ``ContextBudget`` consumed by request assembly."""
        return ContextBudget(
            total_limit=self.total_limit,
            system_prompt_budget=self.system_prompt,
            memory_budget=self.memories,
            summary_budget=self.conversation_summary,
            recent_messages_budget=self.recent_messages,
            response_reserve=self.response_reserve,
        )
