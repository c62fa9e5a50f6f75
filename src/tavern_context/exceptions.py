"""Custom exceptions for tavern-context."""

from __future__ import annotations

__all__ = [
    "CapacityConfigError",
    "TavernContextError",
    "TokenBudgetExceededError",
]


class TavernContextError(Exception):
    """Base exception for all tavern-context errors."""


class CapacityConfigError(TavernContextError):
    """Raised when a model capacity override file cannot be loaded."""


class TokenBudgetExceededError(TavernContextError):
    """Raised when assembled content cannot be made to fit its token budget."""

    def __init__(self, message: str, used_tokens: int = 0, budget_tokens: int = 0) -> None:
        super().__init__(message)
        self.used_tokens = used_tokens
        self.budget_tokens = budget_tokens
