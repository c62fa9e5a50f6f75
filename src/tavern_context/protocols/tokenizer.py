"""Structural interface for anything that can count and cut tokens."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Tokenizer(Protocol):
    """Token counter bound to one provider's notion of a token.

    :class:`~tavern_context.tokens.estimator.CharRatioEstimator` is the
    built-in implementation. A deployment that ships a real tokenizer for its
    model only needs these two methods to stand in for it.
    """

    def count_tokens(self, text: str) -> int:
        """Return the token cost of *text*; ``0`` for the empty string."""
        ...

    def truncate_to_tokens(self, text: str, max_tokens: int) -> str:
        """Return a prefix-based cut of *text* costing at most *max_tokens*.

        Text already within the limit comes back unchanged.
        """
        ...
