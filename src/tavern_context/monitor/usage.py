"""Context usage monitoring: percentages, warning levels and limit prediction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tavern_context._math import clamp_int
from tavern_context.models.provider import Provider
from tavern_context.models.results import ContextLevel, ContextStatus, LimitCheck
from tavern_context.registry.capacity import (
    DEFAULT_RESPONSE_RESERVE,
    ModelCapacityRegistry,
    get_safe_input_limit,
)
from tavern_context.tokens.estimator import MessageLike, count_messages_tokens, estimate_tokens

logger = logging.getLogger(__name__)


class UsageThresholds(BaseModel):
    """Thresholds for usage warnings and the summarization trigger."""

    model_config = ConfigDict(frozen=True)

    warning_percent: int = Field(default=80, ge=1, le=100)
    critical_percent: int = Field(default=95, ge=1, le=100)
    summarize_message_count: int = Field(default=50, ge=1)
    summarize_token_fraction: float = Field(default=0.6, gt=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_ordering(self) -> Self:
        if self.warning_percent >= self.critical_percent:
            msg = (
                f"warning_percent ({self.warning_percent}) must be below "
                f"critical_percent ({self.critical_percent})"
            )
            raise ValueError(msg)
        return self


DEFAULT_USAGE_THRESHOLDS = UsageThresholds()

_STATUS_MESSAGES = {
    ContextLevel.CRITICAL: (
        "Context nearly full. Consider starting a new conversation or generating a summary."
    ),
    ContextLevel.WARNING: "Context filling up. Older messages may be dropped soon.",
}


def get_context_usage_percent(used_tokens: int, limit_tokens: int) -> int:
    """Percentage of *limit_tokens* consumed, as an integer in [0, 100].

    A non-positive limit reports 100, meaning the context is exhausted.
    """
    if limit_tokens <= 0:
        return 100
    return clamp_int(round(used_tokens / limit_tokens * 100), 0, 100)


def get_context_warning_level(
    used_tokens: int,
    total_limit: int,
    thresholds: UsageThresholds | None = None,
) -> ContextLevel:
    """Classify usage as ``ok``, ``warning`` or ``critical``."""
    thresholds = thresholds or DEFAULT_USAGE_THRESHOLDS
    percent = get_context_usage_percent(used_tokens, total_limit)
    if percent >= thresholds.critical_percent:
        return ContextLevel.CRITICAL
    if percent >= thresholds.warning_percent:
        return ContextLevel.WARNING
    return ContextLevel.OK


def get_context_status(
    used_tokens: int,
    total_limit: int,
    thresholds: UsageThresholds | None = None,
) -> ContextStatus:
    """Usage status with a human-readable message for the chat UI."""
    percent = get_context_usage_percent(used_tokens, total_limit)
    level = get_context_warning_level(used_tokens, total_limit, thresholds)
    message = _STATUS_MESSAGES.get(level, f"Using {percent}% of context window.")
    return ContextStatus(
        level=level,
        percent_used=percent,
        remaining_tokens=max(0, total_limit - used_tokens),
        message=message,
    )


def will_exceed_context_limit(
    messages: Sequence[MessageLike],
    candidate_text: str,
    provider: Provider | str | None,
    model: str | None,
    response_reserve: int = DEFAULT_RESPONSE_RESERVE,
    *,
    registry: ModelCapacityRegistry | None = None,
) -> LimitCheck:
    """Predict whether sending *candidate_text* after *messages* overflows the model.

    The estimate covers the existing conversation plus the candidate text and
    is compared against the safe input limit, i.e. the context window minus
    *response_reserve*.
    """
    estimated = count_messages_tokens(messages, provider) + estimate_tokens(candidate_text, provider)
    safe_limit = get_safe_input_limit(provider, model, response_reserve, registry=registry)
    will_exceed = estimated > safe_limit
    if will_exceed:
        logger.debug(
            "Request for %s/%s estimated at %d tokens, over the safe limit of %d",
            Provider.parse(provider).value,
            model,
            estimated,
            safe_limit,
        )
    return LimitCheck(
        will_exceed=will_exceed,
        estimated_tokens=estimated,
        safe_limit=safe_limit,
        percent_used=get_context_usage_percent(estimated, safe_limit),
    )


def should_summarize_conversation(
    message_count: int,
    estimated_tokens: int,
    total_limit: int,
    thresholds: UsageThresholds | None = None,
) -> bool:
    """Whether a conversation is long enough to warrant a summary.

    Either signal is sufficient: more messages than the count threshold, or
    more tokens than the configured fraction of the context window.
    """
    thresholds = thresholds or DEFAULT_USAGE_THRESHOLDS
    if message_count > thresholds.summarize_message_count:
        return True
    if total_limit <= 0:
        return estimated_tokens > 0
    return estimated_tokens > total_limit * thresholds.summarize_token_fraction
