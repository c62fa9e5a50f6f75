"""Render a conversation summary into a budget-bounded context block."""

from __future__ import annotations

import logging

from tavern_context.models.provider import Provider
from tavern_context.models.results import SummaryContext
from tavern_context.tokens.estimator import estimate_tokens, truncate_to_token_limit

logger = logging.getLogger(__name__)

SUMMARY_HEADER = "## Previous Conversation Summary"


def format_summary_for_context(
    summary: str | None,
    budget_tokens: int,
    provider: Provider | str | None = None,
) -> SummaryContext:
    """Render *summary* under :data:`SUMMARY_HEADER`, truncating the body to fit.

    A missing or blank summary gives an empty result, as does a budget too
    small for the header. ``token_count`` never exceeds *budget_tokens*.
    """
    body = (summary or "").strip()
    if not body:
        return SummaryContext()

    full = f"{SUMMARY_HEADER}\n{body}"
    full_tokens = estimate_tokens(full, provider)
    if full_tokens <= budget_tokens:
        return SummaryContext(content=full, token_count=full_tokens)

    available = budget_tokens - estimate_tokens(SUMMARY_HEADER + "\n", provider)
    truncated = truncate_to_token_limit(body, available, provider) if available > 0 else ""
    if not truncated:
        logger.debug("Summary dropped: no room beside the header in %d tokens", budget_tokens)
        return SummaryContext()

    content = f"{SUMMARY_HEADER}\n{truncated}"
    logger.debug("Summary truncated from %d to fit %d tokens", full_tokens, budget_tokens)
    return SummaryContext(
        content=content,
        token_count=estimate_tokens(content, provider),
        truncated=True,
    )
