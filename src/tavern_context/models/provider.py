"""LLM provider identifiers."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    """The closed set of providers the budget tables know about.

    ``UNKNOWN`` is the explicit fallback arm: every lookup keyed by provider
    has an entry or a default for it, so callers never branch on ``None``.
    """

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    GROK = "grok"
    OLLAMA = "ollama"
    OPENROUTER = "openrouter"
    OPENAI_COMPATIBLE = "openai_compatible"
    GAB_AI = "gab_ai"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Provider | str | None) -> Provider:
        """Normalise a provider identifier, mapping anything unrecognised to ``UNKNOWN``.

        Accepts enum members, any-case strings and ``-`` or ``_`` separators
        (``"OPENAI_COMPATIBLE"``, ``"openai-compatible"``).
        """
        if isinstance(value, cls):
            return value
        if not value:
            return cls.UNKNOWN
        key = str(value).strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN
