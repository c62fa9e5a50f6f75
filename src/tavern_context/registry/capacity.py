"""Model capacity registry: (provider, model) -> context window size.

Lookups never fail. An unknown model falls back to its provider's default
and an unknown provider falls back to a conservative global default, so
callers always get a usable number.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tavern_context.exceptions import CapacityConfigError
from tavern_context.models.capacity import ModelCapacity
from tavern_context.models.provider import Provider

logger = logging.getLogger(__name__)

GLOBAL_DEFAULT_CONTEXT = 8192
EXTENDED_CONTEXT_THRESHOLD = 100_000
DEFAULT_RESPONSE_RESERVE = 4096

MIN_CONTEXT_TOKENS = 5
"""Smallest window that still gives every budget category at least one token."""

_ANTHROPIC_200K = 200_000
_GEMINI_1M = 1_000_000

MODEL_CONTEXT_LIMITS: Mapping[Provider, Mapping[str, int]] = MappingProxyType(
    {
        Provider.ANTHROPIC: MappingProxyType(
            {
                "claude-sonnet-4-5-20250929": _ANTHROPIC_200K,
                "claude-haiku-4-5-20251001": _ANTHROPIC_200K,
                "claude-opus-4-1-20250805": _ANTHROPIC_200K,
                "claude-sonnet-4-20250514": _ANTHROPIC_200K,
                "claude-opus-4-20250514": _ANTHROPIC_200K,
                "claude-3-opus-20240229": _ANTHROPIC_200K,
                "claude-3-haiku-20240307": _ANTHROPIC_200K,
            }
        ),
        Provider.OPENAI: MappingProxyType(
            {
                "gpt-4o": 128_000,
                "gpt-4o-mini": 128_000,
                "o1": 200_000,
                "o1-mini": 128_000,
                "gpt-3.5-turbo": 16_385,
                "gpt-3.5-turbo-16k": 16_385,
                "gpt-4-0613": 8192,
                "gpt-4-32k": 32_768,
            }
        ),
        Provider.GOOGLE: MappingProxyType(
            {
                "gemini-2.0-flash": _GEMINI_1M,
                "gemini-2.0-pro": _GEMINI_1M,
                "gemini-1.5-flash": _GEMINI_1M,
                "gemini-1.5-pro": _GEMINI_1M,
            }
        ),
        Provider.GROK: MappingProxyType(
            {
                "grok-2": 131_072,
                "grok-2-mini": 131_072,
            }
        ),
        # Local context depends on model and host memory; these are the advertised windows.
        Provider.OLLAMA: MappingProxyType(
            {
                "llama3.2:3b": 131_072,
                "llama3.1:8b": 131_072,
                "llama3.1:70b": 131_072,
                "mistral:7b": 32_768,
                "mixtral:8x7b": 32_768,
                "codellama:7b": 16_384,
                "phi3:mini": 4096,
                "qwen2:7b": 32_768,
            }
        ),
        Provider.OPENROUTER: MappingProxyType(
            {
                "anthropic/claude-3-opus": _ANTHROPIC_200K,
                "anthropic/claude-3-sonnet": _ANTHROPIC_200K,
                "anthropic/claude-3-haiku": _ANTHROPIC_200K,
                "openai/gpt-4-turbo": 128_000,
                "openai/gpt-4": 8192,
                "google/gemini-pro": _GEMINI_1M,
            }
        ),
        Provider.GAB_AI: MappingProxyType({"gab-ai-chat": 32_000}),
    }
)

PROVIDER_DEFAULT_CONTEXT: Mapping[Provider, int] = MappingProxyType(
    {
        Provider.ANTHROPIC: _ANTHROPIC_200K,
        Provider.OPENAI: 128_000,
        Provider.GOOGLE: _GEMINI_1M,
        Provider.GROK: 131_072,
        Provider.OLLAMA: 8192,
        Provider.OPENROUTER: 128_000,
        Provider.OPENAI_COMPATIBLE: 8192,
        Provider.GAB_AI: 32_000,
    }
)


ContextLimit = Annotated[int, Field(ge=MIN_CONTEXT_TOKENS)]


class CapacityOverrides(BaseModel):
    """Schema of a capacity override file.

    Example::

        {
            "models": {"ollama": {"llama3.3:70b": 131072}},
            "provider_defaults": {"openai_compatible": 32768},
            "global_default": 8192
        }
    """

    model_config = ConfigDict(extra="forbid")

    models: dict[str, dict[str, ContextLimit]] = {}
    provider_defaults: dict[str, ContextLimit] = {}
    global_default: ContextLimit | None = None


def _known_provider(name: str, source: str) -> Provider | None:
    provider = Provider.parse(name)
    if provider is Provider.UNKNOWN and name.strip().lower() != Provider.UNKNOWN.value:
        logger.warning("Skipping unknown provider %r in %s", name, source)
        return None
    return provider


class ModelCapacityRegistry:
    """Read-only lookup from (provider, model) to total context tokens.

    The built-in tables cover the providers the chat platform ships with.
    Deployments extend them without touching allocator logic by layering
    overrides on top::

        registry = get_default_registry().with_overrides(
            models={Provider.OLLAMA: {"llama3.3:70b": 131_072}},
        )
        registry.context_limit("ollama", "llama3.3:70b")  # 131072

    Instances are immutable; every ``with_*``/``from_*`` call returns a new
    registry. Every limit must be at least :data:`MIN_CONTEXT_TOKENS`.
    """

    __slots__ = ("_global_default", "_models", "_provider_defaults")

    def __init__(
        self,
        models: Mapping[Provider, Mapping[str, int]] | None = None,
        provider_defaults: Mapping[Provider, int] | None = None,
        global_default: int = GLOBAL_DEFAULT_CONTEXT,
    ) -> None:
        if global_default < MIN_CONTEXT_TOKENS:
            msg = f"global_default must be at least {MIN_CONTEXT_TOKENS}, got {global_default}"
            raise ValueError(msg)
        source_models = MODEL_CONTEXT_LIMITS if models is None else models
        source_defaults = PROVIDER_DEFAULT_CONTEXT if provider_defaults is None else provider_defaults
        for provider, table in source_models.items():
            for model, limit in table.items():
                if limit < MIN_CONTEXT_TOKENS:
                    msg = (
                        f"context limit for {provider}/{model} must be at least "
                        f"{MIN_CONTEXT_TOKENS}, got {limit}"
                    )
                    raise ValueError(msg)
        for provider, limit in source_defaults.items():
            if limit < MIN_CONTEXT_TOKENS:
                msg = (
                    f"default context limit for {provider} must be at least "
                    f"{MIN_CONTEXT_TOKENS}, got {limit}"
                )
                raise ValueError(msg)

        self._models: Mapping[Provider, Mapping[str, int]] = MappingProxyType(
            {
                Provider.parse(provider): MappingProxyType(dict(table))
                for provider, table in source_models.items()
            }
        )
        self._provider_defaults: Mapping[Provider, int] = MappingProxyType(
            {Provider.parse(provider): limit for provider, limit in source_defaults.items()}
        )
        self._global_default = global_default

    def __repr__(self) -> str:
        model_count = sum(len(table) for table in self._models.values())
        return (
            f"{type(self).__name__}(models={model_count}, "
            f"providers={len(self._provider_defaults)}, "
            f"global_default={self._global_default})"
        )

    @property
    def global_default(self) -> int:
        return self._global_default

    def context_limit(self, provider: Provider | str | None, model: str | None) -> int:
        """Total context window for the pair, degrading to defaults when unknown."""
        resolved = Provider.parse(provider)
        name = (model or "").strip()
        limit = self._models.get(resolved, {}).get(name)
        if limit is not None:
            return limit

        default = self._provider_defaults.get(resolved)
        if default is not None:
            logger.debug(
                "Unknown model %r for provider %s, using provider default %d",
                name,
                resolved.value,
                default,
            )
            return default

        logger.debug(
            "No capacity data for provider %s, using global default %d",
            resolved.value,
            self._global_default,
        )
        return self._global_default

    def capacity(self, provider: Provider | str | None, model: str | None) -> ModelCapacity:
        """Resolve the full :class:`ModelCapacity` record for the pair."""
        total = self.context_limit(provider, model)
        return ModelCapacity(
            provider=Provider.parse(provider),
            model=(model or "").strip(),
            total_tokens=total,
            extended=total >= EXTENDED_CONTEXT_THRESHOLD,
        )

    def known_models(self, provider: Provider | str | None) -> dict[str, int]:
        """Return a copy of the explicit model table for *provider*."""
        return dict(self._models.get(Provider.parse(provider), {}))

    def with_overrides(
        self,
        models: Mapping[Provider | str, Mapping[str, int]] | None = None,
        provider_defaults: Mapping[Provider | str, int] | None = None,
        global_default: int | None = None,
    ) -> ModelCapacityRegistry:
        """Return a new registry with the given entries layered over this one."""
        merged_models: dict[Provider, dict[str, int]] = {
            provider: dict(table) for provider, table in self._models.items()
        }
        for provider, table in (models or {}).items():
            merged_models.setdefault(Provider.parse(provider), {}).update(table)

        merged_defaults: dict[Provider, int] = dict(self._provider_defaults)
        for provider, limit in (provider_defaults or {}).items():
            merged_defaults[Provider.parse(provider)] = limit

        return type(self)(
            models=merged_models,
            provider_defaults=merged_defaults,
            global_default=global_default or self._global_default,
        )

    def with_mapping(self, data: Mapping[str, Any], source: str = "<mapping>") -> ModelCapacityRegistry:
        """Layer overrides described by a plain mapping (see :class:`CapacityOverrides`).

        Raises:
            CapacityConfigError: If the mapping does not match the schema.
        """
        try:
            overrides = CapacityOverrides.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid capacity overrides in {source}: {e.error_count()} error(s)"
            raise CapacityConfigError(msg) from e

        models: dict[Provider, dict[str, int]] = {}
        for name, table in overrides.models.items():
            provider = _known_provider(name, source)
            if provider is not None:
                models.setdefault(provider, {}).update(table)

        defaults: dict[Provider, int] = {}
        for name, limit in overrides.provider_defaults.items():
            provider = _known_provider(name, source)
            if provider is not None:
                defaults[provider] = limit

        return self.with_overrides(
            models=models,
            provider_defaults=defaults,
            global_default=overrides.global_default,
        )

    def with_json_file(self, file_path: str | Path) -> ModelCapacityRegistry:
        """Layer overrides loaded from a JSON file.

        Raises:
            CapacityConfigError: If the file is missing, not valid JSON, or
                does not match the override schema.
        """
        path = Path(file_path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"Failed to read capacity overrides from {path}"
            raise CapacityConfigError(msg) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"Failed to load capacity overrides from {path}: invalid JSON"
            raise CapacityConfigError(msg) from e

        if not isinstance(data, dict):
            msg = f"Capacity overrides in {path} must be a JSON object"
            raise CapacityConfigError(msg)
        return self.with_mapping(data, source=str(path))

    @classmethod
    def from_json_file(cls, file_path: str | Path) -> ModelCapacityRegistry:
        """Build a registry from the built-in tables plus a JSON override file."""
        return cls().with_json_file(file_path)


@functools.cache
def get_default_registry() -> ModelCapacityRegistry:
    """Get or create the registry backed by the built-in tables.

    Call ``get_default_registry.cache_clear()`` to reset the singleton
    (useful in tests).
    """
    return ModelCapacityRegistry()


def get_model_context_limit(
    provider: Provider | str | None,
    model: str | None,
    *,
    registry: ModelCapacityRegistry | None = None,
) -> int:
    """Total context window size for the model, in tokens."""
    return (registry or get_default_registry()).context_limit(provider, model)


def get_model_capacity(
    provider: Provider | str | None,
    model: str | None,
    *,
    registry: ModelCapacityRegistry | None = None,
) -> ModelCapacity:
    """Capacity record for the model, including the extended-context flag."""
    return (registry or get_default_registry()).capacity(provider, model)


def get_safe_input_limit(
    provider: Provider | str | None,
    model: str | None,
    response_reserve: int = DEFAULT_RESPONSE_RESERVE,
    *,
    registry: ModelCapacityRegistry | None = None,
) -> int:
    """Tokens usable for input once *response_reserve* is held back for the reply.

    Strictly below the window for any positive reserve. A zero reserve
    returns the full window, and a reserve at or above the window size
    yields ``0``.
    """
    if response_reserve < 0:
        msg = "response_reserve must be a non-negative integer"
        raise ValueError(msg)
    total = get_model_context_limit(provider, model, registry=registry)
    return max(0, total - response_reserve)


def has_extended_context(
    provider: Provider | str | None,
    model: str | None,
    *,
    registry: ModelCapacityRegistry | None = None,
) -> bool:
    """``True`` when the model's window reaches the large-context threshold."""
    return get_model_context_limit(provider, model, registry=registry) >= EXTENDED_CONTEXT_THRESHOLD
