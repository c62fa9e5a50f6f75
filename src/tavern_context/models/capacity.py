"""Model capacity model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .provider import Provider


class ModelCapacity(BaseModel):
    """Total context capacity of one (provider, model) pair.

    Static, configuration-like data; never mutated after creation.
    """

    model_config = ConfigDict(frozen=True)

    provider: Provider
    model: str
    total_tokens: int = Field(gt=0)
    extended: bool = False
