"""Chat-side input records: messages, memories, characters and personas.

These are read-only views of data owned by the persistence layer. Optional
text fields are normalised at the boundary: ``None`` becomes ``""`` so the
rest of the package only ever sees one "empty" representation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatMessage(BaseModel):
    """A single message in a conversation, ordered chronologically by the caller."""

    model_config = ConfigDict(frozen=True)

    role: str
    content: str

    @field_validator("role", "content", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ScoredMemory(BaseModel):
    """A persisted memory ranked by an external retrieval step.

    ``score`` is the relevance rank from the retriever; ``importance`` is the
    memory's own weight and only breaks ties between equal scores.
    """

    model_config = ConfigDict(frozen=True)

    content: str = ""
    summary: str = ""
    importance: float = Field(default=0.5, ge=0.0, le=1.0)
    score: float = 0.0

    @field_validator("content", "summary", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def text(self) -> str:
        """The text injected into context: the summary when present, else the content."""
        return self.summary.strip() or self.content.strip()


class Character(BaseModel):
    """The roleplay character whose system prompt is being assembled."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    personality: str = ""
    scenario: str = ""
    example_dialogues: str = ""
    system_prompt: str = ""

    @field_validator(
        "description",
        "personality",
        "scenario",
        "example_dialogues",
        "system_prompt",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Persona(BaseModel):
    """The user-side persona the character is talking to."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    personality_traits: str = ""

    @field_validator("description", "personality_traits", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value
