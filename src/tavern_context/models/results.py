"""Result models returned by the selector, formatters, monitor and builder."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import TypedDict

from .budget import ContextBudget
from .chat import ChatMessage, ScoredMemory


class MessageDict(TypedDict):
    """Chat-completion style message payload."""

    role: str
    content: str


class ContextLevel(StrEnum):
    """How close token usage is to the context limit."""

    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


class MessageSelection(BaseModel):
    """Suffix of the conversation history that fits a token budget."""

    model_config = ConfigDict(frozen=True)

    messages: list[ChatMessage] = Field(default_factory=list)
    token_count: int = Field(default=0, ge=0)
    truncated: bool = False


class MemoryContext(BaseModel):
    """Rendered memory block ready for injection into the system message."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    token_count: int = Field(default=0, ge=0)
    memories_used: int = Field(default=0, ge=0)
    included: list[ScoredMemory] = Field(default_factory=list)


class SummaryContext(BaseModel):
    """Rendered conversation summary block."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    token_count: int = Field(default=0, ge=0)
    truncated: bool = False


class ContextStatus(BaseModel):
    """Usage classification for display in the chat UI."""

    model_config = ConfigDict(frozen=True)

    level: ContextLevel
    percent_used: int = Field(ge=0, le=100)
    remaining_tokens: int = Field(default=0, ge=0)
    message: str


class LimitCheck(BaseModel):
    """Prediction of whether a prospective request fits the safe input limit."""

    model_config = ConfigDict(frozen=True)

    will_exceed: bool
    estimated_tokens: int = Field(ge=0)
    safe_limit: int = Field(ge=0)
    percent_used: int = Field(ge=0, le=100)


class TokenUsage(BaseModel):
    """Token usage breakdown of an assembled request.

    ``framing`` is the wrapping no single category owns: the system message's
    role label, overhead and section separators, plus the per-conversation
    overhead.
    """

    model_config = ConfigDict(frozen=True)

    system_prompt: int = 0
    memories: int = 0
    summary: int = 0
    recent_messages: int = 0
    new_message: int = 0
    framing: int = 0

    @property
    def total(self) -> int:
        return (
            self.system_prompt
            + self.memories
            + self.summary
            + self.recent_messages
            + self.new_message
            + self.framing
        )


class BuiltContext(BaseModel):
    """The final output of context assembly for one model request."""

    model_config = ConfigDict(frozen=True)

    messages: list[ChatMessage]
    token_usage: TokenUsage
    budget: ContextBudget
    system_prompt: str = ""
    included_summary: bool = False
    memories_included: int = 0
    messages_included: int = 0
    messages_truncated: bool = False
    warnings: list[str] = Field(default_factory=list)

    def as_dicts(self) -> list[MessageDict]:
        """Return the messages as ``{"role", "content"}`` dicts for chat-completion APIs."""
        return [MessageDict(role=m.role, content=m.content) for m in self.messages]
