from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field

from auto_recall.schemas.common import APIModel


class PromptBuildEvent(APIModel):
    """Payload of the host's prompt-build hook."""

    prompt: str = Field(default="")
    session_key: Optional[str] = Field(default=None, alias="sessionKey")


class PromptBuildResponse(APIModel):
    """Directive returned to the host; the context is prepended to the prompt."""

    prepend_context: Optional[str] = Field(default=None, alias="prependContext")


class AgentEndEvent(APIModel):
    """Payload of the host's conversation-end hook."""

    success: bool = Field(default=False)
    # Messages stay loosely typed; text extraction tolerates any shape.
    messages: List[Any] = Field(default_factory=list)


class AgentEndResponse(APIModel):
    """Number of memories newly captured by the run."""

    stored: int
