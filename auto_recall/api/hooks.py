from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from auto_recall.schemas.hooks import (
    AgentEndEvent,
    AgentEndResponse,
    PromptBuildEvent,
    PromptBuildResponse,
)
from auto_recall.services.plugin import AutoRecallPlugin

router = APIRouter(prefix="/hooks", tags=["hooks"])


def get_plugin(request: Request) -> AutoRecallPlugin:
    """Dependency to access the plugin from app state."""

    return request.app.state.plugin


@router.post("/before-prompt-build", response_model=PromptBuildResponse)
async def before_prompt_build(
    payload: PromptBuildEvent,
    plugin: AutoRecallPlugin = Depends(get_plugin),
) -> PromptBuildResponse:
    """Return memory context for the host to prepend to the prompt."""

    directive = await plugin.before_prompt_build(payload.prompt, payload.session_key)
    if directive is None:
        return PromptBuildResponse()
    return PromptBuildResponse(prepend_context=directive["prependContext"])


@router.post("/agent-end", response_model=AgentEndResponse)
async def agent_end(
    payload: AgentEndEvent,
    plugin: AutoRecallPlugin = Depends(get_plugin),
) -> AgentEndResponse:
    """Capture memorable user messages from a finished conversation."""

    stored = await plugin.agent_end(payload.success, payload.messages)
    return AgentEndResponse(stored=stored)
