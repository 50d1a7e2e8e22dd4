from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from auto_recall.core.config import Settings
from auto_recall.schemas.runtime_settings import RuntimeSettingsResponse
from auto_recall.services.plugin import AutoRecallPlugin

router = APIRouter(prefix="/api/debug/settings", tags=["debug"])


def get_plugin(request: Request) -> AutoRecallPlugin:
    """Dependency to access the plugin from app state."""

    return request.app.state.plugin


def get_process_settings(request: Request) -> Settings:
    """Dependency to access process settings from app state."""

    return request.app.state.settings


@router.get("", response_model=RuntimeSettingsResponse)
async def get_runtime_settings(
    plugin: AutoRecallPlugin = Depends(get_plugin),
    settings: Settings = Depends(get_process_settings),
) -> RuntimeSettingsResponse:
    """Return the resolved recall settings currently active in process memory."""

    memory_dir = plugin.memory_dir() if plugin.settings.auto_capture else None
    return RuntimeSettingsResponse(
        settings=plugin.settings.as_public_dict(),
        memory_search_url=settings.memory_search_url,
        auto_capture_dir=str(memory_dir) if memory_dir is not None else None,
    )
