from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import httpx

from auto_recall.core.config import Settings
from auto_recall.core.recall_config import RecallSettings, resolve_recall_settings
from auto_recall.memory.search_tool import SearchToolFactory, create_search_tool_factory
from auto_recall.services.capture_service import capture_memories
from auto_recall.services.recall_service import recall_memories

logger = logging.getLogger(__name__)

MEMORY_SUBDIR = "memory"


class AutoRecallPlugin:
    """Bind recall and capture to the host's prompt-build and agent-end events."""

    plugin_id = "memory-auto-recall"
    name = "Memory Auto-Recall"
    description = "Auto-inject relevant memories into context before each agent prompt"

    def __init__(
        self,
        *,
        plugin_config: Any,
        host_config: Any,
        search_tool_factory: SearchToolFactory,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.settings: RecallSettings = resolve_recall_settings(plugin_config)
        self._host_config = host_config
        self._search_tool_factory = search_tool_factory
        self._environ = environ if environ is not None else os.environ

    async def before_prompt_build(
        self, prompt: str, session_key: Optional[str] = None
    ) -> Optional[dict[str, str]]:
        """Return ``{"prependContext": block}`` when memories should be injected."""

        try:
            search = self._search_tool_factory(session_key)
            block = await recall_memories(prompt, self.settings, search)
        except Exception as exc:  # noqa: BLE001
            logger.warning("memory-auto-recall: recall error: %s", exc)
            return None
        if block is None:
            return None
        return {"prependContext": block}

    async def agent_end(self, success: bool, messages: Optional[list[Any]]) -> int:
        """Capture memorable user messages; return how many were newly stored."""

        if not self.settings.auto_capture:
            return 0
        if not success or not messages:
            return 0

        memory_dir = self.memory_dir()
        if memory_dir is None:
            logger.warning("memory-auto-recall: auto-capture skipped, workspace dir not found")
            return 0

        result = await capture_memories(messages, self.settings, memory_dir)
        return result.stored

    def memory_dir(self) -> Optional[Path]:
        workspace = resolve_workspace_dir(self._host_config, self._environ)
        if workspace is None:
            return None
        return Path(workspace) / MEMORY_SUBDIR

    def start(self) -> None:
        logger.info(
            "memory-auto-recall: active (maxResults=%s, minScore=%s, autoCapture=%s)",
            self.settings.max_results,
            self.settings.min_score,
            self.settings.auto_capture,
        )

    def stop(self) -> None:
        logger.info("memory-auto-recall: stopped")


def resolve_workspace_dir(
    host_config: Any, environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Return the agent workspace from ``agents.defaults.workspace`` or a home default."""

    env = environ if environ is not None else os.environ
    if isinstance(host_config, Mapping):
        workspace = _nested_get(host_config, "agents", "defaults", "workspace")
        if isinstance(workspace, str) and workspace:
            return workspace

    home = env.get("HOME") or env.get("USERPROFILE") or ""
    if not home:
        return None
    return os.path.join(home, ".openclaw", "workspace")


def _nested_get(value: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def create_plugin(
    settings: Settings, http_client: Optional[httpx.AsyncClient] = None
) -> AutoRecallPlugin:
    """Factory wiring the plugin to process settings."""

    if not settings.memory_search_url.strip():
        logger.warning("memory-auto-recall: MEMORY_SEARCH_URL is not set; recall is disabled")
    return AutoRecallPlugin(
        plugin_config=settings.parsed_plugin_config(),
        host_config=settings.parsed_host_config(),
        search_tool_factory=create_search_tool_factory(settings, http_client=http_client),
    )
