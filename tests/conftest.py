import json
import sys
from pathlib import Path
from typing import Any, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx
import pytest

from auto_recall.core.config import get_settings
from auto_recall.main import create_app
from auto_recall.services.plugin import AutoRecallPlugin


class StubSearchTool:
    """Search tool stub that records calls and replays a fixed payload."""

    def __init__(self, payload: Any = None, error: Optional[Exception] = None) -> None:
        self.payload = payload if payload is not None else {"results": []}
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def execute(self, query_name: str, params: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((query_name, params))
        if self.error is not None:
            raise self.error
        text = self.payload if isinstance(self.payload, str) else json.dumps(self.payload)
        return {"content": [{"type": "text", "text": text}]}


def snippet_payload(*scores: float) -> dict[str, Any]:
    return {
        "results": [
            {
                "path": f"memory/2024-0{index}-01.md",
                "snippet": f"Remembered fact number {index}",
                "score": score,
                "source": "memory",
            }
            for index, score in enumerate(scores, start=1)
        ]
    }


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def search_tool() -> StubSearchTool:
    return StubSearchTool(snippet_payload(0.81, 0.42))


@pytest.fixture
def app(tmp_path, monkeypatch, search_tool):
    monkeypatch.setenv("AUTO_RECALL_CONFIG", json.dumps({"autoCapture": True}))
    monkeypatch.setenv(
        "HOST_CONFIG", json.dumps({"agents": {"defaults": {"workspace": str(tmp_path)}}})
    )
    monkeypatch.setenv("MEMORY_SEARCH_URL", "http://search.test/tools/memory_search")
    get_settings.cache_clear()
    app = create_app()
    settings = app.state.settings
    app.state.plugin = AutoRecallPlugin(
        plugin_config=settings.parsed_plugin_config(),
        host_config=settings.parsed_host_config(),
        search_tool_factory=lambda session_key: search_tool,
    )
    yield app
    get_settings.cache_clear()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
