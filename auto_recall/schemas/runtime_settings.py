from __future__ import annotations

from typing import Any

from auto_recall.schemas.common import APIModel


class RuntimeSettingsResponse(APIModel):
    """Resolved recall settings and the active search endpoint."""

    settings: dict[str, Any]
    memory_search_url: str
    auto_capture_dir: str | None
