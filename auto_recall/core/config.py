from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="127.0.0.1", alias="APP_HOST")
    app_port: int = Field(default=8787, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # NOTE: Keep JSON-valued settings as strings so a malformed value never fails startup.
    plugin_config: str = Field(default="", alias="AUTO_RECALL_CONFIG")
    host_config: str = Field(default="", alias="HOST_CONFIG")
    memory_search_url: str = Field(default="", alias="MEMORY_SEARCH_URL")
    memory_search_api_key: str = Field(default="", alias="MEMORY_SEARCH_API_KEY")
    memory_search_timeout_sec: float = Field(default=15.0, alias="MEMORY_SEARCH_TIMEOUT_SEC")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def parsed_plugin_config(self) -> Any:
        """Return the raw plugin config object, or None when unset or malformed."""

        return _decode_json_object(self.plugin_config)

    def parsed_host_config(self) -> Any:
        """Return the host config object, or None when unset or malformed."""

        return _decode_json_object(self.host_config)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached process settings."""

    return Settings()


def _decode_json_object(raw: str) -> Any:
    text = (raw or "").strip()
    if not text:
        return None
    try:
        value: Any = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None
