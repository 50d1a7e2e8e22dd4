from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

import httpx

from auto_recall.core.config import Settings


class MemorySearchTool(Protocol):
    """Black-box semantic search over the agent's memory files."""

    async def execute(self, query_name: str, params: dict[str, Any]) -> dict[str, Any]:
        """Run a search and return a tool result shaped ``{"content": [...]}``."""


SearchToolFactory = Callable[[Optional[str]], Optional[MemorySearchTool]]


class SearchToolError(RuntimeError):
    """Raised when a memory search call fails."""

    def __init__(
        self,
        code: str,
        message: str,
        retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.retryable = retryable
        self.status_code = status_code


def build_status_error(response: httpx.Response) -> SearchToolError:
    """Build a normalized search error from an HTTP response."""

    status = response.status_code
    message = _extract_response_message(response)
    formatted = f"Memory search returned {status}: {message}"
    if status in {408, 429}:
        code = "SEARCH_TIMEOUT" if status == 408 else "SEARCH_RATE_LIMIT"
        return SearchToolError(code, formatted, retryable=True, status_code=status)
    if status >= 500:
        return SearchToolError("SEARCH_UPSTREAM", formatted, retryable=True, status_code=status)
    return SearchToolError("SEARCH_BAD_STATUS", formatted, status_code=status)


def _extract_response_message(response: httpx.Response) -> str:
    # The search endpoint reports failures as {"error": {"message": ...}} or {"error": "..."}.
    try:
        payload: Any = response.json()
    except ValueError:
        payload = None

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        error = error.get("message")
    if isinstance(error, str) and error.strip():
        return error.strip()
    return (response.text or "Unknown error from memory search.").strip()


class HTTPMemorySearchTool:
    """Memory search tool reached over HTTP.

    The endpoint receives ``{"toolCallId", "sessionKey", "args"}`` and answers
    with the tool result object.
    """

    def __init__(
        self,
        *,
        url: str,
        session_key: str | None = None,
        api_key: str | None = None,
        timeout_sec: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = url
        self._session_key = session_key
        self._api_key = api_key
        self._timeout = timeout_sec
        self._client = http_client

    async def execute(self, query_name: str, params: dict[str, Any]) -> dict[str, Any]:
        body = {"toolCallId": query_name, "sessionKey": self._session_key, "args": params}
        response = await self._request(body)
        try:
            payload = response.json()
        except ValueError as exc:
            raise SearchToolError("SEARCH_PARSE_ERROR", "Invalid JSON from memory search.") from exc
        if not isinstance(payload, dict):
            raise SearchToolError(
                "SEARCH_PARSE_ERROR", "Memory search returned invalid JSON payload."
            )
        return payload

    async def _request(self, body: dict[str, Any]) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        try:
            if self._client:
                response = await self._client.post(
                    self._url, headers=headers, json=body, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._url, headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise SearchToolError(
                "SEARCH_TIMEOUT", "Memory search request timed out.", retryable=True
            ) from exc
        except httpx.RequestError as exc:
            raise SearchToolError(
                "SEARCH_CONNECTION_ERROR",
                "Memory search connection failed.",
                retryable=True,
            ) from exc
        if response.status_code >= 400:
            raise build_status_error(response)
        return response


def create_search_tool_factory(
    settings: Settings, http_client: Optional[httpx.AsyncClient] = None
) -> SearchToolFactory:
    """Return a per-session tool factory; it yields None when search is unconfigured."""

    url = settings.memory_search_url.strip()
    api_key = settings.memory_search_api_key.strip() or None

    def factory(session_key: Optional[str]) -> Optional[MemorySearchTool]:
        if not url:
            return None
        return HTTPMemorySearchTool(
            url=url,
            session_key=session_key,
            api_key=api_key,
            timeout_sec=settings.memory_search_timeout_sec,
            http_client=http_client,
        )

    return factory
