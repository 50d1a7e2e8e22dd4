from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MemorySnippet:
    """Ranked search result handed to prompt injection."""

    path: str
    snippet: str
    score: float
    source: str


@dataclass(frozen=True)
class CaptureResult:
    """Outcome of one conversation-end capture run."""

    candidates: int
    attempted: int
    stored: int
