from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field

from auto_recall.memory.types import MemorySnippet
from auto_recall.schemas.common import APIModel


class SearchSnippet(APIModel):
    """One ranked result as returned by the memory search tool."""

    model_config = ConfigDict(strict=True)

    path: str
    snippet: str
    score: float = Field(allow_inf_nan=False)
    source: str

    def to_snippet(self) -> MemorySnippet:
        return MemorySnippet(
            path=self.path,
            snippet=self.snippet,
            score=self.score,
            source=self.source,
        )


class SearchPayload(APIModel):
    """JSON document carried in the first text block of a search result."""

    results: Optional[List[SearchSnippet]] = Field(default=None)
    disabled: Optional[bool] = Field(default=None)
