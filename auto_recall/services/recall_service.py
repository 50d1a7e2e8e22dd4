from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from auto_recall.core.recall_config import RecallSettings
from auto_recall.core.security import MEMORY_BLOCK_OPEN
from auto_recall.memory.search_tool import MemorySearchTool
from auto_recall.memory.types import MemorySnippet
from auto_recall.schemas.search import SearchPayload
from auto_recall.services.memory_framer import format_memories_block

logger = logging.getLogger(__name__)

RECALL_QUERY_NAME = "auto-recall"


async def recall_memories(
    prompt: str,
    settings: RecallSettings,
    search: Optional[MemorySearchTool],
) -> Optional[str]:
    """Return a memory block to prepend to the prompt, or None to inject nothing.

    Search failures are logged and swallowed; recall never breaks prompt
    construction.
    """

    if not prompt or len(prompt) < settings.min_prompt_length:
        return None
    if MEMORY_BLOCK_OPEN in prompt:
        return None
    if search is None:
        return None

    try:
        result = await search.execute(
            RECALL_QUERY_NAME,
            {
                "query": prompt,
                "maxResults": settings.max_results,
                "minScore": settings.min_score,
            },
        )
        text = _first_text_block(result)
        if not text:
            return None
        memories = parse_search_results(json.loads(text))
    except Exception as exc:  # noqa: BLE001
        logger.warning("memory-auto-recall: recall error: %s", exc)
        return None

    if not memories:
        return None

    block = format_memories_block(memories, settings.show_score)
    logger.info(
        "memory-auto-recall: injecting %d memories (%d chars)", len(memories), len(block)
    )
    return block


def parse_search_results(data: Any) -> list[MemorySnippet]:
    """Interpret a decoded search payload; any shape mismatch means no results."""

    try:
        payload = SearchPayload.model_validate(data)
    except ValidationError:
        return []
    if payload.disabled or not payload.results:
        return []
    return [item.to_snippet() for item in payload.results]


def _first_text_block(result: Any) -> Optional[str]:
    content = result.get("content") if isinstance(result, dict) else None
    if not isinstance(content, list):
        return None
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            text = block.get("text")
            return text if isinstance(text, str) else None
    return None
