from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from auto_recall.core.recall_config import RecallSettings
from auto_recall.memory.capture_store import ensure_memory_dir, write_capture_file
from auto_recall.memory.types import CaptureResult
from auto_recall.services.capture_classifier import extract_candidates

logger = logging.getLogger(__name__)


async def capture_memories(
    messages: Iterable[Any],
    settings: RecallSettings,
    memory_dir: Path,
) -> CaptureResult:
    """Persist memorable user texts from one finished conversation.

    At most ``capture_max_per_run`` candidates are attempted, one at a time in
    transcript order. Failures are logged and never raised.
    """

    try:
        await ensure_memory_dir(memory_dir)
    except OSError as exc:
        logger.warning(
            "memory-auto-recall: auto-capture skipped, cannot create %s: %s", memory_dir, exc
        )
        return CaptureResult(candidates=0, attempted=0, stored=0)

    candidates = extract_candidates(messages)
    if not candidates:
        return CaptureResult(candidates=0, attempted=0, stored=0)

    batch = candidates[: max(0, settings.capture_max_per_run)]
    stored = 0
    for text in batch:
        try:
            if await write_capture_file(memory_dir, text):
                stored += 1
        except Exception as exc:  # noqa: BLE001
            logger.warning("memory-auto-recall: capture write error: %s", exc)

    if stored > 0:
        logger.info("memory-auto-recall: auto-captured %d memories to %s", stored, memory_dir)
    return CaptureResult(candidates=len(candidates), attempted=len(batch), stored=stored)
