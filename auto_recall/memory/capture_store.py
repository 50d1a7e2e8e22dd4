from __future__ import annotations

import asyncio
import hashlib
from datetime import datetime, timezone
from pathlib import Path

CAPTURE_FILE_PREFIX = "auto-"
CAPTURE_TAG = "memory-auto-recall"


def stable_id(text: str) -> str:
    """Fingerprint of the stripped, lower-cased text; equal ids mean the same memory."""

    normalized = text.strip().lower()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:16]


def capture_path(memory_dir: Path, text: str) -> Path:
    """Return the deterministic file path for a captured text."""

    return memory_dir / f"{CAPTURE_FILE_PREFIX}{stable_id(text)}.md"


def render_capture(text: str, memory_id: str, captured_at: datetime | None = None) -> str:
    """Render a captured memory with its provenance header."""

    moment = captured_at or datetime.now(timezone.utc)
    timestamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    timestamp = timestamp.replace("+00:00", "Z")
    return "\n".join(
        [
            f"<!-- auto-captured by {CAPTURE_TAG} on {timestamp} -->",
            f"<!-- id: {memory_id} -->",
            "",
            text.strip(),
            "",
        ]
    )


async def ensure_memory_dir(memory_dir: Path) -> None:
    """Create the capture directory and its parents if they do not exist."""

    await asyncio.to_thread(memory_dir.mkdir, parents=True, exist_ok=True)


async def write_capture_file(memory_dir: Path, text: str) -> bool:
    """Store text once under its content id.

    Returns True when a new file was created and False when the same memory
    was already on disk. Any other OSError propagates.
    """

    return await asyncio.to_thread(_write_exclusive, memory_dir, text)


def _write_exclusive(memory_dir: Path, text: str) -> bool:
    target = capture_path(memory_dir, text)
    content = render_capture(text, stable_id(text))
    try:
        # Mode "x" is an atomic create-if-absent; it is the only dedup lock.
        with target.open("x", encoding="utf-8") as handle:
            handle.write(content)
    except FileExistsError:
        return False
    return True
