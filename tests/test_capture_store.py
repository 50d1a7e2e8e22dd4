from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from auto_recall.core.recall_config import RecallSettings
from auto_recall.memory.capture_store import (
    capture_path,
    render_capture,
    stable_id,
    write_capture_file,
)
from auto_recall.services.capture_service import capture_memories


def test_stable_id_ignores_case_and_outer_whitespace() -> None:
    assert stable_id("  My name is Alex  ") == stable_id("my NAME is alex")
    assert stable_id("My name is Alex") != stable_id("My name is Alexa")
    assert len(stable_id("anything")) == 16


def test_render_capture_has_provenance_header() -> None:
    moment = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    content = render_capture("  I like tea a lot \n", "abc123", captured_at=moment)
    assert content == (
        "<!-- auto-captured by memory-auto-recall on 2024-05-01T12:30:00.000Z -->\n"
        "<!-- id: abc123 -->\n"
        "\n"
        "I like tea a lot\n"
    )


@pytest.mark.anyio
async def test_write_is_idempotent_across_case_and_whitespace(tmp_path: Path) -> None:
    assert await write_capture_file(tmp_path, "My name is Alex and I work at Acme") is True
    assert await write_capture_file(tmp_path, "  my name is alex and i work at acme\n") is False

    files = list(tmp_path.iterdir())
    assert files == [capture_path(tmp_path, "My name is Alex and I work at Acme")]
    content = files[0].read_text(encoding="utf-8")
    assert "My name is Alex and I work at Acme" in content
    assert f"<!-- id: {stable_id('My name is Alex and I work at Acme')} -->" in content


@pytest.mark.anyio
async def test_existing_file_is_never_overwritten(tmp_path: Path) -> None:
    target = capture_path(tmp_path, "I prefer tabs over spaces")
    target.write_text("manual edit", encoding="utf-8")

    assert await write_capture_file(tmp_path, "I prefer tabs over spaces") is False
    assert target.read_text(encoding="utf-8") == "manual edit"


@pytest.mark.anyio
async def test_other_os_errors_propagate(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        await write_capture_file(tmp_path / "missing", "I prefer tabs over spaces")


def _user(text: str) -> dict:
    return {"role": "user", "content": text}


@pytest.mark.anyio
async def test_capture_respects_per_run_cap(tmp_path: Path) -> None:
    messages = [_user(f"I prefer option number {index}") for index in range(5)]
    memory_dir = tmp_path / "memory"

    result = await capture_memories(messages, RecallSettings(capture_max_per_run=3), memory_dir)

    assert result.candidates == 5
    assert result.attempted == 3
    assert result.stored == 3
    stored_texts = {
        path.read_text(encoding="utf-8").splitlines()[3] for path in memory_dir.iterdir()
    }
    assert stored_texts == {f"I prefer option number {index}" for index in range(3)}


@pytest.mark.anyio
async def test_negative_cap_stores_nothing(tmp_path: Path) -> None:
    result = await capture_memories(
        [_user("I prefer option number 1")],
        RecallSettings(capture_max_per_run=-1),
        tmp_path,
    )
    assert result.stored == 0
    assert list(tmp_path.iterdir()) == []


@pytest.mark.anyio
async def test_duplicates_in_batch_count_once(tmp_path: Path) -> None:
    messages = [_user("I prefer green tea"), _user("i prefer GREEN tea ")]
    result = await capture_memories(messages, RecallSettings(), tmp_path)
    assert result.attempted == 2
    assert result.stored == 1


@pytest.mark.anyio
async def test_unwritable_directory_skips_run(tmp_path: Path, caplog) -> None:
    blocker = tmp_path / "memory"
    blocker.write_text("a file, not a directory", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        result = await capture_memories([_user("I prefer green tea")], RecallSettings(), blocker)

    assert result.stored == 0
    assert "auto-capture skipped" in caplog.text


@pytest.mark.anyio
async def test_write_error_does_not_abort_batch(tmp_path: Path, monkeypatch, caplog) -> None:
    from auto_recall.services import capture_service

    calls: list[str] = []

    async def flaky_write(memory_dir: Path, text: str) -> bool:
        calls.append(text)
        if len(calls) == 1:
            raise PermissionError("read-only volume")
        return True

    monkeypatch.setattr(capture_service, "write_capture_file", flaky_write)
    messages = [_user("I prefer green tea"), _user("I prefer black coffee")]

    with caplog.at_level(logging.WARNING):
        result = await capture_memories(messages, RecallSettings(), tmp_path)

    assert calls == ["I prefer green tea", "I prefer black coffee"]
    assert result.stored == 1
    assert "capture write error: read-only volume" in caplog.text
