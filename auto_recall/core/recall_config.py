from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RecallSettings:
    """Fully-defaulted settings for the recall and capture pipelines."""

    max_results: int = 3
    min_score: float = 0.3
    min_prompt_length: int = 10
    show_score: bool = True
    auto_capture: bool = False
    capture_max_per_run: int = 3

    def as_public_dict(self) -> dict[str, Any]:
        """Return settings keyed by their plugin config names."""

        return {
            "maxResults": self.max_results,
            "minScore": self.min_score,
            "minPromptLength": self.min_prompt_length,
            "showScore": self.show_score,
            "autoCapture": self.auto_capture,
            "captureMaxPerRun": self.capture_max_per_run,
        }


DEFAULT_RECALL_SETTINGS = RecallSettings()


def resolve_recall_settings(raw: Any) -> RecallSettings:
    """Build RecallSettings from an untyped plugin config object.

    Every field is checked on its own and falls back to its default when it is
    missing or has the wrong type. Values are not range-checked, so a negative
    ``maxResults`` is passed through unchanged. This function never raises.
    """

    if not isinstance(raw, Mapping):
        return DEFAULT_RECALL_SETTINGS

    defaults = DEFAULT_RECALL_SETTINGS
    return RecallSettings(
        max_results=_int_field(raw.get("maxResults"), defaults.max_results),
        min_score=_float_field(raw.get("minScore"), defaults.min_score),
        min_prompt_length=_int_field(raw.get("minPromptLength"), defaults.min_prompt_length),
        show_score=_bool_field(raw.get("showScore"), defaults.show_score),
        auto_capture=_bool_field(raw.get("autoCapture"), defaults.auto_capture),
        capture_max_per_run=_int_field(
            raw.get("captureMaxPerRun"), defaults.capture_max_per_run
        ),
    )


def _is_number(value: Any) -> bool:
    # bool is an int subclass but is never a valid number here.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _int_field(value: Any, default: int) -> int:
    if not _is_number(value):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    return int(value)


def _float_field(value: Any, default: float) -> float:
    if not _is_number(value):
        return default
    return float(value)


def _bool_field(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default
