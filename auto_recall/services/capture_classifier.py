from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from auto_recall.core.security import MEMORY_BLOCK_OPEN, looks_like_injection

MIN_CAPTURE_CHARS = 15
MAX_CAPTURE_CHARS = 2000

CAPTURE_TRIGGERS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bi (like|prefer|hate|love|want|need|always|never)\b", re.IGNORECASE),
    re.compile(r"\bmy (name|job|company|address|email|phone|preference|goal)\b", re.IGNORECASE),
    re.compile(r"\b(remember|don't forget|note that|keep in mind)\b", re.IGNORECASE),
    re.compile(r"\b(i work at|i'm at|i live in|i moved to)\b", re.IGNORECASE),
    re.compile(r"\b(we decided|we agreed|let's use|going with)\b", re.IGNORECASE),
    re.compile(r"[\w.+-]+@[\w-]+\.[a-z]{2,}", re.IGNORECASE),
    re.compile(r"\+\d{7,}"),
)


def looks_capturable(text: str) -> bool:
    """Return True when text is worth saving as a memory.

    Reject rules run first and win over any capture trigger.
    """

    if len(text) < MIN_CAPTURE_CHARS or len(text) > MAX_CAPTURE_CHARS:
        return False
    # Previously injected memory must not be captured again as user input.
    if MEMORY_BLOCK_OPEN in text:
        return False
    if looks_like_injection(text):
        return False
    return any(pattern.search(text) for pattern in CAPTURE_TRIGGERS)


def extract_user_texts(messages: Iterable[Any]) -> list[str]:
    """Collect text authored by the user from a loosely-typed transcript."""

    texts: list[str] = []
    for message in messages:
        if not isinstance(message, Mapping) or message.get("role") != "user":
            continue
        content = message.get("content")
        if isinstance(content, str):
            texts.append(content)
        elif isinstance(content, list):
            for block in content:
                if (
                    isinstance(block, Mapping)
                    and block.get("type") == "text"
                    and isinstance(block.get("text"), str)
                ):
                    texts.append(block["text"])
    return texts


def extract_candidates(messages: Iterable[Any]) -> list[str]:
    """Return capturable user texts in transcript order."""

    return [text for text in extract_user_texts(messages) if looks_capturable(text)]
