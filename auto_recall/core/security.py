from __future__ import annotations

import re

SECRET_PATTERN = re.compile(r"(sk-[A-Za-z0-9]{6,})")
BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]{6,}", re.IGNORECASE)

MEMORY_BLOCK_OPEN = "<relevant-memories>"
MEMORY_BLOCK_CLOSE = "</relevant-memories>"

# Minimum bar of prompt-injection signatures. Extend, never shrink.
INJECTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"ignore (all|any|previous|above|prior) instructions", re.IGNORECASE),
    re.compile(r"disregard (all|any|previous|above|prior) instructions", re.IGNORECASE),
    re.compile(r"do not follow (the )?(system|developer)", re.IGNORECASE),
    re.compile(r"system prompt", re.IGNORECASE),
    re.compile(
        r"<\s*/?\s*(system|assistant|developer|tool|function|relevant-memories)\b",
        re.IGNORECASE,
    ),
)

_PROMPT_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}
)


def redact_secrets(text: str) -> str:
    """Redact API keys and bearer tokens from a string."""

    redacted = SECRET_PATTERN.sub("sk-***", text)
    return BEARER_PATTERN.sub(r"\1***", redacted)


def escape_for_prompt(text: str) -> str:
    """Escape markup metacharacters so untrusted text cannot close a prompt block."""

    return text.translate(_PROMPT_ESCAPES)


def looks_like_injection(text: str) -> bool:
    """Return True when text matches any prompt-injection signature."""

    return any(pattern.search(text) for pattern in INJECTION_PATTERNS)
