from __future__ import annotations

import hashlib


def content_hash(text: str) -> str:
    """SHA-256 hex digest of ``text``; a cache key, not a security primitive."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def short_hash(value: str | None) -> str:
    normalized = (value or "").strip()
    if not normalized:
        return ""
    return content_hash(normalized)[:12]
