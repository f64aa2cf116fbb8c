"""
Chat message word filter.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable

from thinky.server.core import constant


def normalize_text(text: str) -> str:
    """Fold a message for matching: strip accents, lower-case, keep words only."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"[^a-z0-9]+", " ", stripped.lower()).strip()


def contains_blacklisted(text: str, blacklist: Iterable[str] = constant.MESSAGE_BLACKLIST) -> bool:
    """Whole-word match of any blacklisted word against the folded message."""
    words = set(normalize_text(text).split())
    return any(normalize_text(word) in words for word in blacklist)
