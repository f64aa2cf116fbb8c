"""
Flashcard normalisation.

Clients send flashcards either as a list of objects (``front``/``back``,
or the older ``meaning``/``content`` keys) or as ``flashcards_text`` with
one ``front,back`` pair per line.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Optional


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def normalize_flashcards(cards: Iterable[Dict[str, Any]], uploader_id: str) -> List[Dict[str, Any]]:
    """Bring client flashcard objects into the stored shape."""
    normalized = []
    for card in cards:
        normalized.append(
            {
                "id": card.get("id") or str(uuid.uuid4()),
                "front": _text(card.get("front") or card.get("meaning")),
                "back": _text(card.get("back") or card.get("content")),
                "is_public": bool(card.get("is_public")),
                "uploader_id": card.get("uploader_id") or uploader_id,
            }
        )
    return normalized


def parse_flashcards_text(text: Optional[str], uploader_id: str) -> List[Dict[str, Any]]:
    """Parse ``front,back`` lines; the back keeps any further commas."""
    cards = []
    for line in (text or "").split("\n"):
        line = line.strip()
        if not line:
            continue
        front, _, back = line.partition(",")
        cards.append(
            {
                "id": str(uuid.uuid4()),
                "front": front.strip(),
                "back": back.strip(),
                "is_public": True,
                "uploader_id": uploader_id,
            }
        )
    return cards
