"""Unit tests for flashcard normalisation."""

import uuid

from thinky.server.services.flashcards import normalize_flashcards, parse_flashcards_text


class TestNormalizeFlashcards:
    def test_front_back_cards_keep_their_fields(self):
        cards = normalize_flashcards(
            [{"id": "c1", "front": " Q ", "back": " A ", "is_public": True, "uploader_id": "someone"}],
            uploader_id="author",
        )
        assert cards == [{"id": "c1", "front": "Q", "back": "A", "is_public": True, "uploader_id": "someone"}]

    def test_meaning_content_keys_and_defaults(self):
        [card] = normalize_flashcards([{"meaning": "Term", "content": "Definition"}], uploader_id="author")

        assert card["front"] == "Term"
        assert card["back"] == "Definition"
        assert card["is_public"] is False
        assert card["uploader_id"] == "author"
        assert uuid.UUID(card["id"]).version == 4


class TestParseFlashcardsText:
    def test_lines_become_cards(self):
        cards = parse_flashcards_text("Mitochondria, powerhouse\n\n  DNA,genetic code, in cells  \n", "author")

        assert [(c["front"], c["back"]) for c in cards] == [
            ("Mitochondria", "powerhouse"),
            ("DNA", "genetic code, in cells"),
        ]
        assert all(c["is_public"] and c["uploader_id"] == "author" for c in cards)
        assert len({c["id"] for c in cards}) == 2

    def test_line_without_comma_has_empty_back(self):
        [card] = parse_flashcards_text("lonely", "author")
        assert card["front"] == "lonely"
        assert card["back"] == ""

    def test_blank_text(self):
        assert parse_flashcards_text("", "author") == []
        assert parse_flashcards_text(None, "author") == []
