"""Tests for gateway response parsing."""

import json

import pytest

from flashgen_core.errors import ParseError
from flashgen_core.generation.parse import (
    extract_content,
    parse_completion,
    parse_flashcards,
)
from flashgen_core.schemas.cards import CandidateFlashcard


def _completion(content: str | None) -> dict:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class TestExtractContent:
    """Tests for pulling the message content out of a completion."""

    def test_returns_first_choice_content(self) -> None:
        assert extract_content(_completion('{"flashcards": []}')) == '{"flashcards": []}'

    @pytest.mark.parametrize(
        "response",
        [
            {},
            {"choices": []},
            {"choices": [{"message": {}}]},
            _completion(None),
            _completion("   "),
        ],
    )
    def test_missing_content_raises(self, response: dict) -> None:
        with pytest.raises(ParseError, match="No content"):
            extract_content(response)


class TestParseFlashcards:
    """Tests for decoding and validating flashcard payloads."""

    def test_strict_json(self) -> None:
        content = json.dumps(
            {
                "flashcards": [
                    {"front": "What is ATP?", "back": "The cell's energy currency"},
                    {"front": "Where is ATP made?", "back": "Mostly in mitochondria"},
                ]
            }
        )

        cards = parse_flashcards(content, max_cards=5)

        assert cards == [
            CandidateFlashcard(front="What is ATP?", back="The cell's energy currency"),
            CandidateFlashcard(front="Where is ATP made?", back="Mostly in mitochondria"),
        ]

    def test_fallback_extracts_embedded_object(self) -> None:
        content = (
            "Sure! Here are your cards:\n"
            '{"flashcards": [{"front": "Q1", "back": "A1"}]}\n'
            "Let me know if you need more."
        )

        cards = parse_flashcards(content, max_cards=5)

        assert cards == [CandidateFlashcard(front="Q1", back="A1")]

    def test_no_json_raises_with_raw_content(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_flashcards("I cannot help with that.", max_cards=5)

        assert exc_info.value.raw_content == "I cannot help with that."

    def test_broken_embedded_json_raises(self) -> None:
        with pytest.raises(ParseError, match="Failed to parse JSON"):
            parse_flashcards('noise {"flashcards": [ {"front": } noise', max_cards=5)

    def test_raw_content_is_truncated(self) -> None:
        content = "x" * 2000
        with pytest.raises(ParseError) as exc_info:
            parse_flashcards(content, max_cards=5)

        assert exc_info.value.raw_content is not None
        assert len(exc_info.value.raw_content) < 600

    @pytest.mark.parametrize(
        "payload",
        [
            {"cards": [{"front": "Q", "back": "A"}]},
            {"flashcards": "not a list"},
            [{"front": "Q", "back": "A"}],
        ],
    )
    def test_wrong_envelope_raises(self, payload: object) -> None:
        with pytest.raises(ParseError, match="flashcards array"):
            parse_flashcards(json.dumps(payload), max_cards=5)

    def test_invalid_entries_are_dropped(self) -> None:
        """One valid card and one with an empty back yields only the valid one."""
        content = json.dumps(
            {
                "flashcards": [
                    {"front": "What is DNA?", "back": "Deoxyribonucleic acid"},
                    {"front": "Empty answer", "back": ""},
                ]
            }
        )

        cards = parse_flashcards(content, max_cards=5)

        assert cards == [
            CandidateFlashcard(front="What is DNA?", back="Deoxyribonucleic acid")
        ]

    def test_bounds_and_types_are_enforced(self) -> None:
        content = json.dumps(
            {
                "flashcards": [
                    {"front": "x" * 201, "back": "too long front"},
                    {"front": "too long back", "back": "y" * 501},
                    {"front": "   ", "back": "blank front"},
                    {"front": 42, "back": "numeric front"},
                    {"front": "missing back"},
                    "not an object",
                    None,
                    {"front": "x" * 200, "back": "y" * 500},
                ]
            }
        )

        cards = parse_flashcards(content, max_cards=10)

        assert len(cards) == 1
        assert len(cards[0].front) == 200
        assert len(cards[0].back) == 500

    def test_whitespace_is_trimmed(self) -> None:
        content = json.dumps({"flashcards": [{"front": "  Q?  ", "back": "\nA\n"}]})

        assert parse_flashcards(content, max_cards=1) == [
            CandidateFlashcard(front="Q?", back="A")
        ]

    def test_all_invalid_raises(self) -> None:
        content = json.dumps({"flashcards": [{"front": "", "back": ""}]})

        with pytest.raises(ParseError, match="No valid flashcards"):
            parse_flashcards(content, max_cards=5)

    def test_empty_array_raises(self) -> None:
        with pytest.raises(ParseError, match="No valid flashcards"):
            parse_flashcards('{"flashcards": []}', max_cards=5)

    def test_never_returns_more_than_max_cards(self) -> None:
        content = json.dumps(
            {"flashcards": [{"front": f"Q{i}", "back": f"A{i}"} for i in range(8)]}
        )

        cards = parse_flashcards(content, max_cards=3)

        assert [card.front for card in cards] == ["Q0", "Q1", "Q2"]


def test_parse_completion_end_to_end() -> None:
    response = _completion('{"flashcards": [{"front": "Q", "back": "A"}]}')

    assert parse_completion(response, max_cards=1) == [
        CandidateFlashcard(front="Q", back="A")
    ]
