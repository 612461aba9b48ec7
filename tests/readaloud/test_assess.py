"""Tests for read-aloud assessment."""

import pytest

from decodable.readaloud import assess, build_word_gpc_map, spoken_words_from_json
from decodable.types import SpokenWord


def spoken(*words, confidence=0.9):
    return [SpokenWord(w, confidence, i * 400) for i, w in enumerate(words)]


class TestAssess:
    def test_perfect_reading(self):
        result = assess("The cat sat.", spoken("the", "cat", "sat"), 3000)
        assert result.accuracy == 1.0
        assert result.wcpm == 60
        assert all(w.correct for w in result.words)
        assert all(w.error_type is None for w in result.words)
        assert result.gpc_reinforcement == ()

    def test_substitution_example(self):
        result = assess("the cat sat", spoken("the", "big", "sat"), 60000)
        assert result.accuracy == pytest.approx(2 / 3)
        assert result.wcpm == 2
        judgement = result.words[1]
        assert judgement.expected == "cat"
        assert judgement.spoken == "big"
        assert judgement.error_type == "substitution"
        assert not judgement.correct

    def test_reinforcement_sorted_by_error_rate(self):
        result = assess("the cat sat", spoken("the", "big", "sat"), 60000)
        summary = [(r.gpc, r.error_count, r.total_occurrences) for r in result.gpc_reinforcement]
        # c only occurs in the missed word; a and t also occur in "sat"
        assert summary == [("c", 1, 1), ("a", 1, 2), ("t", 1, 2)]

    def test_single_omission(self):
        result = assess("a big dog", spoken("a", "dog"), 60000)
        assert [w.error_type for w in result.words] == [None, "omission", None]
        assert result.words[1].spoken == ""
        assert result.words[1].confidence == 0.0
        assert result.accuracy == pytest.approx(2 / 3)

    def test_insertion_does_not_count_towards_gpcs(self):
        result = assess("the cat", spoken("the", "um", "cat"), 60000)
        assert result.accuracy == 1.0
        assert result.words[1].error_type == "insertion"
        assert result.words[1].gpcs == ()
        assert result.gpc_reinforcement == ()

    def test_mispronunciation(self):
        result = assess("the cat", spoken("the", "cap"), 60000)
        assert result.words[1].error_type == "mispronunciation"

    def test_spoken_words_are_normalized(self):
        result = assess("The cat sat", spoken("The", "Cat!", "sat."), 60000)
        assert result.accuracy == 1.0

    def test_confidence_from_aligned_word(self):
        words = [SpokenWord("the", 0.95), SpokenWord("cat", 0.4)]
        result = assess("the cat", words, 60000)
        assert [w.confidence for w in result.words] == [0.95, 0.4]

    @pytest.mark.parametrize("reading_time_ms", [0, -100])
    def test_non_positive_reading_time(self, reading_time_ms):
        result = assess("the cat", spoken("the", "cat"), reading_time_ms)
        assert result.wcpm == 0
        assert result.accuracy == 1.0

    def test_empty_expected_text(self):
        result = assess("", spoken("hello"), 1000)
        assert result.accuracy == 0.0
        assert [w.error_type for w in result.words] == ["insertion"]

    def test_custom_word_gpc_map(self):
        gpc_map = {"the": ["th", "e"], "ship": ["sh", "i", "p"]}
        result = assess("the ship", spoken("the", "sip"), 60000, word_gpc_map=gpc_map)
        assert result.words[1].gpcs == ("sh", "i", "p")
        assert {r.gpc for r in result.gpc_reinforcement} == {"sh", "i", "p"}

    def test_wcpm_half_rounds_up(self):
        # 5 correct words in 2 minutes is 2.5 wcpm
        result = assess("a big red fox ran", spoken("a", "big", "red", "fox", "ran"), 120000)
        assert result.wcpm == 3

    def test_page_number_carried(self):
        assert assess("cat", spoken("cat"), 1000, page_number=4).page_number == 4


def test_build_word_gpc_map_unique_per_word():
    gpc_map = build_word_gpc_map("Make a cake. Make it!")
    assert list(gpc_map) == ["make", "a", "cake", "it"]
    assert gpc_map["make"] == ["m", "a_e", "k"]


def test_spoken_words_from_json():
    words = spoken_words_from_json([
        {"word": "cat", "confidence": 0.8, "timestampMs": 120},
        {"word": "sat", "confidence": 0.7, "timestamp_ms": 480},
        {"word": "on"},
    ])
    assert words[0] == SpokenWord("cat", 0.8, 120)
    assert words[1].timestamp_ms == 480
    assert words[2].confidence == 0.0
