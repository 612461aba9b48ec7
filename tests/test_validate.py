"""Tests for decodability validation."""

from unittest.mock import MagicMock

import pytest

from decodable.decompose import WordDecomposer
from decodable.inventory import DEFAULT_INVENTORY
from decodable.types import GPC
from decodable.validate import DecodabilityValidator, grapheme_set

SATPIN = ["s", "a", "t", "p", "i", "n"]


@pytest.fixture
def validator():
    return DecodabilityValidator()


def test_grapheme_set_accepts_gpcs_and_strings():
    assert grapheme_set([GPC("SH", "/ʃ/"), "A"]) == frozenset({"sh", "a"})


class TestAnalyseWord:
    def test_decodable(self, validator):
        result = validator.analyse_word("sat", ["s", "a", "t"])
        assert result.is_decodable
        assert [g.grapheme for g in result.required_gpcs] == ["s", "a", "t"]
        assert result.untaught_gpcs == ()

    def test_untaught(self, validator):
        result = validator.analyse_word("make", ["m", "k"])
        assert not result.is_decodable
        assert {g.grapheme for g in result.untaught_gpcs} == {"a_e"}

    def test_tricky_word_short_circuits(self, validator):
        result = validator.analyse_word("The", [])
        assert result.is_decodable
        assert result.is_tricky_word
        assert result.required_gpcs == ()
        assert result.untaught_gpcs == ()

    def test_synthetic_gpc_is_never_taught(self, validator):
        result = validator.analyse_word("café", [g.grapheme for g in DEFAULT_INVENTORY])
        assert not result.is_decodable
        assert [g.grapheme for g in result.untaught_gpcs] == ["é"]


class TestValidateStory:
    def test_fully_decodable(self, validator):
        report = validator.validate_story("sat pat", ["s", "a", "t", "p"])
        assert report.decodability_score == 1.0
        assert report.passes_threshold
        assert report.undecodable_words == ()

    def test_partially_decodable_fails(self, validator):
        report = validator.validate_story("sat pit quiz", SATPIN)
        assert report.decodability_score == pytest.approx(2 / 3)
        assert not report.passes_threshold
        assert report.undecodable_words == ("quiz",)

    def test_empty_text_scores_zero(self, validator):
        report = validator.validate_story("", SATPIN)
        assert report.total_words == 0
        assert report.decodability_score == 0.0
        assert report.unique_decodability_score == 0.0
        assert not report.passes_threshold

    def test_token_weighted_score_gates(self, validator):
        # 9 decodable tokens, 1 undecodable: token 0.9, unique 0.5
        report = validator.validate_story("sat " * 9 + "quiz", SATPIN)
        assert report.decodability_score == pytest.approx(0.9)
        assert report.unique_decodability_score == pytest.approx(0.5)
        assert report.passes_threshold

    def test_counts(self, validator):
        report = validator.validate_story("The cat sat. The cat sat on the mat!", SATPIN)
        assert report.total_words == 9
        assert report.unique_words == 5
        # "the" x3 and "on" are tricky words
        assert report.tricky_words == 4
        assert report.undecodable_words == ("cat", "mat")
        assert report.decodable_words == 6
        assert report.decodable_unique_words == 3

    def test_undecodable_unique_in_first_occurrence_order(self, validator):
        report = validator.validate_story("zap quiz zap fox", SATPIN)
        assert report.undecodable_words == ("zap", "quiz", "fox")

    def test_threshold_is_inclusive(self, validator):
        report = validator.validate_story("sat quiz", SATPIN, threshold=0.5)
        assert report.passes_threshold
        assert report.threshold == 0.5

    def test_full_inventory_decodes_everything(self, validator):
        everything = [g.grapheme for g in DEFAULT_INVENTORY]
        text = "The brave fox and the little ship sailed home through the night."
        report = validator.validate_story(text, everything)
        assert report.decodability_score == 1.0

    def test_adding_taught_gpcs_never_lowers_score(self, validator):
        text = "Sam and Pip sat in the ship. The fish is quick."
        taught = list(SATPIN)
        previous = validator.validate_story(text, taught).decodability_score
        for extra in ["m", "d", "sh", "f", "h", "qu", "ck", "c", "k"]:
            taught.append(extra)
            score = validator.validate_story(text, taught).decodability_score
            assert score >= previous
            previous = score

    def test_deterministic(self, validator):
        text = "A cat sat on a mat. Quick!"
        assert validator.validate_story(text, SATPIN) == validator.validate_story(text, SATPIN)


class TestTargetCoverage:
    def test_no_targets_is_full_coverage(self, validator):
        assert validator.validate_story("sat", SATPIN).target_gpc_coverage == 1.0

    def test_partial_coverage(self, validator):
        report = validator.validate_story("sat", SATPIN, target_gpcs=["a", "sh"])
        assert report.target_gpc_coverage == 0.5

    def test_untaught_words_still_count_towards_coverage(self, validator):
        report = validator.validate_story("ship", SATPIN, target_gpcs=["sh"])
        assert report.target_gpc_coverage == 1.0


def test_each_unique_word_decomposed_once():
    decomposer = MagicMock(wraps=WordDecomposer())
    validator = DecodabilityValidator(decomposer=decomposer, inventory=DEFAULT_INVENTORY)
    validator.validate_story("sat sat pat the sat pat the", SATPIN)
    # "the" is tricky and never decomposed
    assert decomposer.decompose.call_count == 2


def test_memo_not_shared_between_calls():
    decomposer = MagicMock(wraps=WordDecomposer())
    validator = DecodabilityValidator(decomposer=decomposer, inventory=DEFAULT_INVENTORY)
    validator.validate_story("sat", SATPIN)
    validator.validate_story("sat", SATPIN)
    assert decomposer.decompose.call_count == 2


def test_validate_pages(validator):
    report, pages = validator.validate_pages(["sat pat", "", "sat quiz"], SATPIN)
    assert report.total_words == 4
    assert [p.page_number for p in pages] == [1, 2, 3]
    assert [p.score for p in pages] == [1.0, 1.0, 0.5]
    assert [p.total_words for p in pages] == [2, 0, 2]


def test_find_target_words(validator):
    words = validator.find_target_words("Ship! A fish sat on the ship.", ["sh"])
    assert words == ["ship", "fish"]
    assert validator.find_target_words("ship", []) == []


def test_every_tricky_word_decodable_with_nothing_taught(validator):
    for word in DEFAULT_INVENTORY.tricky_words:
        assert validator.analyse_word(word, []).is_decodable, word


@pytest.mark.parametrize("word", ["make", "shout", "night", "quiz", "these", "bridge"])
def test_own_decomposition_makes_word_decodable(validator, word):
    taught = validator.decomposer.decompose(word)
    result = validator.analyse_word(word, taught)
    assert result.is_decodable
    assert result.untaught_gpcs == ()


@pytest.mark.parametrize("taught", [
    frozenset(GPC(g, f"/{g}/") for g in "sat"),
    frozenset({"S", "A", "T"}),
    ("S", "a", GPC("T", "/t/")),
])
def test_analyse_word_normalizes_any_taught_collection(validator, taught):
    result = validator.analyse_word("sat", taught)
    assert result.is_decodable
    assert result.untaught_gpcs == ()
