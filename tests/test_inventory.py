"""Tests for the GPC inventory and tokenizer."""

import pytest

from decodable.inventory import (
    DEFAULT_INVENTORY,
    GPCInventory,
    normalize_word,
    tokenize,
)
from decodable.types import GPC


def test_entries_sorted_longest_first():
    lengths = [len(g.grapheme) for g in DEFAULT_INVENTORY]
    assert lengths == sorted(lengths, reverse=True)


def test_covers_every_letter():
    for ch in "abcdefghijklmnopqrstuvwxyz":
        assert ch in DEFAULT_INVENTORY


def test_split_digraphs_present():
    for g in ("a_e", "e_e", "i_e", "o_e", "u_e"):
        assert DEFAULT_INVENTORY.lookup(g).is_split_digraph


def test_contains_is_case_insensitive():
    assert "SH" in DEFAULT_INVENTORY
    assert "xyz" not in DEFAULT_INVENTORY
    assert 42 not in DEFAULT_INVENTORY


def test_duplicate_grapheme_rejected():
    with pytest.raises(ValueError, match="Duplicate grapheme"):
        GPCInventory([GPC("s", "/s/"), GPC("s", "/z/")])


def test_inventory_is_immutable():
    with pytest.raises(AttributeError):
        DEFAULT_INVENTORY._entries = ()


def test_lookup_unknown_raises_key_error():
    with pytest.raises(KeyError):
        DEFAULT_INVENTORY.lookup("zzz")


class TestSelect:
    def test_preserves_order_and_normalizes(self):
        gpcs = DEFAULT_INVENTORY.select([" S", "a", "sh", ""])
        assert [g.grapheme for g in gpcs] == ["s", "a", "sh"]

    def test_unknown_graphemes_listed(self):
        with pytest.raises(ValueError, match="Unknown graphemes"):
            DEFAULT_INVENTORY.select(["s", "xyz"])


def test_gpcs_for_phase_is_cumulative():
    phase2 = {g.grapheme for g in DEFAULT_INVENTORY.gpcs_for_phase(2)}
    phase3 = {g.grapheme for g in DEFAULT_INVENTORY.gpcs_for_phase(3)}
    assert {"s", "a", "t", "p", "ck"} <= phase2
    assert "sh" not in phase2
    assert phase2 < phase3
    assert "sh" in phase3


def test_tricky_words():
    assert DEFAULT_INVENTORY.is_tricky_word("the")
    assert DEFAULT_INVENTORY.is_tricky_word("The!")
    assert not DEFAULT_INVENTORY.is_tricky_word("cat")


def test_with_tricky_words_returns_copy():
    custom = DEFAULT_INVENTORY.with_tricky_words(["Cat"])
    assert custom.is_tricky_word("cat")
    assert not custom.is_tricky_word("the")
    assert DEFAULT_INVENTORY.is_tricky_word("the")
    assert len(custom) == len(DEFAULT_INVENTORY)


class TestTokenize:
    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Sam sat. A CAT sat!") == ["sam", "sat", "a", "cat", "sat"]

    def test_digits_and_apostrophes_delimit(self):
        assert tokenize("it's 3 cats") == ["it", "s", "cats"]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize("  ... ") == []

    def test_keeps_unicode_letters(self):
        assert tokenize("Café time") == ["café", "time"]


def test_normalize_word():
    assert normalize_word("Don't!") == "dont"
    assert normalize_word("123") == ""
