"""Grapheme-phoneme correspondence inventory and tricky-word set."""

import re
from collections.abc import Iterable

from decodable.types import GPC

# Letters and Sounds inventory: (grapheme, phoneme, examples, phase).
# Order within a length band is kept when the inventory is sorted.
_INVENTORY_ROWS: list[tuple[str, str, tuple[str, ...], int]] = [
    # Trigraphs
    ("igh", "/aɪ/", ("high", "night", "light"), 3),
    ("air", "/eə/", ("hair", "fair", "pair"), 3),
    ("ear", "/ɪə/", ("hear", "near", "dear"), 3),
    ("ure", "/ʊə/", ("sure", "pure", "cure"), 3),
    ("dge", "/dʒ/", ("badge", "bridge", "hedge"), 5),
    ("tch", "/tʃ/", ("match", "catch", "watch"), 4),
    # Split digraphs (vowel, one consonant, terminal e)
    ("a_e", "/eɪ/", ("make", "cake", "name"), 5),
    ("e_e", "/iː/", ("these", "theme"), 5),
    ("i_e", "/aɪ/", ("like", "time", "five"), 5),
    ("o_e", "/əʊ/", ("home", "bone", "stone"), 5),
    ("u_e", "/juː/", ("cube", "tube", "huge"), 5),
    # Consonant digraphs
    ("sh", "/ʃ/", ("ship", "fish", "shell"), 3),
    ("ch", "/tʃ/", ("chip", "chop", "rich"), 3),
    ("th", "/θ/", ("thin", "bath", "with"), 3),
    ("ng", "/ŋ/", ("ring", "sing", "long"), 3),
    ("nk", "/ŋk/", ("think", "pink", "bank"), 3),
    ("ck", "/k/", ("back", "kick", "duck"), 2),
    ("qu", "/kw/", ("queen", "quick", "quiz"), 3),
    ("wh", "/w/", ("when", "what", "which"), 5),
    ("wr", "/r/", ("write", "wrong", "wrap"), 5),
    ("kn", "/n/", ("know", "knee", "knit"), 5),
    ("ph", "/f/", ("phone", "photo", "graph"), 5),
    ("ll", "/l/", ("bell", "hill", "full"), 2),
    ("ss", "/s/", ("miss", "fuss", "less"), 2),
    ("ff", "/f/", ("off", "puff", "cliff"), 2),
    ("zz", "/z/", ("buzz", "fizz", "jazz"), 3),
    # Vowel digraphs
    ("ee", "/iː/", ("see", "tree", "been"), 3),
    ("oo", "/uː/", ("moon", "food", "zoo"), 3),
    ("oa", "/əʊ/", ("boat", "coat", "road"), 3),
    ("ai", "/eɪ/", ("rain", "wait", "paint"), 3),
    ("oi", "/ɔɪ/", ("coin", "join", "oil"), 3),
    ("ow", "/aʊ/", ("cow", "now", "how"), 3),
    ("ar", "/ɑː/", ("car", "star", "park"), 3),
    ("or", "/ɔː/", ("for", "sort", "born"), 3),
    ("er", "/ɜː/", ("her", "fern", "term"), 3),
    ("ur", "/ɜː/", ("fur", "burn", "turn"), 3),
    ("ou", "/aʊ/", ("out", "shout", "cloud"), 5),
    ("aw", "/ɔː/", ("saw", "paw", "draw"), 5),
    ("ir", "/ɜː/", ("sir", "bird", "girl"), 5),
    ("ey", "/eɪ/", ("they", "grey", "obey"), 5),
    ("ay", "/eɪ/", ("day", "play", "say"), 5),
    ("ie", "/aɪ/", ("pie", "tie", "lie"), 5),
    ("ea", "/iː/", ("sea", "read", "team"), 5),
    ("oy", "/ɔɪ/", ("boy", "toy", "enjoy"), 5),
    ("ue", "/uː/", ("blue", "clue", "true"), 5),
    ("ew", "/uː/", ("new", "few", "grew"), 5),
    ("oe", "/əʊ/", ("toe", "goes", "hoe"), 5),
    ("au", "/ɔː/", ("haul", "launch", "author"), 5),
    # Single letters
    ("s", "/s/", ("sat", "sun"), 2),
    ("a", "/æ/", ("ant", "cat"), 2),
    ("t", "/t/", ("tap", "sit"), 2),
    ("p", "/p/", ("pan", "tip"), 2),
    ("i", "/ɪ/", ("it", "pin"), 2),
    ("n", "/n/", ("net", "tin"), 2),
    ("m", "/m/", ("map", "dim"), 2),
    ("d", "/d/", ("dog", "sad"), 2),
    ("g", "/g/", ("got", "dig"), 2),
    ("o", "/ɒ/", ("on", "pot"), 2),
    ("c", "/k/", ("cat", "cot"), 2),
    ("k", "/k/", ("kit", "kid"), 2),
    ("e", "/e/", ("egg", "pen"), 2),
    ("u", "/ʌ/", ("up", "sun"), 2),
    ("r", "/r/", ("rat", "run"), 2),
    ("h", "/h/", ("hat", "hen"), 2),
    ("b", "/b/", ("bat", "cab"), 2),
    ("f", "/f/", ("fan", "if"), 2),
    ("l", "/l/", ("leg", "lap"), 2),
    ("j", "/dʒ/", ("jam", "jet"), 3),
    ("v", "/v/", ("van", "vet"), 3),
    ("w", "/w/", ("wet", "win"), 3),
    ("x", "/ks/", ("box", "fox"), 3),
    ("y", "/j/", ("yes", "yak"), 3),
    ("z", "/z/", ("zip", "zap"), 3),
    ("q", "/k/", (), 3),
]

# High-frequency words taught as whole units across phases.
DEFAULT_TRICKY_WORDS: frozenset[str] = frozenset({
    # Phase 2
    "the", "to", "i", "no", "go", "into",
    # Phase 3
    "he", "she", "we", "me", "be", "was", "my", "you", "her", "they", "all", "are",
    # Phase 4
    "said", "have", "like", "so", "do", "some", "come", "were", "there", "little",
    "one", "when", "out", "what",
    # Phase 5
    "oh", "their", "people", "mr", "mrs", "looked", "called", "asked", "could",
    "should", "would", "right", "through", "where", "two", "any", "many",
    # Common function words
    "a", "an", "and", "is", "it", "in", "on", "at", "of", "up", "but", "not",
    "this", "that", "with", "for", "had", "has", "his", "him",
    "can", "will", "just", "then", "than", "them", "from", "been", "very",
})

_CONSONANTS = frozenset("bcdfghjklmnpqrstvwxyz")

_WORD_RE = re.compile(r"[^\W\d_]+")


def normalize_word(word: str) -> str:
    """Lowercase and keep alphabetic characters only."""
    return "".join(ch for ch in word.lower() if ch.isalpha())


def tokenize(text: str) -> list[str]:
    """Split text into lowercase alphabetic words.

    Any run of non-letters (whitespace, punctuation, digits, apostrophes)
    is a delimiter.
    """
    return _WORD_RE.findall(text.lower())


def is_consonant(ch: str) -> bool:
    return ch in _CONSONANTS


class GPCInventory:
    """Immutable, ordered set of GPCs plus the tricky-word set.

    Entries are held longest grapheme first (stable within a length), so a
    first-match scan is a longest-match scan.
    """

    __slots__ = ("_entries", "_tricky_words", "_by_grapheme", "_split_by_vowel")

    def __init__(self, entries: Iterable[GPC], tricky_words: Iterable[str] = ()):
        ordered = sorted(entries, key=lambda g: len(g.grapheme), reverse=True)
        by_grapheme: dict[str, GPC] = {}
        split_by_vowel: dict[str, GPC] = {}
        for gpc in ordered:
            key = gpc.grapheme.lower()
            if key in by_grapheme:
                raise ValueError(f"Duplicate grapheme in inventory: {gpc.grapheme!r}")
            by_grapheme[key] = gpc
            if gpc.is_split_digraph:
                split_by_vowel.setdefault(key[0], gpc)
        object.__setattr__(self, "_entries", tuple(ordered))
        object.__setattr__(self, "_tricky_words", frozenset(
            normalize_word(w) for w in tricky_words if normalize_word(w)
        ))
        object.__setattr__(self, "_by_grapheme", by_grapheme)
        object.__setattr__(self, "_split_by_vowel", split_by_vowel)

    def __setattr__(self, name, value):
        raise AttributeError("GPCInventory is immutable")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __contains__(self, grapheme: object) -> bool:
        return isinstance(grapheme, str) and grapheme.lower() in self._by_grapheme

    @property
    def entries(self) -> tuple[GPC, ...]:
        return self._entries

    @property
    def tricky_words(self) -> frozenset[str]:
        return self._tricky_words

    def is_tricky_word(self, word: str) -> bool:
        """Case-insensitive membership test ignoring non-letters."""
        return normalize_word(word) in self._tricky_words

    def lookup(self, grapheme: str) -> GPC:
        return self._by_grapheme[grapheme.lower()]

    def split_digraph_for(self, vowel: str) -> GPC | None:
        return self._split_by_vowel.get(vowel)

    def select(self, graphemes: Iterable[str]) -> tuple[GPC, ...]:
        """Resolve grapheme strings to inventory GPCs, preserving order."""
        found = []
        unknown = []
        for g in graphemes:
            g = g.strip().lower()
            if not g:
                continue
            if g in self._by_grapheme:
                found.append(self._by_grapheme[g])
            else:
                unknown.append(g)
        if unknown:
            raise ValueError(f"Unknown graphemes: {unknown}")
        return tuple(found)

    def gpcs_for_phase(self, phase: int) -> tuple[GPC, ...]:
        """All GPCs introduced at or before *phase* (cumulative taught set)."""
        return tuple(g for g in self._entries if g.phase is not None and g.phase <= phase)

    def with_tricky_words(self, tricky_words: Iterable[str]) -> "GPCInventory":
        """Return a copy with a different tricky-word set."""
        return GPCInventory(self._entries, tricky_words)


DEFAULT_INVENTORY = GPCInventory(
    (GPC(grapheme=g, phoneme=p, examples=ex, phase=phase)
     for g, p, ex, phase in _INVENTORY_ROWS),
    DEFAULT_TRICKY_WORDS,
)
