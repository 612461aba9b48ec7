"""Decompose words into grapheme-phoneme correspondences."""

from decodable.inventory import DEFAULT_INVENTORY, GPCInventory, is_consonant, normalize_word
from decodable.types import GPC


class WordDecomposer:
    """Greedy left-to-right decomposition over a GPC inventory.

    At each position, in priority order:

    1. the terminal "e" of a split digraph opened earlier in the word is
       attributed to that split digraph;
    2. a vowel followed by exactly one consonant and a terminal "e" opens a
       split digraph (only the vowel is consumed);
    3. the longest inventory grapheme that is a literal prefix of the
       remaining text is consumed;
    4. anything else becomes a synthetic single-character GPC.

    Example: "shout" -> sh, ou, t;  "make" -> m, a_e, k, a_e
    """

    def __init__(self, inventory: GPCInventory = DEFAULT_INVENTORY):
        self.inventory = inventory
        self._plain = tuple(g for g in inventory if not g.is_split_digraph)

    def segments(self, word: str) -> tuple[tuple[str, GPC], ...]:
        """Return (consumed characters, GPC) pairs covering the normalized word."""
        text = normalize_word(word)
        result: list[tuple[str, GPC]] = []
        pending_close: dict[int, GPC] = {}
        pos = 0
        n = len(text)

        while pos < n:
            ch = text[pos]

            if pos in pending_close:
                result.append((ch, pending_close.pop(pos)))
                pos += 1
                continue

            split = self._split_digraph_at(text, pos)
            if split is not None:
                result.append((ch, split))
                pending_close[pos + 2] = split
                pos += 1
                continue

            for gpc in self._plain:
                g = gpc.grapheme.lower()
                if text.startswith(g, pos):
                    result.append((g, gpc))
                    pos += len(g)
                    break
            else:
                result.append((ch, GPC(grapheme=ch, phoneme=ch)))
                pos += 1

        return tuple(result)

    def decompose(self, word: str) -> tuple[GPC, ...]:
        """Decompose a word into its ordered GPCs. Never raises.

        A split digraph appears twice (at its vowel and at its closing "e"),
        so grapheme lengths do not sum to the word length. Use ``segments``
        for the characters each GPC consumed.
        """
        return tuple(gpc for _, gpc in self.segments(word))

    def graphemes(self, word: str) -> list[str]:
        """Unique graphemes of a word in decomposition order."""
        return list(dict.fromkeys(gpc.grapheme for gpc in self.decompose(word)))

    def _split_digraph_at(self, text: str, pos: int) -> GPC | None:
        gpc = self.inventory.split_digraph_for(text[pos])
        if gpc is None:
            return None
        # Vowel must be third from the end: vowel, one consonant, terminal e.
        if len(text) - pos != 3:
            return None
        final = gpc.grapheme[2].lower()
        if is_consonant(text[pos + 1]) and text[pos + 2] == final:
            return gpc
        return None
