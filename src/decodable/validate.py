"""Decodability scoring of words and texts against a learner's taught GPCs."""

import logging
from collections.abc import Iterable, Sequence

from decodable.decompose import WordDecomposer
from decodable.inventory import DEFAULT_INVENTORY, GPCInventory, normalize_word, tokenize
from decodable.types import GPC, DecodabilityReport, PageScore, WordDecodability

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.85


def grapheme_set(gpcs: Iterable[GPC | str]) -> frozenset[str]:
    """Lowercased graphemes of a GPC collection (GPCs or grapheme strings)."""
    return frozenset(
        (g.grapheme if isinstance(g, GPC) else g).lower() for g in gpcs
    )


class DecodabilityValidator:
    """Score words and texts against a taught/target GPC subset."""

    def __init__(
        self,
        decomposer: WordDecomposer | None = None,
        inventory: GPCInventory | None = None,
    ):
        if decomposer is None:
            decomposer = WordDecomposer(inventory or DEFAULT_INVENTORY)
        self.decomposer = decomposer
        self.inventory = inventory or decomposer.inventory

    def analyse_word(self, word: str, taught_gpcs: Iterable[GPC | str]) -> WordDecodability:
        """Check whether a single word is decodable with the taught GPCs."""
        return self._analyse(normalize_word(word), grapheme_set(taught_gpcs))

    def _analyse(self, word: str, taught: frozenset[str]) -> WordDecodability:
        if self.inventory.is_tricky_word(word):
            return WordDecodability(
                word=word,
                is_decodable=True,
                required_gpcs=(),
                untaught_gpcs=(),
                is_tricky_word=True,
            )

        required = self.decomposer.decompose(word)
        untaught = tuple(g for g in required if g.grapheme.lower() not in taught)
        return WordDecodability(
            word=word,
            is_decodable=not untaught,
            required_gpcs=required,
            untaught_gpcs=untaught,
            is_tricky_word=False,
        )

    def validate_story(
        self,
        text: str,
        taught_gpcs: Iterable[GPC | str],
        target_gpcs: Iterable[GPC | str] = (),
        threshold: float = DEFAULT_THRESHOLD,
    ) -> DecodabilityReport:
        """Validate a complete text and return a decodability report.

        Each unique word is analysed once per call. The token-weighted score
        decides ``passes_threshold``; the unique-word score is informational.
        An empty text scores 0.0.
        """
        words = tokenize(text)
        taught = grapheme_set(taught_gpcs)
        targets = grapheme_set(target_gpcs)

        # Local to this call; never shared between calls.
        analysis: dict[str, WordDecodability] = {}
        for word in words:
            if word not in analysis:
                analysis[word] = self._analyse(word, taught)

        decodable_count = 0
        tricky_count = 0
        undecodable: list[str] = []
        seen_undecodable: set[str] = set()
        for word in words:
            result = analysis[word]
            if result.is_decodable:
                decodable_count += 1
                if result.is_tricky_word:
                    tricky_count += 1
            elif word not in seen_undecodable:
                seen_undecodable.add(word)
                undecodable.append(word)

        decodable_unique = sum(1 for a in analysis.values() if a.is_decodable)

        used_targets = {
            g.grapheme.lower()
            for a in analysis.values()
            for g in a.required_gpcs
            if g.grapheme.lower() in targets
        }

        score = decodable_count / len(words) if words else 0.0
        unique_score = decodable_unique / len(analysis) if analysis else 0.0
        coverage = len(used_targets) / len(targets) if targets else 1.0

        logger.debug(
            f"Validated {len(words)} words ({len(analysis)} unique): "
            f"score={score:.3f} unique={unique_score:.3f} coverage={coverage:.3f}"
        )

        return DecodabilityReport(
            total_words=len(words),
            unique_words=len(analysis),
            decodable_words=decodable_count,
            decodable_unique_words=decodable_unique,
            tricky_words=tricky_count,
            undecodable_words=tuple(undecodable),
            decodability_score=score,
            unique_decodability_score=unique_score,
            target_gpc_coverage=coverage,
            word_analysis=tuple(analysis.values()),
            passes_threshold=score >= threshold,
            threshold=threshold,
        )

    def validate_pages(
        self,
        pages: Sequence[str],
        taught_gpcs: Iterable[GPC | str],
        target_gpcs: Iterable[GPC | str] = (),
        threshold: float = DEFAULT_THRESHOLD,
    ) -> tuple[DecodabilityReport, tuple[PageScore, ...]]:
        """Validate a story page by page.

        Returns the whole-story report plus a token-weighted score per page
        (pages with no words score 1.0).
        """
        taught = grapheme_set(taught_gpcs)
        report = self.validate_story(" ".join(pages), taught, target_gpcs, threshold)
        verdicts = {a.word: a.is_decodable for a in report.word_analysis}

        scores = []
        for number, page in enumerate(pages, start=1):
            words = tokenize(page)
            decodable = sum(1 for w in words if verdicts[w])
            scores.append(PageScore(
                page_number=number,
                score=decodable / len(words) if words else 1.0,
                total_words=len(words),
            ))
        return report, tuple(scores)

    def find_target_words(self, text: str, target_gpcs: Iterable[GPC | str]) -> list[str]:
        """Unique words, in order of appearance, that use a target GPC."""
        targets = grapheme_set(target_gpcs)
        if not targets:
            return []
        found: dict[str, None] = {}
        for word in tokenize(text):
            if word in found:
                continue
            if any(g.grapheme.lower() in targets for g in self.decomposer.decompose(word)):
                found[word] = None
        return list(found)
