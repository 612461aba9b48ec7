"""Read-aloud assessment: score a transcribed reading against the expected text."""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence

from decodable.decompose import WordDecomposer
from decodable.inventory import tokenize
from decodable.readaloud.align import align_words
from decodable.types import (
    GPCReinforcement,
    ReadAloudAssessment,
    SpokenWord,
    WordJudgement,
)

logger = logging.getLogger(__name__)


def spoken_words_from_json(records: Iterable[Mapping]) -> list[SpokenWord]:
    """Build SpokenWords from ASR records ``{word, confidence, timestampMs}``."""
    words = []
    for rec in records:
        words.append(SpokenWord(
            word=str(rec["word"]),
            confidence=float(rec.get("confidence", 0.0)),
            timestamp_ms=int(rec.get("timestampMs", rec.get("timestamp_ms", 0))),
        ))
    return words


def build_word_gpc_map(text: str, decomposer: WordDecomposer | None = None) -> dict[str, list[str]]:
    """Map each word of *text* to its graphemes (unique, decomposition order)."""
    decomposer = decomposer or WordDecomposer()
    return {word: decomposer.graphemes(word) for word in dict.fromkeys(tokenize(text))}


def _spoken_tokens(spoken_words: Sequence[SpokenWord]) -> tuple[list[str], list[SpokenWord]]:
    """Normalize spoken words into tokens, keeping each token's source word."""
    tokens: list[str] = []
    sources: list[SpokenWord] = []
    for sw in spoken_words:
        for token in tokenize(sw.word):
            tokens.append(token)
            sources.append(sw)
    return tokens, sources


def assess(
    expected_text: str,
    spoken_words: Sequence[SpokenWord],
    reading_time_ms: int,
    word_gpc_map: Mapping[str, Sequence[str]] | None = None,
    decomposer: WordDecomposer | None = None,
    page_number: int = 0,
) -> ReadAloudAssessment:
    """Assess one spoken attempt at one page.

    Args:
        expected_text: The page text the child was reading.
        spoken_words: Transcribed words with confidences, in spoken order.
        reading_time_ms: Time spent reading; non-positive gives wcpm 0.
        word_gpc_map: Graphemes per expected word. Built with *decomposer*
            when omitted.
        decomposer: Used only when *word_gpc_map* is omitted.
        page_number: Carried through to the result.

    Returns:
        ReadAloudAssessment with per-word judgements and GPC reinforcement
        sorted by descending error rate.
    """
    expected = tokenize(expected_text)
    spoken, sources = _spoken_tokens(spoken_words)
    if word_gpc_map is None:
        word_gpc_map = build_word_gpc_map(expected_text, decomposer)

    alignment = align_words(expected, spoken)

    judgements: list[WordJudgement] = []
    # gpc -> [errors, total], insertion ordered for stable sorting
    gpc_counts: dict[str, list[int]] = {}
    correct_count = 0

    for pair in alignment:
        gpcs = tuple(word_gpc_map.get(pair.expected, ())) if pair.expected is not None else ()
        for gpc in gpcs:
            counts = gpc_counts.setdefault(gpc, [0, 0])
            counts[1] += 1
            if not pair.correct:
                counts[0] += 1

        if pair.correct:
            correct_count += 1

        confidence = sources[pair.spoken_index].confidence if pair.spoken_index is not None else 0.0
        judgements.append(WordJudgement(
            expected=pair.expected or "",
            spoken=pair.spoken or "",
            correct=pair.correct,
            error_type=None if pair.correct else pair.op,
            gpcs=gpcs,
            confidence=confidence,
        ))

    total = len(expected)
    accuracy = correct_count / total if total > 0 else 0.0
    minutes = reading_time_ms / 60000
    # Halves round up.
    wcpm = math.floor(correct_count / minutes + 0.5) if minutes > 0 else 0

    reinforcement = [
        GPCReinforcement(gpc=gpc, error_count=errors, total_occurrences=occurrences)
        for gpc, (errors, occurrences) in gpc_counts.items()
        if errors > 0
    ]
    reinforcement.sort(key=lambda r: r.error_rate, reverse=True)

    logger.info(
        f"Read-aloud assessment: {correct_count}/{total} correct, "
        f"accuracy={accuracy:.2f}, wcpm={wcpm}, "
        f"{len(reinforcement)} GPC(s) need reinforcement"
    )

    return ReadAloudAssessment(
        accuracy=accuracy,
        wcpm=wcpm,
        reading_time_ms=reading_time_ms,
        words=tuple(judgements),
        gpc_reinforcement=tuple(reinforcement),
        page_number=page_number,
    )
