"""Word-level Levenshtein alignment of expected against spoken text."""

import numpy as np

from decodable.types import AlignedPair

# Share of spoken characters found in the expected word above which a
# substitution is reported as a mispronunciation.
MISPRONUNCIATION_OVERLAP = 0.6


def character_overlap(expected: str, spoken: str) -> float:
    """Spoken characters present in the expected word, over the longer length."""
    longer = max(len(expected), len(spoken))
    if longer == 0:
        return 0.0
    expected_chars = set(expected)
    common = sum(1 for ch in spoken if ch in expected_chars)
    return common / longer


def is_mispronunciation(expected: str, spoken: str) -> bool:
    return character_overlap(expected, spoken) > MISPRONUNCIATION_OVERLAP


def edit_table(expected: list[str], spoken: list[str]) -> np.ndarray:
    """Unit-cost edit distance table, shape (len(expected)+1, len(spoken)+1)."""
    m, n = len(expected), len(spoken)
    dp = np.zeros((m + 1, n + 1), dtype=np.int64)
    dp[:, 0] = np.arange(m + 1)
    dp[0, :] = np.arange(n + 1)

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if expected[i - 1] == spoken[j - 1]:
                dp[i, j] = dp[i - 1, j - 1]
            else:
                dp[i, j] = 1 + min(dp[i - 1, j], dp[i, j - 1], dp[i - 1, j - 1])
    return dp


def align_words(expected: list[str], spoken: list[str]) -> tuple[AlignedPair, ...]:
    """Align two token sequences and classify every step.

    Backtracks from the bottom-right cell. When several steps are equally
    optimal the order is fixed: diagonal (match/substitution), then
    insertion (extra spoken token), then omission (skipped expected token).
    """
    dp = edit_table(expected, spoken)
    pairs: list[AlignedPair] = []
    i, j = len(expected), len(spoken)

    while i > 0 or j > 0:
        if i > 0 and j > 0 and expected[i - 1] == spoken[j - 1] and dp[i, j] == dp[i - 1, j - 1]:
            pairs.append(AlignedPair("match", expected[i - 1], spoken[j - 1], i - 1, j - 1))
            i -= 1
            j -= 1
        elif i > 0 and j > 0 and dp[i, j] == dp[i - 1, j - 1] + 1:
            op = "mispronunciation" if is_mispronunciation(expected[i - 1], spoken[j - 1]) else "substitution"
            pairs.append(AlignedPair(op, expected[i - 1], spoken[j - 1], i - 1, j - 1))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i, j] == dp[i, j - 1] + 1):
            pairs.append(AlignedPair("insertion", None, spoken[j - 1], None, j - 1))
            j -= 1
        else:
            pairs.append(AlignedPair("omission", expected[i - 1], None, i - 1, None))
            i -= 1

    pairs.reverse()
    return tuple(pairs)
