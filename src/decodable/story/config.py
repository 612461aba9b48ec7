"""Configuration for the story regeneration loop."""

from dataclasses import dataclass, field

# Words per page by phonics phase, (min, max).
WORDS_PER_PAGE: dict[int, tuple[int, int]] = {
    1: (5, 10),
    2: (8, 15),
    3: (12, 25),
    4: (20, 35),
    5: (25, 45),
    6: (30, 60),
}


@dataclass(frozen=True)
class RegenerationConfig:
    """Knobs for generate_story.

    attempt_timeout_s applies to each collaborator call separately; None
    disables it.
    """
    decodability_threshold: float = 0.85
    max_regeneration_attempts: int = 3
    attempt_timeout_s: float | None = None
    default_page_count: tuple[int, int] = (8, 16)
    words_per_page: dict[int, tuple[int, int]] = field(default_factory=lambda: dict(WORDS_PER_PAGE))
    temperature: float = 0.7
    max_tokens: int = 4096

    def __post_init__(self):
        if not 0.0 <= self.decodability_threshold <= 1.0:
            raise ValueError(
                f"decodability_threshold must be in [0, 1], got {self.decodability_threshold}"
            )
        if self.max_regeneration_attempts < 1:
            raise ValueError(
                f"max_regeneration_attempts must be >= 1, got {self.max_regeneration_attempts}"
            )
        if self.attempt_timeout_s is not None and self.attempt_timeout_s <= 0:
            raise ValueError(f"attempt_timeout_s must be positive, got {self.attempt_timeout_s}")

    def page_count(self, phase: int) -> int:
        low, high = self.default_page_count
        if phase <= 2:
            return low
        return min(high, low + phase * 2)

    def words_for_phase(self, phase: int) -> tuple[int, int]:
        if phase in self.words_per_page:
            return self.words_per_page[phase]
        nearest = min(self.words_per_page, key=lambda p: abs(p - phase))
        return self.words_per_page[nearest]
