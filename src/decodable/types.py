"""Core data types for decodable."""

from dataclasses import asdict, dataclass
from typing import Literal

AlignmentOp = Literal["match", "substitution", "mispronunciation", "insertion", "omission"]


@dataclass(frozen=True)
class GPC:
    """A grapheme-phoneme correspondence."""
    grapheme: str                   # e.g. "sh", "igh", "a_e"
    phoneme: str                    # e.g. "/ʃ/"
    examples: tuple[str, ...] = ()
    phase: int | None = None        # phonics phase the GPC is introduced in

    @property
    def is_split_digraph(self) -> bool:
        return len(self.grapheme) == 3 and self.grapheme[1] == "_"

    def to_dict(self) -> dict:
        return {
            "grapheme": self.grapheme,
            "phoneme": self.phoneme,
            "examples": list(self.examples),
            "phase": self.phase,
        }


@dataclass(frozen=True)
class WordDecodability:
    """Decodability of one word against a taught set."""
    word: str
    is_decodable: bool
    required_gpcs: tuple[GPC, ...]
    untaught_gpcs: tuple[GPC, ...]
    is_tricky_word: bool

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "is_decodable": self.is_decodable,
            "required_gpcs": [g.grapheme for g in self.required_gpcs],
            "untaught_gpcs": [g.grapheme for g in self.untaught_gpcs],
            "is_tricky_word": self.is_tricky_word,
        }


@dataclass(frozen=True)
class DecodabilityReport:
    """Aggregate decodability of a text."""
    total_words: int
    unique_words: int
    decodable_words: int
    decodable_unique_words: int
    tricky_words: int                   # token occurrences of tricky words
    undecodable_words: tuple[str, ...]  # unique, first-occurrence order
    decodability_score: float           # token weighted, gates acceptance
    unique_decodability_score: float    # reporting only
    target_gpc_coverage: float
    word_analysis: tuple[WordDecodability, ...]
    passes_threshold: bool
    threshold: float

    def to_dict(self) -> dict:
        return {
            "total_words": self.total_words,
            "unique_words": self.unique_words,
            "decodable_words": self.decodable_words,
            "decodable_unique_words": self.decodable_unique_words,
            "tricky_words": self.tricky_words,
            "undecodable_words": list(self.undecodable_words),
            "decodability_score": round(self.decodability_score, 4),
            "unique_decodability_score": round(self.unique_decodability_score, 4),
            "target_gpc_coverage": round(self.target_gpc_coverage, 4),
            "passes_threshold": self.passes_threshold,
            "threshold": self.threshold,
            "word_analysis": [w.to_dict() for w in self.word_analysis],
        }


@dataclass(frozen=True)
class PageScore:
    """Token-weighted decodability of a single page."""
    page_number: int
    score: float
    total_words: int


@dataclass(frozen=True)
class StoryCharacter:
    name: str
    description: str = ""
    personality: str = ""
    appearance: str = ""


@dataclass(frozen=True)
class PhonicsFingerprint:
    """Learner context that constrains story generation. Never mutated."""
    learner_id: str
    taught_gpcs: tuple[GPC, ...]
    target_gpcs: tuple[GPC, ...]
    phase: int
    age_years: int
    themes: tuple[str, ...] = ()
    reading_level: str = "early"
    wcpm_band: tuple[int, int] = (20, 40)
    series_characters: tuple[StoryCharacter, ...] = ()
    series_id: str | None = None


@dataclass(frozen=True)
class StoryPage:
    page_number: int
    text: str
    illustration_prompt: str
    target_words: tuple[str, ...]   # words featuring target GPCs
    word_count: int


@dataclass(frozen=True)
class StoryMetadata:
    phonics_phase: int
    target_gpcs: tuple[str, ...]
    taught_gpc_count: int
    decodability_score: float
    reading_level: str
    wcpm_target: int
    vocabulary_tier: str
    narrative_structure: str
    total_word_count: int
    unique_word_count: int
    sentences_per_page: int
    themes: tuple[str, ...]
    series_id: str | None = None


@dataclass(frozen=True)
class GeneratedStory:
    """A story that passed the decodability threshold."""
    id: str
    title: str
    pages: tuple[StoryPage, ...]
    characters: tuple[StoryCharacter, ...]
    metadata: StoryMetadata
    decodability_report: DecodabilityReport
    generation_cost: float          # summed across every attempt
    attempts: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["decodability_report"] = self.decodability_report.to_dict()
        return data


@dataclass(frozen=True)
class SpokenWord:
    """One transcribed word from the ASR collaborator."""
    word: str
    confidence: float
    timestamp_ms: int = 0


@dataclass(frozen=True)
class AlignedPair:
    """One step of the expected/spoken word alignment."""
    op: AlignmentOp
    expected: str | None
    spoken: str | None
    expected_index: int | None = None
    spoken_index: int | None = None

    @property
    def correct(self) -> bool:
        return self.op == "match"


@dataclass(frozen=True)
class WordJudgement:
    expected: str
    spoken: str
    correct: bool
    error_type: AlignmentOp | None
    gpcs: tuple[str, ...]
    confidence: float


@dataclass(frozen=True)
class GPCReinforcement:
    gpc: str
    error_count: int
    total_occurrences: int

    @property
    def error_rate(self) -> float:
        return self.error_count / self.total_occurrences if self.total_occurrences else 0.0


@dataclass(frozen=True)
class ReadAloudAssessment:
    """Word-level judgement of one spoken attempt at one page."""
    accuracy: float
    wcpm: int
    reading_time_ms: int
    words: tuple[WordJudgement, ...]
    gpc_reinforcement: tuple[GPCReinforcement, ...]
    page_number: int = 0

    def to_dict(self) -> dict:
        return {
            "page_number": self.page_number,
            "accuracy": round(self.accuracy, 4),
            "wcpm": self.wcpm,
            "reading_time_ms": self.reading_time_ms,
            "words": [asdict(w) for w in self.words],
            "gpc_reinforcement": [
                {**asdict(r), "error_rate": round(r.error_rate, 4)}
                for r in self.gpc_reinforcement
            ],
        }
