"""Typed failures returned by the story generation loop."""

from dataclasses import dataclass

from decodable.types import DecodabilityReport


class CollaboratorError(Exception):
    """Raised by a text-generation backend when a request fails."""


@dataclass(frozen=True)
class DecodabilityExhausted:
    """The loop ran out of attempts without crossing the threshold."""
    attempts: int
    last_report: DecodabilityReport | None
    best_report: DecodabilityReport | None
    total_cost: float

    @property
    def message(self) -> str:
        return "could not produce a story that fits this child's current phonics level"

    def to_dict(self) -> dict:
        return {
            "error": "decodability_exhausted",
            "message": self.message,
            "attempts": self.attempts,
            "total_cost": self.total_cost,
            "best_score": self.best_report.decodability_score if self.best_report else None,
            "last_undecodable_words": (
                list(self.last_report.undecodable_words) if self.last_report else []
            ),
        }


@dataclass(frozen=True)
class CollaboratorFailure:
    """The text-generation backend failed; surfaced as-is."""
    attempt: int
    message: str
    total_cost: float

    def to_dict(self) -> dict:
        return {
            "error": "collaborator_failure",
            "message": self.message,
            "attempt": self.attempt,
            "total_cost": self.total_cost,
        }


@dataclass(frozen=True)
class GenerationCancelled:
    """Cancellation was requested between attempts."""
    attempts: int
    total_cost: float

    def to_dict(self) -> dict:
        return {
            "error": "cancelled",
            "attempts": self.attempts,
            "total_cost": self.total_cost,
        }
