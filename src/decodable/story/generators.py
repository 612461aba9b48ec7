"""Text-generation backend interface and registry."""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from decodable.errors import CollaboratorError
from decodable.story.prompts import GenerationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResponse:
    """Structured data returned by a backend, plus what the call cost."""
    data: dict
    cost: float = 0.0


class TextGenerator(ABC):
    """Abstract base for story text-generation backends."""

    name: str = "base"

    @abstractmethod
    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Produce one story draft.

        Args:
            request: Prompts, target JSON schema and sampling settings.

        Returns:
            GenerationResponse whose data follows the request schema.

        Raises:
            CollaboratorError: The backend could not produce a response.
        """


class ReplayGenerator(TextGenerator):
    """Returns pre-written drafts in order.

    Used for offline runs and tests. Raises CollaboratorError once the
    drafts run out.
    """

    name = "replay"

    def __init__(self, drafts: Iterable[dict] = (), cost_per_call: float = 0.0,
                 path: str | Path | None = None, **kwargs):
        drafts = list(drafts)
        if path is not None:
            loaded = json.loads(Path(path).read_text(encoding="utf-8"))
            drafts.extend(loaded if isinstance(loaded, list) else [loaded])
        self._drafts = drafts
        self.cost_per_call = cost_per_call
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        index = len(self.requests) - 1
        if index >= len(self._drafts):
            raise CollaboratorError(
                f"Replay exhausted after {len(self._drafts)} draft(s)"
            )
        logger.debug(f"Replaying draft {index + 1}/{len(self._drafts)}")
        return GenerationResponse(data=self._drafts[index], cost=self.cost_per_call)


def _get_gemini_class():
    """Lazy import of GeminiGenerator so the SDK loads only when used."""
    from decodable.story.gemini import GeminiGenerator
    return GeminiGenerator


_GENERATORS = {
    "replay": ReplayGenerator,
    "gemini": _get_gemini_class,
}


def get_generator(name: str, **kwargs) -> TextGenerator:
    """Get a text-generation backend by name.

    Modes:
        "gemini": Google Gemini via google-genai (needs GEMINI_API_KEY).
        "replay": pre-written drafts from ``drafts=`` or a JSON ``path=``.
    """
    if name not in _GENERATORS:
        raise ValueError(
            f"Unknown generator: {name!r}. Available: {list(_GENERATORS.keys())}"
        )

    factory = _GENERATORS[name]
    if name == "gemini":
        try:
            cls = factory()
        except ImportError as e:
            raise ImportError(
                f"Gemini generator requires the 'google-genai' package: {e}"
            ) from e
        return cls(**kwargs)

    return factory(**kwargs)
