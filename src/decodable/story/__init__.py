"""Story pipeline: generate, validate and regenerate until decodable."""

import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from pydantic import ValidationError

from decodable.errors import (
    CollaboratorError,
    CollaboratorFailure,
    DecodabilityExhausted,
    GenerationCancelled,
)
from decodable.inventory import DEFAULT_INVENTORY, GPCInventory, tokenize
from decodable.names import generate_story_id
from decodable.story.config import RegenerationConfig
from decodable.story.generators import GenerationResponse, TextGenerator
from decodable.story.prompts import GenerationRequest, RegenerationContext, build_prompt
from decodable.story.schema import StoryDraft
from decodable.types import (
    DecodabilityReport,
    GeneratedStory,
    PhonicsFingerprint,
    StoryCharacter,
    StoryMetadata,
    StoryPage,
)
from decodable.validate import DecodabilityValidator

logger = logging.getLogger(__name__)

StoryOutcome = GeneratedStory | DecodabilityExhausted | CollaboratorFailure | GenerationCancelled

_SENTENCE_RE = re.compile(r"[.!?]+")


def fingerprint_from_dict(data: dict, inventory: GPCInventory = DEFAULT_INVENTORY) -> PhonicsFingerprint:
    """Build a PhonicsFingerprint from a JSON-style dict.

    Accepts camelCase or snake_case keys. GPCs are given as grapheme strings
    and resolved against *inventory*; when ``taughtGpcs`` is missing, every
    GPC up to ``phase`` counts as taught.
    """
    def get(camel: str, snake: str, default=None):
        return data.get(camel, data.get(snake, default))

    phase = int(get("phase", "phase", 2))
    taught_names = get("taughtGpcs", "taught_gpcs")
    if taught_names is None:
        taught = inventory.gpcs_for_phase(phase)
    else:
        taught = inventory.select(taught_names)
    target = inventory.select(get("targetGpcs", "target_gpcs", []))

    characters = tuple(
        StoryCharacter(
            name=c["name"],
            description=c.get("description", ""),
            personality=c.get("personality", ""),
            appearance=c.get("appearance", ""),
        )
        for c in get("seriesCharacters", "series_characters", [])
    )
    low, high = get("wcpmBand", "wcpm_band", (20, 40))

    return PhonicsFingerprint(
        learner_id=str(get("learnerId", "learner_id", "anonymous")),
        taught_gpcs=taught,
        target_gpcs=target,
        phase=phase,
        age_years=int(get("ageYears", "age_years", 5)),
        themes=tuple(get("themes", "themes", ())),
        reading_level=get("readingLevel", "reading_level", "early"),
        wcpm_band=(int(low), int(high)),
        series_characters=characters,
        series_id=get("seriesId", "series_id"),
    )


def _call_generator(
    generator: TextGenerator,
    request: GenerationRequest,
    timeout_s: float | None,
) -> GenerationResponse:
    """Run one collaborator call, bounded by *timeout_s* when given."""
    if timeout_s is None:
        return generator.generate(request)
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(generator.generate, request)
        return future.result(timeout=timeout_s)
    finally:
        # A timed-out call is abandoned, not awaited.
        executor.shutdown(wait=False, cancel_futures=True)


def _parse_draft(data: dict) -> StoryDraft | None:
    try:
        return StoryDraft.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Draft does not match the story schema: {e.error_count()} error(s)")
        return None


def _build_story(
    draft: StoryDraft,
    fingerprint: PhonicsFingerprint,
    report: DecodabilityReport,
    validator: DecodabilityValidator,
    total_cost: float,
    attempts: int,
    seed: int | None,
) -> GeneratedStory:
    pages = tuple(
        StoryPage(
            page_number=i,
            text=p.text,
            illustration_prompt=p.illustration_prompt,
            target_words=tuple(validator.find_target_words(p.text, fingerprint.target_gpcs)),
            word_count=len(tokenize(p.text)),
        )
        for i, p in enumerate(draft.pages, start=1)
    )

    if draft.characters:
        characters = tuple(
            StoryCharacter(
                name=c.name,
                description=c.description,
                personality=c.personality,
                appearance=c.appearance,
            )
            for c in draft.characters
        )
    else:
        characters = fingerprint.series_characters

    sentences = [s for s in _SENTENCE_RE.split(draft.full_text) if s.strip()]
    low, high = fingerprint.wcpm_band

    metadata = StoryMetadata(
        phonics_phase=fingerprint.phase,
        target_gpcs=tuple(g.grapheme for g in fingerprint.target_gpcs),
        taught_gpc_count=len(fingerprint.taught_gpcs),
        decodability_score=report.decodability_score,
        reading_level=fingerprint.reading_level,
        wcpm_target=round((low + high) / 2),
        vocabulary_tier="tier1_everyday" if fingerprint.phase <= 3 else "tier2_academic",
        narrative_structure=draft.structure,
        total_word_count=report.total_words,
        unique_word_count=report.unique_words,
        sentences_per_page=round(len(sentences) / len(pages)) if pages else 0,
        themes=fingerprint.themes,
        series_id=fingerprint.series_id,
    )

    return GeneratedStory(
        id=generate_story_id(seed),
        title=draft.title,
        pages=pages,
        characters=characters,
        metadata=metadata,
        decodability_report=report,
        generation_cost=total_cost,
        attempts=attempts,
    )


def generate_story(
    fingerprint: PhonicsFingerprint,
    generator: TextGenerator,
    config: RegenerationConfig | None = None,
    validator: DecodabilityValidator | None = None,
    cancel_event: threading.Event | None = None,
    seed: int | None = None,
) -> StoryOutcome:
    """Generate a story that passes the learner's decodability threshold.

    Each attempt prompts the generator, validates the returned prose and
    either accepts it or feeds its undecodable words into the next prompt.
    The loop makes at most ``config.max_regeneration_attempts`` generator
    calls.

    Args:
        fingerprint: Learner's taught/target GPCs, phase, age and themes.
        generator: Text-generation backend.
        config: Threshold, attempt budget and per-attempt timeout.
        validator: Decodability validator (default inventory if omitted).
        cancel_event: Checked before each attempt; never mid-attempt.
        seed: Makes the accepted story's ID deterministic.

    Returns:
        GeneratedStory on acceptance; otherwise DecodabilityExhausted,
        CollaboratorFailure or GenerationCancelled. Never raises for
        generator failures.
    """
    config = config or RegenerationConfig()
    validator = validator or DecodabilityValidator()
    tricky_words = validator.inventory.tricky_words
    start_time = time.monotonic()

    total_cost = 0.0
    last_report: DecodabilityReport | None = None
    best_report: DecodabilityReport | None = None

    for attempt in range(1, config.max_regeneration_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Story generation cancelled before attempt {attempt}")
            return GenerationCancelled(attempts=attempt - 1, total_cost=total_cost)

        context = RegenerationContext(
            attempt=attempt,
            previous_undecodable_words=last_report.undecodable_words if last_report else (),
        )
        request = build_prompt(fingerprint, context, config, tricky_words)
        logger.info(
            f"Story generation attempt {attempt}/{config.max_regeneration_attempts} "
            f"for learner {fingerprint.learner_id} (phase {fingerprint.phase}, "
            f"avoiding {len(context.previous_undecodable_words)} word(s))"
        )

        draft: StoryDraft | None = None
        try:
            response = _call_generator(generator, request, config.attempt_timeout_s)
        except FutureTimeoutError:
            logger.warning(
                f"Attempt {attempt} timed out after {config.attempt_timeout_s}s"
            )
        except CollaboratorError as e:
            logger.warning(f"Text generator failed on attempt {attempt}: {e}")
            return CollaboratorFailure(attempt=attempt, message=str(e), total_cost=total_cost)
        except Exception as e:
            logger.warning(f"Text generator raised on attempt {attempt}: {e!r}")
            return CollaboratorFailure(
                attempt=attempt,
                message=f"{type(e).__name__}: {e}",
                total_cost=total_cost,
            )
        else:
            total_cost += response.cost
            draft = _parse_draft(response.data)

        text = draft.full_text if draft is not None else ""
        report = validator.validate_story(
            text,
            fingerprint.taught_gpcs,
            fingerprint.target_gpcs,
            config.decodability_threshold,
        )
        logger.info(
            f"Attempt {attempt}: decodability={report.decodability_score:.3f} "
            f"coverage={report.target_gpc_coverage:.3f} "
            f"undecodable={len(report.undecodable_words)} "
            f"passes={report.passes_threshold}"
        )

        if draft is not None and report.passes_threshold:
            story = _build_story(
                draft, fingerprint, report, validator, total_cost, attempt, seed,
            )
            logger.info(
                f"Story {story.id} accepted after {attempt} attempt(s): "
                f"{len(story.pages)} pages, {report.total_words} words, "
                f"cost ${total_cost:.4f}, {time.monotonic() - start_time:.1f}s"
            )
            return story

        last_report = report
        if best_report is None or report.decodability_score > best_report.decodability_score:
            best_report = report

    logger.info(
        f"Story generation exhausted {config.max_regeneration_attempts} attempt(s); "
        f"best score {best_report.decodability_score:.3f}"
    )
    return DecodabilityExhausted(
        attempts=config.max_regeneration_attempts,
        last_report=last_report,
        best_report=best_report,
        total_cost=total_cost,
    )
