"""Prompt construction for decodable story generation."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from decodable.story.config import RegenerationConfig
from decodable.story.schema import story_json_schema
from decodable.types import PhonicsFingerprint

DEFAULT_THEMES = ("adventure", "friendship", "nature")


@dataclass(frozen=True)
class RegenerationContext:
    """Feedback carried from one attempt into the next prompt."""
    attempt: int = 1
    previous_undecodable_words: tuple[str, ...] = ()


@dataclass(frozen=True)
class GenerationRequest:
    """Everything a text-generation backend needs for one attempt."""
    system_prompt: str
    user_prompt: str
    schema: dict = field(default_factory=dict)
    temperature: float = 0.7
    max_tokens: int = 4096


def avoidance_guidance(words: Iterable[str]) -> str:
    words = list(words)
    if not words:
        return ""
    lines = "\n".join(
        f'  - "{w}" must be replaced with a decodable alternative'
        for w in words
    )
    return (
        "\n\nCRITICAL: The previous version used these words that the learner "
        "CANNOT decode. Do not use them again:\n" + lines
    )


def character_guidance(fingerprint: PhonicsFingerprint) -> str:
    if not fingerprint.series_characters:
        return ""
    lines = "\n".join(
        f"  {c.name}: {c.description}. Personality: {c.personality}"
        for c in fingerprint.series_characters
    )
    return f"\nUse these existing characters:\n{lines}"


def build_prompt(
    fingerprint: PhonicsFingerprint,
    context: RegenerationContext,
    config: RegenerationConfig,
    tricky_words: Iterable[str] = (),
) -> GenerationRequest:
    """Build the request for one generation attempt.

    From attempt 2 onward the system prompt carries the avoidance list from
    the previous attempt's report.
    """
    min_words, max_words = config.words_for_phase(fingerprint.phase)
    page_count = config.page_count(fingerprint.phase)

    taught = ", ".join(g.grapheme for g in fingerprint.taught_gpcs)
    targets = "; ".join(
        f"{g.grapheme} (as in {', '.join(g.examples[:2])})" if g.examples else g.grapheme
        for g in fingerprint.target_gpcs
    )
    tricky = ", ".join(sorted(tricky_words))
    themes = ", ".join(fingerprint.themes or DEFAULT_THEMES)

    avoidance = ""
    if context.attempt > 1:
        avoidance = avoidance_guidance(context.previous_undecodable_words)

    system_prompt = (
        "You are a children's storybook author who specialises in phonics-aligned "
        "decodable readers. Your stories must be engaging, age-appropriate, and "
        "carefully constrained to use only specific letter-sound patterns.\n\n"
        "ABSOLUTE RULES:\n"
        f"1. Every word must be decodable using ONLY these grapheme-phoneme "
        f"correspondences: {taught}\n"
        f"2. These tricky words are always acceptable: {tricky}\n"
        f"3. Feature the TARGET sounds prominently: {targets}\n"
        f"4. Use {min_words}-{max_words} words per page\n"
        f"5. The story should be {page_count} pages long\n"
        f"6. Age appropriate for a {fingerprint.age_years}-year-old\n"
        f"7. Keep sentences short and clear for Phase {fingerprint.phase} readers\n\n"
        "VOCABULARY GUIDANCE:\n"
        "- Use high-frequency, concrete nouns that children know\n"
        "- Simple verb forms (present tense preferred for early phases)\n"
        "- Repetitive sentence patterns help beginning readers\n\n"
        f"THEME: {themes}"
        f"{character_guidance(fingerprint)}{avoidance}"
    )

    user_prompt = (
        f"Write a {page_count}-page decodable storybook for Phase {fingerprint.phase} "
        f"phonics, targeting the sounds: {targets}.\n\n"
        "Return JSON with keys: title, structure (one of cumulative, "
        "problem_solution, circular, journey, pattern, adventure), characters "
        "(name, description, personality, appearance) and pages (text, "
        "illustrationPrompt)."
    )

    return GenerationRequest(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        schema=story_json_schema(),
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )
