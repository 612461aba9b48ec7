"""Pydantic schema for story drafts returned by the text generator."""

from pydantic import BaseModel, ConfigDict, Field

NARRATIVE_STRUCTURES = (
    "cumulative", "problem_solution", "circular", "journey",
    "information", "rhyming", "pattern", "adventure",
)


class CharacterDraft(BaseModel):
    name: str
    description: str = ""
    personality: str = ""
    appearance: str = ""


class PageDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    illustration_prompt: str = Field(default="", alias="illustrationPrompt")


class StoryDraft(BaseModel):
    """Structured output expected from the text-generation backend."""
    title: str
    structure: str = "adventure"
    characters: list[CharacterDraft] = Field(default_factory=list)
    pages: list[PageDraft] = Field(min_length=1)

    @property
    def full_text(self) -> str:
        return " ".join(p.text for p in self.pages)


def story_json_schema() -> dict:
    """JSON schema sent to the generator alongside the prompt."""
    return StoryDraft.model_json_schema(by_alias=True)
