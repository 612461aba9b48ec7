"""Gemini text-generation backend (google-genai SDK)."""

import json
import logging
import os

from google import genai
from google.genai import types as genai_types

from decodable.errors import CollaboratorError
from decodable.story.generators import GenerationResponse, TextGenerator
from decodable.story.prompts import GenerationRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = os.environ.get("DECODABLE_GEMINI_MODEL", "gemini-2.5-flash")

# USD per million tokens.
DEFAULT_INPUT_PRICE = 0.30
DEFAULT_OUTPUT_PRICE = 2.50


class GeminiGenerator(TextGenerator):
    """Story drafts from Gemini in JSON response mode.

    Cost is estimated from the response's token usage.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        input_price_per_m: float = DEFAULT_INPUT_PRICE,
        output_price_per_m: float = DEFAULT_OUTPUT_PRICE,
        **kwargs,
    ):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY not set. Check your .env file.")
        self.model_name = model
        self.input_price_per_m = input_price_per_m
        self.output_price_per_m = output_price_per_m
        self.client = genai.Client(api_key=self.api_key)

    def _cost(self, usage) -> float:
        if usage is None:
            return 0.0
        prompt_tokens = usage.prompt_token_count or 0
        output_tokens = usage.candidates_token_count or 0
        return (
            prompt_tokens * self.input_price_per_m
            + output_tokens * self.output_price_per_m
        ) / 1_000_000

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        contents = request.user_prompt
        if request.schema:
            contents += "\n\nJSON schema:\n" + json.dumps(request.schema)

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=genai_types.GenerateContentConfig(
                    system_instruction=request.system_prompt,
                    temperature=request.temperature,
                    max_output_tokens=request.max_tokens,
                    response_mime_type="application/json",
                ),
            )
        except Exception as e:
            raise CollaboratorError(f"Gemini request failed: {e}") from e

        cost = self._cost(getattr(response, "usage_metadata", None))
        text = response.text
        if not text:
            raise CollaboratorError("Empty response from Gemini")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            # Billed but unusable; the loop counts it as a failed attempt.
            logger.warning(f"Gemini returned non-JSON output: {e}")
            data = {}
        if not isinstance(data, dict):
            data = {}

        return GenerationResponse(data=data, cost=cost)
