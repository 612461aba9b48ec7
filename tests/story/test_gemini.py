"""Tests for the Gemini backend (SDK mocked)."""

import json
from unittest.mock import MagicMock, patch

import pytest

from decodable.errors import CollaboratorError
from decodable.story.gemini import GeminiGenerator
from decodable.story.prompts import GenerationRequest

REQUEST = GenerationRequest(
    system_prompt="Write decodable stories.",
    user_prompt="Write a story.",
    schema={"type": "object"},
    temperature=0.3,
    max_tokens=512,
)
DRAFT = {"title": "Sam", "pages": [{"text": "Sam sat.", "illustrationPrompt": "a boy"}]}


def _response(text, prompt_tokens=1000, output_tokens=2000):
    response = MagicMock()
    response.text = text
    response.usage_metadata.prompt_token_count = prompt_tokens
    response.usage_metadata.candidates_token_count = output_tokens
    return response


@pytest.fixture
def mock_genai():
    with patch("decodable.story.gemini.genai") as genai:
        yield genai


def _client(mock_genai):
    return mock_genai.Client.return_value


def test_requires_api_key(monkeypatch, mock_genai):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        GeminiGenerator()


def test_api_key_from_environment(monkeypatch, mock_genai):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    GeminiGenerator()
    mock_genai.Client.assert_called_once_with(api_key="env-key")


def test_generate_returns_data_and_cost(mock_genai):
    _client(mock_genai).models.generate_content.return_value = _response(json.dumps(DRAFT))
    generator = GeminiGenerator(api_key="k", model="gemini-test")

    response = generator.generate(REQUEST)

    assert response.data == DRAFT
    # 1000 * 0.30 + 2000 * 2.50 per million
    assert response.cost == pytest.approx(0.0053)


def test_generate_passes_request_settings(mock_genai):
    generate_content = _client(mock_genai).models.generate_content
    generate_content.return_value = _response(json.dumps(DRAFT))
    GeminiGenerator(api_key="k", model="gemini-test").generate(REQUEST)

    kwargs = generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["contents"].startswith("Write a story.")
    assert '"type": "object"' in kwargs["contents"]
    config = kwargs["config"]
    assert config.system_instruction == "Write decodable stories."
    assert config.temperature == 0.3
    assert config.max_output_tokens == 512
    assert config.response_mime_type == "application/json"


def test_custom_prices(mock_genai):
    _client(mock_genai).models.generate_content.return_value = _response(
        json.dumps(DRAFT), prompt_tokens=1_000_000, output_tokens=0,
    )
    generator = GeminiGenerator(api_key="k", input_price_per_m=1.0)
    assert generator.generate(REQUEST).cost == pytest.approx(1.0)


def test_sdk_error_becomes_collaborator_error(mock_genai):
    _client(mock_genai).models.generate_content.side_effect = RuntimeError("quota exceeded")
    generator = GeminiGenerator(api_key="k")
    with pytest.raises(CollaboratorError, match="quota exceeded"):
        generator.generate(REQUEST)


def test_empty_response_is_collaborator_error(mock_genai):
    _client(mock_genai).models.generate_content.return_value = _response("")
    with pytest.raises(CollaboratorError, match="Empty response"):
        GeminiGenerator(api_key="k").generate(REQUEST)


@pytest.mark.parametrize("text", ["not json at all", "[1, 2, 3]"])
def test_unusable_json_keeps_cost(mock_genai, text):
    _client(mock_genai).models.generate_content.return_value = _response(text)
    response = GeminiGenerator(api_key="k").generate(REQUEST)
    assert response.data == {}
    assert response.cost > 0
