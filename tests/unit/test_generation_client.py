"""Tests for the analysis model client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.config import Settings
from src.models.analysis_models import GenerationRequest
from src.services.generation_client import (
    GenerationError,
    MissingCredentialError,
    PydanticAIGenerationClient,
    build_generation_client,
    get_generation_client,
)


@pytest.fixture
def generation_request():
    return GenerationRequest(
        system_instruction="You are an analyst. Answer in Turkish.",
        user_content="og:title: Test",
        prompt_version="test-v1",
    )


def _agent_returning(output):
    agent = MagicMock()
    agent.run = AsyncMock(return_value=MagicMock(output=output))
    return agent


class TestPydanticAIGenerationClient:
    """Test PydanticAIGenerationClient."""

    @pytest.mark.parametrize("api_key", [None, ""])
    def test_missing_key_raises(self, api_key):
        with pytest.raises(MissingCredentialError):
            PydanticAIGenerationClient(api_key=api_key, model="gpt-4.1-mini", temperature=0.8)

    def test_initialization(self):
        client = PydanticAIGenerationClient(
            api_key="sk-test-key", model="gpt-4.1-mini", temperature=0.3
        )

        assert client.model_name == "gpt-4.1-mini"
        assert client.temperature == 0.3

    def test_agent_carries_system_instruction(self, generation_request):
        client = PydanticAIGenerationClient(
            api_key="sk-test-key", model="gpt-4.1-mini", temperature=0.8
        )

        with patch("src.services.generation_client.Agent") as mock_agent_cls:
            client._build_agent(generation_request)

        kwargs = mock_agent_cls.call_args.kwargs
        assert kwargs["system_prompt"] == generation_request.system_instruction
        assert kwargs["output_type"] is str
        assert kwargs["model_settings"]["temperature"] == 0.8
        assert kwargs["model_settings"]["extra_body"] == {
            "response_format": {"type": "json_object"}
        }

    @pytest.mark.asyncio
    async def test_complete_returns_raw_text(self, generation_request, mock_logfire):
        client = PydanticAIGenerationClient(
            api_key="sk-test-key", model="gpt-4.1-mini", temperature=0.8
        )
        agent = _agent_returning('{"detected_niche": "Fitness"}')

        with patch.object(client, "_build_agent", return_value=agent):
            raw = await client.complete(generation_request)

        assert raw == '{"detected_niche": "Fitness"}'
        agent.run.assert_awaited_once_with("og:title: Test")
        mock_logfire.info.assert_called_once()

    @pytest.mark.asyncio
    async def test_none_output_becomes_empty_string(self, generation_request):
        client = PydanticAIGenerationClient(
            api_key="sk-test-key", model="gpt-4.1-mini", temperature=0.8
        )

        with patch.object(client, "_build_agent", return_value=_agent_returning(None)):
            assert await client.complete(generation_request) == ""

    @pytest.mark.asyncio
    async def test_upstream_failure_raises_generation_error(
        self, generation_request, mock_logfire
    ):
        client = PydanticAIGenerationClient(
            api_key="sk-test-key", model="gpt-4.1-mini", temperature=0.8
        )
        agent = MagicMock()
        agent.run = AsyncMock(side_effect=RuntimeError("rate limited"))

        with patch.object(client, "_build_agent", return_value=agent):
            with pytest.raises(GenerationError, match="rate limited"):
                await client.complete(generation_request)

        mock_logfire.error.assert_called_once()


class TestBuildGenerationClient:
    def test_builds_from_settings(self):
        settings = Settings(
            openai_api_key="sk-test-key", openai_model="gpt-4.1", generation_temperature=0.5
        )

        client = build_generation_client(settings)

        assert client.model_name == "gpt-4.1"
        assert client.temperature == 0.5

    def test_missing_key_in_settings_raises(self):
        with pytest.raises(MissingCredentialError):
            build_generation_client(Settings(openai_api_key=None))

    def test_factory_uses_current_settings(self, mock_settings):
        client = get_generation_client()

        assert client.model_name == mock_settings.openai_model
