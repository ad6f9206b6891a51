"""Analysis model client built on PydanticAI.

The client is an injected dependency: the analyze endpoint receives it via
``get_generation_client`` so tests can substitute a stub that returns canned
raw text. Output is requested as plain text; decoding and repair happen in
src.services.response_validator.
"""

import logging
import time
from typing import Protocol

import logfire
from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from src.config import Settings, get_settings
from src.constants import JSON_OBJECT_RESPONSE_FORMAT
from src.logging_config import mask_pii
from src.models.analysis_models import GenerationRequest

logger = logging.getLogger(__name__)


class GenerationClientError(Exception):
    """Base exception for analysis model client errors."""

    pass


class MissingCredentialError(GenerationClientError):
    """Raised when OPENAI_API_KEY is not configured."""

    pass


class GenerationError(GenerationClientError):
    """Raised when the analysis model call itself fails."""

    pass


class GenerationClient(Protocol):
    """Protocol for producing raw analysis text from a GenerationRequest."""

    async def complete(self, request: GenerationRequest) -> str:
        """Run one completion.

        Args:
            request: System instruction and user content

        Returns:
            Raw model text (not yet decoded)

        Raises:
            GenerationError: If the upstream call fails
        """
        ...


class PydanticAIGenerationClient:
    """Chat completion over an OpenAI model via a PydanticAI Agent."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float,
    ):
        """
        Initialize the client.

        Args:
            api_key: OpenAI API key
            model: OpenAI chat model name (e.g. 'gpt-4.1-mini')
            temperature: Sampling temperature
        """
        if not api_key:
            raise MissingCredentialError("OPENAI_API_KEY is not configured.")
        self.model_name = model
        self.temperature = temperature
        self._model = OpenAIChatModel(model, provider=OpenAIProvider(api_key=api_key))
        logger.info(
            "PydanticAIGenerationClient initialized with model: %s (key %s)",
            model,
            mask_pii(api_key),
        )

    def _build_agent(self, request: GenerationRequest) -> Agent[None, str]:
        return Agent(
            self._model,
            output_type=str,
            system_prompt=request.system_instruction,
            model_settings={
                "temperature": self.temperature,
                "extra_body": {"response_format": JSON_OBJECT_RESPONSE_FORMAT},
            },
        )

    async def complete(self, request: GenerationRequest) -> str:
        start_time = time.time()
        agent = self._build_agent(request)
        try:
            result = await agent.run(request.user_content)
        except Exception as e:
            logfire.error(
                "Analysis model call failed",
                model=self.model_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GenerationError(f"Analysis model call failed: {e}") from e

        elapsed = time.time() - start_time
        raw = result.output or ""
        logfire.info(
            "Analysis model call completed",
            model=self.model_name,
            prompt_version=request.prompt_version,
            output_length=len(raw),
            response_time_ms=elapsed * 1000,
        )
        return raw


def build_generation_client(settings: Settings) -> PydanticAIGenerationClient:
    """Create a client from settings, failing fast on a missing credential."""
    return PydanticAIGenerationClient(
        api_key=settings.openai_api_key or "",
        model=settings.openai_model,
        temperature=settings.generation_temperature,
    )


# Factory function for dependency injection
def get_generation_client() -> GenerationClient:
    """Get a generation client for the current settings.

    Raises:
        MissingCredentialError: If OPENAI_API_KEY is absent
    """
    return build_generation_client(get_settings())
