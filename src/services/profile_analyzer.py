"""Profile analysis orchestration service.

Runs one analysis request end-to-end:
1. Validate the profile URL
2. Fetch the public page (failures degrade to empty meta)
3. Extract meta tags
4. Synthesize the prompt
5. Call the analysis model
6. Decode/repair the model output

The fetcher and the generation client are injected so the API layer and the
CLI share this flow and tests can substitute stubs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import logfire

from src.config import get_settings
from src.models.analysis_models import AnalysisFailed, AnalysisOk, GenerationRequest
from src.models.meta_models import ExtractedMeta
from src.models.profile_models import InvalidProfileUrl, ProfileReference
from src.services.generation_client import GenerationClient, get_generation_client
from src.services.meta_extractor import extract_meta
from src.services.page_fetcher import PageFetcher, get_page_fetcher
from src.services.profile_url import validate_profile_url
from src.services.prompt_builder import build_generation_request
from src.services.response_validator import validate_generation_output

logger = logging.getLogger(__name__)


class ProfileAnalyzerError(Exception):
    """Base exception for ProfileAnalyzer errors."""

    pass


class InvalidInputError(ProfileAnalyzerError):
    """Raised when the profile URL is missing, malformed or not allowed."""

    def __init__(self, rejection: InvalidProfileUrl):
        super().__init__(rejection.message)
        self.rejection = rejection


class GenerationDecodeError(ProfileAnalyzerError):
    """Raised when model output stays undecodable after repair."""

    def __init__(self, failure: AnalysisFailed, meta: ExtractedMeta):
        super().__init__(failure.reason)
        self.failure = failure
        self.meta = meta

    @property
    def raw(self) -> str:
        return self.failure.raw


@dataclass(frozen=True)
class AnalysisOutcome:
    """Everything produced for one successful analysis."""

    profile: ProfileReference
    meta: ExtractedMeta
    request: GenerationRequest
    result: AnalysisOk

    def response_body(self) -> dict[str, Any]:
        """JSON body shared by the HTTP endpoint and the CLI."""
        body: dict[str, Any] = {
            "meta": self.meta.model_dump(by_alias=True),
            "result": self.result.value,
        }
        if self.result.warnings:
            body["warnings"] = list(self.result.warnings)
        return body


class ProfileAnalyzer:
    """Orchestrate URL validation, scraping, prompting and decoding.

    Example:
        >>> analyzer = ProfileAnalyzer()
        >>> outcome = await analyzer.analyze("https://instagram.com/somehandle")

        # With stubs for testing:
        >>> analyzer = ProfileAnalyzer(
        ...     fetcher=StubFetcher(),
        ...     generation_client=StubGenerationClient('{"detected_niche": "x"}'),
        ... )
    """

    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        generation_client: GenerationClient | None = None,
        generation_client_factory: Callable[[], GenerationClient] | None = None,
        language: str | None = None,
    ):
        """Initialize the analyzer.

        Args:
            fetcher: Page fetcher; uses get_page_fetcher() if not provided.
            generation_client: Analysis model client. When omitted it is built
                               lazily, after URL validation, so a missing
                               credential never masks an invalid URL.
            generation_client_factory: Factory used for the lazy build.
                                       Defaults to get_generation_client().
            language: Response language; defaults to settings.response_language.
        """
        self._fetcher = fetcher
        self._generation_client = generation_client
        self._generation_client_factory = (
            generation_client_factory or get_generation_client
        )
        self._language = language

    def _get_fetcher(self) -> PageFetcher:
        if self._fetcher is None:
            self._fetcher = get_page_fetcher()
        return self._fetcher

    def _get_generation_client(self) -> GenerationClient:
        """Get or create the generation client (may raise MissingCredentialError)."""
        if self._generation_client is None:
            self._generation_client = self._generation_client_factory()
        return self._generation_client

    def _get_language(self) -> str:
        return self._language or get_settings().response_language

    async def collect_meta(self, profile: ProfileReference) -> ExtractedMeta:
        """Fetch and extract; never raises."""
        fetch_result = await self._get_fetcher().fetch(profile.url)
        return extract_meta(fetch_result)

    async def analyze(self, candidate_url: object) -> AnalysisOutcome:
        """Run the full analysis for one URL.

        Args:
            candidate_url: URL supplied by the caller

        Returns:
            AnalysisOutcome with meta and the decoded analysis

        Raises:
            InvalidInputError: URL missing or rejected
            MissingCredentialError: OPENAI_API_KEY not configured
            GenerationError: Analysis model call failed
            GenerationDecodeError: Output undecodable after repair
        """
        validated = validate_profile_url(candidate_url)
        if isinstance(validated, InvalidProfileUrl):
            logfire.info(
                "Profile URL rejected",
                reason=validated.reason,
            )
            raise InvalidInputError(validated)

        generation_client = self._get_generation_client()

        with logfire.span("analyze profile", url=validated.url, kind=validated.kind):
            meta = await self.collect_meta(validated)

            # Empty meta still goes to the model; the prompt states the limitation.
            request = build_generation_request(
                meta, source_url=validated.url, language=self._get_language()
            )
            raw = await generation_client.complete(request)
            result = validate_generation_output(raw)

        if isinstance(result, AnalysisFailed):
            raise GenerationDecodeError(result, meta)

        logger.info(
            "Profile analysis completed - url: %s, fetch_succeeded: %s, stage: %s, warnings: %d",
            validated.url,
            meta.fetch_succeeded,
            result.stage,
            len(result.warnings),
        )
        return AnalysisOutcome(profile=validated, meta=meta, request=request, result=result)


def get_profile_analyzer() -> ProfileAnalyzer:
    """Factory function for dependency injection."""
    return ProfileAnalyzer()
