"""Prompt synthesis for the analysis model.

Maps ExtractedMeta to a GenerationRequest. The system instruction comes from
src/prompts/analysis_system_instructions.md and the JSON schema is a fixed
constant; the only variable part is the serialized meta. Output is
deterministic for identical input.
"""

from functools import lru_cache
from pathlib import Path

from src.constants import DEFAULT_RESPONSE_LANGUAGE, UNKNOWN_FIELD_PLACEHOLDER
from src.models.analysis_models import GenerationRequest
from src.models.meta_models import ExtractedMeta

_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_SYSTEM_PROMPT_PATH = _PROMPTS_DIR / "analysis_system_instructions.md"

# Contract with the analysis model. Mirrors src.models.analysis_models.AnalysisReport.
ANALYSIS_SCHEMA_TEMPLATE = """{
  "detected_niche": "string",
  "audience": {
    "who": "string",
    "level": "beginner|intermediate|advanced",
    "main_pain_points": ["string", "string", "string"]
  },
  "topic_clusters": [
    {"cluster": "string", "weight_pct": number, "example_angles": ["string", "string", "string"]}
  ],
  "missing_gaps": ["string", "string", "string", "string", "string"],
  "positioning_sentence": "string",
  "product_ladder": {
    "entry_pdf": {
      "name": "string",
      "price_range": "string",
      "deliverables": ["string", "string", "string"],
      "outline": ["string", "string", "string", "string", "string"]
    },
    "mid_video": {
      "name": "string",
      "price_range": "string",
      "modules": [{"title": "string", "minutes": number, "outcome": "string"}],
      "bonuses": ["string", "string"]
    },
    "premium_1on1": {
      "name": "string",
      "price_range": "string",
      "who_its_for": ["string", "string", "string"],
      "format": "string",
      "call_structure": ["string", "string", "string", "string"]
    }
  },
  "content_plan_30d": [
    {"day": 1, "title": "string", "hook": "string", "script": "string", "cta": "string"}
  ]
}"""

LIMITED_DATA_NOTE = (
    "Note: the profile page could not be read or exposed no metadata. "
    "State that the data is limited and give your best estimate from the URL."
)


@lru_cache()
def load_system_prompt() -> tuple[str, str]:
    """Load the system prompt template.

    Returns:
        (version, template body after the ``---`` header)
    """
    if not _SYSTEM_PROMPT_PATH.exists():
        raise FileNotFoundError(f"Analysis system prompt not found: {_SYSTEM_PROMPT_PATH}")
    text = _SYSTEM_PROMPT_PATH.read_text(encoding="utf-8")
    header, _, body = text.partition("---")
    version = "unversioned"
    for line in header.splitlines():
        key, _, value = line.partition(":")
        if key.strip() == "version" and value.strip():
            version = value.strip()
    return version, body.strip()


def prompt_version() -> str:
    """Version string from the system prompt header."""
    return load_system_prompt()[0]


def _field(value: str) -> str:
    return value if value else UNKNOWN_FIELD_PLACEHOLDER


def build_system_instruction(language: str = DEFAULT_RESPONSE_LANGUAGE) -> str:
    _, template = load_system_prompt()
    return template.replace("{{ language }}", language)


def build_user_content(meta: ExtractedMeta, source_url: str = "") -> str:
    """Render the meta record into the user message.

    Every field is always present; empty values are shown as a placeholder.
    """
    lines = [
        f"Instagram URL: {_field(meta.canonical_url or source_url)}",
        f"og:title: {_field(meta.title)}",
        f"og:description: {_field(meta.description)}",
        f"og:image: {_field(meta.image_url)}",
        f"og:site_name: {_field(meta.site_name)}",
        f"og:type: {_field(meta.content_type)}",
        f"page fetched: {'yes' if meta.fetch_succeeded else 'no'} (HTTP {meta.status})",
    ]
    if not meta.fetch_succeeded:
        lines.append(LIMITED_DATA_NOTE)
    lines.extend(
        [
            "",
            "From this metadata produce the analysis, the product ladder and the content plan.",
            "Return output that CONFORMS to the JSON schema below. Write nothing else.",
            "",
            "JSON schema:",
            ANALYSIS_SCHEMA_TEMPLATE,
        ]
    )
    return "\n".join(lines)


def build_generation_request(
    meta: ExtractedMeta,
    source_url: str = "",
    language: str = DEFAULT_RESPONSE_LANGUAGE,
) -> GenerationRequest:
    """Synthesize the prompt payload for one analysis.

    Args:
        meta: Extracted (possibly empty) profile metadata
        source_url: Requested URL, shown when the page had no canonical link
        language: Language the model must answer in

    Returns:
        Immutable GenerationRequest
    """
    version, _ = load_system_prompt()
    return GenerationRequest(
        system_instruction=build_system_instruction(language),
        user_content=build_user_content(meta, source_url=source_url),
        prompt_version=version,
    )
