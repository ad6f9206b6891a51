"""Generation request, analysis result and report schema models."""

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class GenerationRequest(BaseModel):
    """Prompt payload for the analysis model. Consumed once per request."""

    model_config = ConfigDict(frozen=True)

    system_instruction: str
    user_content: str
    prompt_version: str


@dataclass(frozen=True)
class AnalysisOk:
    """Decoded model output.

    Attributes:
        value: The decoded JSON value.
        stage: Which decode attempt succeeded ("strict" or "boundary").
        warnings: Soft schema-drift warnings; never fatal.
    """

    value: Any
    stage: Literal["strict", "boundary"] = "strict"
    warnings: list[str] = field(default_factory=list)
    kind: Literal["ok"] = "ok"

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class AnalysisFailed:
    """Model output that could not be decoded. ``raw`` is kept verbatim."""

    reason: str
    raw: str
    kind: Literal["failed"] = "failed"

    @property
    def ok(self) -> bool:
        return False


AnalysisResult = Union[AnalysisOk, AnalysisFailed]


# =============================================================================
# Documented analysis schema (contract with the analysis model)
# =============================================================================
# extra="allow" everywhere: newer prompt versions may add keys.


class _SchemaModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class Audience(_SchemaModel):
    who: str
    level: str = Field(..., description="beginner | intermediate | advanced")
    main_pain_points: list[str]


class TopicCluster(_SchemaModel):
    cluster: str
    weight_pct: float
    example_angles: list[str]


class EntryPdfProduct(_SchemaModel):
    name: str
    price_range: str
    deliverables: list[str]
    outline: list[str]


class VideoModule(_SchemaModel):
    title: str
    minutes: float
    outcome: str


class MidVideoProduct(_SchemaModel):
    name: str
    price_range: str
    modules: list[VideoModule]
    bonuses: list[str]


class PremiumProduct(_SchemaModel):
    name: str
    price_range: str
    who_its_for: list[str]
    format: str
    call_structure: list[str]


class ProductLadder(_SchemaModel):
    entry_pdf: EntryPdfProduct
    mid_video: MidVideoProduct
    premium_1on1: PremiumProduct


class ContentPlanDay(_SchemaModel):
    day: int
    title: str
    hook: str
    script: str
    cta: str


class AnalysisReport(_SchemaModel):
    """Creator analysis returned by the model: niche, product ladder, 30-day plan."""

    detected_niche: str
    audience: Audience
    topic_clusters: list[TopicCluster]
    missing_gaps: list[str]
    positioning_sentence: str
    product_ladder: ProductLadder
    content_plan_30d: list[ContentPlanDay]


class ReportRequest(BaseModel):
    """Body of POST /api/pdf. Both fields are opaque text, coerced with str()."""

    title: Any = None
    content: Any = None
