"""Decode and repair raw analysis-model output.

The analysis model is not schema-enforced and may wrap its JSON in prose or
code fences, or truncate it. Decoding runs in strict priority order:

1. strict ``json.loads`` of the whole text
2. ``json.loads`` of the substring between the first "{" and the last "}"
3. AnalysisFailed carrying the original text verbatim

Shape checking against the documented schema is a separate, soft stage:
missing or mistyped keys become warnings, never failures.
"""

import json
from typing import Any

import logfire
from pydantic import ValidationError

from src.constants import INVALID_OUTPUT_REASON
from src.models.analysis_models import (
    AnalysisFailed,
    AnalysisOk,
    AnalysisReport,
    AnalysisResult,
)

# Cap on warnings attached to one result; schema drift can produce hundreds
MAX_SHAPE_WARNINGS = 25


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _strict_decode(text: str) -> tuple[bool, Any]:
    # NaN and Infinity are not JSON and cannot be serialized back out
    try:
        return True, json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return False, None


def extract_braced_span(text: str) -> str | None:
    """Return text from the first "{" to the last "}" inclusive, if ordered."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]


def _format_location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def check_analysis_shape(value: Any) -> list[str]:
    """Compare a decoded value against the documented analysis schema.

    Args:
        value: Decoded JSON value

    Returns:
        Human-readable warnings; empty when the value matches the schema
    """
    if not isinstance(value, dict):
        return [f"expected a JSON object, got {type(value).__name__}"]
    try:
        AnalysisReport.model_validate(value)
    except ValidationError as e:
        warnings = []
        for error in e.errors():
            location = _format_location(error["loc"])
            if error["type"] == "missing":
                warnings.append(f"missing expected key: {location}")
            else:
                warnings.append(f"unexpected shape at {location}: {error['msg']}")
        return warnings[:MAX_SHAPE_WARNINGS]
    return []


def decode_generation_output(raw: str) -> AnalysisResult:
    """Syntactic stage only: strict decode, then boundary extraction."""
    if not isinstance(raw, str):
        return AnalysisFailed(reason=INVALID_OUTPUT_REASON, raw="" if raw is None else str(raw))

    decoded, value = _strict_decode(raw)
    if decoded:
        return AnalysisOk(value=value, stage="strict")

    span = extract_braced_span(raw)
    if span is not None:
        decoded, value = _strict_decode(span)
        if decoded:
            return AnalysisOk(value=value, stage="boundary")

    return AnalysisFailed(reason=INVALID_OUTPUT_REASON, raw=raw)


def validate_generation_output(raw: str) -> AnalysisResult:
    """Decode raw model output and attach schema-drift warnings.

    Never raises.

    Args:
        raw: Text returned by the analysis model

    Returns:
        AnalysisOk with the decoded value, or AnalysisFailed with ``raw`` verbatim
    """
    result = decode_generation_output(raw)
    if isinstance(result, AnalysisFailed):
        logfire.warn(
            "Analysis output could not be decoded",
            reason=result.reason,
            raw_length=len(result.raw),
            raw_preview=result.raw[:200],
        )
        return result

    warnings = check_analysis_shape(result.value)
    if warnings:
        logfire.warn(
            "Analysis output does not match documented schema",
            stage=result.stage,
            warning_count=len(warnings),
            warnings=warnings[:5],
        )
    else:
        logfire.info("Analysis output decoded", stage=result.stage)
    return AnalysisOk(value=result.value, stage=result.stage, warnings=warnings)
