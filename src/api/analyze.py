"""Profile analysis endpoint.

Maps the ProfileAnalyzer error taxonomy to HTTP responses:
- InvalidInputError -> 400 {"error"}
- MissingCredentialError -> 500 {"error"}
- GenerationDecodeError -> 500 {"error", "raw"}
- GenerationError -> 502 {"error"}

Fetch failures never reach this layer; they degrade to empty meta.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.services.generation_client import GenerationError, MissingCredentialError
from src.services.profile_analyzer import (
    GenerationDecodeError,
    InvalidInputError,
    ProfileAnalyzer,
    get_profile_analyzer,
)

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_URL_MESSAGE = "Enter a valid Instagram link."
MISSING_CREDENTIAL_MESSAGE = "Server is missing OPENAI_API_KEY."
DECODE_FAILURE_MESSAGE = "AI output could not be parsed."
GENERATION_FAILURE_MESSAGE = "AI service is unavailable."


async def read_json_object(request: Request) -> dict[str, Any]:
    """Return the JSON body when it is an object, otherwise an empty dict."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post("/analyze")
async def analyze_profile(
    request: Request,
    analyzer: ProfileAnalyzer = Depends(get_profile_analyzer),
):
    """Analyze an Instagram profile URL."""
    payload = await read_json_object(request)

    try:
        outcome = await analyzer.analyze(payload.get("url"))
    except InvalidInputError as e:
        return JSONResponse(
            status_code=400,
            content={"error": INVALID_URL_MESSAGE, "reason": e.rejection.reason},
        )
    except MissingCredentialError:
        logger.error("Analysis requested but OPENAI_API_KEY is not configured")
        return JSONResponse(status_code=500, content={"error": MISSING_CREDENTIAL_MESSAGE})
    except GenerationDecodeError as e:
        return JSONResponse(
            status_code=500,
            content={"error": DECODE_FAILURE_MESSAGE, "raw": e.raw},
        )
    except GenerationError as e:
        logger.error("Analysis model call failed: %s", e)
        return JSONResponse(status_code=502, content={"error": GENERATION_FAILURE_MESSAGE})

    return outcome.response_body()
