"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from src.config import get_settings


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (model validation logging)
    - PydanticAI instrumentation (analysis model calls)
    - Python logging format by environment
    """
    settings = get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "service_name": "profile-analyzer",
        # Without a token logs stay local instead of prompting for a project
        "send_to_logfire": "if-token-present",
    }
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)

    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()
    logfire.instrument_pydantic_ai()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.env == "local":
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Logfire handles structured formatting in deployed environments
        logging.basicConfig(level=log_level, format="%(message)s")


def mask_pii(value: str | None, mask_char: str = "*") -> str:
    """
    Mask potentially sensitive data in logs.

    Args:
        value: Value to mask
        mask_char: Character to use for masking

    Returns:
        Masked string showing only the first and last two characters
    """
    if not value:
        return ""

    if len(value) <= 4:
        return mask_char * len(value)

    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"
