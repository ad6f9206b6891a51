"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import analyze, health, report
from src.config import get_settings
from src.constants import APP_VERSION
from src.logging_config import setup_logfire
from src.middleware.correlation_id import CorrelationIDMiddleware
from src.services.prompt_builder import prompt_version


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    setup_logfire(app)

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.env,
            integrations=[FastApiIntegration()],
        )

    # The key is checked again on every analyze request; this only warns early.
    if not settings.openai_api_key:
        logfire.warn("OPENAI_API_KEY is not set; /api/analyze will return 500")

    logfire.info(
        "Application startup complete",
        model=settings.openai_model,
        prompt_version=prompt_version(),
        environment=settings.env,
    )

    yield

    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Instagram Profile Analyzer",
    description="Scrapes public profile meta tags and turns them into a creator analysis",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["health"])
app.include_router(analyze.router, prefix="/api", tags=["analyze"])
app.include_router(report.router, prefix="/api", tags=["report"])


@app.get("/")
def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": "Instagram Profile Analyzer API",
        "model": settings.openai_model,
        "prompt_version": prompt_version(),
        "version": APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", get_settings().port))
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
