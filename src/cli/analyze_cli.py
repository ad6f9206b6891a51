"""Typer-based command line for profile analysis and PDF export."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent.parent
from dotenv import load_dotenv

load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local")

import asyncio
import json
from typing import Any, Optional

import questionary
import typer

from src.services.generation_client import GenerationError, MissingCredentialError
from src.services.profile_analyzer import (
    GenerationDecodeError,
    InvalidInputError,
    ProfileAnalyzer,
)
from src.services.report_renderer import RenderError, render_report, report_filename

app = typer.Typer(help="Analyze Instagram profiles and export PDF reports.")


def _prompt_for_url() -> str:
    answer = questionary.text(
        "Instagram profile URL:",
        validate=lambda text: bool(text.strip()) or "Enter a URL",
    ).ask()
    if answer is None:
        raise typer.Exit(code=1)
    return answer


def _write_or_echo(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Wrote {output}")


def run_analysis(url: str, analyzer: ProfileAnalyzer | None = None) -> dict[str, Any]:
    """Run one analysis and return the same body the HTTP endpoint returns."""
    outcome = asyncio.run((analyzer or ProfileAnalyzer()).analyze(url))
    return outcome.response_body()


@app.command()
def analyze(
    url: Optional[str] = typer.Argument(None, help="Instagram profile, reel or post URL"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here"),
):
    """Analyze a profile and print the JSON result."""
    candidate = url or _prompt_for_url()
    try:
        body = run_analysis(candidate)
    except InvalidInputError as e:
        typer.secho(f"Invalid URL: {e.rejection.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    except MissingCredentialError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except GenerationDecodeError as e:
        typer.secho("AI output could not be parsed. Raw output:", fg=typer.colors.RED, err=True)
        typer.echo(e.raw, err=True)
        raise typer.Exit(code=1)
    except GenerationError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if not body["meta"]["fetchSucceeded"]:
        typer.secho(
            "Profile page could not be read; analysis is based on the URL only.",
            fg=typer.colors.YELLOW,
            err=True,
        )
    _write_or_echo(json.dumps(body, ensure_ascii=False, indent=2), output)


@app.command()
def pdf(
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Report title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Report body text"),
    content_file: Optional[Path] = typer.Option(
        None, "--content-file", "-f", exists=True, dir_okay=False, help="Read body from file"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="PDF path"),
):
    """Render title and content into a PDF file."""
    if content_file is not None:
        content = content_file.read_text(encoding="utf-8")
    try:
        pdf_bytes = render_report(title, content)
    except RenderError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    target = output or Path(report_filename(title))
    target.write_bytes(pdf_bytes)
    typer.echo(f"Wrote {target} ({len(pdf_bytes)} bytes)")


if __name__ == "__main__":
    app()
