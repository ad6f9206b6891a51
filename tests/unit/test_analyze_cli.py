"""Tests for the profile-analyzer CLI."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import fitz
import pytest
from typer.testing import CliRunner

from src.cli.analyze_cli import app, run_analysis
from src.services.generation_client import GenerationClient, MissingCredentialError

runner = CliRunner()

PROFILE_URL = "https://www.instagram.com/ayse.cooks/"


@pytest.fixture
def stub_analyzer(make_analyzer, mock_fetcher_success, mock_generation_client):
    analyzer = make_analyzer(
        fetcher=mock_fetcher_success, generation_client=mock_generation_client
    )
    with patch("src.cli.analyze_cli.ProfileAnalyzer", return_value=analyzer):
        yield analyzer


class TestRunAnalysis:
    def test_returns_http_body(self, make_analyzer, mock_fetcher_success, mock_generation_client):
        analyzer = make_analyzer(
            fetcher=mock_fetcher_success, generation_client=mock_generation_client
        )

        body = run_analysis(PROFILE_URL, analyzer=analyzer)

        assert body["meta"]["fetchSucceeded"] is True
        assert body["result"]["detected_niche"] == "Home cooking"


class TestAnalyzeCommand:
    """Test `profile-analyzer analyze`."""

    def test_writes_json_to_file(self, stub_analyzer, tmp_path, sample_analysis):
        target = tmp_path / "result.json"

        result = runner.invoke(app, ["analyze", PROFILE_URL, "--output", str(target)])

        assert result.exit_code == 0
        body = json.loads(target.read_text(encoding="utf-8"))
        assert body["result"] == sample_analysis
        assert body["meta"]["siteName"] == "Instagram"

    def test_invalid_url_exits_2(self, stub_analyzer):
        result = runner.invoke(app, ["analyze", "https://example.com/x"])

        assert result.exit_code == 2
        assert "Invalid URL" in result.output

    def test_missing_credential_exits_1(self, make_analyzer, mock_fetcher_success):
        def _raise():
            raise MissingCredentialError("OPENAI_API_KEY is not configured.")

        analyzer = make_analyzer(fetcher=mock_fetcher_success, generation_client_factory=_raise)
        with patch("src.cli.analyze_cli.ProfileAnalyzer", return_value=analyzer):
            result = runner.invoke(app, ["analyze", PROFILE_URL])

        assert result.exit_code == 1
        assert "OPENAI_API_KEY" in result.output

    def test_undecodable_output_prints_raw(self, make_analyzer, mock_fetcher_success):
        client = MagicMock(spec=GenerationClient)
        client.complete = AsyncMock(return_value="I cannot comply.")
        analyzer = make_analyzer(fetcher=mock_fetcher_success, generation_client=client)
        with patch("src.cli.analyze_cli.ProfileAnalyzer", return_value=analyzer):
            result = runner.invoke(app, ["analyze", PROFILE_URL])

        assert result.exit_code == 1
        assert "I cannot comply." in result.output

    def test_warns_when_page_unreadable(
        self, make_analyzer, mock_fetcher_failure, mock_generation_client, tmp_path
    ):
        analyzer = make_analyzer(
            fetcher=mock_fetcher_failure, generation_client=mock_generation_client
        )
        with patch("src.cli.analyze_cli.ProfileAnalyzer", return_value=analyzer):
            result = runner.invoke(
                app, ["analyze", PROFILE_URL, "--output", str(tmp_path / "out.json")]
            )

        assert result.exit_code == 0
        assert "could not be read" in result.output

    def test_prompts_when_url_omitted(self, stub_analyzer, tmp_path):
        with patch("src.cli.analyze_cli.questionary.text") as mock_text:
            mock_text.return_value.ask.return_value = PROFILE_URL
            result = runner.invoke(
                app, ["analyze", "--output", str(tmp_path / "out.json")]
            )

        assert result.exit_code == 0
        mock_text.assert_called_once()

    def test_prompt_cancelled_exits_1(self):
        with patch("src.cli.analyze_cli.questionary.text") as mock_text:
            mock_text.return_value.ask.return_value = None
            result = runner.invoke(app, ["analyze"])

        assert result.exit_code == 1


class TestPdfCommand:
    """Test `profile-analyzer pdf`."""

    def test_writes_pdf(self, tmp_path):
        target = tmp_path / "plan.pdf"

        result = runner.invoke(
            app, ["pdf", "--title", "Plan", "--content", "Day 1: hook", "--output", str(target)]
        )

        assert result.exit_code == 0
        with fitz.open(target) as doc:
            assert "Day 1: hook" in doc[0].get_text()

    def test_reads_content_file(self, tmp_path):
        source = tmp_path / "plan.txt"
        source.write_text("From a file", encoding="utf-8")
        target = tmp_path / "out.pdf"

        result = runner.invoke(
            app, ["pdf", "--content-file", str(source), "--output", str(target)]
        )

        assert result.exit_code == 0
        with fitz.open(target) as doc:
            assert "From a file" in doc[0].get_text()
