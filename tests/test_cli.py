"""Unit tests for the command-line interface (uiforge.cli).

Tests cover:
- Argument parsing for every subcommand
- materialize: stdout summary, --output and --json
- preview: stdout, --output, --result, missing --stack
- generate: success, image input, service failure, timeout (client and config mocked)
- models: listing and unavailable service
- main error handling
"""

from __future__ import annotations

import base64
import io
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from uiforge.cli import build_parser, main
from uiforge.config import Config, PipelineSettings
from uiforge.groq_client import GroqResponse


@pytest.fixture
def source_file(tmp_path: Path, react_component: str) -> Path:
    path = tmp_path / "Counter.tsx"
    path.write_text(react_component, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    @pytest.mark.unit
    def test_materialize_args(self):
        args = build_parser().parse_args(
            ["materialize", "page.html", "-s", "vue", "--page-type", "Blog", "-o", "out"]
        )
        assert args.command == "materialize"
        assert args.stack == "vue"
        assert args.page_type == "Blog"
        assert args.output == "out"
        assert args.json is None

    @pytest.mark.unit
    def test_stack_choices_enforced(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["materialize", "page.html", "--stack", "angular"])

    @pytest.mark.unit
    def test_preview_result_flag(self):
        args = build_parser().parse_args(["preview", "result.json", "--result"])
        assert args.result is True
        assert args.stack is None

    @pytest.mark.unit
    def test_generate_args(self):
        args = build_parser().parse_args(["generate", "A pricing page", "-s", "nextjs", "-v"])
        assert args.description == "A pricing page"
        assert args.verbose is True

    @pytest.mark.unit
    def test_generate_image_args(self):
        args = build_parser().parse_args(["generate", "--image", "sketch.png", "-s", "react"])
        assert args.description == ""
        assert args.image == "sketch.png"
        assert args.mime_type is None

    @pytest.mark.unit
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ---------------------------------------------------------------------------
# materialize
# ---------------------------------------------------------------------------


class TestMaterializeCommand:
    @pytest.mark.unit
    def test_summary_only(self, source_file: Path):
        with patch("uiforge.cli.print_summary_table") as mock_table:
            assert main(["materialize", str(source_file), "--stack", "react"]) == 0
        data = mock_table.call_args[0][0]
        assert "src/App.tsx" in data
        assert mock_table.call_args[1]["title"] == "react project"

    @pytest.mark.unit
    def test_writes_project_and_json(self, source_file: Path, tmp_path: Path):
        out_dir = tmp_path / "app"
        payload_path = tmp_path / "result.json"

        code = main(
            [
                "materialize", str(source_file), "-s", "nextjs",
                "--project-name", "Counter Demo",
                "-o", str(out_dir), "--json", str(payload_path),
            ]
        )

        assert code == 0
        assert (out_dir / "app" / "page.tsx").read_text(encoding="utf-8").startswith('"use client";')
        assert (out_dir / "preview.html").exists()
        package = json.loads((out_dir / "package.json").read_text(encoding="utf-8"))
        assert package["name"] == "counter-demo"
        payload = json.loads(payload_path.read_text(encoding="utf-8"))
        assert payload["framework"] == "nextjs"
        assert payload["previewEntry"] == "app/page.tsx"

    @pytest.mark.unit
    def test_reads_stdin(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr("sys.stdin", io.StringIO("<div>From stdin</div>"))
        out_dir = tmp_path / "site"
        assert main(["materialize", "-", "-s", "html", "-o", str(out_dir)]) == 0
        assert "<div>From stdin</div>" in (out_dir / "index.html").read_text(encoding="utf-8")

    @pytest.mark.unit
    def test_missing_source(self, tmp_path: Path):
        with patch("uiforge.cli.print_error") as mock_error:
            code = main(["materialize", str(tmp_path / "missing.tsx"), "-s", "react"])
        assert code == 1
        assert "Source file not found" in mock_error.call_args[0][0]


# ---------------------------------------------------------------------------
# preview
# ---------------------------------------------------------------------------


class TestPreviewCommand:
    @pytest.mark.unit
    def test_stdout(self, source_file: Path, capsys):
        assert main(["preview", str(source_file), "-s", "react"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("<!DOCTYPE html>")
        assert "React.createElement(Counter)" in out

    @pytest.mark.unit
    def test_output_file(self, source_file: Path, tmp_path: Path):
        target = tmp_path / "previews" / "counter.html"
        assert main(["preview", str(source_file), "-s", "react", "-o", str(target)]) == 0
        assert "React.createElement(Counter)" in target.read_text(encoding="utf-8")

    @pytest.mark.unit
    def test_from_saved_result(self, source_file: Path, tmp_path: Path, capsys):
        payload_path = tmp_path / "result.json"
        assert main(["materialize", str(source_file), "-s", "react", "--json", str(payload_path)]) == 0
        capsys.readouterr()

        assert main(["preview", str(payload_path), "--result"]) == 0
        assert "React.createElement(Counter)" in capsys.readouterr().out

    @pytest.mark.unit
    def test_invalid_saved_result(self, tmp_path: Path):
        payload_path = tmp_path / "bad.json"
        payload_path.write_text('{"files": []}', encoding="utf-8")
        with patch("uiforge.cli.print_error") as mock_error:
            assert main(["preview", str(payload_path), "--result"]) == 1
        assert "Invalid result payload" in mock_error.call_args[0][0]

    @pytest.mark.unit
    def test_stack_required_without_result(self, source_file: Path):
        with patch("uiforge.cli.print_error"):
            assert main(["preview", str(source_file)]) == 2


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


def _fake_config() -> Config:
    config = Config()
    config.groq.api_key = "gsk_test"
    config.pipeline = PipelineSettings(stage_interval=0.0, deadline_seconds=5.0)
    return config


class TestGenerateCommand:
    @pytest.mark.unit
    def test_success(self, tmp_path: Path, react_component: str):
        client = AsyncMock()
        client.generate = AsyncMock(return_value=GroqResponse(text=react_component))
        out_dir = tmp_path / "gen"

        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client):
            code = main(["generate", "A counter button", "-s", "react", "-o", str(out_dir)])

        assert code == 0
        assert (out_dir / "src" / "App.tsx").exists()
        client.generate.assert_awaited_once()

    @pytest.mark.unit
    def test_image_without_description(self, tmp_path: Path, react_component: str):
        sketch = tmp_path / "sketch.png"
        sketch.write_bytes(b"\x89PNG\r\n\x1a\n")
        client = AsyncMock()
        client.generate = AsyncMock(return_value=GroqResponse(text=react_component))

        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client):
            code = main(["generate", "--image", str(sketch), "-s", "react"])

        assert code == 0
        image = client.generate.call_args[1]["image"]
        assert image.mime_type == "image/png"
        assert image.data == base64.b64encode(b"\x89PNG\r\n\x1a\n").decode("ascii")

    @pytest.mark.unit
    def test_image_type_rejected(self, tmp_path: Path):
        sketch = tmp_path / "sketch.bmp"
        sketch.write_bytes(b"BM")
        client = AsyncMock()

        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client), \
             patch("uiforge.cli.print_error") as mock_error:
            code = main(["generate", "--image", str(sketch), "--mime-type", "image/bmp", "-s", "react"])

        assert code == 1
        assert mock_error.call_args[0][0].startswith('Error: Invalid MIME type: "image/bmp"')
        client.generate.assert_not_called()

    @pytest.mark.unit
    def test_verbose_prints_stages(self, react_component: str):
        client = AsyncMock()
        client.generate = AsyncMock(return_value=GroqResponse(text=react_component))

        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client), \
             patch("uiforge.pipeline.print_stage") as mock_stage:
            code = main(["generate", "A counter button", "-s", "react", "--verbose"])

        assert code == 0
        assert mock_stage.call_count == 6

    @pytest.mark.unit
    def test_service_failure(self):
        client = AsyncMock()
        client.generate = AsyncMock(
            return_value=GroqResponse(success=False, error="Groq returned HTTP 429: slow down")
        )

        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client), \
             patch("uiforge.cli.print_error") as mock_error:
            code = main(["generate", "A counter button", "-s", "react"])

        assert code == 1
        assert mock_error.call_args[0][0].startswith("Rate limit reached")

    @pytest.mark.unit
    def test_timeout(self):
        config = _fake_config()
        config.pipeline = PipelineSettings(stage_interval=0.0, deadline_seconds=0.05)

        async def never_answers(prompt, system=""):
            import asyncio

            await asyncio.sleep(3600)

        client = AsyncMock()
        client.generate = never_answers

        with patch("uiforge.cli.Config.from_env", return_value=config), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client), \
             patch("uiforge.cli.print_error") as mock_error:
            code = main(["generate", "A counter button", "-s", "vue"])

        assert code == 1
        assert mock_error.call_args[0][0] == "Generation timed out. Please try again."

    @pytest.mark.unit
    def test_prompt_error(self):
        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.print_error") as mock_error:
            code = main(["generate", "ab", "-s", "react"])
        assert code == 1
        assert mock_error.call_args[0][0] == "Error: Prompt is too short"


# ---------------------------------------------------------------------------
# models
# ---------------------------------------------------------------------------


class TestModelsCommand:
    @pytest.mark.unit
    def test_lists_models(self):
        client = AsyncMock()
        client.is_available = AsyncMock(return_value=True)
        client.list_models = AsyncMock(return_value=["llama-3.1-8b-instant", "llama-3.3-70b-versatile"])

        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client), \
             patch("uiforge.cli.print_summary_table") as mock_table:
            assert main(["models"]) == 0

        data = mock_table.call_args[0][0]
        assert data == {"llama-3.1-8b-instant": "", "llama-3.3-70b-versatile": "default"}

    @pytest.mark.unit
    def test_unavailable(self):
        client = AsyncMock()
        client.is_available = AsyncMock(return_value=False)

        with patch("uiforge.cli.Config.from_env", return_value=_fake_config()), \
             patch("uiforge.cli.GroqClient.from_config", return_value=client), \
             patch("uiforge.cli.print_error") as mock_error:
            assert main(["models"]) == 1

        assert "unavailable" in mock_error.call_args[0][0]
        client.list_models.assert_not_called()
