"""Command-line interface.

Usage::

    uiforge materialize page.html --stack react --output ./my-app
    uiforge preview App.vue --stack vue --output preview.html
    uiforge preview result.json --result --output preview.html
    uiforge generate "A pricing page with three tiers" --stack nextjs -o ./pricing
    uiforge generate --image sketch.png --stack react -o ./sketch
    uiforge models
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
import time
from pathlib import Path
from typing import Optional

from rich.panel import Panel

from uiforge.config import Config
from uiforge.errors import TIMEOUT_MESSAGE, UIForgeError
from uiforge.export import write_result
from uiforge.groq_client import GroqClient
from uiforge.materializers import materialize, supported_tech_stacks
from uiforge.models import (
    STAGE_LABELS,
    GenerationResult,
    GeneratorConfig,
    ImageInput,
    PipelineStage,
    StageName,
)
from uiforge.pipeline import GenerationOrchestrator, StageCallback
from uiforge.preview import compile_files, compile_source, preview_key
from uiforge.prompts import validate_image
from uiforge.utils import (
    console,
    create_progress,
    format_duration,
    load_json,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    save_json,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_source(source: str) -> str:
    """Read raw source from a file path, or from stdin when *source* is ``-``."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _generator_config(args: argparse.Namespace) -> GeneratorConfig:
    return GeneratorConfig(
        tech_stack=args.stack,
        page_type=getattr(args, "page_type", None) or "",
        project_name=getattr(args, "project_name", None) or "",
    )


def _read_image(path: str, mime_type: Optional[str]) -> ImageInput:
    """Load an image file for generation, guessing its MIME type from the name."""
    if not mime_type:
        mime_type, _ = mimetypes.guess_type(path)
    return validate_image(Path(path).read_bytes(), mime_type or "")


def _print_result(result: GenerationResult) -> None:
    data = {
        generated.path: f"{len(generated.content)} chars ({generated.language})"
        for generated in result.files
    }
    print_summary_table(data, title=f"{result.framework.value} project")
    if result.preview_html is not None:
        console.print(f"  Preview key: [cyan]{preview_key(result.preview_html)}[/cyan]")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _export(result: GenerationResult, output: Optional[str], json_path: Optional[str]) -> None:
    if output:
        written = await write_result(result, output, include_preview=True)
        print_success(f"Wrote {len(written)} file(s) to {Path(output).resolve()}")
    if json_path:
        await save_json(result.to_payload(), json_path)
        print_success(f"Result payload saved to {Path(json_path).resolve()}")


def cmd_materialize(args: argparse.Namespace) -> int:
    raw = _read_source(args.source)
    result = materialize(args.stack, raw, _generator_config(args))

    _print_result(result)
    asyncio.run(_export(result, args.output, args.json))
    return 0


def _load_result(path: str) -> GenerationResult:
    """Read a result payload previously saved with ``--json``."""
    return GenerationResult.model_validate(load_json(path))


def cmd_preview(args: argparse.Namespace) -> int:
    if args.result:
        saved = _load_result(args.source)
        document = compile_files(saved.files, saved.framework)
    elif not args.stack:
        print_error("Error: --stack is required unless --result is given")
        return 2
    else:
        document = compile_source(_read_source(args.source), args.stack)

    if args.output:
        target = Path(args.output)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(document, encoding="utf-8")
        print_success(f"Preview written to {target.resolve()} (key {preview_key(document)})")
    else:
        sys.stdout.write(document)
        sys.stdout.write("\n")
    return 0


async def _run_generation(
    orchestrator: GenerationOrchestrator,
    description: str,
    config: GeneratorConfig,
    deadline: float,
    on_stage: Optional[StageCallback] = None,
    image: Optional[ImageInput] = None,
) -> Optional[PipelineStage]:
    try:
        return await asyncio.wait_for(
            orchestrator.run(description, config, on_stage, image=image), deadline
        )
    except asyncio.TimeoutError:
        return None


async def _generate_with_progress(
    orchestrator: GenerationOrchestrator,
    description: str,
    config: GeneratorConfig,
    deadline: float,
    image: Optional[ImageInput] = None,
) -> Optional[PipelineStage]:
    with create_progress() as progress:
        task_id = progress.add_task(STAGE_LABELS[StageName.PREPARING], total=100)

        def on_stage(stage: PipelineStage) -> None:
            progress.update(task_id, description=stage.message, completed=stage.progress)

        return await _run_generation(orchestrator, description, config, deadline, on_stage, image)


def cmd_generate(args: argparse.Namespace) -> int:
    settings = Config.from_env()
    if not settings.groq.is_configured:
        print_warning("GROQ_API_KEY is not set; the generation service will refuse the request.")

    client = GroqClient.from_config(settings.groq)
    orchestrator = GenerationOrchestrator(client, settings.pipeline, verbose=args.verbose)
    config = _generator_config(args)
    image = _read_image(args.image, args.mime_type) if args.image else None
    model = settings.groq.vision_model if image else settings.groq.model

    console.print(
        Panel(
            f"[bold bright_cyan]uiforge generate[/bold bright_cyan]\n"
            f"Stack  : {args.stack}\n"
            f"Model  : {model}\n"
            f"Output : {Path(args.output).resolve() if args.output else '(none)'}",
            border_style="bright_cyan",
        )
    )

    deadline = settings.pipeline.deadline_seconds
    started = time.monotonic()
    if args.verbose:
        final = asyncio.run(
            _run_generation(orchestrator, args.description, config, deadline, image=image)
        )
    else:
        final = asyncio.run(
            _generate_with_progress(orchestrator, args.description, config, deadline, image)
        )
    elapsed = format_duration(time.monotonic() - started)

    if final is None:
        print_error(TIMEOUT_MESSAGE)
        return 1
    if final.error or final.result is None:
        print_error(f"{final.error} ({elapsed})")
        return 1

    _print_result(final.result)
    asyncio.run(_export(final.result, args.output, args.json))
    print_success(f"Generation complete in {elapsed}")
    return 0


def cmd_models(args: argparse.Namespace) -> int:
    settings = Config.from_env()
    client = GroqClient.from_config(settings.groq)

    if not asyncio.run(client.is_available()):
        print_error(f"Generation service unavailable at {settings.groq.url} (is GROQ_API_KEY set?)")
        return 1

    models = asyncio.run(client.list_models())
    print_summary_table(
        {model: "default" if model == settings.groq.model else "" for model in models},
        title="Available models",
    )
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uiforge",
        description="uiforge -- turn generated UI source into framework projects and previews",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  uiforge materialize page.html --stack react -o ./my-app\n"
            "  uiforge preview App.vue --stack vue -o preview.html\n"
            '  uiforge generate "A pricing page" --stack nextjs -o ./pricing\n'
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    stacks = supported_tech_stacks()

    materialize_parser = subparsers.add_parser(
        "materialize", help="Wrap raw source into a framework project"
    )
    materialize_parser.add_argument("source", help="Source file, or '-' for stdin")
    materialize_parser.add_argument("--stack", "-s", required=True, choices=stacks)
    materialize_parser.add_argument("--page-type", default=None, help="Page type, used as the title")
    materialize_parser.add_argument("--project-name", default=None, help="package.json name")
    materialize_parser.add_argument("--output", "-o", default=None, help="Directory to write files to")
    materialize_parser.add_argument("--json", default=None, help="Also save the result payload as JSON")
    materialize_parser.set_defaults(handler=cmd_materialize)

    preview_parser = subparsers.add_parser(
        "preview", help="Compile raw source into a sandbox-ready HTML document"
    )
    preview_parser.add_argument("source", help="Source file, or '-' for stdin")
    preview_parser.add_argument("--stack", "-s", default=None, choices=stacks)
    preview_parser.add_argument(
        "--result", action="store_true", help="Treat source as a payload saved with --json"
    )
    preview_parser.add_argument("--output", "-o", default=None, help="File to write (default: stdout)")
    preview_parser.set_defaults(handler=cmd_preview)

    generate_parser = subparsers.add_parser(
        "generate", help="Generate UI from a description via the generation service"
    )
    generate_parser.add_argument(
        "description", nargs="?", default="", help="What to build (optional with --image)"
    )
    generate_parser.add_argument("--image", default=None, help="Sketch or screenshot to build from")
    generate_parser.add_argument(
        "--mime-type", default=None, help="Image MIME type (default: guessed from the file name)"
    )
    generate_parser.add_argument("--stack", "-s", required=True, choices=stacks)
    generate_parser.add_argument("--page-type", default=None, help="Page type, used as the title")
    generate_parser.add_argument("--project-name", default=None, help="package.json name")
    generate_parser.add_argument("--output", "-o", default=None, help="Directory to write files to")
    generate_parser.add_argument("--json", default=None, help="Also save the result payload as JSON")
    generate_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Print every stage instead of a progress bar"
    )
    generate_parser.set_defaults(handler=cmd_generate)

    models_parser = subparsers.add_parser("models", help="List the models the API key can use")
    models_parser.set_defaults(handler=cmd_models)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for ``uiforge`` and ``python -m uiforge``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return args.handler(args)
    except FileNotFoundError as exc:
        print_error(f"Error: Source file not found: {exc.filename}")
        return 1
    except UIForgeError as exc:
        print_error(f"Error: {exc}")
        return 1
    except ValueError as exc:
        print_error(f"Error: Invalid result payload: {exc}")
        return 1
