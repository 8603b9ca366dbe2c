"""uiforge configuration.

Centralised, typed configuration for the generation service, the staged
pipeline and the CLI.  All settings use Pydantic v2 models so they can be
validated at construction time and serialised to/from JSON or environment
variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class GroqConfig(BaseModel):
    """Connection and sampling settings for the Groq chat-completions API."""

    url: str = Field(default="https://api.groq.com/openai/v1")
    model: str = Field(default="llama-3.3-70b-versatile")
    vision_model: str = Field(
        default="meta-llama/llama-4-scout-17b-16e-instruct",
        description="Model used when a request carries an image",
    )
    api_key: str = Field(default="", description="Bearer token; empty means not configured")
    timeout: int = Field(default=120, ge=5, description="Per-request timeout in seconds")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8192, ge=256)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class PipelineSettings(BaseModel):
    """Tuning knobs for the staged generation pipeline."""

    stage_interval: float = Field(
        default=0.8,
        ge=0.0,
        description="Seconds between the simulated styling/interactions/polishing stages",
    )
    deadline_seconds: float = Field(
        default=120.0,
        gt=0.0,
        description="Overall deadline applied by the streaming transport",
    )


class Config(BaseModel):
    """Global uiforge configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the client, orchestrator and exporter.
    """

    output_dir: Path = Field(default=Path("./output"))
    groq: GroqConfig = Field(default_factory=GroqConfig)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        The API key is never written to disk.

        Args:
            path: Destination file. Defaults to ``<output_dir>/uiforge.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.output_dir / "uiforge.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            self.model_dump_json(indent=2, exclude={"groq": {"api_key"}}),
            encoding="utf-8",
        )
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON.

        Args:
            path: The JSON file to read.

        Returns:
            A validated ``Config`` instance.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            UIFORGE_OUTPUT_DIR, GROQ_API_KEY, UIFORGE_GROQ_URL, UIFORGE_MODEL,
            UIFORGE_VISION_MODEL, UIFORGE_TIMEOUT, UIFORGE_STAGE_INTERVAL,
            UIFORGE_DEADLINE.
        """
        groq_kwargs: dict[str, Any] = {}
        if os.environ.get("GROQ_API_KEY"):
            groq_kwargs["api_key"] = os.environ["GROQ_API_KEY"]
        if os.environ.get("UIFORGE_GROQ_URL"):
            groq_kwargs["url"] = os.environ["UIFORGE_GROQ_URL"]
        if os.environ.get("UIFORGE_MODEL"):
            groq_kwargs["model"] = os.environ["UIFORGE_MODEL"]
        if os.environ.get("UIFORGE_VISION_MODEL"):
            groq_kwargs["vision_model"] = os.environ["UIFORGE_VISION_MODEL"]
        if os.environ.get("UIFORGE_TIMEOUT"):
            groq_kwargs["timeout"] = int(os.environ["UIFORGE_TIMEOUT"])

        pipeline_kwargs: dict[str, Any] = {}
        if os.environ.get("UIFORGE_STAGE_INTERVAL"):
            pipeline_kwargs["stage_interval"] = float(os.environ["UIFORGE_STAGE_INTERVAL"])
        if os.environ.get("UIFORGE_DEADLINE"):
            pipeline_kwargs["deadline_seconds"] = float(os.environ["UIFORGE_DEADLINE"])

        return cls(
            output_dir=Path(os.environ.get("UIFORGE_OUTPUT_DIR", "./output")),
            groq=GroqConfig(**groq_kwargs),
            pipeline=PipelineSettings(**pipeline_kwargs),
        )
