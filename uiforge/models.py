"""Pydantic v2 models shared by the materializers, preview compiler and pipeline.

Defines the value objects that flow through uiforge: generated files, the
per-request generation result, the pass-through generator configuration and
the progress stages emitted by the orchestrator.  All models serialise with
camelCase aliases so that payloads match the wire format consumed by the
studio front end, while Python code keeps snake_case attribute names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TechStack(str, Enum):
    """Closed set of target ecosystems."""
    HTML = "html"
    REACT = "react"
    NEXTJS = "nextjs"
    VUE = "vue"
    SVELTE = "svelte"


class StageName(str, Enum):
    """Pipeline stages, declared in their fixed emission order."""
    PREPARING = "preparing"
    STRUCTURE = "structure"
    STYLING = "styling"
    INTERACTIONS = "interactions"
    POLISHING = "polishing"
    COMPLETE = "complete"


STAGE_ORDER: tuple[StageName, ...] = tuple(StageName)

STAGE_PROGRESS: dict[StageName, int] = {
    StageName.PREPARING: 5,
    StageName.STRUCTURE: 20,
    StageName.STYLING: 45,
    StageName.INTERACTIONS: 70,
    StageName.POLISHING: 90,
    StageName.COMPLETE: 100,
}

STAGE_LABELS: dict[StageName, str] = {
    StageName.PREPARING: "Analyzing layout...",
    StageName.STRUCTURE: "Building structure...",
    StageName.STYLING: "Applying design system...",
    StageName.INTERACTIONS: "Adding interactions...",
    StageName.POLISHING: "Final polish...",
    StageName.COMPLETE: "Done",
}


class _CamelModel(BaseModel):
    """Base model that reads and writes camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------

class ColorPalette(_CamelModel):
    """A named colour palette selected in the studio."""
    id: str = Field(default="", description="Palette identifier")
    name: str = Field(default="", description="Human-readable palette name")
    colors: list[str] = Field(default_factory=list, description="Hex colour values")


class GeneratorConfig(_CamelModel):
    """Studio options passed through to the materializers and prompts.

    Only ``page_type``, ``tech_stack`` and ``project_name`` change what the
    materializers emit; the rest is forwarded to the generation prompt.
    """
    tech_stack: Optional[str] = Field(default=None, description="Target ecosystem tag")
    styling: Literal["tailwind", "cssmodules", "vanilla"] = Field(default="tailwind")
    design_system: str = Field(default="", description="Design system name, e.g. 'minimal'")
    color_palette: Optional[ColorPalette] = Field(default=None)
    interaction_level: Literal["static", "micro", "full"] = Field(default="micro")
    features: list[str] = Field(default_factory=list)
    page_type: str = Field(default="", description="Page type, used as the document title")
    nav_type: Literal["topnav", "sidebar", "bottomnav", "none"] = Field(default="none")
    project_name: str = Field(default="", description="Package name override for manifests")


class ImageInput(_CamelModel):
    """A sketch or screenshot to generate from, already validated.

    Build instances with :func:`uiforge.prompts.validate_image`, which checks
    the MIME type and size and strips any ``data:`` URL prefix.
    """
    model_config = ConfigDict(frozen=True)

    data: str = Field(description="Base64-encoded image bytes, without a data URL prefix")
    mime_type: str = Field(description="Normalised MIME type, e.g. 'image/png'")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


# ---------------------------------------------------------------------------
# Generation output
# ---------------------------------------------------------------------------

class GeneratedFile(_CamelModel):
    """A single file of a materialized project."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Relative path, e.g. 'src/App.tsx'")
    content: str = Field(default="", description="File contents")
    language: str = Field(..., description="Language tag, e.g. 'typescript', 'vue'")

    @field_validator("path")
    @classmethod
    def _relative_path(cls, value: str) -> str:
        if value.startswith("/") or value.startswith("\\"):
            raise ValueError(f"File path must be relative: {value!r}")
        return value


class GenerationResult(_CamelModel):
    """The structured project produced for one request.

    Results are immutable values; edits re-run materialization against the
    raw source instead of patching an existing result.
    """

    model_config = ConfigDict(frozen=True)

    files: list[GeneratedFile] = Field(default_factory=list)
    preview_entry: str = Field(default="", description="Path of the file the preview starts from")
    framework: TechStack = Field(..., description="Ecosystem the files target")
    preview_html: Optional[str] = Field(
        default=None, description="Complete, sandbox-renderable HTML document"
    )

    @model_validator(mode="after")
    def _check_paths(self) -> "GenerationResult":
        paths = [f.path for f in self.files]
        duplicates = sorted({p for p in paths if paths.count(p) > 1})
        if duplicates:
            raise ValueError(f"Duplicate file paths: {', '.join(duplicates)}")
        if self.files and self.preview_entry not in paths:
            raise ValueError(f"Preview entry {self.preview_entry!r} is not one of the files")
        return self

    @property
    def paths(self) -> list[str]:
        """File paths in emission order."""
        return [f.path for f in self.files]

    def get_file(self, path: str) -> GeneratedFile | None:
        """Return the file at *path*, or ``None`` if absent."""
        for generated in self.files:
            if generated.path == path:
                return generated
        return None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON wire form (camelCase, absent preview omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Pipeline progress
# ---------------------------------------------------------------------------

class PipelineStage(_CamelModel):
    """One progress event emitted by the generation orchestrator."""

    stage: StageName
    progress: int = Field(..., ge=0, le=100)
    error: Optional[str] = Field(default=None, description="Set only on a failed 'complete'")
    message: str = Field(default="", description="Short human-readable label")
    result: Optional[GenerationResult] = Field(
        default=None, description="Materialized result, set only on a successful 'complete'"
    )

    @model_validator(mode="after")
    def _terminal_fields(self) -> "PipelineStage":
        if self.stage is not StageName.COMPLETE and (
            self.error is not None or self.result is not None
        ):
            raise ValueError("Only the 'complete' stage may carry an error or result")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.stage is StageName.COMPLETE

    @property
    def failed(self) -> bool:
        return self.is_terminal and self.error is not None

    def to_event(self) -> dict[str, Any]:
        """Return the streaming frame payload for this stage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def for_stage(cls, stage: StageName, **kwargs: Any) -> "PipelineStage":
        """Build a stage event with the standard progress value and label."""
        kwargs.setdefault("progress", STAGE_PROGRESS[stage])
        kwargs.setdefault("message", STAGE_LABELS[stage])
        return cls(stage=stage, **kwargs)
