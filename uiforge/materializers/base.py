"""Shared plumbing for the per-framework materializers.

A materializer is a pure function of ``(raw_source, config)``: it never
touches the file system or the network, never raises on unexpected input
shapes, and produces byte-identical output for identical input.  Scaffold
files come from Jinja2 templates; JSON manifests are built from constant
dictionaries.
"""

from __future__ import annotations

import json
import re
from typing import Any, ClassVar, Optional, Protocol

from uiforge.models import GeneratedFile, GenerationResult, GeneratorConfig, TechStack
from uiforge.preview import PreviewCompiler
from uiforge.templates import TemplateRenderer, default_renderer
from uiforge.utils import sanitize_name


class Materializer(Protocol):
    """Anything that turns raw source into a :class:`GenerationResult`."""

    framework: TechStack

    def materialize(
        self, raw_source: str, config: Optional[GeneratorConfig] = None
    ) -> GenerationResult:
        ...


# ---------------------------------------------------------------------------
# Source shape detection
# ---------------------------------------------------------------------------

_DEFAULT_EXPORT_RE = re.compile(r"\bexport\s+default\b")
_NAMED_EXPORT_FUNCTION_RE = re.compile(r"\bexport\s+(?:async\s+)?function\s+([A-Za-z_$][\w$]*)")
_USE_CLIENT_DIRECTIVE_RE = re.compile(r"""["']use client["']""")

CLIENT_MARKERS: tuple[str, ...] = (
    "useState",
    "useEffect",
    "useReducer",
    "useRef",
    "onClick",
    "onChange",
    "onSubmit",
    "onInput",
)


def has_default_export(source: str) -> bool:
    return bool(_DEFAULT_EXPORT_RE.search(source))


def named_export_function(source: str) -> Optional[str]:
    """Name of the first ``export function Name`` declaration, if any."""
    match = _NAMED_EXPORT_FUNCTION_RE.search(source)
    return match.group(1) if match else None


def needs_client_directive(source: str) -> bool:
    """Whether the source uses hooks or event handlers that need a client component."""
    return any(marker in source for marker in CLIENT_MARKERS)


def has_client_directive(source: str) -> bool:
    return bool(_USE_CLIENT_DIRECTIVE_RE.search(source))


# ---------------------------------------------------------------------------
# BaseMaterializer
# ---------------------------------------------------------------------------


class BaseMaterializer:
    """Common helpers for the concrete materializers.

    Subclasses set the class attributes and implement :meth:`materialize`.
    """

    framework: ClassVar[TechStack]
    template_prefix: ClassVar[str]
    default_title: ClassVar[str]
    default_package_name: ClassVar[str] = ""

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        compiler: PreviewCompiler | None = None,
    ) -> None:
        self.renderer = renderer or default_renderer()
        self.compiler = compiler or PreviewCompiler(self.renderer)

    def materialize(
        self, raw_source: str, config: Optional[GeneratorConfig] = None
    ) -> GenerationResult:
        raise NotImplementedError

    # -- Context helpers ---------------------------------------------------

    def title(self, config: GeneratorConfig) -> str:
        return config.page_type or self.default_title

    def package_name(self, config: GeneratorConfig) -> str:
        return sanitize_name(config.project_name) or self.default_package_name

    # -- File builders -----------------------------------------------------

    def render(self, name: str, context: dict[str, Any] | None = None) -> str:
        """Render ``<template_prefix>/<name>.j2``."""
        return self.renderer.render(f"{self.template_prefix}/{name}.j2", context)

    def render_shared(self, name: str, context: dict[str, Any] | None = None) -> str:
        """Render ``shared/<name>.j2``."""
        return self.renderer.render(f"shared/{name}.j2", context)

    @staticmethod
    def file(path: str, content: str, language: str) -> GeneratedFile:
        return GeneratedFile(path=path, content=content, language=language)

    @staticmethod
    def json_file(path: str, data: dict[str, Any]) -> GeneratedFile:
        """Emit *data* as two-space indented JSON."""
        return GeneratedFile(path=path, content=json.dumps(data, indent=2), language="json")

    def result(
        self,
        files: list[GeneratedFile],
        preview_entry: str,
        preview_html: Optional[str] = None,
    ) -> GenerationResult:
        """Assemble the result, compiling a preview from *files* when none is given."""
        if preview_html is None:
            preview_html = self.compiler.compile_files(files, self.framework)
        return GenerationResult(
            files=files,
            preview_entry=preview_entry,
            framework=self.framework,
            preview_html=preview_html,
        )


def manifest(name: str, body: dict[str, Any]) -> dict[str, Any]:
    """Return a ``package.json`` mapping with *name* as its first key."""
    return {"name": name, **body}
