"""Preview compilation: files or raw source -> one sandbox-renderable document.

The compiler is stateless.  Each call derives a complete HTML document from
its inputs alone, so recompiling always replaces the previous document
wholesale.  Documents load their runtimes from public CDNs and execute
inline; nothing is bundled.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Sequence
from typing import Any, Optional

from uiforge.models import GeneratedFile, TechStack
from uiforge.preview.jsx import clean_component_source
from uiforge.preview.rules import PreviewFamily, family_for, select_main_file
from uiforge.preview.sfc import (
    OPTIONS_COMPONENT_NAME,
    STATIC_PREVIEW_BADGE,
    extract_vue_blocks,
    options_api_script,
    svelte_static_markup,
    top_level_bindings,
)
from uiforge.templates import TemplateRenderer, default_renderer


# ---------------------------------------------------------------------------
# Runtime locations and sandbox contract
# ---------------------------------------------------------------------------

TAILWIND_CDN = "https://cdn.tailwindcss.com"

CDN: dict[str, str] = {
    "tailwind": TAILWIND_CDN,
    "react": "https://unpkg.com/react@18/umd/react.development.js",
    "react_dom": "https://unpkg.com/react-dom@18/umd/react-dom.development.js",
    "babel": "https://unpkg.com/@babel/standalone@7/babel.min.js",
    "vue": "https://unpkg.com/vue@3/dist/vue.global.prod.js",
}

# Must never include allow-same-origin.
SANDBOX_PERMISSIONS = "allow-scripts allow-forms allow-popups allow-modals"

FRAMEWORK_LABELS: dict[TechStack, str] = {
    TechStack.HTML: "HTML",
    TechStack.REACT: "React",
    TechStack.NEXTJS: "Next.js",
    TechStack.VUE: "Vue",
    TechStack.SVELTE: "Svelte",
}

_MISSING_MAIN_FILE: dict[PreviewFamily, str] = {
    PreviewFamily.STATIC: "No HTML file found",
    PreviewFamily.COMPONENT: "No React component found",
    PreviewFamily.VUE: "No Vue component found",
    PreviewFamily.SVELTE: "No Svelte component found",
}

_HEAD_OPEN_RE = re.compile(r"<head(?:\s[^>]*)?>", re.IGNORECASE)
_DOCUMENT_RE = re.compile(r"<!doctype|<html[\s>]", re.IGNORECASE)
_HTML_OPEN_RE = re.compile(r"<html(?:\s[^>]*)?>", re.IGNORECASE)
_DOCTYPE_RE = re.compile(r"<!doctype[^>]*>", re.IGNORECASE)


def _label(framework: TechStack | str | None) -> str:
    try:
        return FRAMEWORK_LABELS[TechStack(framework)]
    except ValueError:
        return str(framework or "HTML")


# ---------------------------------------------------------------------------
# PreviewCompiler
# ---------------------------------------------------------------------------


class PreviewCompiler:
    """Turns generated files or raw model output into a preview document.

    The compiler never raises for a non-empty file list: a missing main
    file yields a placeholder document, and an unexpected failure while
    assembling the document yields a placeholder carrying the error text.
    Script errors *inside* the document are caught there and shown as an
    inline banner.
    """

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or default_renderer()

    # -- Entry points ------------------------------------------------------

    def compile_files(
        self,
        files: Sequence[GeneratedFile],
        framework: TechStack | str | None,
    ) -> str:
        """Build the preview document for a structured file set.

        Args:
            files: Files of a materialized project.
            framework: Tech-stack tag; unknown tags use the static family.

        Returns:
            A complete HTML document.
        """
        family = family_for(framework)
        main_file = select_main_file(files, family)
        if main_file is None:
            return self.placeholder_document(_MISSING_MAIN_FILE[family])
        return self._compile(main_file.content, family, framework)

    def compile_source(self, raw_source: str, framework: TechStack | str | None) -> str:
        """Build the preview document directly from raw model output."""
        return self._compile(raw_source, family_for(framework), framework)

    def loading_document(self, framework: TechStack | str | None = None) -> str:
        """Document shown while nothing has been generated yet."""
        return self.renderer.render(
            "preview/loading.html.j2", {"framework_label": _label(framework)}
        )

    def placeholder_document(self, message: str, detail: str = "") -> str:
        """Document shown in place of a preview that cannot be built."""
        return self.renderer.render(
            "preview/placeholder.html.j2", {"message": message, "detail": detail}
        )

    # -- Family dispatch ---------------------------------------------------

    def _compile(
        self,
        source: str,
        family: PreviewFamily,
        framework: TechStack | str | None,
    ) -> str:
        try:
            if family is PreviewFamily.COMPONENT:
                return self._compile_component(source, framework)
            if family is PreviewFamily.VUE:
                return self._compile_vue(source)
            if family is PreviewFamily.SVELTE:
                return self._compile_svelte(source)
            return self._compile_static(source)
        except Exception as exc:  # noqa: BLE001 - reported inside the document
            return self.placeholder_document("Preview compilation failed", str(exc))

    def _compile_static(self, source: str) -> str:
        if not _DOCUMENT_RE.search(source):
            return self.renderer.render(
                "preview/document.html.j2",
                {"title": "Preview", "body": source, "cdn": CDN},
            )
        return inject_tailwind(source)

    def _compile_component(self, source: str, framework: TechStack | str | None) -> str:
        code, component_name = clean_component_source(source)
        context: dict[str, Any] = {
            "title": f"{_label(framework)} Preview",
            "cdn": CDN,
            "code": code,
            "component_name": component_name,
            "nextjs_shims": framework in (TechStack.NEXTJS, TechStack.NEXTJS.value),
        }
        return self.renderer.render("preview/react.html.j2", context)

    def _compile_vue(self, source: str) -> str:
        blocks = extract_vue_blocks(source)
        context: dict[str, Any] = {
            "title": "Vue Preview",
            "cdn": CDN,
            "template": blocks.template,
            "style": blocks.style,
            "script": blocks.script,
            "bindings": [],
            "options_component": "",
        }
        if blocks.uses_options_api:
            context["script"] = options_api_script(blocks.script)
            context["options_component"] = OPTIONS_COMPONENT_NAME
        else:
            context["bindings"] = top_level_bindings(blocks.script)
        return self.renderer.render("preview/vue.html.j2", context)

    def _compile_svelte(self, source: str) -> str:
        return self.renderer.render(
            "preview/svelte_static.html.j2",
            {
                "title": "Svelte Preview",
                "cdn": CDN,
                "markup": svelte_static_markup(source),
                "badge": STATIC_PREVIEW_BADGE,
            },
        )


# ---------------------------------------------------------------------------
# Document helpers
# ---------------------------------------------------------------------------

def inject_tailwind(document: str) -> str:
    """Ensure the Tailwind CDN script is loaded by *document*.

    The script goes right after ``<head>``.  Without a head it is placed in
    a new ``<head>`` after ``<html>``, else after the doctype, else first.
    """
    if "tailwindcss.com" in document:
        return document
    tag = f'<script src="{TAILWIND_CDN}"></script>'
    for pattern, insert in (
        (_HEAD_OPEN_RE, f"\n{tag}"),
        (_HTML_OPEN_RE, f"\n<head>\n{tag}\n</head>"),
        (_DOCTYPE_RE, f"\n{tag}"),
    ):
        match = pattern.search(document)
        if match:
            return document[: match.end()] + insert + document[match.end():]
    return f"{tag}\n{document}"


def preview_key(document: str) -> str:
    """Short content digest used as the renderer's identity key.

    The host keys its iframe on this value so that any change in the
    document forces a full reload instead of an in-place patch.
    """
    return hashlib.sha256(document.encode("utf-8")).hexdigest()[:16]


def sandbox_iframe(
    document: str,
    title: str = "Preview",
    renderer: Optional[TemplateRenderer] = None,
) -> str:
    """Render an ``<iframe>`` that executes *document* in an isolated sandbox."""
    renderer = renderer or default_renderer()
    return renderer.render(
        "preview/iframe.html.j2",
        {"document": document, "title": title, "sandbox": SANDBOX_PERMISSIONS},
    )


def compile_files(files: Sequence[GeneratedFile], framework: TechStack | str | None) -> str:
    """Shortcut for :meth:`PreviewCompiler.compile_files`."""
    return PreviewCompiler().compile_files(files, framework)


def compile_source(raw_source: str, framework: TechStack | str | None) -> str:
    """Shortcut for :meth:`PreviewCompiler.compile_source`."""
    return PreviewCompiler().compile_source(raw_source, framework)
