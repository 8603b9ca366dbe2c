"""Single-file component handling for Vue and Svelte previews.

Blocks are located with non-greedy delimiter patterns.  A nested block of
the same kind (a ``<template v-if>`` inside the root ``<template>``, or a
literal ``</script>`` inside a script) ends the match early; that is a known
limitation of delimiter-based extraction.
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass

from uiforge.preview.jsx import strip_imports

NO_TEMPLATE_MARKUP = "<div>No template</div>"
STATIC_PREVIEW_BADGE = "Svelte Preview (Static)"

_TEMPLATE_RE = re.compile(r"<template(?:\s[^>]*)?>([\s\S]*?)</template>", re.IGNORECASE)
_SCRIPT_RE = re.compile(r"<script[^>]*>([\s\S]*?)</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>([\s\S]*?)</style>", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Vue
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VueBlocks:
    """The three top-level blocks of a Vue single-file component."""

    template: str
    script: str
    style: str

    @property
    def uses_options_api(self) -> bool:
        return bool(_OPTIONS_EXPORT_RE.search(self.script))


def extract_vue_blocks(source: str) -> VueBlocks:
    """Split a ``.vue`` source into template, script and style text.

    A missing template becomes a small placeholder element; missing script
    or style blocks become empty strings.
    """
    template = _TEMPLATE_RE.search(source)
    script = _SCRIPT_RE.search(source)
    style = _STYLE_RE.search(source)
    return VueBlocks(
        template=template.group(1).strip() if template else NO_TEMPLATE_MARKUP,
        script=strip_imports(script.group(1)).strip() if script else "",
        style=style.group(1).strip() if style else "",
    )


_OPTIONS_EXPORT_RE = re.compile(r"\bexport\s+default\s+(?=(?:defineComponent\s*\()?\s*\{)")
OPTIONS_COMPONENT_NAME = "__previewComponent"

_DECLARATION_RE = re.compile(r"^(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*[=;]", re.MULTILINE)
_FUNCTION_RE = re.compile(r"^(?:async\s+)?function\s*\*?\s*([A-Za-z_$][\w$]*)\s*\(", re.MULTILINE)
_DESTRUCTURE_RE = re.compile(r"^(?:const|let|var)\s+\{([^}]*)\}\s*=", re.MULTILINE)


def top_level_bindings(script: str) -> list[str]:
    """Names declared at the top level of a ``<script setup>`` body.

    These are what a compiled ``<script setup>`` exposes to its template,
    so the preview ``setup()`` returns them.  Order follows the source.
    """
    body = textwrap.dedent(script)
    found: list[tuple[int, str]] = []

    for pattern in (_DECLARATION_RE, _FUNCTION_RE):
        for match in pattern.finditer(body):
            found.append((match.start(), match.group(1)))

    for match in _DESTRUCTURE_RE.finditer(body):
        for part in match.group(1).split(","):
            name = part.split("=", 1)[0].split(":")[-1].strip().lstrip(".")
            if re.fullmatch(r"[A-Za-z_$][\w$]*", name):
                found.append((match.start(), name))

    names: list[str] = []
    for _, name in sorted(found, key=lambda item: item[0]):
        if name not in names:
            names.append(name)
    return names


def options_api_script(script: str) -> str:
    """Bind an Options API ``export default {...}`` to a local name.

    The preview mounts that object directly instead of running a
    ``setup()`` wrapper.
    """
    return _OPTIONS_EXPORT_RE.sub(f"const {OPTIONS_COMPONENT_NAME} = ", script, count=1)


# ---------------------------------------------------------------------------
# Svelte (static rendering)
# ---------------------------------------------------------------------------

_SVELTE_DIRECTIVE_ATTR_RE = re.compile(
    r"""\s(?:on|bind|class|use|transition|in|out|animate):[\w|.$-]+"""
    r"""(?:\s*=\s*(?:\{[^}]*\}|"[^"]*"|'[^']*'))?"""
)
_SVELTE_EXPRESSION_ATTR_RE = re.compile(r"\s[\w:.-]+\s*=\s*\{[^}]*\}")
_SVELTE_BLOCK_RE = re.compile(r"\{[#:/][^}]*\}")
_SVELTE_INTERPOLATION_RE = re.compile(r"\{[^{}]*\}")


def svelte_static_markup(source: str) -> str:
    """Reduce a ``.svelte`` component to static, displayable markup.

    Script and style blocks, directive attributes and expression-valued
    attributes are removed, control-flow blocks are dropped, and remaining
    interpolations are shown as ``...``.
    """
    markup = _SCRIPT_RE.sub("", source)
    markup = _STYLE_RE.sub("", markup)
    markup = _SVELTE_DIRECTIVE_ATTR_RE.sub("", markup)
    markup = _SVELTE_EXPRESSION_ATTR_RE.sub("", markup)
    markup = _SVELTE_BLOCK_RE.sub("", markup)
    markup = _SVELTE_INTERPOLATION_RE.sub("...", markup)
    return markup.strip()
