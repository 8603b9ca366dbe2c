"""Source clean-up for running React components in a browser.

The preview document loads React, ReactDOM and Babel standalone from a CDN,
so module syntax has to go: ``"use client"`` directives, ``import``
statements and ``export`` keywords are stripped, and the identifier of the
component to mount is detected from the original source.
"""

from __future__ import annotations

import re

DEFAULT_COMPONENT_NAME = "App"

_IDENT = r"[A-Za-z_$][\w$]*"

_USE_CLIENT_RE = re.compile(r"""^[ \t]*["']use client["'];?[ \t]*\n?""", re.MULTILINE)

# Covers default, named, namespace, type-only, side-effect and multi-line
# brace imports.
_IMPORT_RE = re.compile(
    r"""^[ \t]*import\s+(?:[\w$*{}\s,]+?\s*from\s*)?["'][^"'\n]+["'];?[ \t]*(?:\n|$)""",
    re.MULTILINE,
)

_DEFAULT_FUNCTION_RE = re.compile(rf"\bexport\s+default\s+(async\s+)?function\s*\*?\s*({_IDENT})\s*\(")
_DEFAULT_CLASS_RE = re.compile(rf"\bexport\s+default\s+class\s+({_IDENT})")
_DEFAULT_NAME_RE = re.compile(rf"^[ \t]*export\s+default\s+({_IDENT})\s*;?[ \t]*$", re.MULTILINE)
_DEFAULT_ANON_FUNCTION_RE = re.compile(r"\bexport\s+default\s+(async\s+)?function\s*\(")
_DEFAULT_ARROW_RE = re.compile(
    rf"\bexport\s+default\s+(?=(?:async\s*)?(?:\([^()]*\)|{_IDENT})\s*=>)"
)
_FIRST_CAPITALISED_RE = re.compile(
    r"\b(?:function\s+([A-Z][\w$]*)\s*\(|(?:const|let|var)\s+([A-Z][\w$]*)\s*=)"
)

_EXPORT_LIST_RE = re.compile(
    r"^[ \t]*export\s*(?:type\b\s*)?\{[^}]*\}\s*(?:from\s*[\"'][^\"']+[\"'])?;?[ \t]*(?:\n|$)", re.MULTILINE
)
_EXPORT_DEFAULT_RE = re.compile(r"\bexport\s+default\s+")
# TypeScript declarations are left for Babel's typescript preset to erase.
_EXPORT_DECL_RE = re.compile(
    r"\bexport\s+(?=(?:async\s+)?function\b|(?:abstract\s+)?class\b|const\b|let\b|var\b"
    r"|interface\b|type\b|enum\b|declare\b)"
)

_COMPONENT_SHAPE_RE = re.compile(
    r"\bexport\s+default\b|\bfunction\s+[A-Z]|\bclass\s+[A-Z]|\b(?:const|let|var)\s+[A-Z][\w$]*\s*="
)


def strip_use_client(source: str) -> str:
    """Remove ``"use client"`` directives in either quote style."""
    return _USE_CLIENT_RE.sub("", source)


def strip_imports(source: str) -> str:
    """Remove module-level ``import`` statements, single or multi-line."""
    return _IMPORT_RE.sub("", source)


def detect_component_name(source: str) -> str:
    """Return the identifier of the component a preview should mount.

    Detection order: ``export default function Name``, ``export default
    class Name``, ``export default Name``, an anonymous default function or
    arrow (mounted as ``App``), the first capitalised function or constant,
    and finally ``App``.
    """
    for pattern, group in (
        (_DEFAULT_FUNCTION_RE, 2),
        (_DEFAULT_CLASS_RE, 1),
        (_DEFAULT_NAME_RE, 1),
    ):
        match = pattern.search(source)
        if match:
            return match.group(group)

    if _DEFAULT_ANON_FUNCTION_RE.search(source) or _DEFAULT_ARROW_RE.search(source):
        return DEFAULT_COMPONENT_NAME

    match = _FIRST_CAPITALISED_RE.search(source)
    if match:
        return match.group(1) or match.group(2)
    return DEFAULT_COMPONENT_NAME


def strip_exports(source: str) -> str:
    """Rewrite module exports into plain declarations.

    Anonymous default exports are bound to ``App`` so the mount code has an
    identifier to render; ``export default Name;`` statements are dropped.
    """
    code = _DEFAULT_ANON_FUNCTION_RE.sub(
        lambda m: f"{m.group(1) or ''}function {DEFAULT_COMPONENT_NAME}(", source
    )
    code = _DEFAULT_ARROW_RE.sub(f"const {DEFAULT_COMPONENT_NAME} = ", code)
    code = _DEFAULT_NAME_RE.sub("", code)
    code = _EXPORT_LIST_RE.sub("", code)
    code = _EXPORT_DEFAULT_RE.sub("", code)
    return _EXPORT_DECL_RE.sub("", code)


def looks_like_component(source: str) -> bool:
    """Whether *source* declares a component rather than being bare markup."""
    return bool(_COMPONENT_SHAPE_RE.search(source))


def wrap_fragment(markup: str, name: str = DEFAULT_COMPONENT_NAME) -> str:
    """Wrap bare JSX markup in a function component returning a fragment."""
    body = "\n".join("      " + line for line in markup.strip().split("\n"))
    return f"function {name}() {{\n  return (\n    <>\n{body}\n    </>\n  );\n}}"


def clean_component_source(source: str) -> tuple[str, str]:
    """Prepare component source for inline Babel execution.

    Returns:
        A ``(code, component_name)`` tuple.  Bare markup is wrapped in an
        ``App`` component first.
    """
    code = strip_imports(strip_use_client(source))
    if not looks_like_component(code):
        return wrap_fragment(code), DEFAULT_COMPONENT_NAME

    name = detect_component_name(code)
    return strip_exports(code).strip(), name
