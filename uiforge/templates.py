"""Jinja2 template rendering for scaffolds and preview documents.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``uiforge/templates/`` directory and renders them with per-request context
data.  Every constant file of a materialized project (entry points, build
configs, HTML shells) and every preview document shell lives there as a
``.j2`` template, so Python code only decides *which* template to render and
*what* goes into it.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolds and previews.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Autoescaping is disabled because templates produce
    source code, not only HTML; values that land inside HTML are escaped
    explicitly with the ``e`` filter.  Rendering is read-only, so a single
    renderer can be shared between concurrent requests.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["indent_lines"] = _indent_lines_filter
        self.env.filters["script_safe"] = _script_safe_filter

    def render(self, template_path: str, context: dict[str, Any] | None = None) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"react/main.tsx.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**(context or {}))


@lru_cache(maxsize=1)
def default_renderer() -> TemplateRenderer:
    """Return the shared renderer bound to the packaged templates."""
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _indent_lines_filter(value: str, width: int = 6) -> str:
    """Prefix every line of *value* (including blank ones) with *width* spaces."""
    pad = " " * width
    return "\n".join(pad + line for line in value.split("\n"))


def _script_safe_filter(value: str) -> str:
    """Neutralise closing ``</script`` tags so inlined code cannot end its block."""
    return re.sub(r"</(script)", r"<\\/\1", value, flags=re.IGNORECASE)
