"""Ordered main-file selection rules.

Each rendering family owns a priority table of :class:`MainFileRule`
entries.  :func:`select_main_file` walks the table in order and returns the
first file matched by the earliest rule, so ``App.tsx`` always wins over an
arbitrary ``*.tsx`` regardless of where each appears in the file list.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from uiforge.models import GeneratedFile, TechStack


class PreviewFamily(str, Enum):
    """How a framework's files are turned into a preview document."""
    STATIC = "static"
    COMPONENT = "component"
    VUE = "vue"
    SVELTE = "svelte"


@dataclass(frozen=True)
class MainFileRule:
    """A single entry of a main-file priority table."""

    label: str
    matches: Callable[[str], bool]

    def __call__(self, path: str) -> bool:
        return self.matches(path)


def _basename(path: str) -> str:
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def named(filename: str) -> MainFileRule:
    """Rule matching files whose base name is exactly *filename*."""
    return MainFileRule(filename, lambda path: _basename(path) == filename)


def with_suffix(suffix: str) -> MainFileRule:
    """Rule matching any file whose name ends with *suffix*."""
    return MainFileRule(f"any *{suffix}", lambda path: path.lower().endswith(suffix))


# ---------------------------------------------------------------------------
# Priority tables
# ---------------------------------------------------------------------------

MAIN_FILE_RULES: dict[PreviewFamily, tuple[MainFileRule, ...]] = {
    PreviewFamily.STATIC: (
        named("index.html"),
        with_suffix(".html"),
    ),
    PreviewFamily.COMPONENT: (
        named("App.tsx"),
        named("App.jsx"),
        named("page.tsx"),
        named("page.jsx"),
        with_suffix(".tsx"),
        with_suffix(".jsx"),
    ),
    PreviewFamily.VUE: (
        named("App.vue"),
        with_suffix(".vue"),
    ),
    PreviewFamily.SVELTE: (
        named("+page.svelte"),
        with_suffix(".svelte"),
    ),
}

FAMILY_BY_FRAMEWORK: dict[TechStack, PreviewFamily] = {
    TechStack.HTML: PreviewFamily.STATIC,
    TechStack.REACT: PreviewFamily.COMPONENT,
    TechStack.NEXTJS: PreviewFamily.COMPONENT,
    TechStack.VUE: PreviewFamily.VUE,
    TechStack.SVELTE: PreviewFamily.SVELTE,
}


def family_for(framework: TechStack | str | None) -> PreviewFamily:
    """Return the rendering family for *framework*.

    Unknown or missing tags fall back to the static family.
    """
    try:
        return FAMILY_BY_FRAMEWORK[TechStack(framework)]
    except ValueError:
        return PreviewFamily.STATIC


def select_main_file(
    files: Sequence[GeneratedFile],
    family: PreviewFamily,
) -> Optional[GeneratedFile]:
    """Pick the file a preview of *family* should start from.

    Rules are tried in priority order; within a rule, files are tried in
    list order.  Returns ``None`` when no rule matches any file.
    """
    for rule in MAIN_FILE_RULES[family]:
        for generated in files:
            if rule(generated.path):
                return generated
    return None
