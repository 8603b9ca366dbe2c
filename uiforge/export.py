"""Writing a :class:`GenerationResult` to disk.

File contents are written exactly as generated.  Paths are checked before
anything is written so a result can never escape the target directory.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from uiforge.errors import ExportError
from uiforge.models import GenerationResult
from uiforge.utils import ensure_dir

PREVIEW_FILENAME = "preview.html"


def resolve_targets(result: GenerationResult, output_dir: str | Path) -> dict[str, Path]:
    """Map every file path of *result* to its destination under *output_dir*.

    Raises:
        ExportError: If a path resolves outside *output_dir*.
    """
    root = Path(output_dir).resolve()
    targets: dict[str, Path] = {}
    for generated in result.files:
        target = (root / generated.path).resolve()
        if target != root and root not in target.parents:
            raise ExportError(f"Refusing to write outside {root}: {generated.path}")
        targets[generated.path] = target
    return targets


def _write_all(contents: dict[Path, str]) -> None:
    for target, content in contents.items():
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


async def write_result(
    result: GenerationResult,
    output_dir: str | Path,
    *,
    include_preview: bool = False,
) -> list[Path]:
    """Write every file of *result* under *output_dir*.

    The writes run in a thread-pool executor so a web host's event loop is
    not blocked.

    Args:
        result: The materialized project.
        output_dir: Destination root; created if missing.
        include_preview: Also write ``preview.html`` when the result has a
            preview document and no file already uses that name.

    Returns:
        The written paths, in file order (the preview last).
    """
    root = ensure_dir(output_dir)
    targets = resolve_targets(result, root)

    contents: dict[Path, str] = {
        targets[generated.path]: generated.content for generated in result.files
    }
    if include_preview and result.preview_html is not None and PREVIEW_FILENAME not in targets:
        contents[root / PREVIEW_FILENAME] = result.preview_html

    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _write_all, contents)
    return list(contents)
