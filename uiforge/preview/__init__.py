"""uiforge preview compiler -- files or raw source to a sandboxed document.

Quick usage::

    from uiforge.preview import PreviewCompiler

    html = PreviewCompiler().compile_files(result.files, result.framework)
"""

from uiforge.preview.compiler import (
    CDN,
    SANDBOX_PERMISSIONS,
    TAILWIND_CDN,
    PreviewCompiler,
    compile_files,
    compile_source,
    inject_tailwind,
    preview_key,
    sandbox_iframe,
)
from uiforge.preview.rules import (
    MAIN_FILE_RULES,
    MainFileRule,
    PreviewFamily,
    family_for,
    select_main_file,
)

__all__ = [
    "CDN",
    "MAIN_FILE_RULES",
    "MainFileRule",
    "PreviewCompiler",
    "PreviewFamily",
    "SANDBOX_PERMISSIONS",
    "TAILWIND_CDN",
    "compile_files",
    "compile_source",
    "family_for",
    "inject_tailwind",
    "preview_key",
    "sandbox_iframe",
    "select_main_file",
]
