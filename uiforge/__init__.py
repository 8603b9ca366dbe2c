"""uiforge -- turn AI-generated UI source into framework projects and live previews.

Quick usage::

    from uiforge import GeneratorConfig, materialize

    result = materialize("react", raw_source, GeneratorConfig(page_type="Pricing"))
    print(result.preview_entry)      # src/App.tsx
    html = result.preview_html       # sandbox-ready document
"""

from uiforge.errors import TechStackError, UIForgeError, classify_service_error
from uiforge.materializers import is_known_tech_stack, materialize, supported_tech_stacks
from uiforge.models import (
    ColorPalette,
    GeneratedFile,
    GenerationResult,
    GeneratorConfig,
    ImageInput,
    PipelineStage,
    StageName,
    TechStack,
)
from uiforge.pipeline import GenerationOrchestrator
from uiforge.preview import PreviewCompiler, compile_files, compile_source
from uiforge.prompts import validate_image

__version__ = "0.1.0"

__all__ = [
    "ColorPalette",
    "GeneratedFile",
    "GenerationOrchestrator",
    "GenerationResult",
    "GeneratorConfig",
    "ImageInput",
    "PipelineStage",
    "PreviewCompiler",
    "StageName",
    "TechStack",
    "TechStackError",
    "UIForgeError",
    "classify_service_error",
    "compile_files",
    "compile_source",
    "is_known_tech_stack",
    "materialize",
    "supported_tech_stacks",
    "validate_image",
]
