"""uiforge materializers -- raw model output to framework project files.

Quick usage::

    from uiforge.materializers import materialize

    result = materialize("react", raw_source, config)
    for generated in result.files:
        print(generated.path)
"""

from uiforge.materializers.base import CLIENT_MARKERS, BaseMaterializer, Materializer
from uiforge.materializers.html import HtmlMaterializer
from uiforge.materializers.nextjs import NextjsMaterializer
from uiforge.materializers.react import ReactMaterializer
from uiforge.materializers.router import (
    MATERIALIZERS,
    is_known_tech_stack,
    materialize,
    resolve_tech_stack,
    supported_tech_stacks,
)
from uiforge.materializers.svelte import SvelteMaterializer
from uiforge.materializers.vue import VueMaterializer

__all__ = [
    "BaseMaterializer",
    "CLIENT_MARKERS",
    "HtmlMaterializer",
    "MATERIALIZERS",
    "Materializer",
    "NextjsMaterializer",
    "ReactMaterializer",
    "SvelteMaterializer",
    "VueMaterializer",
    "is_known_tech_stack",
    "materialize",
    "resolve_tech_stack",
    "supported_tech_stacks",
]
