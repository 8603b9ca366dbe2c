"""Tech-stack validation and dispatch to the concrete materializers."""

from __future__ import annotations

from typing import Optional

from uiforge.errors import TechStackError
from uiforge.materializers.base import Materializer
from uiforge.materializers.html import HtmlMaterializer
from uiforge.materializers.nextjs import NextjsMaterializer
from uiforge.materializers.react import ReactMaterializer
from uiforge.materializers.svelte import SvelteMaterializer
from uiforge.materializers.vue import VueMaterializer
from uiforge.models import GenerationResult, GeneratorConfig, TechStack

MATERIALIZERS: dict[TechStack, Materializer] = {
    TechStack.HTML: HtmlMaterializer(),
    TechStack.REACT: ReactMaterializer(),
    TechStack.NEXTJS: NextjsMaterializer(),
    TechStack.VUE: VueMaterializer(),
    TechStack.SVELTE: SvelteMaterializer(),
}


def supported_tech_stacks() -> list[str]:
    """The closed set of tech-stack tags, in declaration order."""
    return [stack.value for stack in TechStack]


def is_known_tech_stack(tag: object) -> bool:
    """True iff *tag* is one of the supported tech-stack identifiers."""
    if isinstance(tag, TechStack):
        return True
    return isinstance(tag, str) and tag in supported_tech_stacks()


def resolve_tech_stack(tag: object) -> TechStack:
    """Return the :class:`TechStack` for *tag*.

    Raises:
        TechStackError: If *tag* is missing, blank or not supported.
    """
    if not is_known_tech_stack(tag):
        raise TechStackError(tag)
    return TechStack(tag)


def materialize(
    tech_stack: TechStack | str | None,
    raw_source: str,
    config: Optional[GeneratorConfig] = None,
) -> GenerationResult:
    """Convert *raw_source* into the project structure for *tech_stack*.

    Args:
        tech_stack: Target ecosystem tag.
        raw_source: Raw model output (markup or component source).
        config: Studio options; defaults are used when omitted.

    Returns:
        A new :class:`GenerationResult`.

    Raises:
        TechStackError: If *tech_stack* is missing, blank or not supported.
    """
    stack = resolve_tech_stack(tech_stack)
    return MATERIALIZERS[stack].materialize(raw_source, config or GeneratorConfig())
