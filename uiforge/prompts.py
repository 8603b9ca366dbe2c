"""Prompt construction for the generation service.

The system prompt fixes the output contract (raw code, no fences, no
prose) and adds per-stack output rules; the user prompt carries the
description plus the studio options from :class:`GeneratorConfig`.
"""

from __future__ import annotations

import base64
import binascii

from uiforge.errors import PromptError
from uiforge.models import GeneratorConfig, ImageInput, TechStack

MIN_DESCRIPTION_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 4000

ALLOWED_IMAGE_MIME_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp", "image/gif")
# Applies to the base64 text, not the decoded bytes.
MAX_IMAGE_SIZE = 10 * 1024 * 1024
IMAGE_PROMPT = "Convert this sketch into production-ready UI code."

SYSTEM_PROMPT = """You are UIForge, a specialized AI that converts user descriptions into production-ready UI code.

OUTPUT RULES (STRICT):
- Output ONLY raw code
- NO explanations, NO comments, NO markdown, NO code fences
- NO emojis, NO placeholder images
- NO external dependencies or CDN links

CODE QUALITY REQUIREMENTS:
- Use semantic HTML5 elements (header, main, nav, section, article, footer)
- Structure: proper heading hierarchy (h1, h2, h3)
- Responsive design: mobile-first approach with sm:, md:, lg: breakpoints
- Accessible: proper alt text, aria labels, focus states
- Clean indentation and readable structure

DESIGN PRINCIPLES:
- Clean, modern, minimal aesthetic
- Generous whitespace
- Clear visual hierarchy
- Subtle shadows and borders when appropriate"""

STACK_RULES: dict[TechStack, str] = {
    TechStack.HTML: (
        "TARGET: plain HTML with Tailwind CSS classes.\n"
        "Return the markup starting with a root element. No doctype, no html/head/body "
        "tags unless building a full page. No JavaScript unless essential."
    ),
    TechStack.REACT: (
        "TARGET: a single React function component written in TSX.\n"
        "Use hooks from 'react' for state. End with `export default function App()` "
        "or an equivalent default export. Style with Tailwind CSS classes."
    ),
    TechStack.NEXTJS: (
        "TARGET: a Next.js App Router page component written in TSX.\n"
        'Start with "use client"; when using hooks or event handlers. Export the page '
        "as `export default function Page()`. Style with Tailwind CSS classes."
    ),
    TechStack.VUE: (
        "TARGET: a Vue 3 single-file component.\n"
        'Use <script setup lang="ts">, a <template> block and an optional <style scoped> '
        "block. Style with Tailwind CSS classes."
    ),
    TechStack.SVELTE: (
        "TARGET: a Svelte 4 component.\n"
        'Use a <script lang="ts"> block, markup, and an optional <style> block. '
        "Style with Tailwind CSS classes."
    ),
}

_INTERACTION_HINTS: dict[str, str] = {
    "static": "No interactivity; purely presentational.",
    "micro": "Subtle hover and focus transitions only.",
    "full": "Working interactive behaviour (toggles, tabs, menus) where it makes sense.",
}

_NAV_HINTS: dict[str, str] = {
    "topnav": "a top navigation bar",
    "sidebar": "a sidebar navigation",
    "bottomnav": "a bottom navigation bar",
}


def validate_description(description: str) -> str:
    """Return the trimmed *description*, or raise if its length is out of range.

    Raises:
        PromptError: If the description is empty, shorter than
            ``MIN_DESCRIPTION_LENGTH`` or longer than ``MAX_DESCRIPTION_LENGTH``.
    """
    text = (description or "").strip()
    if not text:
        raise PromptError("Prompt is required")
    if len(text) < MIN_DESCRIPTION_LENGTH:
        raise PromptError("Prompt is too short")
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise PromptError(
            f"Prompt exceeds maximum length of {MAX_DESCRIPTION_LENGTH} characters"
        )
    return text


def validate_request(description: str, image: ImageInput | None = None) -> str:
    """Validate the text side of a request.

    With an image attached the description is optional: a blank one yields
    ``""``.  Otherwise the rules of :func:`validate_description` apply.
    """
    if image is not None and not (description or "").strip():
        return ""
    return validate_description(description)


def validate_image(data: bytes | str, mime_type: str) -> ImageInput:
    """Check an uploaded image and normalise it to an :class:`ImageInput`.

    Args:
        data: Raw image bytes, or base64 text (optionally a full
            ``data:<mime>;base64,`` URL).
        mime_type: Declared MIME type; trimmed and lower-cased.

    Raises:
        PromptError: If the data or MIME type is missing, the MIME type is
            not one of ``ALLOWED_IMAGE_MIME_TYPES``, the encoded image is
            larger than ``MAX_IMAGE_SIZE`` or the text is not valid base64.
    """
    if not data:
        raise PromptError("Image data is required")
    if not mime_type or not mime_type.strip():
        raise PromptError("MIME type is required")

    normalized = mime_type.strip().lower()
    if normalized not in ALLOWED_IMAGE_MIME_TYPES:
        raise PromptError(
            f'Invalid MIME type: "{mime_type}". Allowed: {", ".join(ALLOWED_IMAGE_MIME_TYPES)}'
        )

    if isinstance(data, bytes):
        encoded = base64.b64encode(data).decode("ascii")
    else:
        encoded = data.split(",", 1)[1] if "," in data else data
        encoded = encoded.strip()
        if not encoded:
            raise PromptError("Image data is required")
        try:
            base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise PromptError("Image data is not valid base64") from None

    if len(encoded) > MAX_IMAGE_SIZE:
        raise PromptError("Image too large. Maximum size: 10MB")
    return ImageInput(data=encoded, mime_type=normalized)


def build_system_prompt(tech_stack: TechStack) -> str:
    """System prompt for generating code in *tech_stack*."""
    return f"{SYSTEM_PROMPT}\n\n{STACK_RULES[tech_stack]}"


def build_generate_prompt(
    description: str,
    config: GeneratorConfig | None = None,
    *,
    from_image: bool = False,
) -> str:
    """User prompt for one generation request.

    The studio options become a short bullet list after the description;
    options left at their empty defaults are omitted.  With *from_image* the
    prompt asks for the attached sketch to be converted and the description,
    if any, becomes additional instructions.
    """
    config = config or GeneratorConfig()
    text = description.strip()
    if from_image:
        lines = [IMAGE_PROMPT]
        if text:
            lines.extend(["", "Additional instructions:", text])
    else:
        lines = ["Create a UI component based on this description:", "", text]

    options: list[str] = []
    if config.page_type:
        options.append(f"- Page type: {config.page_type}")
    if config.design_system:
        options.append(f"- Design system: {config.design_system}")
    if config.color_palette and config.color_palette.colors:
        label = config.color_palette.name or config.color_palette.id or "custom"
        options.append(f"- Colour palette ({label}): {', '.join(config.color_palette.colors)}")
    if config.styling != "tailwind":
        options.append(f"- Styling: {config.styling}")
    options.append(f"- Interactions: {_INTERACTION_HINTS[config.interaction_level]}")
    if config.nav_type in _NAV_HINTS:
        options.append(f"- Navigation: include {_NAV_HINTS[config.nav_type]}")
    if config.features:
        options.append(f"- Features: {', '.join(config.features)}")

    lines.extend(["", "Requirements:", *options])
    return "\n".join(lines)
