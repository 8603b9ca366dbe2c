"""Static document materializer: one self-contained ``index.html``."""

from __future__ import annotations

from typing import Optional

from uiforge.materializers.base import BaseMaterializer
from uiforge.models import GenerationResult, GeneratorConfig, TechStack
from uiforge.preview import TAILWIND_CDN


def is_complete_document(source: str) -> bool:
    """Whether *source*, ignoring leading whitespace, starts with a doctype."""
    return source.lstrip().lower().startswith("<!doctype")


class HtmlMaterializer(BaseMaterializer):
    """Emits a single ``index.html`` that doubles as the preview document."""

    framework = TechStack.HTML
    template_prefix = "html"
    default_title = "Generated Page"

    def materialize(
        self, raw_source: str, config: Optional[GeneratorConfig] = None
    ) -> GenerationResult:
        config = config or GeneratorConfig()

        if is_complete_document(raw_source):
            content = raw_source
        else:
            content = self.render(
                "index.html",
                {
                    "title": self.title(config),
                    "body": raw_source,
                    "tailwind_cdn": TAILWIND_CDN,
                },
            )

        files = [self.file("index.html", content, "html")]
        return self.result(files, "index.html", preview_html=content)
