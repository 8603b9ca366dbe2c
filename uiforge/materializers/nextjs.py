"""Next.js App Router materializer."""

from __future__ import annotations

from typing import Any, Optional

from uiforge.materializers.base import (
    BaseMaterializer,
    has_client_directive,
    has_default_export,
    manifest,
    named_export_function,
    needs_client_directive,
)
from uiforge.models import GenerationResult, GeneratorConfig, TechStack

USE_CLIENT = '"use client";\n\n'
LAYOUT_DESCRIPTION = "Generated with uiforge"

NEXTJS_PACKAGE: dict[str, Any] = {
    "version": "0.1.0",
    "private": True,
    "scripts": {
        "dev": "next dev",
        "build": "next build",
        "start": "next start",
        "lint": "next lint",
    },
    "dependencies": {
        "next": "^14.0.0",
        "react": "^18.2.0",
        "react-dom": "^18.2.0",
    },
    "devDependencies": {
        "@types/node": "^20.0.0",
        "@types/react": "^18.2.0",
        "@types/react-dom": "^18.2.0",
        "autoprefixer": "^10.4.16",
        "postcss": "^8.4.32",
        "tailwindcss": "^3.4.0",
        "typescript": "^5.3.0",
    },
}

NEXTJS_TSCONFIG: dict[str, Any] = {
    "compilerOptions": {
        "lib": ["dom", "dom.iterable", "esnext"],
        "allowJs": True,
        "skipLibCheck": True,
        "strict": True,
        "noEmit": True,
        "esModuleInterop": True,
        "module": "esnext",
        "moduleResolution": "bundler",
        "resolveJsonModule": True,
        "isolatedModules": True,
        "jsx": "preserve",
        "incremental": True,
        "plugins": [{"name": "next"}],
        "paths": {"@/*": ["./*"]},
    },
    "include": ["next-env.d.ts", "**/*.ts", "**/*.tsx", ".next/types/**/*.ts"],
    "exclude": ["node_modules"],
}


class NextjsMaterializer(BaseMaterializer):
    """Wraps page source into a Next.js 14 App Router project."""

    framework = TechStack.NEXTJS
    template_prefix = "nextjs"
    default_title = "Next.js App"
    default_package_name = "uiforge-nextjs-app"

    def page_component(self, raw_source: str) -> str:
        """Return ``app/page.tsx`` content with exactly one default export.

        A lone named ``export function Name`` gets ``export default Name;``
        appended; other source without a default export is wrapped in a
        ``Page`` component.  ``"use client";`` is prepended when the source
        uses hooks or event handlers and does not already carry the directive.
        """
        source = raw_source.strip()
        use_client = needs_client_directive(source)

        if not has_default_export(source):
            name = named_export_function(source)
            if not name:
                return self.render("page.tsx", {"use_client": use_client, "body": source})
            source = f"{source}\n\nexport default {name};"
        if use_client and not has_client_directive(source):
            return USE_CLIENT + source
        return source

    def materialize(
        self, raw_source: str, config: Optional[GeneratorConfig] = None
    ) -> GenerationResult:
        config = config or GeneratorConfig()
        layout_context = {"title": self.title(config), "description": LAYOUT_DESCRIPTION}

        files = [
            self.file("app/page.tsx", self.page_component(raw_source), "typescript"),
            self.file("app/layout.tsx", self.render("layout.tsx", layout_context), "typescript"),
            self.file("app/globals.css", self.render_shared("tailwind.css"), "css"),
            self.json_file("package.json", manifest(self.package_name(config), NEXTJS_PACKAGE)),
            self.file("next.config.js", self.render("next.config.js"), "javascript"),
            self.file("tailwind.config.ts", self.render("tailwind.config.ts"), "typescript"),
            self.file("postcss.config.js", self.render_shared("postcss.config.cjs.js"), "javascript"),
            self.json_file("tsconfig.json", NEXTJS_TSCONFIG),
        ]
        return self.result(files, "app/page.tsx")
