"""SvelteKit materializer."""

from __future__ import annotations

from typing import Any, Optional

from uiforge.materializers.base import BaseMaterializer, manifest
from uiforge.models import GenerationResult, GeneratorConfig, TechStack

SVELTE_PACKAGE: dict[str, Any] = {
    "version": "0.1.0",
    "private": True,
    "scripts": {
        "dev": "vite dev",
        "build": "vite build",
        "preview": "vite preview",
    },
    "devDependencies": {
        "@sveltejs/adapter-auto": "^3.0.0",
        "@sveltejs/kit": "^2.0.0",
        "@sveltejs/vite-plugin-svelte": "^3.0.0",
        "autoprefixer": "^10.4.16",
        "postcss": "^8.4.32",
        "svelte": "^4.2.0",
        "svelte-check": "^3.6.0",
        "tailwindcss": "^3.4.0",
        "typescript": "^5.3.0",
        "vite": "^5.0.0",
    },
    "type": "module",
}

SVELTE_TSCONFIG: dict[str, Any] = {
    "extends": "./.svelte-kit/tsconfig.json",
    "compilerOptions": {
        "allowJs": True,
        "checkJs": True,
        "esModuleInterop": True,
        "forceConsistentCasingInFileNames": True,
        "resolveJsonModule": True,
        "skipLibCheck": True,
        "sourceMap": True,
        "strict": True,
        "moduleResolution": "bundler",
    },
}


def is_svelte_component(source: str) -> bool:
    return "<script" in source or "$:" in source


class SvelteMaterializer(BaseMaterializer):
    """Wraps markup or a component into a SvelteKit project."""

    framework = TechStack.SVELTE
    template_prefix = "svelte"
    default_title = "SvelteKit App"
    default_package_name = "uiforge-sveltekit-app"

    def page_component(self, raw_source: str) -> str:
        source = raw_source.strip()
        if is_svelte_component(source):
            return source
        return self.render("page.svelte", {"body": source})

    def materialize(
        self, raw_source: str, config: Optional[GeneratorConfig] = None
    ) -> GenerationResult:
        config = config or GeneratorConfig()
        context = {"title": self.title(config)}

        files = [
            self.file("src/routes/+page.svelte", self.page_component(raw_source), "svelte"),
            self.file("src/routes/+layout.svelte", self.render("layout.svelte"), "svelte"),
            self.file("src/app.html", self.render("app.html", context), "html"),
            self.file("src/app.css", self.render_shared("tailwind.css"), "css"),
            self.json_file("package.json", manifest(self.package_name(config), SVELTE_PACKAGE)),
            self.file("svelte.config.js", self.render("svelte.config.js"), "javascript"),
            self.file("vite.config.ts", self.render("vite.config.ts"), "typescript"),
            self.file("tailwind.config.js", self.render("tailwind.config.js"), "javascript"),
            self.file("postcss.config.js", self.render_shared("postcss.config.esm.js"), "javascript"),
            self.json_file("tsconfig.json", SVELTE_TSCONFIG),
        ]
        return self.result(files, "src/routes/+page.svelte")
