"""Vue 3 + Vite materializer."""

from __future__ import annotations

from typing import Any, Optional

from uiforge.materializers.base import BaseMaterializer, manifest
from uiforge.models import GenerationResult, GeneratorConfig, TechStack

VUE_PACKAGE: dict[str, Any] = {
    "private": True,
    "version": "0.1.0",
    "type": "module",
    "scripts": {
        "dev": "vite",
        "build": "vue-tsc && vite build",
        "preview": "vite preview",
    },
    "dependencies": {
        "vue": "^3.4.0",
    },
    "devDependencies": {
        "@vitejs/plugin-vue": "^5.0.0",
        "autoprefixer": "^10.4.16",
        "postcss": "^8.4.32",
        "tailwindcss": "^3.4.0",
        "typescript": "^5.3.0",
        "vite": "^5.0.0",
        "vue-tsc": "^1.8.0",
    },
}

VUE_TSCONFIG: dict[str, Any] = {
    "compilerOptions": {
        "target": "ES2020",
        "useDefineForClassFields": True,
        "module": "ESNext",
        "lib": ["ES2020", "DOM", "DOM.Iterable"],
        "skipLibCheck": True,
        "moduleResolution": "bundler",
        "allowImportingTsExtensions": True,
        "resolveJsonModule": True,
        "isolatedModules": True,
        "noEmit": True,
        "jsx": "preserve",
        "strict": True,
        "noUnusedLocals": True,
        "noUnusedParameters": True,
        "noFallthroughCasesInSwitch": True,
    },
    "include": ["src/**/*.ts", "src/**/*.tsx", "src/**/*.vue"],
}


def is_vue_sfc(source: str) -> bool:
    return "<template>" in source or "<script" in source


class VueMaterializer(BaseMaterializer):
    """Wraps markup or a single-file component into a Vue 3 project."""

    framework = TechStack.VUE
    template_prefix = "vue"
    default_title = "Vue App"
    default_package_name = "uiforge-vue-app"

    def app_component(self, raw_source: str) -> str:
        source = raw_source.strip()
        if is_vue_sfc(source):
            return source
        return self.render("App.vue", {"body": source})

    def materialize(
        self, raw_source: str, config: Optional[GeneratorConfig] = None
    ) -> GenerationResult:
        config = config or GeneratorConfig()
        context = {"title": self.title(config)}

        files = [
            self.file("src/App.vue", self.app_component(raw_source), "vue"),
            self.file("src/main.ts", self.render("main.ts"), "typescript"),
            self.file("src/style.css", self.render_shared("tailwind.css"), "css"),
            self.file("index.html", self.render("index.html", context), "html"),
            self.json_file("package.json", manifest(self.package_name(config), VUE_PACKAGE)),
            self.file("vite.config.ts", self.render("vite.config.ts"), "typescript"),
            self.file("tailwind.config.js", self.render("tailwind.config.js"), "javascript"),
            self.file("postcss.config.js", self.render_shared("postcss.config.esm.js"), "javascript"),
            self.json_file("tsconfig.json", VUE_TSCONFIG),
        ]
        return self.result(files, "src/App.vue")
