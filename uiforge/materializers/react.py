"""React + Vite materializer."""

from __future__ import annotations

from typing import Any, Optional

from uiforge.materializers.base import (
    BaseMaterializer,
    has_default_export,
    manifest,
    named_export_function,
)
from uiforge.models import GenerationResult, GeneratorConfig, TechStack

REACT_PACKAGE: dict[str, Any] = {
    "private": True,
    "version": "0.1.0",
    "type": "module",
    "scripts": {
        "dev": "vite",
        "build": "tsc && vite build",
        "preview": "vite preview",
    },
    "dependencies": {
        "react": "^18.2.0",
        "react-dom": "^18.2.0",
    },
    "devDependencies": {
        "@types/react": "^18.2.0",
        "@types/react-dom": "^18.2.0",
        "@vitejs/plugin-react": "^4.2.0",
        "autoprefixer": "^10.4.16",
        "postcss": "^8.4.32",
        "tailwindcss": "^3.4.0",
        "typescript": "^5.3.0",
        "vite": "^5.0.0",
    },
}

REACT_TSCONFIG: dict[str, Any] = {
    "compilerOptions": {
        "target": "ES2020",
        "useDefineForClassFields": True,
        "lib": ["ES2020", "DOM", "DOM.Iterable"],
        "module": "ESNext",
        "skipLibCheck": True,
        "moduleResolution": "bundler",
        "allowImportingTsExtensions": True,
        "resolveJsonModule": True,
        "isolatedModules": True,
        "noEmit": True,
        "jsx": "react-jsx",
        "strict": True,
        "noUnusedLocals": True,
        "noUnusedParameters": True,
        "noFallthroughCasesInSwitch": True,
    },
    "include": ["src"],
}


class ReactMaterializer(BaseMaterializer):
    """Wraps component source into a Vite + React + Tailwind project."""

    framework = TechStack.REACT
    template_prefix = "react"
    default_title = "React App"
    default_package_name = "uiforge-react-app"

    def app_component(self, raw_source: str) -> str:
        """Return ``src/App.tsx`` content with exactly one default export.

        Source with a default export is kept as is.  A lone named
        ``export function Name`` gets ``export default Name;`` appended.
        Anything else is treated as JSX markup and wrapped in an ``App``
        component returning a fragment.
        """
        source = raw_source.strip()
        if has_default_export(source):
            return source
        name = named_export_function(source)
        if name:
            return f"{source}\n\nexport default {name};"
        return self.render("App.tsx", {"component_name": "App", "body": source})

    def materialize(
        self, raw_source: str, config: Optional[GeneratorConfig] = None
    ) -> GenerationResult:
        config = config or GeneratorConfig()
        context = {"title": self.title(config)}

        files = [
            self.file("src/App.tsx", self.app_component(raw_source), "typescript"),
            self.file("src/main.tsx", self.render("main.tsx"), "typescript"),
            self.file("src/index.css", self.render_shared("tailwind.css"), "css"),
            self.file("index.html", self.render("index.html", context), "html"),
            self.json_file("package.json", manifest(self.package_name(config), REACT_PACKAGE)),
            self.file("vite.config.ts", self.render("vite.config.ts"), "typescript"),
            self.file("tailwind.config.js", self.render("tailwind.config.js"), "javascript"),
            self.file("postcss.config.js", self.render_shared("postcss.config.esm.js"), "javascript"),
            self.json_file("tsconfig.json", REACT_TSCONFIG),
        ]
        return self.result(files, "src/App.tsx")
