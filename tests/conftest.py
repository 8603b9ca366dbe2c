"""Shared pytest fixtures for the uiforge test suite.

Provides reusable fixtures for:
- Raw model output in each supported shape (markup, components, SFCs)
- Generator configurations
- A scripted generation client standing in for the Groq API
- Pipeline settings with pacing disabled
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from uiforge.config import PipelineSettings
from uiforge.groq_client import GroqResponse
from uiforge.models import ColorPalette, GeneratorConfig


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Temporary directory that exported projects are written into."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    yield output_dir


# ---------------------------------------------------------------------------
# Raw sources
# ---------------------------------------------------------------------------

@pytest.fixture
def html_fragment() -> str:
    return textwrap.dedent("""\
        <main class="p-8">
          <h1 class="text-3xl font-bold">Pricing</h1>
          <p>Simple plans for everyone.</p>
        </main>
    """)


@pytest.fixture
def html_document() -> str:
    return textwrap.dedent("""\
        <!DOCTYPE html>
        <html lang="en">
        <head>
          <title>Landing</title>
        </head>
        <body><h1>Hello</h1></body>
        </html>
    """)


@pytest.fixture
def react_component() -> str:
    return textwrap.dedent("""\
        import React, { useState } from 'react';

        export default function Counter() {
          const [count, setCount] = useState(0);
          return (
            <button onClick={() => setCount(count + 1)}>
              Clicked {count} times
            </button>
          );
        }
    """)


@pytest.fixture
def jsx_markup() -> str:
    return textwrap.dedent("""\
        <section className="p-4">
          <h2>Features</h2>
        </section>
    """)


@pytest.fixture
def vue_sfc() -> str:
    return textwrap.dedent("""\
        <script setup lang="ts">
        import { ref } from 'vue'
        const count = ref(0)
        function increment() {
          count.value++
        }
        </script>

        <template>
          <button class="btn" @click="increment">Count is {{ count }}</button>
        </template>

        <style scoped>
        .btn { color: red; }
        </style>
    """)


@pytest.fixture
def svelte_component() -> str:
    return textwrap.dedent("""\
        <script lang="ts">
          let name = 'world';
          let open = false;
        </script>

        <h1 class="title">Hello {name}!</h1>
        <button on:click={() => (open = !open)}>Toggle</button>
        {#if open}
          <p>Open</p>
        {/if}

        <style>
          h1 { color: purple; }
        </style>
    """)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def generator_config() -> GeneratorConfig:
    """A fully populated studio configuration targeting React."""
    return GeneratorConfig(
        tech_stack="react",
        styling="tailwind",
        design_system="minimal",
        color_palette=ColorPalette(id="ocean", name="Ocean", colors=["#0EA5E9", "#0F172A"]),
        interaction_level="full",
        features=["pricing table", "faq"],
        page_type="Pricing",
        nav_type="topnav",
        project_name="Pricing Page",
    )


@pytest.fixture
def fast_settings() -> PipelineSettings:
    """Pipeline settings with the paced stages running back to back."""
    return PipelineSettings(stage_interval=0.0, deadline_seconds=5.0)


# ---------------------------------------------------------------------------
# Generation client
# ---------------------------------------------------------------------------

def make_client(**response_kwargs: Any) -> AsyncMock:
    """Build a mock client whose ``generate`` returns one ``GroqResponse``."""
    client = AsyncMock()
    client.generate = AsyncMock(return_value=GroqResponse(**response_kwargs))
    return client


@pytest.fixture
def mock_groq_success(react_component: str) -> AsyncMock:
    """Client answering with a fenced React component."""
    return make_client(
        text=f"```tsx\n{react_component}```",
        model="llama-3.3-70b-versatile",
        duration_ms=850.0,
        success=True,
    )


@pytest.fixture
def mock_groq_failure() -> AsyncMock:
    """Client reporting a rate-limit failure."""
    return make_client(
        success=False,
        error='Groq returned HTTP 429: {"error": {"message": "Rate limit reached"}}',
    )


@pytest.fixture
def client_factory():
    """Factory fixture: ``client_factory(text=..., success=...)`` -> mock client."""
    return make_client
