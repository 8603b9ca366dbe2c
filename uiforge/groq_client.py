"""Async client for the Groq chat-completions API.

Wraps the OpenAI-compatible Groq HTTP API (``/chat/completions``,
``/models``) with timeout handling and structured responses.  Transport
failures never raise: they come back as an unsuccessful
:class:`GroqResponse` whose ``error`` text the orchestrator classifies.

Typical usage::

    client = GroqClient(api_key=os.environ["GROQ_API_KEY"])
    resp = await client.generate("A pricing page with three tiers", system=prompt)
    if resp.success:
        print(resp.text)
"""

from __future__ import annotations

import re
import time
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from uiforge.config import GroqConfig
from uiforge.errors import GenerationServiceError
from uiforge.models import ImageInput
from uiforge.prompts import IMAGE_PROMPT

_FENCED_BLOCK_RE = re.compile(r"^```[\w+-]*[ \t]*\n?([\s\S]*?)\n?```$")


def clean_generated_code(text: str) -> str:
    """Strip a surrounding markdown code fence from model output.

    Handles a fence with or without a language tag (```` ```html ````,
    ```` ```tsx ````) and an unterminated opening fence.  Text without a
    fence is returned trimmed.
    """
    cleaned = text.strip()

    match = _FENCED_BLOCK_RE.match(cleaned)
    if match:
        return match.group(1).strip()

    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines.pop(0)
        if lines and lines[-1].strip() == "```":
            lines.pop()
        return "\n".join(lines).strip()

    return cleaned


class GroqResponse(BaseModel):
    """Structured response from a Groq generation call."""

    text: str = Field(default="", description="Generated text")
    model: str = Field(default="", description="Model that produced the response")
    duration_ms: float = Field(default=0.0, description="Wall-clock request time in ms")
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: str | None = Field(default=None, description="Error message on failure")

    def raise_for_error(self) -> "GroqResponse":
        """Return self, or raise :class:`GenerationServiceError` if unsuccessful."""
        if not self.success:
            raise GenerationServiceError(self.error or "Generation failed")
        return self


class GroqClient:
    """Async client for an OpenAI-compatible chat-completions endpoint.

    The client uses ``httpx.AsyncClient`` for non-blocking HTTP.  A fresh
    client is opened per request, so a single instance can be shared by
    concurrent pipeline runs.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.groq.com/openai/v1",
        model: str = "llama-3.3-70b-versatile",
        vision_model: str = "meta-llama/llama-4-scout-17b-16e-instruct",
        timeout: int = 120,
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.vision_model = vision_model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, config: GroqConfig) -> "GroqClient":
        return cls(
            api_key=config.api_key,
            base_url=config.url,
            model=config.model,
            vision_model=config.vision_model,
            timeout=config.timeout,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with base URL, auth and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Pull the assistant message out of a chat-completions response."""
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(
        self,
        prompt: str,
        system: str = "",
        image: Optional[ImageInput] = None,
    ) -> GroqResponse:
        """Generate text from a prompt, optionally with an attached image.

        Args:
            prompt: The user message.
            system: Optional system message sent before the prompt.
            image: A validated sketch or screenshot.  When given, the user
                message carries the image as a data URL followed by the
                prompt text (or a default conversion instruction), and
                ``vision_model`` is used.

        Returns:
            A ``GroqResponse`` with the generated text or an error.
        """
        model = self.vision_model if image is not None else self.model
        if not self.api_key:
            return GroqResponse(
                model=model,
                success=False,
                error="GROQ_API_KEY environment variable is not set",
            )

        messages: list[dict] = []
        if system:
            messages.append({"role": "system", "content": system})
        if image is None:
            messages.append({"role": "user", "content": prompt})
        else:
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": image.data_url}},
                        {"type": "text", "text": prompt or IMAGE_PROMPT},
                    ],
                }
            )

        payload: dict = {
            "model": model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        started = time.monotonic()
        try:
            async with self._client() as client:
                response = await client.post("/chat/completions", json=payload)
                response.raise_for_status()
                data = response.json()
                return GroqResponse(
                    text=self._extract_text(data),
                    model=data.get("model", model),
                    duration_ms=(time.monotonic() - started) * 1000.0,
                    success=True,
                )
        except httpx.ConnectError:
            return GroqResponse(
                model=model,
                success=False,
                error=f"Cannot connect to the generation service at {self.base_url}.",
            )
        except httpx.TimeoutException:
            return GroqResponse(
                model=model,
                success=False,
                error=f"Request to the generation service timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return GroqResponse(
                model=model,
                success=False,
                error=f"Groq returned HTTP {exc.response.status_code}: {exc.response.text[:500]}",
            )
        except Exception as exc:  # noqa: BLE001
            return GroqResponse(
                model=model,
                success=False,
                error=f"Unexpected error during Groq generate: {exc}",
            )

    async def is_available(self) -> bool:
        """Return ``True`` if the API key is set and ``/models`` answers 200."""
        if not self.api_key:
            return False
        try:
            async with self._client() as client:
                response = await client.get("/models")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def list_models(self) -> list[str]:
        """Return the sorted ids of the models the key can use.

        Returns an empty list if the service is unreachable or rejects the key.
        """
        if not self.api_key:
            return []
        try:
            async with self._client() as client:
                response = await client.get("/models")
                response.raise_for_status()
                data = response.json()
                return sorted(m.get("id", "") for m in data.get("data", []) if m.get("id"))
        except (httpx.HTTPError, ValueError):
            return []
