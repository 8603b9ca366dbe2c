"""Staged generation orchestrator.

Drives one generation request through a fixed sequence of stages:

preparing    -- validate inputs, build the prompts.
structure    -- the single call to the generation service.
styling      -- paced progress step.
interactions -- paced progress step.
polishing    -- paced progress step.
complete     -- terminal; carries the materialized result or an error.

Stages are reported through a caller-supplied callback, strictly in that
order and never after ``complete``.  The service is called exactly once per
run; the three later stages are paced by ``PipelineSettings.stage_interval``.

Usage::

    orchestrator = GenerationOrchestrator(GroqClient.from_config(config.groq))
    final = await orchestrator.run("A pricing page", GeneratorConfig(tech_stack="react"), print)
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Optional, Protocol, Union

from uiforge.config import PipelineSettings
from uiforge.errors import StageOrderError, classify_service_error
from uiforge.groq_client import GroqResponse, clean_generated_code
from uiforge.materializers import materialize, resolve_tech_stack
from uiforge.models import (
    STAGE_ORDER,
    GenerationResult,
    GeneratorConfig,
    ImageInput,
    PipelineStage,
    StageName,
    TechStack,
)
from uiforge.prompts import build_generate_prompt, build_system_prompt, validate_request
from uiforge.utils import print_stage

StageCallback = Callable[[PipelineStage], Union[Awaitable[Any], None]]
ErrorClassifier = Callable[[str], str]

_PACED_STAGES: tuple[StageName, ...] = (
    StageName.STYLING,
    StageName.INTERACTIONS,
    StageName.POLISHING,
)

EMPTY_RESPONSE_ERROR = "Generation service returned no code"
FAILED_LABEL = "Generation failed"


class GenerationClient(Protocol):
    """The slice of :class:`~uiforge.groq_client.GroqClient` the orchestrator uses."""

    async def generate(
        self, prompt: str, system: str = "", image: Optional[ImageInput] = None
    ) -> GroqResponse:
        ...


# ---------------------------------------------------------------------------
# Stage emitter
# ---------------------------------------------------------------------------


class StageEmitter:
    """Forwards stages to a callback while enforcing their order.

    Each callback invocation completes (awaited when it returns an
    awaitable) before the next stage can be emitted.

    Attributes:
        history: Every stage emitted so far, in order.
    """

    def __init__(self, on_stage: Optional[StageCallback] = None, verbose: bool = False) -> None:
        self.on_stage = on_stage
        self.verbose = verbose
        self.history: list[PipelineStage] = []

    @property
    def last(self) -> Optional[StageName]:
        return self.history[-1].stage if self.history else None

    @property
    def finished(self) -> bool:
        return self.last is StageName.COMPLETE

    async def emit(self, stage: PipelineStage) -> None:
        """Report *stage*.

        Raises:
            StageOrderError: If *stage* does not come strictly after the
                previous one, or ``complete`` was already emitted.
        """
        if self.finished:
            raise StageOrderError(f"Cannot emit '{stage.stage.value}' after 'complete'")
        if self.last is not None and STAGE_ORDER.index(stage.stage) <= STAGE_ORDER.index(self.last):
            raise StageOrderError(
                f"Stage '{stage.stage.value}' cannot follow '{self.last.value}'"
            )

        self.history.append(stage)
        if self.verbose:
            print_stage(stage.stage, stage.progress, stage.error)

        if self.on_stage is not None:
            outcome = self.on_stage(stage)
            if inspect.isawaitable(outcome):
                await outcome


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class GenerationOrchestrator:
    """Sequences one generation request and reports its progress.

    The orchestrator holds no per-run state, so one instance can serve
    concurrent runs.

    Attributes:
        client: Generation service client (injected).
        settings: Pacing settings for the simulated stages.
        error_classifier: Maps raw service errors to user-facing messages.
    """

    def __init__(
        self,
        client: GenerationClient,
        settings: PipelineSettings | None = None,
        *,
        error_classifier: ErrorClassifier = classify_service_error,
        verbose: bool = False,
    ) -> None:
        self.client = client
        self.settings = settings or PipelineSettings()
        self.error_classifier = error_classifier
        self.verbose = verbose

    async def run(
        self,
        description: str,
        config: GeneratorConfig,
        on_stage: Optional[StageCallback] = None,
        image: Optional[ImageInput] = None,
    ) -> PipelineStage:
        """Run the full stage sequence for one request.

        Args:
            description: What the user wants built.  Optional when *image*
                is given.
            config: Studio options; ``config.tech_stack`` selects the target.
            on_stage: Called with every stage, in order.  May be async.
            image: A validated sketch to convert (see
                :func:`~uiforge.prompts.validate_image`).

        Returns:
            The terminal ``complete`` stage.  It carries ``result`` on
            success and ``error`` (a classified, user-facing message) when
            the service call failed.

        Raises:
            TechStackError: If the tech stack is missing or unsupported.
                Raised before any stage is emitted.
            PromptError: If the description is empty or out of bounds.
                Raised before any stage is emitted.
        """
        stack = resolve_tech_stack(config.tech_stack)
        text = validate_request(description, image)
        emitter = StageEmitter(on_stage, verbose=self.verbose)

        await emitter.emit(PipelineStage.for_stage(StageName.PREPARING))
        system = build_system_prompt(stack)
        prompt = build_generate_prompt(text, config, from_image=image is not None)

        await emitter.emit(PipelineStage.for_stage(StageName.STRUCTURE))
        raw_source, error = await self._call_service(prompt, system, image)
        if error is not None:
            return await self._fail(emitter, error)

        for stage in _PACED_STAGES:
            await self._pace()
            await emitter.emit(PipelineStage.for_stage(stage))

        result = self._materialize(stack, raw_source, config)
        terminal = PipelineStage.for_stage(StageName.COMPLETE, result=result)
        await emitter.emit(terminal)
        return terminal

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _call_service(
        self, prompt: str, system: str, image: Optional[ImageInput] = None
    ) -> tuple[str, Optional[str]]:
        """Issue the single service call.

        ``image`` is only passed as a keyword when an image is attached.

        Returns:
            ``(cleaned_source, None)`` on success, ``("", raw_error)`` otherwise.
        """
        kwargs: dict[str, Any] = {"system": system}
        if image is not None:
            kwargs["image"] = image
        try:
            response = await self.client.generate(prompt, **kwargs)
        except Exception as exc:  # noqa: BLE001 - becomes the terminal error stage
            return "", str(exc) or type(exc).__name__

        if not response.success:
            return "", response.error or ""

        raw_source = clean_generated_code(response.text)
        if not raw_source:
            return "", EMPTY_RESPONSE_ERROR
        return raw_source, None

    async def _fail(self, emitter: StageEmitter, raw_error: str) -> PipelineStage:
        terminal = PipelineStage.for_stage(
            StageName.COMPLETE,
            error=self.error_classifier(raw_error),
            message=FAILED_LABEL,
        )
        await emitter.emit(terminal)
        return terminal

    async def _pace(self) -> None:
        if self.settings.stage_interval > 0:
            await asyncio.sleep(self.settings.stage_interval)

    @staticmethod
    def _materialize(
        stack: TechStack, raw_source: str, config: GeneratorConfig
    ) -> GenerationResult:
        return materialize(stack, raw_source, config)
