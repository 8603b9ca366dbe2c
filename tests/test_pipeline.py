"""Unit tests for the staged orchestrator (uiforge.pipeline).

Tests cover:
- StageEmitter ordering rules and callback handling
- GenerationOrchestrator.run success path (stage order, single service call)
- Service failures (unsuccessful response, empty output, raised exception)
- Image input forwarded to the client with the sketch prompt
- Configuration errors raised before any stage
- Pacing between the simulated stages
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from uiforge.config import PipelineSettings
from uiforge.errors import (
    GENERIC_FAILURE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    RATE_LIMIT_MESSAGE,
    PromptError,
    StageOrderError,
    TechStackError,
)
from uiforge.models import STAGE_ORDER, GeneratorConfig, PipelineStage, StageName, TechStack
from uiforge.pipeline import (
    EMPTY_RESPONSE_ERROR,
    FAILED_LABEL,
    GenerationOrchestrator,
    StageEmitter,
)
from uiforge.prompts import IMAGE_PROMPT, validate_image


# ---------------------------------------------------------------------------
# StageEmitter
# ---------------------------------------------------------------------------


class TestStageEmitter:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_records_history(self):
        emitter = StageEmitter()
        await emitter.emit(PipelineStage.for_stage(StageName.PREPARING))
        await emitter.emit(PipelineStage.for_stage(StageName.STRUCTURE))
        assert [s.stage for s in emitter.history] == [StageName.PREPARING, StageName.STRUCTURE]
        assert emitter.last is StageName.STRUCTURE
        assert emitter.finished is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_skipping_forward_is_allowed(self):
        emitter = StageEmitter()
        await emitter.emit(PipelineStage.for_stage(StageName.PREPARING))
        await emitter.emit(PipelineStage.for_stage(StageName.COMPLETE, error="x"))
        assert emitter.finished is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_regression_rejected(self):
        emitter = StageEmitter()
        await emitter.emit(PipelineStage.for_stage(StageName.STYLING))
        with pytest.raises(StageOrderError, match="cannot follow"):
            await emitter.emit(PipelineStage.for_stage(StageName.STRUCTURE))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_repeat_rejected(self):
        emitter = StageEmitter()
        await emitter.emit(PipelineStage.for_stage(StageName.PREPARING))
        with pytest.raises(StageOrderError):
            await emitter.emit(PipelineStage.for_stage(StageName.PREPARING))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_nothing_after_complete(self):
        emitter = StageEmitter()
        await emitter.emit(PipelineStage.for_stage(StageName.COMPLETE, error="x"))
        with pytest.raises(StageOrderError, match="after 'complete'"):
            await emitter.emit(PipelineStage.for_stage(StageName.COMPLETE, error="y"))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sync_callback(self):
        seen: list[StageName] = []
        emitter = StageEmitter(lambda stage: seen.append(stage.stage))
        await emitter.emit(PipelineStage.for_stage(StageName.PREPARING))
        assert seen == [StageName.PREPARING]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_async_callback_awaited(self):
        callback = AsyncMock()
        emitter = StageEmitter(callback)
        stage = PipelineStage.for_stage(StageName.PREPARING)
        await emitter.emit(stage)
        callback.assert_awaited_once_with(stage)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_verbose_prints_stage(self):
        with patch("uiforge.pipeline.print_stage") as mock_print:
            emitter = StageEmitter(verbose=True)
            await emitter.emit(PipelineStage.for_stage(StageName.PREPARING))
        mock_print.assert_called_once_with(StageName.PREPARING, 5, None)


# ---------------------------------------------------------------------------
# GenerationOrchestrator.run -- success
# ---------------------------------------------------------------------------


class TestOrchestratorSuccess:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_emits_every_stage_in_order(self, mock_groq_success, fast_settings):
        stages: list[PipelineStage] = []
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)

        final = await orchestrator.run(
            "A counter button", GeneratorConfig(tech_stack="react"), stages.append
        )

        assert [s.stage for s in stages] == list(STAGE_ORDER)
        assert [s.progress for s in stages] == [5, 20, 45, 70, 90, 100]
        assert final is stages[-1]
        assert final.error is None
        assert final.result is not None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_calls_service_once(self, mock_groq_success, fast_settings):
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)
        await orchestrator.run("A counter button", GeneratorConfig(tech_stack="react"))

        mock_groq_success.generate.assert_awaited_once()
        prompt = mock_groq_success.generate.call_args[0][0]
        system = mock_groq_success.generate.call_args[1]["system"]
        assert "A counter button" in prompt
        assert "React function component" in system

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_result_is_materialized_from_cleaned_output(
        self, mock_groq_success, fast_settings
    ):
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)
        final = await orchestrator.run("A counter button", GeneratorConfig(tech_stack="react"))

        result = final.result
        assert result.framework is TechStack.REACT
        assert result.preview_entry == "src/App.tsx"
        app = result.get_file("src/App.tsx").content
        assert not app.startswith("```")
        assert "export default function Counter()" in app
        assert "React.createElement(Counter)" in result.preview_html

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_concurrent_runs_share_orchestrator(self, client_factory, fast_settings):
        client = client_factory(text="<main>Hi</main>")
        orchestrator = GenerationOrchestrator(client, fast_settings)

        first, second = await asyncio.gather(
            orchestrator.run("First page", GeneratorConfig(tech_stack="html")),
            orchestrator.run("Second page", GeneratorConfig(tech_stack="vue")),
        )

        assert first.result.framework is TechStack.HTML
        assert second.result.framework is TechStack.VUE
        assert client.generate.await_count == 2


# ---------------------------------------------------------------------------
# GenerationOrchestrator.run -- failures
# ---------------------------------------------------------------------------


class TestOrchestratorFailure:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unsuccessful_response(self, mock_groq_failure, fast_settings):
        stages: list[PipelineStage] = []
        orchestrator = GenerationOrchestrator(mock_groq_failure, fast_settings)

        final = await orchestrator.run(
            "A pricing page", GeneratorConfig(tech_stack="html"), stages.append
        )

        assert [s.stage for s in stages] == [
            StageName.PREPARING,
            StageName.STRUCTURE,
            StageName.COMPLETE,
        ]
        assert final.error == RATE_LIMIT_MESSAGE
        assert final.message == FAILED_LABEL
        assert final.result is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_key(self, client_factory, fast_settings):
        client = client_factory(success=False, error="GROQ_API_KEY environment variable is not set")
        final = await GenerationOrchestrator(client, fast_settings).run(
            "A pricing page", GeneratorConfig(tech_stack="html")
        )
        assert final.error == NOT_CONFIGURED_MESSAGE

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_output(self, client_factory, fast_settings):
        client = client_factory(text="```html\n```")
        final = await GenerationOrchestrator(client, fast_settings).run(
            "A pricing page", GeneratorConfig(tech_stack="html")
        )
        assert final.failed is True
        assert final.error == GENERIC_FAILURE_MESSAGE

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_output_reaches_classifier(self, client_factory, fast_settings):
        classifier = lambda raw: f"classified: {raw}"  # noqa: E731
        client = client_factory(text="")
        final = await GenerationOrchestrator(
            client, fast_settings, error_classifier=classifier
        ).run("A pricing page", GeneratorConfig(tech_stack="html"))
        assert final.error == f"classified: {EMPTY_RESPONSE_ERROR}"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_client_exception_becomes_error_stage(self, fast_settings):
        client = AsyncMock()
        client.generate = AsyncMock(side_effect=RuntimeError("429 Too Many Requests"))

        final = await GenerationOrchestrator(client, fast_settings).run(
            "A pricing page", GeneratorConfig(tech_stack="svelte")
        )

        assert final.stage is StageName.COMPLETE
        assert final.error == RATE_LIMIT_MESSAGE


# ---------------------------------------------------------------------------
# GenerationOrchestrator.run -- image input
# ---------------------------------------------------------------------------


class TestOrchestratorImageInput:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_image_forwarded_with_sketch_prompt(self, mock_groq_success, fast_settings):
        image = validate_image(b"\x89PNG\r\n\x1a\n", "image/png")
        stages: list[PipelineStage] = []
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)

        final = await orchestrator.run(
            "", GeneratorConfig(tech_stack="react"), stages.append, image=image
        )

        assert [s.stage for s in stages] == list(STAGE_ORDER)
        assert final.result is not None
        mock_groq_success.generate.assert_awaited_once()
        args, kwargs = mock_groq_success.generate.call_args
        assert kwargs["image"] is image
        assert args[0].startswith(IMAGE_PROMPT)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_description_becomes_instructions(self, mock_groq_success, fast_settings):
        image = validate_image(b"GIF89a", "image/gif")
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)

        await orchestrator.run("Use a dark theme", GeneratorConfig(tech_stack="vue"), image=image)

        prompt = mock_groq_success.generate.call_args[0][0]
        assert "Additional instructions:\nUse a dark theme" in prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_text_only_run_passes_no_image(self, mock_groq_success, fast_settings):
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)
        await orchestrator.run("A counter button", GeneratorConfig(tech_stack="react"))

        assert "image" not in mock_groq_success.generate.call_args[1]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_short_description_rejected_even_with_image(self, mock_groq_success, fast_settings):
        image = validate_image(b"GIF89a", "image/gif")
        stages: list[PipelineStage] = []
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)

        with pytest.raises(PromptError):
            await orchestrator.run("ab", GeneratorConfig(tech_stack="react"), stages.append, image=image)

        assert stages == []
        mock_groq_success.generate.assert_not_called()


# ---------------------------------------------------------------------------
# GenerationOrchestrator.run -- configuration errors
# ---------------------------------------------------------------------------


class TestOrchestratorConfigErrors:
    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("stack", [None, "", "angular"])
    async def test_bad_stack_raises_before_any_stage(self, mock_groq_success, fast_settings, stack):
        stages: list[PipelineStage] = []
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)

        with pytest.raises(TechStackError):
            await orchestrator.run("A pricing page", GeneratorConfig(tech_stack=stack), stages.append)

        assert stages == []
        mock_groq_success.generate.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bad_description_raises_before_any_stage(self, mock_groq_success, fast_settings):
        stages: list[PipelineStage] = []
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)

        with pytest.raises(PromptError):
            await orchestrator.run("  ", GeneratorConfig(tech_stack="react"), stages.append)

        assert stages == []


# ---------------------------------------------------------------------------
# Pacing
# ---------------------------------------------------------------------------


class TestPacing:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sleeps_before_each_paced_stage(self, mock_groq_success):
        orchestrator = GenerationOrchestrator(
            mock_groq_success, PipelineSettings(stage_interval=0.5)
        )
        with patch("uiforge.pipeline.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            await orchestrator.run("A counter", GeneratorConfig(tech_stack="react"))

        assert mock_sleep.await_count == 3
        mock_sleep.assert_awaited_with(0.5)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_sleep_when_interval_zero(self, mock_groq_success, fast_settings):
        orchestrator = GenerationOrchestrator(mock_groq_success, fast_settings)
        with patch("uiforge.pipeline.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            await orchestrator.run("A counter", GeneratorConfig(tech_stack="react"))
        mock_sleep.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_pacing_after_failure(self, mock_groq_failure):
        orchestrator = GenerationOrchestrator(
            mock_groq_failure, PipelineSettings(stage_interval=0.5)
        )
        with patch("uiforge.pipeline.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            await orchestrator.run("A counter", GeneratorConfig(tech_stack="react"))
        mock_sleep.assert_not_called()
