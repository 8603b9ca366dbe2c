"""Server-sent event framing for pipeline progress.

:func:`stream_generation` runs the orchestrator in a background task and
yields one ``data: <json>`` frame per stage, followed by the ``[DONE]``
sentinel.  The transport owns the overall deadline: when it expires the run
is cancelled and a ``complete`` frame carrying the timeout message is sent
in its place.  Closing the iterator early also cancels the run.

A web host only has to forward the frames::

    async def endpoint(request):
        frames = stream_generation(orchestrator, body.prompt, body.config, deadline=120)
        return StreamingResponse(frames, headers=SSE_HEADERS)
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any, Optional

from uiforge.errors import TIMEOUT_MESSAGE, UIForgeError, classify_service_error
from uiforge.materializers import resolve_tech_stack
from uiforge.models import GeneratorConfig, ImageInput, PipelineStage, StageName
from uiforge.pipeline import FAILED_LABEL, GenerationOrchestrator
from uiforge.prompts import validate_request

DONE_FRAME = "data: [DONE]\n\n"

SSE_HEADERS: dict[str, str] = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_event(payload: PipelineStage | dict[str, Any]) -> str:
    """Render one SSE frame for *payload*."""
    if isinstance(payload, PipelineStage):
        payload = payload.to_event()
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def _failure(error: str) -> PipelineStage:
    return PipelineStage.for_stage(StageName.COMPLETE, error=error, message=FAILED_LABEL)


async def stream_generation(
    orchestrator: GenerationOrchestrator,
    description: str,
    config: GeneratorConfig,
    deadline: Optional[float] = None,
    image: Optional[ImageInput] = None,
) -> AsyncIterator[str]:
    """Yield SSE frames for one generation run.

    Args:
        orchestrator: The orchestrator to run.
        description: What the user wants built; optional with *image*.
        config: Studio options, including the tech stack.
        deadline: Seconds until the run is abandoned; ``None`` disables it.
        image: A validated sketch to convert.

    Yields:
        One frame per stage, ending with a ``complete`` frame and then
        :data:`DONE_FRAME`.

    Raises:
        TechStackError: On the first iteration, if the tech stack is invalid.
        PromptError: On the first iteration, if the description is invalid.
    """
    resolve_tech_stack(config.tech_stack)
    validate_request(description, image)

    queue: asyncio.Queue[Optional[PipelineStage]] = asyncio.Queue()
    task = asyncio.create_task(orchestrator.run(description, config, queue.put, image=image))
    task.add_done_callback(lambda _: queue.put_nowait(None))

    loop = asyncio.get_running_loop()
    expires_at = loop.time() + deadline if deadline is not None else None

    try:
        while True:
            remaining = None if expires_at is None else max(0.0, expires_at - loop.time())
            try:
                stage = await asyncio.wait_for(queue.get(), remaining)
            except asyncio.TimeoutError:
                task.cancel()
                yield format_event(_failure(TIMEOUT_MESSAGE))
                break

            if stage is None:
                # The run ended without a terminal stage: it raised.
                exc = None if task.cancelled() else task.exception()
                if isinstance(exc, UIForgeError):
                    message = str(exc)
                else:
                    message = classify_service_error(exc)
                yield format_event(_failure(message))
                break

            yield format_event(stage)
            if stage.is_terminal:
                break

        yield DONE_FRAME
    finally:
        if not task.done():
            task.cancel()
        await asyncio.gather(task, return_exceptions=True)
