"""Exception hierarchy and service error classification.

Configuration problems (an empty or unknown tech stack) are fatal and raised
synchronously.  Failures of the external generation service are never raised
through the pipeline; they are mapped to a short, user-facing message by
:func:`classify_service_error` and attached to the terminal ``complete`` stage.
"""

from __future__ import annotations


class UIForgeError(Exception):
    """Base class for every error raised by uiforge."""


class TechStackError(UIForgeError, ValueError):
    """Raised when a tech-stack tag is missing or not one of the supported set."""

    def __init__(self, tech_stack: object) -> None:
        self.tech_stack = tech_stack
        if tech_stack is None or (isinstance(tech_stack, str) and not tech_stack.strip()):
            message = "Tech stack must be selected before generation"
        else:
            message = f"Unsupported tech stack: {tech_stack}"
        super().__init__(message)


class StageOrderError(UIForgeError):
    """Raised when a pipeline stage would be emitted out of order."""


class GenerationServiceError(UIForgeError):
    """Raised by callers that prefer exceptions over unsuccessful responses."""


class PromptError(UIForgeError, ValueError):
    """Raised when a generation description is empty, too short or too long."""


class ExportError(UIForgeError):
    """Raised when a generated file would be written outside the target directory."""


# ---------------------------------------------------------------------------
# Service error classification
# ---------------------------------------------------------------------------

TIMEOUT_MESSAGE = "Generation timed out. Please try again."
NOT_CONFIGURED_MESSAGE = "AI service not configured"
RATE_LIMIT_MESSAGE = "Rate limit reached. Please wait 1-2 minutes and try again."
GENERIC_FAILURE_MESSAGE = "Failed to generate UI"

_RATE_LIMIT_MARKERS = ("429", "quota", "rate limit", "resource_exhausted", "retrydelay")
_NOT_CONFIGURED_MARKERS = ("api_key", "api key", "not configured", "http 401")


def classify_service_error(message: str | BaseException | None) -> str:
    """Map a raw service failure to the message shown to the end user.

    Args:
        message: Error text or exception produced by the generation client.

    Returns:
        One of the fixed user-facing messages (timeout, not configured,
        rate limit, or the generic failure).
    """
    text = str(message or "").lower()

    if "timed out" in text or "timeout" in text:
        return TIMEOUT_MESSAGE
    if any(marker in text for marker in _NOT_CONFIGURED_MARKERS):
        return NOT_CONFIGURED_MESSAGE
    if any(marker in text for marker in _RATE_LIMIT_MARKERS):
        return RATE_LIMIT_MESSAGE
    return GENERIC_FAILURE_MESSAGE
