"""Map OpenAI SDK exceptions onto the packsmith hierarchy."""

from __future__ import annotations

import contextlib

import openai

from packsmith.errors.exceptions import (
    GenerationError,
    PacksmithError,
    TerminalError,
    TransientError,
)

_TRANSPORT_MESSAGE = (
    "The generation service could not be reached or rejected the request{detail}. "
    "Please try again."
)
_SAFETY_MESSAGE = (
    "The request was rejected by the generation service's safety policy. "
    "Please rephrase your request and try again."
)

_POLICY_CODES = {"content_filter", "content_policy_violation"}


def classify_openai_error(exc: Exception) -> PacksmithError:
    """Convert an openai exception to our exception hierarchy."""
    if isinstance(exc, openai.RateLimitError):
        retry_after = None
        if hasattr(exc, "response") and exc.response:
            retry_after_str = exc.response.headers.get("retry-after")
            if retry_after_str:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_after_str)
        return TransientError(
            str(exc),
            error_type="rate_limit",
            http_status=429,
            retry_after=retry_after,
            original=exc,
        )
    if isinstance(exc, openai.InternalServerError):
        status = getattr(exc, "status_code", 500)
        return TransientError(
            str(exc),
            error_type="server_error",
            http_status=status,
            original=exc,
        )
    if isinstance(exc, (openai.APIConnectionError, openai.APITimeoutError)):
        return TransientError(str(exc), error_type="timeout", original=exc)
    if isinstance(exc, openai.AuthenticationError):
        return TerminalError(str(exc), error_type="auth_failure", http_status=401)
    if isinstance(exc, openai.NotFoundError):
        return TerminalError(str(exc), error_type="model_not_found", http_status=404)
    if isinstance(exc, openai.BadRequestError):
        code = getattr(exc, "code", None)
        error_type = "content_filter" if code in _POLICY_CODES else "bad_input"
        return TerminalError(str(exc), error_type=error_type, http_status=400)
    return TerminalError(str(exc), error_type="unknown")


def to_generation_error(exc: Exception) -> GenerationError:
    """Wrap a transport failure as a user-facing GenerationError."""
    classified = classify_openai_error(exc) if isinstance(exc, openai.OpenAIError) else exc
    if isinstance(classified, TerminalError) and classified.error_type == "content_filter":
        return GenerationError(_SAFETY_MESSAGE, reason="safety", original=exc)
    return GenerationError(
        _TRANSPORT_MESSAGE.format(detail=_describe(classified)),
        reason="transport",
        original=exc,
    )


def _describe(exc: Exception) -> str:
    error_type = getattr(exc, "error_type", None)
    if error_type is None:
        return ""
    status = getattr(exc, "http_status", None)
    if status is None:
        return f" ({error_type})"
    return f" ({error_type}, HTTP {status})"
