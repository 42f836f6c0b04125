"""Async LLM client wrapping OpenAI's API with retry."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import openai
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from packsmith.errors.classify import classify_openai_error
from packsmith.errors.exceptions import TerminalError, TransientError
from packsmith.types import LLMResponse, TokenUsage

logger = logging.getLogger(__name__)

_MAX_WAIT = 60.0
_backoff = wait_exponential(multiplier=1, min=1, max=_MAX_WAIT)


def _retry_wait(retry_state: RetryCallState) -> float:
    """Wait for the server's retry-after hint when it sent one, else back off."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, TransientError) and exc.retry_after is not None:
        return min(exc.retry_after, _MAX_WAIT)
    return _backoff(retry_state)


class Generator(Protocol):
    """The external generation collaborator, reduced to one call."""

    async def call(
        self,
        instruction: str,
        contents: list[dict[str, Any]],
        schema: dict[str, Any] | None = None,
        temperature: float = 0.0,
    ) -> str: ...


class AsyncLLMClient:
    """Sends requests to an OpenAI-compatible chat model."""

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 32768,
        max_attempts: int = 3,
        timeout: float | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self._model = model
        self._max_tokens = max_tokens
        self._max_attempts = max_attempts

    @property
    def model(self) -> str:
        return self._model

    async def call(
        self,
        instruction: str,
        contents: list[dict[str, Any]],
        schema: dict[str, Any] | None = None,
        temperature: float = 0.0,
    ) -> str:
        response = await self.send_request(instruction, contents, schema, temperature)
        return response.content

    async def send_request(
        self,
        instruction: str,
        contents: list[dict[str, Any]],
        schema: dict[str, Any] | None = None,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Send a single request, retrying transient failures with backoff.

        SDK errors are classified first: TransientError is retried,
        TerminalError fails immediately. Both chain the SDK exception.
        """
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": self._build_messages(instruction, contents),
            "max_completion_tokens": self._max_tokens,
            "temperature": temperature,
        }
        if schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": schema.get("title", "result"), "schema": schema},
            }

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TransientError),
            wait=_retry_wait,
            stop=stop_after_attempt(self._max_attempts),
            reraise=True,
        ):
            with attempt:
                try:
                    response = await self._client.chat.completions.create(**kwargs)
                except openai.OpenAIError as e:
                    classified = classify_openai_error(e)
                    if isinstance(classified, TransientError):
                        logger.warning(
                            "Attempt %d to '%s' failed (%s): %s",
                            attempt.retry_state.attempt_number,
                            self._model,
                            classified.error_type,
                            e,
                        )
                    raise classified from e

        result = self._parse_response(response)
        logger.debug(
            "Model '%s' returned %d chars, %d tokens",
            result.model,
            len(result.content),
            result.token_usage.total_tokens,
        )
        return result

    async def close(self) -> None:
        await self._client.close()

    @staticmethod
    def _build_messages(instruction: str, contents: list[dict[str, Any]]) -> list[dict]:
        user_content: list[dict[str, Any]] = []
        for part in contents:
            if "text" in part:
                user_content.append({"type": "text", "text": part["text"]})
            elif "image_b64" in part:
                mime = part.get("mime_type", "image/png")
                user_content.append({
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime};base64,{part['image_b64']}"},
                })

        return [
            {"role": "system", "content": instruction},
            {"role": "user", "content": user_content},
        ]

    @staticmethod
    def _parse_response(response: openai.types.chat.ChatCompletion) -> LLMResponse:
        choice = response.choices[0]
        usage = response.usage

        if choice.finish_reason == "content_filter" or getattr(choice.message, "refusal", None):
            raise TerminalError(
                choice.message.refusal or "Response blocked by content filter",
                error_type="content_filter",
            )

        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            token_usage=TokenUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            finish_reason=choice.finish_reason,
        )
