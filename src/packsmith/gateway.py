"""Generation gateway — cached, two-pass calls to the generation collaborator."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from packsmith.cache.keys import fingerprint_inputs, generation_cache_key
from packsmith.cache.manager import ResponseCache
from packsmith.errors.classify import to_generation_error
from packsmith.errors.exceptions import GenerationError
from packsmith.llm.client import Generator
from packsmith.llm.prompt_builder import build_prompt, file_parts, smart_parts
from packsmith.llm.response_parser import parse_generation_response
from packsmith.llm.schemas import FILE_GENERATION_SCHEMA
from packsmith.types import GenerationResult, ToolPrompt, UploadedInput

logger = logging.getLogger(__name__)

_EMPTY_RESULT_MESSAGE = (
    "The AI did not generate any files in the initial step. Your request might be "
    "too vague, unsupported, or against the safety policy. Please provide more "
    "specific details and try again."
)
_VERIFICATION_EMPTY_MESSAGE = (
    "The AI failed to return any files during the verification step. This is an "
    "unexpected error. Please try again."
)

VERIFY_TEMPERATURE = 0.0


class GatewayState(StrEnum):
    IDLE = "idle"
    GENERATING = "generating"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"


class GenerationGateway:
    """Deduplicates generation requests and enforces the verification pass.

    A request is keyed by (system instruction, prompt, input fingerprint).
    On a miss the collaborator is called once to generate and, whenever
    files came back, a second time at temperature 0 to validate and correct
    them. The verified result is cached under the first-pass key.
    """

    def __init__(
        self,
        generator: Generator,
        cache: ResponseCache | None = None,
        verify_prompt: ToolPrompt | None = None,
    ) -> None:
        self._generator = generator
        self._cache = cache if cache is not None else ResponseCache()
        self._verify_prompt = verify_prompt
        self._state = GatewayState.IDLE

    @property
    def state(self) -> GatewayState:
        return self._state

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def invoke(
        self,
        system_instruction: str,
        prompt: str,
        inputs: Sequence[UploadedInput] = (),
        temperature: float = 0.1,
        verify: bool = True,
        use_cache: bool = True,
        allow_plan: bool = False,
        schema: dict[str, Any] | None = None,
        parts: list[dict[str, Any]] | None = None,
        fingerprint: str | None = None,
    ) -> GenerationResult:
        """Return a cached or freshly generated (and verified) result.

        ``parts`` overrides the content sent for ``inputs``; ``fingerprint``
        overrides the input fingerprint used in the cache key.
        """
        if fingerprint is None:
            fingerprint = fingerprint_inputs(inputs)
        key = generation_cache_key(system_instruction, prompt, fingerprint)

        if use_cache:
            cached = self._lookup(key)
            if cached is not None:
                logger.info("Cache hit! Returning cached addon files (%s)", key)
                self._state = GatewayState.DONE
                return cached
            logger.info("Cache miss. Generating new addon files (%s)", key)

        contents = parts if parts is not None else smart_parts(inputs)
        result = await self._run(
            system_instruction,
            prompt,
            contents,
            temperature,
            verify=verify,
            allow_plan=allow_plan,
            schema=schema or FILE_GENERATION_SCHEMA,
        )

        if use_cache:
            self._cache.set(key, result)
        return result

    async def invoke_text(
        self,
        system_instruction: str,
        prompt: str,
        contents: list[dict[str, Any]],
        temperature: float = 0.3,
        cache_key: str | None = None,
    ) -> str:
        """Free-text call, cached under cache_key when one is given."""
        if cache_key is not None:
            cached = self._cache.get(cache_key)
            if isinstance(cached, str):
                logger.info("Cache hit! Returning cached text (%s)", cache_key)
                return cached
            logger.info("Cache miss. Generating new text (%s)", cache_key)

        text = await self._call(system_instruction, [{"text": prompt}, *contents], None, temperature)
        if not text.strip():
            raise GenerationError(
                "The AI returned an empty response. Please try again.", reason="empty_result"
            )

        if cache_key is not None:
            self._cache.set(cache_key, text)
        return text

    async def _run(
        self,
        system_instruction: str,
        prompt: str,
        contents: list[dict[str, Any]],
        temperature: float,
        verify: bool,
        allow_plan: bool,
        schema: dict[str, Any],
    ) -> GenerationResult:
        self._state = GatewayState.GENERATING
        try:
            first = await self._generate(
                system_instruction, [{"text": prompt}, *contents], schema, temperature
            )
            if allow_plan and first.plan and not first.files:
                logger.info("Model returned a plan for review")
                final = GenerationResult(plan=first.plan)
            elif not first.files:
                raise GenerationError(_EMPTY_RESULT_MESSAGE, reason="empty_result")
            elif verify:
                self._state = GatewayState.VERIFYING
                final = await self._verify(prompt, first)
            else:
                final = first
        except GenerationError:
            self._state = GatewayState.FAILED
            raise

        self._state = GatewayState.DONE
        return final

    async def _verify(self, prompt: str, first: GenerationResult) -> GenerationResult:
        logger.info("Performing verification and correction step...")
        instruction, verify_prompt = build_prompt(self._get_verify_prompt(), prompt=prompt)
        verified = await self._generate(
            instruction,
            [{"text": verify_prompt}, *file_parts(first.files)],
            FILE_GENERATION_SCHEMA,
            VERIFY_TEMPERATURE,
        )
        if not verified.files:
            raise GenerationError(_VERIFICATION_EMPTY_MESSAGE, reason="verification_empty")
        logger.info("Verification complete (%d files)", len(verified.files))

        # The verification pass only rewrites files
        return verified.model_copy(
            update={
                "asset_mappings": first.asset_mappings,
                "summary_report": first.summary_report,
                "plan": first.plan,
            }
        )

    async def _generate(
        self,
        instruction: str,
        contents: list[dict[str, Any]],
        schema: dict[str, Any],
        temperature: float,
    ) -> GenerationResult:
        text = await self._call(instruction, contents, schema, temperature)
        return parse_generation_response(text)

    async def _call(
        self,
        instruction: str,
        contents: list[dict[str, Any]],
        schema: dict[str, Any] | None,
        temperature: float,
    ) -> str:
        try:
            return await self._generator.call(
                instruction, contents, schema=schema, temperature=temperature
            )
        except GenerationError:
            raise
        except Exception as exc:
            logger.error("Generation call failed: %s", exc)
            raise to_generation_error(exc) from exc

    def _lookup(self, key: str) -> GenerationResult | None:
        cached = self._cache.get(key)
        if cached is None:
            return None
        try:
            return GenerationResult.model_validate(cached)
        except ValidationError as e:
            logger.warning("Cached value for key %s has the wrong shape: %s", key, e)
            return None

    def _get_verify_prompt(self) -> ToolPrompt:
        if self._verify_prompt is None:
            from packsmith.config.loader import load_builtin_prompt

            self._verify_prompt = load_builtin_prompt("verify")
        return self._verify_prompt
