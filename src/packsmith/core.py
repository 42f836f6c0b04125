"""Top-level entry points: the Packsmith facade over gateway and assembler."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from packsmith.archive.assembler import ArchiveAssembler
from packsmith.archive.codec import expand_containers
from packsmith.cache.disk import SessionDiskStore
from packsmith.cache.keys import summary_cache_key
from packsmith.cache.manager import ResponseCache
from packsmith.cache.memory import MemoryStore
from packsmith.config.defaults import (
    DEFAULT_CACHE_MEMORY_MB,
    DEFAULT_CACHE_SESSION_MB,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
)
from packsmith.errors.exceptions import GenerationError
from packsmith.gateway import GenerationGateway
from packsmith.llm.client import AsyncLLMClient, Generator
from packsmith.llm.prompt_builder import build_prompt, file_parts, inline_parts, smart_parts
from packsmith.llm.schemas import UNIFIED_GENERATION_SCHEMA
from packsmith.prompts.registry import PromptRegistry
from packsmith.types import (
    AssembledArchive,
    GeneratedFile,
    GenerationResult,
    ToolPrompt,
    UploadedInput,
)

logger = logging.getLogger(__name__)

_NO_SUMMARY = "No summary was generated."
_EMPTY_FUNCTION_MESSAGE = (
    "The AI did not generate a function file. Your request might be too vague or "
    "unsupported. Please provide more specific details and try again."
)
_NO_PLAN_OR_FILES_MESSAGE = (
    "The AI returned an unexpected response. It did not contain a plan or any files. "
    "Please try rephrasing your request."
)


class Packsmith:
    """Addon authoring tools with full lifecycle control."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        request_timeout: float | None = None,
        no_cache: bool = False,
        cache_memory_mb: float = DEFAULT_CACHE_MEMORY_MB,
        cache_session_mb: float = DEFAULT_CACHE_SESSION_MB,
        session_db: str | Path | None = None,
        prompt_dir: str | Path | None = None,
        generator: Generator | None = None,
    ) -> None:
        self._client: AsyncLLMClient | None = None
        if generator is None:
            self._client = AsyncLLMClient(
                model=model,
                api_key=api_key,
                base_url=base_url,
                max_tokens=max_tokens,
                max_attempts=max_retries,
                timeout=request_timeout,
            )
            generator = self._client

        user_dirs = [Path(prompt_dir)] if prompt_dir else []
        self._prompts = PromptRegistry(user_dirs=user_dirs)

        store = (
            SessionDiskStore(Path(session_db), max_size_mb=cache_session_mb)
            if session_db
            else MemoryStore(max_size_mb=cache_memory_mb)
        )
        self._cache = ResponseCache(store, enabled=not no_cache)
        self._gateway = GenerationGateway(
            generator, self._cache, verify_prompt=self._prompts.get("verify")
        )
        self._assembler = ArchiveAssembler()

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def gateway(self) -> GenerationGateway:
        return self._gateway

    @property
    def prompts(self) -> PromptRegistry:
        return self._prompts

    async def generate_addon(
        self, request: str, inputs: Sequence[UploadedInput] = ()
    ) -> GenerationResult:
        """Create an addon, or a plan for the user to review first."""
        tool = self._prompts.get("generate")
        system, prompt = build_prompt(tool, request=request, has_assets=bool(inputs))
        try:
            return await self._gateway.invoke(
                system,
                prompt,
                inputs,
                temperature=_temperature(tool, 0.1),
                allow_plan=True,
                schema=UNIFIED_GENERATION_SCHEMA,
            )
        except GenerationError as e:
            if e.reason == "empty_result":
                raise GenerationError(_NO_PLAN_OR_FILES_MESSAGE, reason="empty_result") from e
            raise

    async def generate_from_plan(
        self,
        plan: dict[str, Any],
        original_request: str,
        inputs: Sequence[UploadedInput] = (),
    ) -> GenerationResult:
        tool = self._prompts.get("generate_from_plan")
        system, prompt = build_prompt(
            tool, request=original_request, plan=json.dumps(plan, indent=2)
        )
        return await self._gateway.invoke(
            system,
            prompt,
            inputs,
            temperature=_temperature(tool, 0.1),
            parts=inline_parts(inputs),
        )

    async def combine_addons(
        self, addon_name: str, inputs: Sequence[UploadedInput]
    ) -> GenerationResult:
        files = expand_containers(inputs)
        tool = self._prompts.get("combine")
        system, prompt = build_prompt(tool, addon_name=addon_name, file_count=len(files))
        result = await self._gateway.invoke(
            system, prompt, files, temperature=_temperature(tool, 0.1)
        )
        if not result.summary_report:
            result = result.model_copy(update={"summary_report": _NO_SUMMARY})
        return result

    async def fix_addon(self, problem: str, inputs: Sequence[UploadedInput]) -> GenerationResult:
        files = expand_containers(inputs)
        tool = self._prompts.get("fix")
        system, prompt = build_prompt(tool, problem=problem.strip())
        return await self._gateway.invoke(
            system, prompt, files, temperature=_temperature(tool, 0.1)
        )

    async def summarize_addon(self, inputs: Sequence[UploadedInput]) -> str:
        files = expand_containers(inputs)
        tool = self._prompts.get("summarize")
        system, prompt = build_prompt(tool)
        return await self._gateway.invoke_text(
            system,
            prompt,
            smart_parts(files),
            temperature=_temperature(tool, 0.3),
            cache_key=summary_cache_key(system, files),
        )

    async def refactor_addon(
        self, instruction: str, files: Sequence[GeneratedFile]
    ) -> GenerationResult:
        """Apply an instruction to existing files. Single pass; mappings dropped."""
        tool = self._prompts.get("refactor")
        system, prompt = build_prompt(tool, instruction=instruction)
        fingerprint = ";".join(f"path:{f.path},content:{f.content}" for f in files)
        result = await self._gateway.invoke(
            system,
            prompt,
            temperature=_temperature(tool, 0.2),
            verify=False,
            parts=file_parts(files),
            fingerprint=fingerprint,
        )
        return GenerationResult(files=result.files)

    async def write_function(self, request: str, function_name: str) -> list[GeneratedFile]:
        """Generate one .mcfunction file. Not verified, not cached."""
        tool = self._prompts.get("function")
        system, prompt = build_prompt(tool, request=request, function_name=function_name)
        try:
            result = await self._gateway.invoke(
                system,
                prompt,
                temperature=_temperature(tool, 0.1),
                verify=False,
                use_cache=False,
            )
        except GenerationError as e:
            if e.reason == "empty_result":
                raise GenerationError(_EMPTY_FUNCTION_MESSAGE, reason="empty_result") from e
            raise
        return result.files

    def package(
        self,
        name: str,
        result: GenerationResult,
        inputs: Sequence[UploadedInput] = (),
    ) -> AssembledArchive:
        return self._assembler.assemble(name, result.files, inputs, result.asset_mappings)

    def package_containers(
        self,
        name: str,
        resource_pack: UploadedInput | None = None,
        behavior_pack: UploadedInput | None = None,
    ) -> AssembledArchive:
        return self._assembler.assemble_from_raw_containers(name, resource_pack, behavior_pack)

    async def close(self, discard_session: bool = False) -> None:
        if self._client:
            await self._client.close()
        self._cache.close(discard=discard_session)


def _temperature(tool: ToolPrompt, default: float) -> float:
    return tool.temperature if tool.temperature is not None else default
