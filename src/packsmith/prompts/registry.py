"""Prompt registry — discover and look up tool prompts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

import yaml

from packsmith.config.loader import BUILTIN_PROMPTS_DIR, load_prompt_yaml
from packsmith.types import ToolPrompt

logger = logging.getLogger(__name__)


class PromptInfo(NamedTuple):
    name: str
    description: str
    builtin: bool


class PromptRegistry:
    """Tool prompts from the builtin directory, overridable by user directories."""

    def __init__(self, user_dirs: list[Path] | None = None) -> None:
        self._prompts: dict[str, ToolPrompt] = {}
        self._sources: dict[str, bool] = {}  # name → is_builtin
        self._scan(BUILTIN_PROMPTS_DIR, builtin=True)
        for d in user_dirs or []:
            self._scan(d, builtin=False)

    def get(self, name: str) -> ToolPrompt:
        if name not in self._prompts:
            raise KeyError(f"Prompt '{name}' not found in registry")
        return self._prompts[name]

    def has(self, name: str) -> bool:
        return name in self._prompts

    def list_prompts(self) -> list[PromptInfo]:
        return [
            PromptInfo(name=p.name, description=p.description, builtin=self._sources[p.name])
            for p in self._prompts.values()
        ]

    def register(self, prompt: ToolPrompt, builtin: bool = False) -> None:
        self._prompts[prompt.name] = prompt
        self._sources[prompt.name] = builtin

    def _scan(self, directory: Path, builtin: bool) -> None:
        if not directory.exists():
            return
        for path in sorted(directory.glob("*.yaml")):
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if not isinstance(raw, dict) or "tool" not in raw:
                    continue  # Not a prompt YAML, skip silently
                prompt = load_prompt_yaml(path)
            except Exception as e:
                logger.warning("Skipping invalid prompt file %s: %s", path, e)
                continue
            if prompt.name in self._prompts and not builtin:
                logger.info("User prompt '%s' overrides builtin", prompt.name)
            self.register(prompt, builtin=builtin)
