"""YAML prompt loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from packsmith.types import ToolPrompt

BUILTIN_PROMPTS_DIR = Path(__file__).parent.parent / "prompts" / "builtin"


def load_prompt_yaml(path: str | Path) -> ToolPrompt:
    """Load a tool prompt YAML file and return a validated ToolPrompt."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Prompt YAML not found: {path}")

    raw = load_yaml(path)
    if "tool" not in raw:
        raise ValueError(f"Invalid prompt YAML: missing top-level 'tool' key in {path}")

    return ToolPrompt(**raw["tool"])


def load_builtin_prompt(name: str) -> ToolPrompt:
    """Load one of the prompts shipped with the package."""
    return load_prompt_yaml(BUILTIN_PROMPTS_DIR / f"{name}.yaml")


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")

    return raw
