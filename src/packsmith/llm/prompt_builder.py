"""Jinja2-based prompt rendering and content-part construction."""

from __future__ import annotations

import base64
from collections.abc import Sequence
from typing import Any

from jinja2 import ChainableUndefined
from jinja2.sandbox import SandboxedEnvironment

from packsmith.cache.keys import guess_mime_type, read_text
from packsmith.types import GeneratedFile, ToolPrompt, UploadedInput

_jinja_env = SandboxedEnvironment(
    autoescape=False,
    keep_trailing_newline=True,
    undefined=ChainableUndefined,
)


def build_prompt(tool_prompt: ToolPrompt, **context: Any) -> tuple[str, str]:
    """Render system and user prompts from a tool prompt.

    Returns (system_instruction, user_prompt).
    """
    system = _render_template(tool_prompt.system, context)
    user = _render_template(tool_prompt.user, context)
    return system, user.strip()


def smart_parts(inputs: Sequence[UploadedInput]) -> list[dict[str, Any]]:
    """Inline text files; list binary files by path only.

    Binary payloads are never sent; the model is told they exist so it can
    emit asset mappings for them.
    """
    parts: list[dict[str, Any]] = []
    binary_paths: list[str] = []
    for item in inputs:
        text = read_text(item)
        if text is None:
            binary_paths.append(item.name)
        else:
            parts.append({"text": f"File path: {item.name}\n\n---\n\n{text}"})

    if binary_paths:
        listing = "\n- ".join(binary_paths)
        parts.append({
            "text": (
                "The following binary asset files also exist. You must create "
                f"assetMappings for them to include them in the final addon:\n- {listing}"
            )
        })
    return parts


def inline_parts(inputs: Sequence[UploadedInput]) -> list[dict[str, Any]]:
    """Send every input: text inline, images as base64, other binaries by name."""
    parts: list[dict[str, Any]] = []
    for item in inputs:
        parts.append({"text": f"This is the content of the file: {item.name}"})
        text = read_text(item)
        mime = guess_mime_type(item.name)
        if text is not None:
            parts.append({"text": text})
        elif mime.startswith("image/"):
            parts.append({
                "image_b64": base64.b64encode(item.data).decode("ascii"),
                "mime_type": mime,
            })
        else:
            parts.append({"text": f"(binary file, {mime}, {len(item.data)} bytes)"})
    return parts


def file_parts(files: Sequence[GeneratedFile]) -> list[dict[str, Any]]:
    """Generated files as content parts for a follow-up call."""
    return [{"text": f"File path: {f.path}\n\n---\n\n{f.content}"} for f in files]


def _render_template(template_str: str, context: dict) -> str:
    template = _jinja_env.from_string(template_str)
    return template.render(**context)
