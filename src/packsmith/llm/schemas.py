"""JSON schemas the model is asked to answer with."""

from __future__ import annotations

from typing import Any

_FILES: dict[str, Any] = {
    "type": "array",
    "description": "The complete set of generated files for the addon.",
    "items": {
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": (
                    "The full path of the file, including folders. "
                    "e.g. 'behavior_pack/entities/custom.json'"
                ),
            },
            "content": {"type": "string", "description": "The full content of the file."},
        },
        "required": ["path", "content"],
    },
}

_ASSET_MAPPINGS: dict[str, Any] = {
    "type": "array",
    "description": "Mappings of existing user assets to their paths in the final addon.",
    "items": {
        "type": "object",
        "properties": {
            "originalPath": {
                "type": "string",
                "description": "The original path or filename of the asset provided by the user.",
            },
            "newPath": {
                "type": "string",
                "description": "The path where this asset should be placed in the final addon.",
            },
        },
        "required": ["originalPath", "newPath"],
    },
}

_SUMMARY_REPORT: dict[str, Any] = {
    "type": "string",
    "description": (
        "A Markdown report of every action taken, every conflict detected "
        "and how it was resolved."
    ),
}

_PLAN: dict[str, Any] = {
    "type": "object",
    "description": (
        "A structured plan for a complex addon. Generate this instead of 'files' "
        "when the request is too large to implement in one step."
    ),
    "properties": {
        "summary": {"type": "string"},
        **{
            section: {"type": "array", "items": {"type": "string"}}
            for section in ("entities", "items", "blocks", "scripts", "recipes", "assets")
        },
    },
}

FILE_GENERATION_SCHEMA: dict[str, Any] = {
    "title": "file_generation",
    "type": "object",
    "properties": {
        "files": _FILES,
        "assetMappings": _ASSET_MAPPINGS,
        "summaryReport": _SUMMARY_REPORT,
    },
    "required": ["files"],
}

UNIFIED_GENERATION_SCHEMA: dict[str, Any] = {
    "title": "unified_generation",
    "type": "object",
    "properties": {
        "plan": _PLAN,
        "files": _FILES,
        "assetMappings": _ASSET_MAPPINGS,
        "summaryReport": _SUMMARY_REPORT,
    },
}
