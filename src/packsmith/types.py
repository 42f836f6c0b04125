"""Shared Pydantic models for packsmith."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ──


class OriginKind(StrEnum):
    ASSET = "asset"
    ADDON_FILE = "addon_file"


class WarningKind(StrEnum):
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"
    CONTAINER_ERROR = "container_error"


# ── Addon content models ──


class GeneratedFile(BaseModel):
    """One text artifact produced by generation."""

    path: str
    content: str


class UploadedInput(BaseModel):
    """A file the user provided, loose or extracted from a container."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    name: str
    origin: OriginKind = OriginKind.ASSET


class RelocationInstruction(BaseModel):
    """Place the input matching ``original_path`` at ``new_path``."""

    model_config = ConfigDict(populate_by_name=True)

    original_path: str = Field(alias="originalPath")
    new_path: str = Field(alias="newPath")


class GenerationResult(BaseModel):
    """Structured output of a generation call.

    Field aliases follow the JSON shape the model is asked to emit, so a
    result dumped ``by_alias`` round-trips through the same parser.
    """

    model_config = ConfigDict(populate_by_name=True)

    files: list[GeneratedFile] = Field(default_factory=list)
    asset_mappings: list[RelocationInstruction] = Field(
        default_factory=list, alias="assetMappings"
    )
    plan: dict[str, Any] | None = None
    summary_report: str | None = Field(default=None, alias="summaryReport")


class AssetWarning(BaseModel):
    """Non-fatal problem met while resolving a relocation."""

    kind: WarningKind
    original_path: str
    new_path: str = ""
    candidates: list[str] = Field(default_factory=list)
    message: str = ""


class AssembledArchive(BaseModel):
    filename: str
    data: bytes
    entries: list[str] = Field(default_factory=list)
    warnings: list[AssetWarning] = Field(default_factory=list)


# ── Config models ──


class ToolPrompt(BaseModel):
    """System instruction and user prompt template for one tool."""

    name: str
    description: str = ""
    system: str
    user: str
    temperature: float | None = None


# ── Runtime models ──


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(BaseModel):
    content: str
    model: str
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
    finish_reason: str | None = None
