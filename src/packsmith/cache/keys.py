"""Cache key derivation — content-addressed, order-sensitive."""

from __future__ import annotations

import hashlib
import mimetypes
from collections.abc import Iterable, Sequence

from packsmith.types import UploadedInput

TEXT_EXTENSIONS = (".json", ".js", ".mcfunction", ".lang", ".md", ".txt")


def derive_key(parts: Iterable[str | bytes]) -> str:
    """Return the SHA256 hex digest of all parts concatenated in order.

    Strings are UTF-8 encoded. No separator is inserted, so callers must keep
    a stable part ordering: ``["ab", "c"]`` and ``["a", "bc"]`` collide.
    """
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8") if isinstance(part, str) else bytes(part))
    return digest.hexdigest()


def fingerprint_inputs(inputs: Sequence[UploadedInput]) -> str:
    """Summarize inputs for cache key use.

    Text files contribute their path and content; anything else contributes
    its name and guessed MIME type only.
    """
    markers: list[str] = []
    for item in inputs:
        text = read_text(item)
        if text is not None:
            markers.append(f"File path: {item.name}\n\n---\n\n{text}")
        else:
            markers.append(f"{item.name}:{guess_mime_type(item.name)}")
    return "|".join(markers)


def generation_cache_key(system_instruction: str, prompt: str, fingerprint: str) -> str:
    return derive_key([system_instruction, prompt, fingerprint])


def summary_cache_key(system_instruction: str, inputs: Sequence[UploadedInput]) -> str:
    """Key a summary request by the raw bytes of every input."""
    return derive_key([system_instruction, "summarize", *(item.data for item in inputs)])


def is_text_name(name: str) -> bool:
    return name.lower().endswith(TEXT_EXTENSIONS)


def read_text(item: UploadedInput) -> str | None:
    """Decode a text-bearing input, or None for binary content."""
    if not is_text_name(item.name):
        return None
    try:
        return item.data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def guess_mime_type(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or "application/octet-stream"
