"""Error handling — exception hierarchy and transport error classification."""

from packsmith.errors.exceptions import (
    ArchiveAssemblyError,
    CacheFullError,
    GenerationError,
    PacksmithError,
    TerminalError,
    TransientError,
)

__all__ = [
    "PacksmithError",
    "GenerationError",
    "ArchiveAssemblyError",
    "CacheFullError",
    "TransientError",
    "TerminalError",
]
