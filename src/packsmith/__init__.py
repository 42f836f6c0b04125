"""packsmith — cached AI generation and archive packaging for game addons."""

from packsmith.archive.assembler import ArchiveAssembler, sanitize_filename
from packsmith.cache.manager import ResponseCache
from packsmith.core import Packsmith
from packsmith.errors.exceptions import ArchiveAssemblyError, GenerationError, PacksmithError
from packsmith.gateway import GenerationGateway
from packsmith.types import (
    AssembledArchive,
    GeneratedFile,
    GenerationResult,
    RelocationInstruction,
    UploadedInput,
)

__all__ = [
    "Packsmith",
    "GenerationGateway",
    "ResponseCache",
    "ArchiveAssembler",
    "sanitize_filename",
    "PacksmithError",
    "GenerationError",
    "ArchiveAssemblyError",
    "AssembledArchive",
    "GeneratedFile",
    "GenerationResult",
    "RelocationInstruction",
    "UploadedInput",
]
