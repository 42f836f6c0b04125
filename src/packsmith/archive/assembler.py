"""Assemble generated files and relocated assets into one archive."""

from __future__ import annotations

import logging
import re
import zipfile
from collections.abc import Sequence
from pathlib import Path

from packsmith.archive.codec import ArchiveWriter
from packsmith.archive.resolver import AssetResolver
from packsmith.config.defaults import DEFAULT_ADDON_NAME, DEFAULT_ARCHIVE_EXTENSION
from packsmith.errors.exceptions import ArchiveAssemblyError
from packsmith.types import (
    AssembledArchive,
    AssetWarning,
    GeneratedFile,
    RelocationInstruction,
    UploadedInput,
)

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_ -]")


def sanitize_filename(name: str, default: str = DEFAULT_ADDON_NAME) -> str:
    """Keep only ``[A-Za-z0-9_ -]``; fall back to default when nothing is left."""
    return _UNSAFE_CHARS.sub("", name).strip() or default


class ArchiveAssembler:
    """Builds the downloadable addon archive.

    Generated files are written first, then relocated assets, each in
    declaration order. A later write to the same path replaces the earlier
    one, so a relocation wins over a generated file at the same path.
    """

    def __init__(self, extension: str = DEFAULT_ARCHIVE_EXTENSION) -> None:
        self._extension = extension

    def assemble(
        self,
        name: str,
        generated_files: Sequence[GeneratedFile],
        uploaded_inputs: Sequence[UploadedInput],
        relocations: Sequence[RelocationInstruction],
    ) -> AssembledArchive:
        writer = ArchiveWriter()
        warnings: list[AssetWarning] = []

        for generated in generated_files:
            writer.add_entry(generated.path, generated.content)

        resolver = AssetResolver(uploaded_inputs)
        for relocation in relocations:
            resolution = resolver.resolve(relocation.original_path, relocation.new_path)
            warnings.extend(resolution.warnings)
            if resolution.data is None:
                continue
            logger.debug("Relocating %s -> %s", resolution.source, relocation.new_path)
            writer.add_entry(relocation.new_path, resolution.data)

        archive = self._build(name, writer, warnings)
        logger.info(
            "Assembled %s: %d entries, %d warnings",
            archive.filename,
            len(archive.entries),
            len(warnings),
        )
        return archive

    def assemble_from_raw_containers(
        self,
        name: str,
        container_a: UploadedInput | None = None,
        container_b: UploadedInput | None = None,
    ) -> AssembledArchive:
        """Bundle up to two finished packs, unmodified, at the archive root."""
        writer = ArchiveWriter()
        for container in (container_a, container_b):
            if container is not None:
                writer.add_entry(Path(container.name).name, container.data)
        return self._build(name, writer, [])

    def _build(
        self, name: str, writer: ArchiveWriter, warnings: list[AssetWarning]
    ) -> AssembledArchive:
        try:
            data = writer.serialize()
        except (zipfile.LargeZipFile, MemoryError, OSError, ValueError) as e:
            raise ArchiveAssemblyError(f"Failed to build archive: {e}", original=e) from e
        return AssembledArchive(
            filename=f"{sanitize_filename(name)}{self._extension}",
            data=data,
            entries=writer.entries,
            warnings=warnings,
        )


def write_archive(archive: AssembledArchive, output_dir: str | Path) -> Path:
    """Write the archive into output_dir and return its path."""
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / archive.filename
        path.write_bytes(archive.data)
    except OSError as e:
        raise ArchiveAssemblyError(f"Failed to write archive: {e}", original=e) from e
    return path
