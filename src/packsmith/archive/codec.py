"""ZIP container codec and eager container expansion."""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from collections.abc import Sequence
from typing import NamedTuple

from packsmith.types import OriginKind, UploadedInput

logger = logging.getLogger(__name__)

CONTAINER_EXTENSIONS = (".zip", ".mcaddon", ".mcpack")

# Raised while reading a damaged, encrypted or unsupported container
CONTAINER_READ_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    OSError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    ValueError,
)


class ContainerEntry(NamedTuple):
    name: str
    data: bytes


def is_container_name(name: str) -> bool:
    return name.lower().endswith(CONTAINER_EXTENSIONS)


class ArchiveWriter:
    """Collects entries in memory and serializes them as one ZIP.

    Adding a path twice replaces the earlier content; entry order follows the
    first time each path was added.
    """

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}

    def add_entry(self, path: str, data: bytes | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        if path in self._entries:
            logger.debug("Overwriting archive entry %s", path)
        self._entries[path] = data

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def serialize(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path, data in self._entries.items():
                zf.writestr(path, data)
        return buffer.getvalue()


def open_container(data: bytes) -> list[ContainerEntry]:
    """Read every file entry of a ZIP container, skipping directories.

    Raises zipfile.BadZipFile for data that is not a ZIP, and any of
    CONTAINER_READ_ERRORS for entries that cannot be read.
    """
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return [
            ContainerEntry(name=info.filename, data=zf.read(info))
            for info in zf.infolist()
            if not info.is_dir()
        ]


def expand_containers(inputs: Sequence[UploadedInput]) -> list[UploadedInput]:
    """Replace every container input by its entries, named by internal path.

    A container that cannot be opened is kept as-is.
    """
    expanded: list[UploadedInput] = []
    for item in inputs:
        if not is_container_name(item.name):
            expanded.append(item)
            continue
        try:
            entries = open_container(item.data)
        except CONTAINER_READ_ERRORS as e:
            logger.error("Failed to unzip %s, adding the file itself: %s", item.name, e)
            expanded.append(item)
            continue
        logger.debug("Expanded %s into %d files", item.name, len(entries))
        expanded.extend(
            UploadedInput(data=entry.data, name=entry.name, origin=OriginKind.ADDON_FILE)
            for entry in entries
        )
    return expanded
