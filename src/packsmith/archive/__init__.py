"""Packaging — asset resolution and archive assembly."""

from packsmith.archive.assembler import ArchiveAssembler, sanitize_filename, write_archive
from packsmith.archive.codec import expand_containers, is_container_name, open_container
from packsmith.archive.resolver import AssetResolver, Resolution

__all__ = [
    "ArchiveAssembler",
    "AssetResolver",
    "Resolution",
    "expand_containers",
    "is_container_name",
    "open_container",
    "sanitize_filename",
    "write_archive",
]
