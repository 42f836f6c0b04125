"""Locate the source bytes for a relocation instruction."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, Field

from packsmith.archive.codec import (
    CONTAINER_READ_ERRORS,
    ContainerEntry,
    is_container_name,
    open_container,
)
from packsmith.types import AssetWarning, UploadedInput, WarningKind

logger = logging.getLogger(__name__)


class Resolution(BaseModel):
    data: bytes | None = None
    source: str | None = None
    warnings: list[AssetWarning] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.data is not None


class AssetResolver:
    """Suffix-matches relocation sources against the uploaded inputs.

    Generation may echo ``texture.png`` for an input uploaded as
    ``assets/textures/texture.png``, so names are matched by suffix. An exact
    name wins; otherwise the first match is used and ambiguity is reported.
    Containers that were not expanded are searched last.
    """

    def __init__(self, inputs: Sequence[UploadedInput]) -> None:
        self._inputs = list(inputs)
        self._containers = [i for i in inputs if is_container_name(i.name)]
        self._opened: dict[int, list[ContainerEntry]] = {}

    def resolve(self, original_path: str, new_path: str = "") -> Resolution:
        # A blank source would suffix-match every input
        if not original_path.strip():
            return self._not_found(original_path, new_path, Resolution())

        matches = [i for i in self._inputs if i.name.endswith(original_path)]
        if matches:
            return self._pick_match(original_path, new_path, matches)

        resolution = self._search_containers(original_path, new_path)
        if resolution.found:
            return resolution
        return self._not_found(original_path, new_path, resolution)

    def _not_found(
        self, original_path: str, new_path: str, resolution: Resolution
    ) -> Resolution:
        message = (
            f"Asset for mapping '{original_path}' -> '{new_path}' not found "
            "in any uploaded files or zips."
        )
        logger.warning(message)
        resolution.warnings.append(
            AssetWarning(
                kind=WarningKind.NOT_FOUND,
                original_path=original_path,
                new_path=new_path,
                message=message,
            )
        )
        return resolution

    def _pick_match(
        self, original_path: str, new_path: str, matches: list[UploadedInput]
    ) -> Resolution:
        for item in matches:
            if item.name == original_path:
                return Resolution(data=item.data, source=item.name)

        chosen = matches[0]
        resolution = Resolution(data=chosen.data, source=chosen.name)
        if len(matches) > 1:
            candidates = [m.name for m in matches]
            message = (
                f"Ambiguous asset mapping for '{original_path}'. Multiple files matched: "
                f"{', '.join(candidates)}. Using the first one found: '{chosen.name}'."
            )
            logger.warning(message)
            resolution.warnings.append(
                AssetWarning(
                    kind=WarningKind.AMBIGUOUS,
                    original_path=original_path,
                    new_path=new_path,
                    candidates=candidates,
                    message=message,
                )
            )
        return resolution

    def _search_containers(self, original_path: str, new_path: str) -> Resolution:
        resolution = Resolution()
        for index, container in enumerate(self._containers):
            try:
                entries = self._entries(index, container)
            except CONTAINER_READ_ERRORS as e:
                message = (
                    f"Error reading zip file {container.name} while searching "
                    f"for asset {original_path}: {e}"
                )
                logger.error(message)
                resolution.warnings.append(
                    AssetWarning(
                        kind=WarningKind.CONTAINER_ERROR,
                        original_path=original_path,
                        new_path=new_path,
                        candidates=[container.name],
                        message=message,
                    )
                )
                continue
            for entry in entries:
                if entry.name.endswith(original_path):
                    resolution.data = entry.data
                    resolution.source = f"{container.name}:{entry.name}"
                    return resolution
        return resolution

    def _entries(self, index: int, container: UploadedInput) -> list[ContainerEntry]:
        if index not in self._opened:
            self._opened[index] = open_container(container.data)
        return self._opened[index]
