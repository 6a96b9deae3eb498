"""Dependency coordinates and resolved artifacts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from sources_list.errors import CoordinateError

DEFAULT_EXTENSION = "jar"

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_.+\-]+$")


def _check_segment(value: str, field_name: str) -> str:
    if not value or not _SEGMENT_RE.match(value) or value in {".", ".."}:
        raise CoordinateError(f"invalid {field_name}: {value!r}")
    return value


@dataclass(frozen=True)
class Coordinate:
    group: str
    name: str
    version: str
    classifier: str | None = None
    extension: str = DEFAULT_EXTENSION

    def __post_init__(self) -> None:
        _check_segment(self.group, "group")
        _check_segment(self.name, "name")
        _check_segment(self.version, "version")
        if self.classifier is not None:
            _check_segment(self.classifier, "classifier")
        _check_segment(self.extension, "extension")

    @property
    def file_name(self) -> str:
        stem = f"{self.name}-{self.version}"
        if self.classifier:
            stem = f"{stem}-{self.classifier}"
        return f"{stem}.{self.extension}"

    @property
    def module_path(self) -> str:
        """Directory of this module version in a Maven repository layout."""
        return "/".join([self.group.replace(".", "/"), self.name, self.version])

    @property
    def repository_path(self) -> str:
        return f"{self.module_path}/{self.file_name}"

    def __str__(self) -> str:
        notation = f"{self.group}:{self.name}:{self.version}"
        if self.classifier:
            notation = f"{notation}:{self.classifier}"
        if self.extension != DEFAULT_EXTENSION:
            notation = f"{notation}@{self.extension}"
        return notation


def parse_coordinate(notation: str) -> Coordinate:
    """Parse ``group:name:version[:classifier][@extension]``."""
    if not isinstance(notation, str) or not notation.strip():
        raise CoordinateError("coordinate must be a non-empty string")

    text = notation.strip()
    extension = DEFAULT_EXTENSION
    if "@" in text:
        text, extension = text.rsplit("@", 1)

    parts = text.split(":")
    if len(parts) not in (3, 4):
        raise CoordinateError(
            f"coordinate must look like group:name:version[:classifier]: {notation!r}"
        )
    group, name, version = parts[:3]
    classifier = parts[3] if len(parts) == 4 else None
    return Coordinate(
        group=group,
        name=name,
        version=version,
        classifier=classifier,
        extension=extension,
    )


@dataclass(frozen=True)
class ResolvedArtifact:
    """One artifact of a resolved dependency set.

    ``repository_url`` is the base URL of the repository the resolver actually
    fetched the artifact from.
    """

    coordinate: Coordinate
    file: Path
    repository_url: str

    @property
    def dest_filename(self) -> str:
        return self.coordinate.file_name
