"""Loading of resolver output into ordered resolved artifacts."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, ValidationError

from sources_list.artifacts import Coordinate, ResolvedArtifact, parse_coordinate
from sources_list.errors import ResolutionError
from sources_list.repositories import RepositoryClient

logger = logging.getLogger(__name__)

RESOLUTION_VERSION = 1
LOCAL_LAYOUTS = ("maven", "gradle")


class ArtifactRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    coordinate: Optional[str] = None
    group: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    classifier: Optional[str] = None
    extension: Optional[str] = None
    file: Optional[str] = None
    repository: Optional[str] = None


class ResolutionDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    resolution_version: Literal[1] = RESOLUTION_VERSION
    repositories: List[str] = []
    artifacts: List[ArtifactRecord] = []


@dataclass(frozen=True)
class LocalRepository:
    """A local artifact cache in Maven or Gradle module-cache layout."""

    root: Path
    layout: str = "maven"

    def __post_init__(self) -> None:
        if self.layout not in LOCAL_LAYOUTS:
            raise ResolutionError(
                f"local repository layout must be one of: {', '.join(LOCAL_LAYOUTS)}"
            )

    def find(self, coordinate: Coordinate) -> Path:
        if self.layout == "maven":
            candidate = self.root / coordinate.repository_path
            if candidate.is_file():
                return candidate
        else:
            # files-2.1/<group>/<name>/<version>/<sha1>/<file>
            module_dir = self.root / coordinate.group / coordinate.name / coordinate.version
            matches = sorted(module_dir.glob(f"*/{coordinate.file_name}"))
            if matches:
                return matches[0]
        raise ResolutionError(f"{coordinate} not found in local repository {self.root}")


def _load_yaml_module() -> Any:
    try:
        import yaml
    except Exception as exc:  # pragma: no cover
        raise ResolutionError(
            "YAML parser not available. Install PyYAML to read YAML resolution files."
        ) from exc
    return yaml


def _read_document(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ResolutionError(f"resolution file not found: {path}")
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ResolutionError(f"failed to read resolution file: {path}: {exc}") from exc
    if path.suffix.lower() in {".yaml", ".yml"}:
        yaml = _load_yaml_module()
        try:
            payload = yaml.safe_load(raw) or {}
        except Exception as exc:
            raise ResolutionError(f"invalid YAML in {path}: {exc}") from exc
    else:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ResolutionError(f"invalid JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ResolutionError("resolution document must be a mapping")
    return payload


def parse_resolution_document(payload: dict[str, Any]) -> ResolutionDocument:
    try:
        return ResolutionDocument.model_validate(payload)
    except ValidationError as exc:
        raise ResolutionError(f"invalid resolution document: {exc}") from exc


def _record_coordinate(record: ArtifactRecord, index: int) -> Coordinate:
    if record.coordinate:
        if record.group or record.name or record.version:
            raise ResolutionError(
                f"artifacts[{index}]: use either coordinate or group/name/version, not both"
            )
        coordinate = parse_coordinate(record.coordinate)
        if record.classifier is None and record.extension is None:
            return coordinate
        return Coordinate(
            group=coordinate.group,
            name=coordinate.name,
            version=coordinate.version,
            classifier=record.classifier or coordinate.classifier,
            extension=record.extension or coordinate.extension,
        )

    missing = [
        field_name
        for field_name in ("group", "name", "version")
        if not getattr(record, field_name)
    ]
    if missing:
        raise ResolutionError(f"artifacts[{index}]: missing {', '.join(missing)}")
    return Coordinate(
        group=str(record.group),
        name=str(record.name),
        version=str(record.version),
        classifier=record.classifier,
        extension=record.extension or "jar",
    )


def resolve_artifacts(
    document: ResolutionDocument,
    *,
    base_dir: Path,
    repositories: Sequence[str] = (),
    local_repository: LocalRepository | None = None,
    client: RepositoryClient | None = None,
) -> list[ResolvedArtifact]:
    """Turn a resolution document into resolved artifacts, keeping document order.

    Repositories listed in the document are probed before ``repositories``
    when an artifact does not name the repository it was fetched from.
    """
    search_repositories: list[str] = []
    for url in [*document.repositories, *repositories]:
        if url and url not in search_repositories:
            search_repositories.append(url)

    resolved: list[ResolvedArtifact] = []
    for index, record in enumerate(document.artifacts):
        coordinate = _record_coordinate(record, index)

        if record.file:
            file_path = Path(record.file)
            if not file_path.is_absolute():
                file_path = base_dir / file_path
        elif local_repository is not None:
            file_path = local_repository.find(coordinate)
        else:
            raise ResolutionError(
                f"{coordinate}: no file given and no local repository configured"
            )

        repository = record.repository
        if not repository:
            if client is None:
                client = RepositoryClient()
            repository = client.locate(coordinate, search_repositories)
            logger.debug("located %s in %s", coordinate, repository)

        resolved.append(
            ResolvedArtifact(coordinate=coordinate, file=file_path, repository_url=repository)
        )
    return resolved


def load_resolution(
    path: str | Path,
    *,
    repositories: Sequence[str] = (),
    local_repository: LocalRepository | None = None,
    client: RepositoryClient | None = None,
) -> list[ResolvedArtifact]:
    resolution_path = Path(path)
    document = parse_resolution_document(_read_document(resolution_path))
    return resolve_artifacts(
        document,
        base_dir=resolution_path.resolve().parent,
        repositories=repositories,
        local_repository=local_repository,
        client=client,
    )
