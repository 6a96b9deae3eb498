"""sources-list public surface."""

from sources_list.artifacts import Coordinate, ResolvedArtifact, parse_coordinate
from sources_list.errors import (
    ArtifactNotFoundError,
    CoordinateError,
    HashComputationError,
    OutputWriteError,
    RepositoryRequestError,
    RepositoryUnavailableError,
    ResolutionError,
    SourcesListError,
)
from sources_list.manifest import (
    ManifestEntry,
    artifact_url,
    build_manifest,
    compute_sha512,
    diff_manifests,
    generate_sources_list,
    load_manifest,
    serialize_manifest,
    write_manifest,
)
from sources_list.repositories import MAVEN_CENTRAL_URL, RepositoryClient
from sources_list.resolution import LocalRepository, load_resolution, resolve_artifacts

__all__ = [
    "SourcesListError",
    "ResolutionError",
    "CoordinateError",
    "ArtifactNotFoundError",
    "RepositoryUnavailableError",
    "RepositoryRequestError",
    "HashComputationError",
    "OutputWriteError",
    "Coordinate",
    "ResolvedArtifact",
    "parse_coordinate",
    "ManifestEntry",
    "artifact_url",
    "build_manifest",
    "compute_sha512",
    "serialize_manifest",
    "write_manifest",
    "generate_sources_list",
    "load_manifest",
    "diff_manifests",
    "MAVEN_CENTRAL_URL",
    "RepositoryClient",
    "LocalRepository",
    "load_resolution",
    "resolve_artifacts",
]
