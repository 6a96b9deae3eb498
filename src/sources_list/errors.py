"""Error types."""

from __future__ import annotations


class SourcesListError(RuntimeError):
    """Base error."""


class ResolutionError(SourcesListError):
    """Resolved dependency input could not be used."""


class CoordinateError(ResolutionError):
    """Dependency coordinate notation is invalid."""


class ArtifactNotFoundError(ResolutionError):
    """No configured repository serves the artifact."""


class RepositoryUnavailableError(ResolutionError):
    """Repository could not be reached."""


class RepositoryRequestError(RepositoryUnavailableError):
    """Repository answered with an unexpected HTTP status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class HashComputationError(SourcesListError):
    """Artifact bytes could not be read for hashing."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class OutputWriteError(SourcesListError):
    """Manifest could not be written to its destination."""
