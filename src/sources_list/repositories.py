"""HTTP client for locating artifacts in Maven-layout repositories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from sources_list.artifacts import Coordinate
from sources_list.errors import (
    ArtifactNotFoundError,
    RepositoryRequestError,
    RepositoryUnavailableError,
)

logger = logging.getLogger(__name__)

MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2/"

_MISSING_STATUSES = frozenset({401, 403, 404, 410})


def repository_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


@dataclass
class RepositoryClient:
    timeout: float = 10.0
    retries: int = 2

    def __post_init__(self) -> None:
        try:
            import requests
            from requests.adapters import HTTPAdapter
            from urllib3.util.retry import Retry
        except Exception as exc:  # pragma: no cover
            raise RepositoryUnavailableError(f"requests stack unavailable: {exc}") from exc

        self._requests = requests
        self._session = requests.Session()
        retry = Retry(
            total=max(0, int(self.retries)),
            connect=max(0, int(self.retries)),
            read=max(0, int(self.retries)),
            status=max(0, int(self.retries)),
            status_forcelist=(429, 500, 502, 503, 504),
            backoff_factor=0.2,
            allowed_methods=("HEAD", "GET"),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def artifact_exists(self, base_url: str, path: str) -> bool:
        url = repository_url(base_url, path)
        try:
            response = self._session.request(
                "HEAD",
                url,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except self._requests.RequestException as exc:
            raise RepositoryUnavailableError(f"{url}: {exc}") from exc

        status = response.status_code
        logger.debug("probe %s -> %s", url, status)
        if 200 <= status < 300:
            return True
        if status in _MISSING_STATUSES:
            return False
        raise RepositoryRequestError(
            f"repository request failed: {status} {url}",
            status_code=status,
            url=url,
        )

    def locate(self, coordinate: Coordinate, repositories: Sequence[str]) -> str:
        """Return the first repository, in declaration order, that serves ``coordinate``."""
        if not repositories:
            raise ArtifactNotFoundError(f"no repositories configured to locate {coordinate}")
        for base_url in repositories:
            if self.artifact_exists(base_url, coordinate.repository_path):
                return base_url
        raise ArtifactNotFoundError(
            f"{coordinate} not found in any repository: {', '.join(repositories)}"
        )

    def close(self) -> None:
        self._session.close()


__all__ = ["MAVEN_CENTRAL_URL", "RepositoryClient", "repository_url"]
