from __future__ import annotations

import types

import pytest
import requests

from sources_list.artifacts import parse_coordinate
from sources_list.errors import (
    ArtifactNotFoundError,
    RepositoryRequestError,
    RepositoryUnavailableError,
)
from sources_list.repositories import MAVEN_CENTRAL_URL, RepositoryClient, repository_url

COORDINATE = parse_coordinate("org.junit.jupiter:junit-jupiter:5.9.2")


def _fake_session(monkeypatch, client: RepositoryClient, statuses: dict[str, int]) -> list[str]:
    captured: list[str] = []

    def fake_request(method, url, *, timeout=None, allow_redirects=None):  # noqa: ANN001
        captured.append(f"{method} {url}")
        return types.SimpleNamespace(status_code=statuses.get(url, 404))

    monkeypatch.setattr(client._session, "request", fake_request)
    return captured


def test_repository_url_joins_without_double_slash() -> None:
    assert repository_url("https://jitpack.io/", "/a/b.jar") == "https://jitpack.io/a/b.jar"


def test_locate_returns_first_repository_that_serves_artifact(monkeypatch) -> None:
    client = RepositoryClient(timeout=0.1)
    central_url = repository_url(MAVEN_CENTRAL_URL, COORDINATE.repository_path)
    jitpack_url = repository_url("https://jitpack.io", COORDINATE.repository_path)
    captured = _fake_session(monkeypatch, client, {central_url: 200, jitpack_url: 200})

    result = client.locate(COORDINATE, [MAVEN_CENTRAL_URL, "https://jitpack.io"])

    assert result == MAVEN_CENTRAL_URL
    assert captured == [f"HEAD {central_url}"]


def test_locate_skips_repositories_without_artifact(monkeypatch) -> None:
    client = RepositoryClient(timeout=0.1)
    jitpack_url = repository_url("https://jitpack.io", COORDINATE.repository_path)
    captured = _fake_session(monkeypatch, client, {jitpack_url: 200})

    result = client.locate(COORDINATE, [MAVEN_CENTRAL_URL, "https://jitpack.io"])

    assert result == "https://jitpack.io"
    assert len(captured) == 2


def test_locate_raises_when_no_repository_has_artifact(monkeypatch) -> None:
    client = RepositoryClient(timeout=0.1)
    _fake_session(monkeypatch, client, {})

    with pytest.raises(ArtifactNotFoundError) as excinfo:
        client.locate(COORDINATE, [MAVEN_CENTRAL_URL])
    assert "junit-jupiter" in str(excinfo.value)


def test_locate_without_repositories_raises() -> None:
    client = RepositoryClient(timeout=0.1)
    with pytest.raises(ArtifactNotFoundError):
        client.locate(COORDINATE, [])


def test_server_error_is_reported_with_status(monkeypatch) -> None:
    client = RepositoryClient(timeout=0.1)
    central_url = repository_url(MAVEN_CENTRAL_URL, COORDINATE.repository_path)
    _fake_session(monkeypatch, client, {central_url: 503})

    with pytest.raises(RepositoryRequestError) as excinfo:
        client.artifact_exists(MAVEN_CENTRAL_URL, COORDINATE.repository_path)
    assert excinfo.value.status_code == 503
    assert excinfo.value.url == central_url


def test_connection_failure_is_repository_unavailable(monkeypatch) -> None:
    client = RepositoryClient(timeout=0.1)

    def fake_request(method, url, *, timeout=None, allow_redirects=None):  # noqa: ANN001
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(client._session, "request", fake_request)

    with pytest.raises(RepositoryUnavailableError):
        client.artifact_exists(MAVEN_CENTRAL_URL, COORDINATE.repository_path)
