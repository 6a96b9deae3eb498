from __future__ import annotations

import pytest

from sources_list.cli.config import ConfigError, load_cli_config
from sources_list.repositories import MAVEN_CENTRAL_URL


def test_defaults_when_config_missing(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("SOURCES_LIST_REPOSITORIES", raising=False)
    config = load_cli_config(tmp_path / "missing.toml")
    assert config.output_file == "sources-list.json"
    assert config.download_directory == "localRepository"
    assert config.repositories == (MAVEN_CENTRAL_URL,)
    assert config.hash_workers == 1


def test_section_table_is_read(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("SOURCES_LIST_REPOSITORIES", raising=False)
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        "[sources_list]\n"
        'download_directory = "offline-repository"\n'
        'repositories = ["https://jitpack.io", "https://repo.maven.apache.org/maven2/"]\n'
        'local_repository_layout = "gradle"\n'
        "hash_workers = 4\n",
        encoding="utf-8",
    )
    config = load_cli_config(config_path)
    assert config.download_directory == "offline-repository"
    assert config.repositories == ("https://jitpack.io", "https://repo.maven.apache.org/maven2/")
    assert config.local_repository_layout == "gradle"
    assert config.hash_workers == 4


def test_env_repositories_override_config_file(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('repositories = ["https://from.file/"]\n', encoding="utf-8")
    monkeypatch.setenv("SOURCES_LIST_REPOSITORIES", "https://a.example/, https://b.example/")
    config = load_cli_config(config_path)
    assert config.repositories == ("https://a.example/", "https://b.example/")


def test_download_directory_is_kept_verbatim(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('download_directory = " spaced dir/ "\n', encoding="utf-8")
    assert load_cli_config(config_path).download_directory == " spaced dir/ "


@pytest.mark.parametrize(
    "content",
    [
        'local_repository_layout = "ivy"\n',
        "hash_workers = 0\n",
        "http_timeout = 0\n",
        'repositories = ["ftp://mirror.example/"]\n',
        "download_directory = 3\n",
        'sources_list = "not a table"\n',
        "not toml = = \n",
    ],
)
def test_invalid_config_is_rejected(tmp_path, monkeypatch, content: str) -> None:
    monkeypatch.delenv("SOURCES_LIST_REPOSITORIES", raising=False)
    config_path = tmp_path / "config.toml"
    config_path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_cli_config(config_path)
