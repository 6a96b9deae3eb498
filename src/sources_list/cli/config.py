"""Configuration helpers for the sources-list CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sources_list.repositories import MAVEN_CENTRAL_URL

DEFAULT_CONFIG_PATH = Path.home() / ".sources_list" / "config.toml"
DEFAULT_OUTPUT_FILE = "sources-list.json"
DEFAULT_DOWNLOAD_DIRECTORY = "localRepository"
REPOSITORIES_ENV_VAR = "SOURCES_LIST_REPOSITORIES"


@dataclass(frozen=True)
class CLIConfig:
    output_file: str = DEFAULT_OUTPUT_FILE
    download_directory: str = DEFAULT_DOWNLOAD_DIRECTORY
    repositories: tuple[str, ...] = (MAVEN_CENTRAL_URL,)
    local_repository: str | None = None
    local_repository_layout: str = "maven"
    http_timeout: float = 10.0
    http_retries: int = 2
    hash_workers: int = 1


class ConfigError(ValueError):
    """Raised when CLI config is invalid."""


def _load_toml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except ModuleNotFoundError:
        try:
            import tomli
        except ModuleNotFoundError as exc:
            raise ConfigError("toml parser unavailable; install tomli for Python < 3.11") from exc
        try:
            return tomli.loads(raw)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


def _to_non_empty_str(value: Any, field_name: str) -> str:
    text = str(value).strip()
    if not text:
        raise ConfigError(f"{field_name} must not be empty")
    return text


def _to_positive_int(value: Any, field_name: str, *, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc
    if parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _to_repositories(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = value
    else:
        raise ConfigError("repositories must be a list of URLs")
    repositories = tuple(str(item).strip() for item in items if str(item).strip())
    for url in repositories:
        if not url.startswith(("http://", "https://")):
            raise ConfigError(f"repository must be an http(s) URL: {url}")
    return repositories


def load_cli_config(path: str | Path | None = None) -> CLIConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    parsed = _load_toml(config_path) if config_path.exists() else {}

    section = parsed.get("sources_list")
    if isinstance(section, dict):
        source = section
    elif section is None:
        source = parsed
    else:
        raise ConfigError("[sources_list] must be a table")

    output_file = _to_non_empty_str(source.get("output_file", DEFAULT_OUTPUT_FILE), "output_file")
    # Copied verbatim into every entry, so only the type is checked.
    download_directory = source.get("download_directory", DEFAULT_DOWNLOAD_DIRECTORY)
    if not isinstance(download_directory, str):
        raise ConfigError("download_directory must be a string")

    env_repositories = os.getenv(REPOSITORIES_ENV_VAR)
    if env_repositories and env_repositories.strip():
        repositories = _to_repositories(env_repositories)
    else:
        repositories = _to_repositories(source.get("repositories", [MAVEN_CENTRAL_URL]))

    local_repository_raw = source.get("local_repository")
    if local_repository_raw is None:
        local_repository = None
    else:
        local_repository = str(local_repository_raw).strip() or None

    layout = str(source.get("local_repository_layout", "maven")).strip().lower()
    if layout not in {"maven", "gradle"}:
        raise ConfigError("local_repository_layout must be one of: maven, gradle")

    try:
        http_timeout = float(source.get("http_timeout", 10.0))
    except (TypeError, ValueError) as exc:
        raise ConfigError("http_timeout must be a number") from exc
    if http_timeout <= 0:
        raise ConfigError("http_timeout must be > 0")

    return CLIConfig(
        output_file=output_file,
        download_directory=download_directory,
        repositories=repositories,
        local_repository=local_repository,
        local_repository_layout=layout,
        http_timeout=http_timeout,
        http_retries=_to_positive_int(source.get("http_retries", 2), "http_retries", minimum=0),
        hash_workers=_to_positive_int(source.get("hash_workers", 1), "hash_workers", minimum=1),
    )
