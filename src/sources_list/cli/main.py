"""Command-line interface for sources-list."""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path
from typing import Sequence

from sources_list.cli.config import CLIConfig, ConfigError, load_cli_config
from sources_list.errors import (
    HashComputationError,
    OutputWriteError,
    RepositoryUnavailableError,
    ResolutionError,
)
from sources_list.manifest import (
    build_manifest,
    diff_manifests,
    load_manifest,
    serialize_manifest,
    write_manifest,
)
from sources_list.repositories import RepositoryClient
from sources_list.resolution import LOCAL_LAYOUTS, LocalRepository, load_resolution

EXIT_SUCCESS = 0
EXIT_VALIDATION_ERROR = 1
EXIT_NETWORK_ERROR = 2
EXIT_VERIFICATION_FAILED = 4

_LOG_HANDLER_NAME = "sources-list-cli"

logger = logging.getLogger(__name__)


def _package_version() -> str:
    try:
        return pkg_version("sources-list")
    except PackageNotFoundError:
        return "0.0.0+local"


def _add_resolution_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--resolution",
        required=True,
        help="Resolved dependency document (JSON or YAML) produced by the build's resolver",
    )
    parser.add_argument(
        "--download-directory",
        default=None,
        help="Value copied into every entry's dest field (default from config)",
    )
    parser.add_argument(
        "--repository",
        action="append",
        default=None,
        help="Repository base URL to probe for artifacts with no recorded repository "
        "(repeatable; replaces the configured list)",
    )
    parser.add_argument(
        "--local-repository",
        default=None,
        help="Local artifact cache used when an artifact has no file path",
    )
    parser.add_argument(
        "--local-repository-layout",
        choices=LOCAL_LAYOUTS,
        default=None,
        help="Layout of --local-repository (default from config: maven)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of threads used to hash artifacts (default from config: 1)",
    )
    parser.add_argument("--json", action="store_true")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sources-list")
    parser.add_argument(
        "--version",
        action="version",
        version=f"sources-list {_package_version()}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to CLI config TOML (default: ~/.sources_list/config.toml)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    version = sub.add_parser("version", help="Show CLI version")
    version.add_argument("--json", action="store_true", help="Print version details as JSON")

    generate = sub.add_parser("generate", help="Generate the sources list manifest")
    _add_resolution_arguments(generate)
    generate.add_argument(
        "--output-file",
        default=None,
        help="Path the manifest is written to (default from config: sources-list.json)",
    )

    verify = sub.add_parser(
        "verify", help="Check that an existing manifest matches the current resolution"
    )
    _add_resolution_arguments(verify)
    verify.add_argument("--manifest", required=True, help="Manifest file to check")

    return parser


def _configure_logging(verbose: bool, stderr) -> None:
    package_logger = logging.getLogger("sources_list")
    for handler in list(package_logger.handlers):
        if handler.get_name() == _LOG_HANDLER_NAME:
            package_logger.removeHandler(handler)
    handler = logging.StreamHandler(stderr)
    handler.set_name(_LOG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _sanitize_error_text(value: str) -> str:
    # Repository URLs may carry credentials as user:password@host.
    return re.sub(r"(?i)(https?://)[^/\s@]+@", r"\1[REDACTED]@", value)


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    print(f"{prefix}: {_sanitize_error_text(message)}", file=stderr)
    return code


def _run_version(*, as_json: bool, stdout) -> int:
    payload = {"cli": "sources-list", "version": _package_version()}
    if as_json:
        print(json.dumps(payload, sort_keys=True), file=stdout)
    else:
        print(f"sources-list {payload['version']}", file=stdout)
    return EXIT_SUCCESS


def _hash_workers(args, config: CLIConfig) -> int:
    workers = args.workers if args.workers is not None else config.hash_workers
    return max(1, int(workers))


def _download_directory(args, config: CLIConfig) -> str:
    if args.download_directory is not None:
        return args.download_directory
    return config.download_directory


def _build_entries(*, args, config: CLIConfig, stderr):
    """Resolve and hash; returns ``(entries, None)`` or ``(None, exit_code)``."""
    local_root = args.local_repository or config.local_repository
    layout = args.local_repository_layout or config.local_repository_layout
    download_directory = _download_directory(args, config)
    repositories = tuple(args.repository) if args.repository else config.repositories

    client = None
    try:
        client = RepositoryClient(timeout=config.http_timeout, retries=config.http_retries)
        local_repository = None
        if local_root:
            local_repository = LocalRepository(Path(local_root).expanduser(), layout)
        artifacts = load_resolution(
            args.resolution,
            repositories=repositories,
            local_repository=local_repository,
            client=client,
        )
        entries = build_manifest(
            artifacts,
            download_directory=download_directory,
            workers=_hash_workers(args, config),
        )
    except RepositoryUnavailableError as exc:
        return None, _print_error(stderr, "repository error", str(exc), code=EXIT_NETWORK_ERROR)
    except ResolutionError as exc:
        return None, _print_error(
            stderr, "resolution error", str(exc), code=EXIT_VALIDATION_ERROR
        )
    except HashComputationError as exc:
        return None, _print_error(stderr, "hash error", str(exc), code=EXIT_VALIDATION_ERROR)
    finally:
        if client is not None:
            client.close()
    return entries, None


def _run_generate(*, args, config: CLIConfig, stdout, stderr) -> int:
    entries, error_code = _build_entries(args=args, config=config, stderr=stderr)
    if entries is None:
        return error_code

    output_file = Path(args.output_file or config.output_file)
    try:
        write_manifest(entries, output_file)
    except OutputWriteError as exc:
        return _print_error(stderr, "output error", str(exc), code=EXIT_VALIDATION_ERROR)

    if args.json:
        payload = {
            "output_file": str(output_file),
            "entry_count": len(entries),
            "download_directory": _download_directory(args, config),
        }
        print(json.dumps(payload, sort_keys=True), file=stdout)
        return EXIT_SUCCESS

    print(f"output_file: {output_file}", file=stdout)
    print(f"entry_count: {len(entries)}", file=stdout)
    return EXIT_SUCCESS


def _run_verify(*, args, config: CLIConfig, stdout, stderr) -> int:
    try:
        on_disk = load_manifest(args.manifest)
    except ValueError as exc:
        return _print_error(stderr, "manifest error", str(exc), code=EXIT_VALIDATION_ERROR)

    entries, error_code = _build_entries(args=args, config=config, stderr=stderr)
    if entries is None:
        return error_code

    result = diff_manifests([entry.to_dict() for entry in entries], on_disk)
    if result["matches"]:
        # Key order and layout are part of the format.
        on_disk_text = Path(args.manifest).read_text(encoding="utf-8")
        result["matches"] = on_disk_text == serialize_manifest(entries)
        result["formatting_differs"] = not result["matches"]

    if args.json:
        print(json.dumps(result, sort_keys=True), file=stdout)
    else:
        for url in result["added"]:
            print(f"missing: {url}", file=stdout)
        for url in result["removed"]:
            print(f"stale: {url}", file=stdout)
        for item in result["changed"]:
            print(f"changed: {item['url']} ({', '.join(item['fields'])})", file=stdout)
        if result["entries_without_url"]:
            print(f"entries without url: {result['entries_without_url']}", file=stdout)
        if result["reordered"]:
            print("order differs from resolution", file=stdout)
        if result.get("formatting_differs"):
            print("formatting differs from generated output", file=stdout)
        print(f"ok: {str(result['matches']).lower()}", file=stdout)

    return EXIT_SUCCESS if result["matches"] else EXIT_VERIFICATION_FAILED


def main(argv: Sequence[str] | None = None, *, stdout=sys.stdout, stderr=sys.stderr) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, stderr)

    try:
        config = load_cli_config(args.config)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_VALIDATION_ERROR)

    if args.command == "version":
        return _run_version(as_json=args.json, stdout=stdout)

    if args.command == "generate":
        logger.debug("generate resolution=%s", args.resolution)
        return _run_generate(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "verify":
        logger.debug("verify resolution=%s manifest=%s", args.resolution, args.manifest)
        return _run_verify(args=args, config=config, stdout=stdout, stderr=stderr)

    print("unknown command", file=stderr)
    return EXIT_VALIDATION_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
