"""Sources list manifest construction for offline dependency pre-fetching."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence

from sources_list.artifacts import ResolvedArtifact
from sources_list.errors import HashComputationError, OutputWriteError

logger = logging.getLogger(__name__)

MANIFEST_ENTRY_TYPE = "file"
MANIFEST_KEYS = ("type", "url", "sha512", "dest", "dest-filename")
HASH_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class ManifestEntry:
    url: str
    sha512: str
    dest: str
    dest_filename: str
    type: str = MANIFEST_ENTRY_TYPE

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type,
            "url": self.url,
            "sha512": self.sha512,
            "dest": self.dest,
            "dest-filename": self.dest_filename,
        }


def compute_sha512(path: str | Path) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise HashComputationError(f"artifact file not found: {file_path}", path=str(file_path))

    digest = hashlib.sha512()
    try:
        with file_path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as exc:
        raise HashComputationError(
            f"failed to read artifact file: {file_path}: {exc}", path=str(file_path)
        ) from exc
    return digest.hexdigest()


def artifact_url(artifact: ResolvedArtifact) -> str:
    base = artifact.repository_url.rstrip("/")
    return f"{base}/{artifact.coordinate.repository_path}"


def _unique_artifacts(artifacts: Iterable[ResolvedArtifact]) -> list[ResolvedArtifact]:
    seen: set[str] = set()
    unique: list[ResolvedArtifact] = []
    for artifact in artifacts:
        url = artifact_url(artifact)
        if url in seen:
            logger.debug("dropping duplicate artifact %s", artifact.coordinate)
            continue
        seen.add(url)
        unique.append(artifact)
    return unique


def _hash_artifact(artifact: ResolvedArtifact) -> str:
    sha512 = compute_sha512(artifact.file)
    logger.debug("hashed %s sha512=%s", artifact.coordinate, sha512)
    return sha512


def build_manifest(
    artifacts: Iterable[ResolvedArtifact],
    *,
    download_directory: str,
    workers: int = 1,
) -> list[ManifestEntry]:
    """Build one manifest entry per resolved artifact, in resolver order.

    Every artifact is hashed before any entry is returned, so an unreadable
    file aborts the whole build with :class:`HashComputationError`.
    """
    if not isinstance(download_directory, str):
        raise TypeError("download_directory must be a string")

    unique = _unique_artifacts(artifacts)
    if workers > 1 and len(unique) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields results in submission order.
            digests = list(executor.map(_hash_artifact, unique))
    else:
        digests = [_hash_artifact(artifact) for artifact in unique]

    return [
        ManifestEntry(
            url=artifact_url(artifact),
            sha512=sha512,
            dest=download_directory,
            dest_filename=artifact.dest_filename,
        )
        for artifact, sha512 in zip(unique, digests)
    ]


def serialize_manifest(entries: Sequence[ManifestEntry]) -> str:
    if not entries:
        return "[]\n"
    objects = [json.dumps(entry.to_dict(), indent=2, ensure_ascii=False) for entry in entries]
    return "[\n" + ",\n".join(objects) + "\n]\n"


def _default_file_mode() -> int:
    # mkstemp creates 0600 files; match what a plain open() would produce.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_manifest(entries: Sequence[ManifestEntry], output_file: str | Path) -> Path:
    """Write the serialized manifest, replacing ``output_file`` atomically."""
    target = Path(output_file)
    content = serialize_manifest(entries)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
        )
    except OSError as exc:
        raise OutputWriteError(f"failed to write manifest: {target}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            os.chmod(tmp_path, _default_file_mode())
            handle.write(content)
        os.replace(tmp_path, target)
    except (OSError, UnicodeEncodeError) as exc:
        tmp_path.unlink(missing_ok=True)
        raise OutputWriteError(f"failed to write manifest: {target}: {exc}") from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("wrote %d manifest entries to %s", len(entries), target)
    return target


def generate_sources_list(
    artifacts: Iterable[ResolvedArtifact],
    *,
    output_file: str | Path,
    download_directory: str,
    workers: int = 1,
) -> list[ManifestEntry]:
    entries = build_manifest(artifacts, download_directory=download_directory, workers=workers)
    write_manifest(entries, output_file)
    return entries


def load_manifest(path: str | Path) -> list[dict[str, Any]]:
    manifest_path = Path(path)
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"manifest file not found: {manifest_path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ValueError(f"failed to read manifest: {manifest_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON in {manifest_path}: {exc}") from exc
    if not isinstance(payload, list) or any(not isinstance(item, dict) for item in payload):
        raise ValueError("manifest must be a JSON array of objects")
    return payload


def _entries_by_url(items: Sequence[dict[str, Any]]) -> tuple[dict[str, dict[str, Any]], int]:
    by_url: dict[str, dict[str, Any]] = {}
    without_url = 0
    for item in items:
        url = item.get("url")
        if not isinstance(url, str) or not url:
            without_url += 1
            continue
        by_url.setdefault(url, item)
    return by_url, without_url


def diff_manifests(
    expected: Sequence[dict[str, Any]],
    actual: Sequence[dict[str, Any]],
) -> dict[str, Any]:
    """Compare a freshly built manifest (``expected``) against one read from disk."""
    expected_by_url, _ = _entries_by_url(expected)
    actual_by_url, without_url = _entries_by_url(actual)

    added = [url for url in expected_by_url if url not in actual_by_url]
    removed = [url for url in actual_by_url if url not in expected_by_url]
    changed = []
    for url, item in expected_by_url.items():
        other = actual_by_url.get(url)
        if other is None:
            continue
        fields = [key for key in MANIFEST_KEYS if item.get(key) != other.get(key)]
        if fields:
            changed.append({"url": url, "fields": fields})

    common = [url for url in expected_by_url if url in actual_by_url]
    common_on_disk = [url for url in actual_by_url if url in expected_by_url]
    reordered = common != common_on_disk

    return {
        "matches": not (added or removed or changed or reordered or without_url),
        "added": added,
        "removed": removed,
        "changed": changed,
        "reordered": reordered,
        "entries_without_url": without_url,
    }
