"""Public types."""

from __future__ import annotations

from sources_list.artifacts import Coordinate, ResolvedArtifact
from sources_list.manifest import ManifestEntry

__all__ = ["Coordinate", "ResolvedArtifact", "ManifestEntry"]
