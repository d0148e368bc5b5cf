"""Manifest loading.

The manifest lists projects and, for each, the upstream and downstream
streams to compare::

    {
      "projects": [
        {
          "name": "owner/repo",
          "type": "container",
          "branch": "main",
          "build_workflow_filename": "build.yml",
          "upstreams": [
            {"name": "base", "type": "docker", "image": "quay.io/org/base",
             "tag": "latest", "label": "vcs-ref"}
          ],
          "downstreams": [
            {"name": "base", "type": "github", "repo": "owner/repo", "branch": "main"}
          ]
        }
      ]
    }

JSON and YAML are both accepted. Stream records with an unrecognized
``type`` are skipped with a warning.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from streamcheck.manifest.exceptions import ManifestError
from streamcheck.manifest.models import (
    HostedBranch,
    Project,
    ReferenceSource,
    RegistryImage,
    SourceKind,
)

logger = logging.getLogger("streamcheck.manifest")

MANIFEST_FILENAMES = ("streams.json", "streams.yaml", "streams.yml")

_REQUIRED_SOURCE_FIELDS = {
    SourceKind.DOCKER: ("name", "image", "tag", "label"),
    SourceKind.GITHUB: ("name", "repo", "branch"),
}
_REQUIRED_PROJECT_FIELDS = ("name", "branch", "build_workflow_filename")


def _require_strings(data: dict[str, Any], fields: tuple[str, ...], what: str) -> None:
    missing = [f for f in fields if not isinstance(data.get(f), str) or not data[f]]
    if missing:
        raise ManifestError(f"{what} is missing required fields: {', '.join(missing)}")


def source_from_dict(data: dict[str, Any]) -> ReferenceSource | None:
    """Decode one stream record.

    Args:
        data: Raw record from the manifest.

    Returns:
        The decoded source, or None if the record's ``type`` is not a known kind.

    Raises:
        ManifestError: If the record is not a mapping or a known kind lacks
            required fields.
    """
    if not isinstance(data, dict):
        raise ManifestError(f"Stream record must be a mapping, got {type(data).__name__}")

    raw_kind = data.get("type")
    try:
        kind = SourceKind(raw_kind)
    except ValueError:
        logger.warning(
            "Skipping stream %r with unrecognized type %r", data.get("name", "?"), raw_kind
        )
        return None

    _require_strings(
        data, _REQUIRED_SOURCE_FIELDS[kind], f"{kind} stream {data.get('name', '?')!r}"
    )

    match kind:
        case SourceKind.DOCKER:
            return RegistryImage(
                name=data["name"],
                image=data["image"],
                tag=data["tag"],
                label=data["label"],
            )
        case SourceKind.GITHUB:
            return HostedBranch(
                name=data["name"],
                repo=data["repo"],
                branch=data["branch"],
            )


def _sources_from_list(records: Any, side: str, project: str) -> tuple[ReferenceSource, ...]:
    if records is None:
        return ()
    if not isinstance(records, list):
        raise ManifestError(f"Project {project!r}: '{side}' must be a list")

    sources = []
    for record in records:
        source = source_from_dict(record)
        if source is not None:
            sources.append(source)
    return tuple(sources)


def project_from_dict(data: dict[str, Any]) -> Project:
    """Decode one project record.

    Args:
        data: Raw project record from the manifest.

    Returns:
        The decoded project.

    Raises:
        ManifestError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ManifestError(f"Project record must be a mapping, got {type(data).__name__}")

    _require_strings(data, _REQUIRED_PROJECT_FIELDS, f"Project {data.get('name', '?')!r}")
    name = data["name"]

    return Project(
        name=name,
        branch=data["branch"],
        build_workflow=data["build_workflow_filename"],
        upstreams=_sources_from_list(data.get("upstreams"), "upstreams", name),
        downstreams=_sources_from_list(data.get("downstreams"), "downstreams", name),
        project_type=str(data.get("type") or ""),
    )


@dataclass
class Manifest:
    """Decoded manifest."""

    projects: list[Project] = field(default_factory=list)
    path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path | None = None) -> Manifest:
        """Create a manifest from its decoded document.

        Raises:
            ManifestError: If the document does not hold a ``projects`` list.
        """
        projects = data.get("projects")
        if not isinstance(projects, list):
            raise ManifestError("Manifest must contain a 'projects' list")
        return cls(projects=[project_from_dict(p) for p in projects], path=path)

    def get_project(self, name: str) -> Project:
        """Look up a project by name.

        Raises:
            ManifestError: If no project has that name.
        """
        for project in self.projects:
            if project.name == name:
                return project
        raise ManifestError(f"Project '{name}' not found in manifest")


def load_manifest(path: Path | str) -> Manifest:
    """Load a manifest from a JSON or YAML file.

    Args:
        path: Path to the manifest. ``.json`` files are decoded as JSON,
              anything else as YAML.

    Returns:
        Parsed manifest.

    Raises:
        ManifestError: If the file doesn't exist or is invalid.
    """
    path = Path(path)

    if not path.exists():
        raise ManifestError(f"Manifest file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest must be a mapping, got {type(data).__name__}")

    manifest = Manifest.from_dict(data, path)
    logger.debug("Loaded %d projects from %s", len(manifest.projects), path)
    return manifest


def find_manifest(start_path: Path | str | None = None) -> Path:
    """Find a manifest by walking up the directory tree.

    Args:
        start_path: Starting directory. Defaults to current directory.

    Returns:
        Path to the first manifest found.

    Raises:
        ManifestError: If no manifest is found.
    """
    start = Path.cwd() if start_path is None else Path(start_path)
    current = start.resolve()

    for directory in (current, *current.parents):
        for filename in MANIFEST_FILENAMES:
            candidate = directory / filename
            if candidate.exists():
                return candidate

    raise ManifestError(
        f"No {' or '.join(MANIFEST_FILENAMES)} found in {start} or any parent directory"
    )
