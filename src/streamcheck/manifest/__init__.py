"""Manifest - Projects and the reference sources they track."""

from streamcheck.manifest.exceptions import MalformedCoordinateError, ManifestError
from streamcheck.manifest.loader import (
    MANIFEST_FILENAMES,
    Manifest,
    find_manifest,
    load_manifest,
    project_from_dict,
    source_from_dict,
)
from streamcheck.manifest.models import (
    HostedBranch,
    Project,
    ReferenceSource,
    RegistryImage,
    SourceKind,
    split_repo_coordinate,
)

__all__ = [
    "MANIFEST_FILENAMES",
    "HostedBranch",
    "MalformedCoordinateError",
    "Manifest",
    "ManifestError",
    "Project",
    "ReferenceSource",
    "RegistryImage",
    "SourceKind",
    "find_manifest",
    "load_manifest",
    "project_from_dict",
    "source_from_dict",
    "split_repo_coordinate",
]
