"""Data models for projects and reference sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from streamcheck.manifest.exceptions import MalformedCoordinateError


class SourceKind(StrEnum):
    """Discriminant of a reference source, as written in the manifest ``type`` field."""

    DOCKER = "docker"
    GITHUB = "github"


def split_repo_coordinate(value: str) -> tuple[str, str]:
    """Split an ``owner/name`` coordinate.

    Args:
        value: Repository coordinate.

    Returns:
        Tuple of (owner, name).

    Raises:
        MalformedCoordinateError: If the value does not contain exactly one
            separator or either side is empty.
    """
    parts = value.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedCoordinateError(
            f"Repository coordinate '{value}' must be in 'owner/name' form"
        )
    return parts[0], parts[1]


@dataclass(frozen=True)
class RegistryImage:
    """A container image whose version is the value of one of its labels.

    Attributes:
        name: Logical name pairing this source with its counterpart.
        image: Repository coordinate of the image (e.g. ``quay.io/org/base``).
        tag: Image tag to pull.
        label: Label key read from the image config.
    """

    name: str
    image: str
    tag: str
    label: str

    @property
    def kind(self) -> SourceKind:
        return SourceKind.DOCKER

    @property
    def reference(self) -> str:
        """Image reference in ``image:tag`` form."""
        return f"{self.image}:{self.tag}"


@dataclass(frozen=True)
class HostedBranch:
    """A hosted repository branch whose version is its tip commit.

    Attributes:
        name: Logical name pairing this source with its counterpart.
        repo: Repository coordinate in ``owner/name`` form.
        branch: Branch to read the tip commit from.
    """

    name: str
    repo: str
    branch: str

    @property
    def kind(self) -> SourceKind:
        return SourceKind.GITHUB

    def owner_and_name(self) -> tuple[str, str]:
        return split_repo_coordinate(self.repo)


ReferenceSource = RegistryImage | HostedBranch


@dataclass(frozen=True)
class Project:
    """A downstream project and the streams it tracks.

    Attributes:
        name: Repository coordinate (``owner/name``) used to dispatch rebuilds.
        branch: Ref the rebuild workflow runs against.
        build_workflow: Workflow file name or ID to dispatch.
        upstreams: Sources the project should follow, in manifest order.
        downstreams: Sources describing what the project currently ships.
        project_type: Free-form project type from the manifest.
    """

    name: str
    branch: str
    build_workflow: str
    upstreams: tuple[ReferenceSource, ...] = field(default_factory=tuple)
    downstreams: tuple[ReferenceSource, ...] = field(default_factory=tuple)
    project_type: str = ""

    def owner_and_name(self) -> tuple[str, str]:
        return split_repo_coordinate(self.name)
