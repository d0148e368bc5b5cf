"""Resolver - Resolves each kind of reference source to a version identifier."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from streamcheck.github.exceptions import GitHubError
from streamcheck.manifest.exceptions import MalformedCoordinateError
from streamcheck.manifest.models import HostedBranch, RegistryImage
from streamcheck.registry.exceptions import RegistryError
from streamcheck.resolver.exceptions import ResolutionError
from streamcheck.resolver.models import ResolutionStatus, ResolvedReference

if TYPE_CHECKING:
    from streamcheck.github import GitHubClient
    from streamcheck.manifest import ReferenceSource
    from streamcheck.registry import RegistryClient

logger = logging.getLogger("streamcheck.resolver")


class Resolver:
    """Resolves reference sources through injected transports.

    Registry images resolve to the value of their configured label, hosted
    branches to their tip commit SHA. A missing label is not an error: it
    resolves to an empty version with status ``LABEL_MISSING``. Every other
    failure raises ``ResolutionError`` naming the offending source.
    """

    def __init__(self, registry: RegistryClient, github: GitHubClient) -> None:
        """Initialize the Resolver.

        Args:
            registry: Transport used for registry images.
            github: Transport used for hosted branches.
        """
        self.registry = registry
        self.github = github

    def resolve(self, source: ReferenceSource, project: str = "") -> ResolvedReference:
        """Resolve one source.

        Args:
            source: The source to resolve.
            project: Owning project name, recorded on errors.

        Returns:
            The resolved reference.

        Raises:
            ResolutionError: If the source cannot be resolved.
        """
        match source:
            case RegistryImage():
                return self._resolve_image(source, project)
            case HostedBranch():
                return self._resolve_branch(source, project)
            case _:
                raise ResolutionError(
                    f"Unsupported source type {type(source).__name__}",
                    project=project,
                    source_name=getattr(source, "name", "?"),
                    kind=str(getattr(source, "kind", "?")),
                )

    def _resolve_image(self, source: RegistryImage, project: str) -> ResolvedReference:
        try:
            self.registry.ensure_image_pulled(source.image, source.tag)
            labels = self.registry.inspect_labels(source.image, source.tag)
        except RegistryError as e:
            raise ResolutionError(
                str(e), project=project, source_name=source.name, kind=source.kind
            ) from e

        if source.label not in labels:
            logger.warning("Label %s not found in image %s", source.label, source.reference)
            return ResolvedReference(
                name=source.name,
                kind=source.kind,
                version="",
                status=ResolutionStatus.LABEL_MISSING,
            )

        version = labels[source.label]
        logger.info("%s: %s[%s] = %s", source.name, source.reference, source.label, version)
        return ResolvedReference(name=source.name, kind=source.kind, version=version)

    def _resolve_branch(self, source: HostedBranch, project: str) -> ResolvedReference:
        try:
            owner, repo = source.owner_and_name()
            sha = self.github.get_branch_tip(owner, repo, source.branch)
        except (MalformedCoordinateError, GitHubError) as e:
            raise ResolutionError(
                str(e), project=project, source_name=source.name, kind=source.kind
            ) from e

        logger.info("%s: %s@%s = %s", source.name, source.repo, source.branch, sha)
        return ResolvedReference(name=source.name, kind=source.kind, version=sha)
