"""Drift detection for a single project.

Both sides are resolved completely before anything is compared, so a
resolution failure on either side means no decision is reached.

Only upstream names drive the comparison:
- upstream name with a matching downstream version: in sync
- upstream name with a different downstream version: drifted
- upstream name with no downstream at all: drifted
- downstream name with no upstream: ignored
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from streamcheck.detector.models import DriftDecision, DriftReport, StreamDrift

if TYPE_CHECKING:
    from streamcheck.manifest import Project, ReferenceSource
    from streamcheck.resolver import ResolvedReference, Resolver

logger = logging.getLogger("streamcheck.detector")


class DriftDetector:
    """Decides whether a project's downstreams have fallen behind its upstreams."""

    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver

    def resolve_side(
        self, project: Project, sources: Iterable[ReferenceSource]
    ) -> dict[str, ResolvedReference]:
        """Resolve every source of one side, keyed by logical name.

        Duplicate names are not rejected: the later source wins.

        Raises:
            ResolutionError: If any source fails to resolve.
        """
        resolved: dict[str, ResolvedReference] = {}
        for source in sources:
            if source.name in resolved:
                logger.debug(
                    "Project %s: stream %s listed twice, keeping the later one",
                    project.name,
                    source.name,
                )
            resolved[source.name] = self.resolver.resolve(source, project=project.name)
        return resolved

    @staticmethod
    def compare(upstream: dict[str, str], downstream: dict[str, str]) -> list[StreamDrift]:
        """Find upstream versions not matched by their downstream counterpart.

        Args:
            upstream: Upstream versions by logical name.
            downstream: Downstream versions by logical name.

        Returns:
            Drifted pairs in upstream order.
        """
        drifted = []
        for name, version in upstream.items():
            current = downstream.get(name)
            if current is None or current != version:
                drifted.append(StreamDrift(name=name, upstream=version, downstream=current))
        return drifted

    def detect(self, project: Project) -> DriftReport:
        """Resolve all streams of a project and decide whether it needs a rebuild.

        Args:
            project: The project to check.

        Returns:
            DriftReport with the decision and the versions it was based on.

        Raises:
            ResolutionError: If any upstream or downstream fails to resolve.
        """
        logger.info("Checking project %s", project.name)
        upstream = self.resolve_side(project, project.upstreams)
        downstream = self.resolve_side(project, project.downstreams)

        upstream_refs = {name: ref.version for name, ref in upstream.items()}
        downstream_refs = {name: ref.version for name, ref in downstream.items()}
        drifted = self.compare(upstream_refs, downstream_refs)

        for drift in drifted:
            logger.info(
                "Project %s: %s drifted (upstream=%s, downstream=%s)",
                project.name,
                drift.name,
                drift.upstream or "<empty>",
                "<missing>" if drift.downstream is None else drift.downstream or "<empty>",
            )

        decision = DriftDecision.NEEDS_REBUILD if drifted else DriftDecision.NO_ACTION_NEEDED
        logger.info("Project %s: %s", project.name, decision)

        return DriftReport(
            project=project.name,
            decision=decision,
            upstream_refs=upstream_refs,
            downstream_refs=downstream_refs,
            drifted=drifted,
        )
