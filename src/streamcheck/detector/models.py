"""Data models for the Drift Detector."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class DriftDecision(StrEnum):
    """Whether a project needs to be rebuilt."""

    NEEDS_REBUILD = "needs_rebuild"
    NO_ACTION_NEEDED = "no_action_needed"


@dataclass(frozen=True)
class StreamDrift:
    """An upstream whose paired downstream does not match.

    Attributes:
        name: Logical name shared by the pair.
        upstream: Upstream version.
        downstream: Downstream version, or None if no downstream has this name.
    """

    name: str
    upstream: str
    downstream: str | None


@dataclass
class DriftReport:
    """Result of drift detection for one project.

    Attributes:
        project: Project name.
        decision: Rebuild decision.
        upstream_refs: Resolved upstream versions by logical name.
        downstream_refs: Resolved downstream versions by logical name.
        drifted: Pairs that differ, in upstream order.
    """

    project: str
    decision: DriftDecision
    upstream_refs: dict[str, str] = field(default_factory=dict)
    downstream_refs: dict[str, str] = field(default_factory=dict)
    drifted: list[StreamDrift] = field(default_factory=list)

    @property
    def needs_rebuild(self) -> bool:
        return self.decision == DriftDecision.NEEDS_REBUILD
