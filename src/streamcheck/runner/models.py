"""Data models for the check runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from streamcheck.detector.models import DriftDecision


@dataclass
class ProjectResult:
    """Outcome of checking one project.

    Attributes:
        project: Project name.
        decision: Rebuild decision, or None if it could not be reached.
        triggered: Whether a rebuild was dispatched.
        drifted: Logical names of the drifted streams.
        error: Error message when the project failed and the run kept going.
    """

    project: str
    decision: DriftDecision | None
    triggered: bool = False
    drifted: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "project": self.project,
            "decision": str(self.decision) if self.decision is not None else None,
            "triggered": self.triggered,
            "drifted": list(self.drifted),
            "error": self.error,
        }


@dataclass
class RunReport:
    """Results of one run, in manifest order."""

    results: list[ProjectResult] = field(default_factory=list)

    @property
    def failed(self) -> list[ProjectResult]:
        return [r for r in self.results if r.failed]

    @property
    def rebuilds(self) -> list[ProjectResult]:
        return [r for r in self.results if r.decision == DriftDecision.NEEDS_REBUILD]

    def to_dict(self) -> dict[str, Any]:
        return {
            "projects": [r.to_dict() for r in self.results],
            "rebuilds": len(self.rebuilds),
            "failed": len(self.failed),
        }
