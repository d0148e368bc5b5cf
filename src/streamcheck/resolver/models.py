"""Data models for the Resolver."""

from dataclasses import dataclass
from enum import StrEnum

from streamcheck.manifest.models import SourceKind


class ResolutionStatus(StrEnum):
    """Outcome of a successful resolution."""

    RESOLVED = "resolved"
    LABEL_MISSING = "label_missing"


@dataclass(frozen=True)
class ResolvedReference:
    """Version identifier produced for one reference source.

    Attributes:
        name: Logical name of the source.
        kind: Kind of the source it was resolved from.
        version: Label value or commit SHA. Empty when the label is missing.
        status: Whether the version was found or degraded to empty.
    """

    name: str
    kind: SourceKind
    version: str
    status: ResolutionStatus = ResolutionStatus.RESOLVED

    @property
    def label_missing(self) -> bool:
        return self.status == ResolutionStatus.LABEL_MISSING
