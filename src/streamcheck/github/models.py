"""Data models for the GitHub client."""

from dataclasses import dataclass


@dataclass
class WorkflowDispatch:
    """Accepted workflow dispatch request."""

    repo: str  # owner/name
    workflow_id: str
    ref: str
    status_code: int
