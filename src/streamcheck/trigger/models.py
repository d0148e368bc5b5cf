"""Data models for the Rebuild Trigger."""

from dataclasses import dataclass


@dataclass
class TriggerAck:
    """Acknowledgment of a dispatched rebuild.

    Attributes:
        repo: Repository in ``owner/name`` form.
        workflow_id: Workflow that was dispatched.
        ref: Ref the workflow runs on.
        status_code: HTTP status returned by the dispatch.
    """

    repo: str
    workflow_id: str
    ref: str
    status_code: int
