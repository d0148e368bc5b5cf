"""GitHub - Branch lookups and workflow dispatch over the REST API."""

from streamcheck.github.client import DEFAULT_API_URL, GitHubClient
from streamcheck.github.exceptions import (
    BranchNotFoundError,
    GitHubError,
    RateLimitError,
    WorkflowDispatchError,
)
from streamcheck.github.models import WorkflowDispatch

__all__ = [
    "DEFAULT_API_URL",
    "BranchNotFoundError",
    "GitHubClient",
    "GitHubError",
    "RateLimitError",
    "WorkflowDispatch",
    "WorkflowDispatchError",
]
