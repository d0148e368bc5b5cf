"""Custom exceptions for the GitHub client."""


class GitHubError(Exception):
    """Base exception for GitHub API errors."""


class BranchNotFoundError(GitHubError):
    """Repository or branch does not exist."""


class RateLimitError(GitHubError):
    """Request was rejected by GitHub rate limiting or permissions."""


class WorkflowDispatchError(GitHubError):
    """Workflow dispatch request was rejected."""
