"""GitHubClient - Reads branch tips and dispatches build workflows."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from streamcheck.github.exceptions import (
    BranchNotFoundError,
    GitHubError,
    RateLimitError,
    WorkflowDispatchError,
)
from streamcheck.github.models import WorkflowDispatch
from streamcheck.logging import sanitize_for_log, truncate_output

logger = logging.getLogger("streamcheck.github")

DEFAULT_API_URL = "https://api.github.com"


def _path(*segments: str) -> str:
    """Join URL path segments, percent-escaping reserved characters in each."""
    return "/" + "/".join(quote(segment, safe="") for segment in segments)


class GitHubClient:
    """Thin client over the GitHub REST API.

    One instance is shared by every resolution and trigger in a run, so
    authentication and connection pooling are set up once.
    """

    def __init__(self, token: str = "", base_url: str = DEFAULT_API_URL) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub token. Anonymous requests are made when empty, which
                   is enough for public branches but not for dispatching.
            base_url: GitHub API base URL (for testing/enterprise)
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for GitHub API."""
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=headers,
                follow_redirects=True,
                timeout=30.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubError(f"{method} {url} failed: {sanitize_for_log(str(e))}") from e

    @staticmethod
    def _describe(response: httpx.Response) -> str:
        return f"{response.status_code} - {sanitize_for_log(truncate_output(response.text, 500))}"

    def get_branch_tip(self, owner: str, repo: str, branch: str) -> str:
        """Get the commit SHA at the tip of a branch.

        Args:
            owner: Repository owner.
            repo: Repository name.
            branch: Branch name.

        Returns:
            Full commit SHA.

        Raises:
            BranchNotFoundError: If the repository or branch does not exist.
            RateLimitError: If GitHub refuses the request (403/429).
            GitHubError: On any other failure.
        """
        url = _path("repos", owner, repo, "branches", branch)
        response = self._request("GET", url)

        if response.status_code == 404:
            raise BranchNotFoundError(f"Branch '{branch}' not found in {owner}/{repo}")
        if response.status_code in (403, 429):
            raise RateLimitError(
                f"GitHub refused branch lookup for {owner}/{repo}@{branch}: "
                f"{self._describe(response)}"
            )
        if response.status_code != 200:
            raise GitHubError(
                f"Failed to get branch {owner}/{repo}@{branch}: {self._describe(response)}"
            )

        try:
            sha = response.json()["commit"]["sha"]
        except (ValueError, KeyError, TypeError) as e:
            raise GitHubError(f"Unexpected branch payload for {owner}/{repo}@{branch}") from e

        logger.debug("%s/%s@%s is at %s", owner, repo, branch, sha)
        return str(sha)

    def dispatch_workflow(
        self, owner: str, repo: str, workflow_id: str, ref: str
    ) -> WorkflowDispatch:
        """Trigger a ``workflow_dispatch`` event.

        Args:
            owner: Repository owner.
            repo: Repository name.
            workflow_id: Workflow file name (e.g. ``build.yml``) or numeric ID.
            ref: Git ref the workflow runs on.

        Returns:
            The accepted dispatch.

        Raises:
            WorkflowDispatchError: If GitHub does not accept the dispatch.
            GitHubError: On transport failure.
        """
        url = _path("repos", owner, repo, "actions", "workflows", workflow_id, "dispatches")
        logger.info("Dispatching %s on %s/%s@%s", workflow_id, owner, repo, ref)
        response = self._request("POST", url, json={"ref": ref})

        if response.status_code != 204:
            logger.error("Failed to dispatch %s: %s", workflow_id, self._describe(response))
            raise WorkflowDispatchError(
                f"Failed to dispatch {workflow_id} on {owner}/{repo}@{ref}: "
                f"{self._describe(response)}"
            )

        return WorkflowDispatch(
            repo=f"{owner}/{repo}",
            workflow_id=workflow_id,
            ref=ref,
            status_code=response.status_code,
        )
