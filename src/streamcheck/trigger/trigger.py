"""RebuildTrigger - Dispatches a project's build workflow."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from streamcheck.github.exceptions import GitHubError
from streamcheck.manifest.exceptions import MalformedCoordinateError
from streamcheck.manifest.models import split_repo_coordinate
from streamcheck.trigger.exceptions import TriggerError
from streamcheck.trigger.models import TriggerAck

if TYPE_CHECKING:
    from streamcheck.github import GitHubClient
    from streamcheck.manifest import Project

logger = logging.getLogger("streamcheck.trigger")


class RebuildTrigger:
    """Starts rebuilds by dispatching GitHub Actions workflows."""

    def __init__(self, github: GitHubClient) -> None:
        self.github = github

    def trigger(self, owner_repo: str, ref: str, workflow_id: str) -> TriggerAck:
        """Dispatch a workflow.

        Args:
            owner_repo: Repository in ``owner/name`` form.
            ref: Ref to build.
            workflow_id: Workflow file name or ID.

        Returns:
            Acknowledgment of the dispatch.

        Raises:
            TriggerError: If the repository is malformed or the dispatch fails.
        """
        try:
            owner, repo = split_repo_coordinate(owner_repo)
            dispatch = self.github.dispatch_workflow(owner, repo, workflow_id, ref)
        except (MalformedCoordinateError, GitHubError) as e:
            logger.error("Rebuild of %s failed: %s", owner_repo, e)
            raise TriggerError(f"Rebuild of {owner_repo} failed: {e}", project=owner_repo) from e

        ack = TriggerAck(
            repo=dispatch.repo,
            workflow_id=dispatch.workflow_id,
            ref=dispatch.ref,
            status_code=dispatch.status_code,
        )
        logger.info(
            "Rebuild triggered for %s (%s@%s, status %d)",
            ack.repo,
            ack.workflow_id,
            ack.ref,
            ack.status_code,
        )
        return ack

    def trigger_project(self, project: Project) -> TriggerAck:
        """Dispatch the build workflow of a project.

        Raises:
            TriggerError: If the dispatch fails.
        """
        return self.trigger(project.name, project.branch, project.build_workflow)
