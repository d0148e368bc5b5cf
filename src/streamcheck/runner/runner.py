"""CheckRunner - Drives detection and triggering across projects."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from tqdm import tqdm

from streamcheck.resolver.exceptions import ResolutionError
from streamcheck.runner.models import ProjectResult, RunReport
from streamcheck.trigger.exceptions import TriggerError

if TYPE_CHECKING:
    from streamcheck.detector import DriftDetector
    from streamcheck.manifest import Project
    from streamcheck.trigger import RebuildTrigger

logger = logging.getLogger("streamcheck.runner")


class CheckRunner:
    """Checks projects one by one (or on a thread pool) and rebuilds drifted ones.

    In fail-fast mode (the default) the first resolution or trigger error
    ends the run: remaining projects are not checked and the error is
    re-raised. Otherwise the error is recorded on the project's result and
    the run continues with the next project.
    """

    def __init__(
        self,
        detector: DriftDetector,
        trigger: RebuildTrigger,
        dry_run: bool = False,
        fail_fast: bool = True,
        workers: int = 1,
        show_progress: bool = False,
    ) -> None:
        """Initialize the runner.

        Args:
            detector: Drift detector used for each project.
            trigger: Rebuild trigger for drifted projects.
            dry_run: Report decisions without dispatching rebuilds.
            fail_fast: Abort the run on the first failed project.
            workers: Number of projects checked concurrently (1 = sequential).
            show_progress: Show a progress bar while checking.
        """
        self.detector = detector
        self.trigger = trigger
        self.dry_run = dry_run
        self.fail_fast = fail_fast
        self.workers = max(1, workers)
        self.show_progress = show_progress
        self._aborted = threading.Event()

    def check_project(self, project: Project) -> ProjectResult:
        """Detect drift for one project and trigger its rebuild if needed.

        Args:
            project: The project to check.

        Returns:
            Result for the project.

        Raises:
            ResolutionError: If a stream fails to resolve.
            TriggerError: If the rebuild cannot be dispatched in fail-fast mode.
        """
        report = self.detector.detect(project)
        drifted = [d.name for d in report.drifted]

        if not report.needs_rebuild:
            logger.info("No update needed for %s", project.name)
            return ProjectResult(project=project.name, decision=report.decision, drifted=drifted)

        if self.dry_run or self._aborted.is_set():
            logger.info("Rebuild needed for %s, not triggering", project.name)
            return ProjectResult(project=project.name, decision=report.decision, drifted=drifted)

        try:
            self.trigger.trigger_project(project)
        except TriggerError as e:
            if self.fail_fast:
                raise
            return ProjectResult(
                project=project.name,
                decision=report.decision,
                drifted=drifted,
                error=str(e),
            )

        return ProjectResult(
            project=project.name,
            decision=report.decision,
            triggered=True,
            drifted=drifted,
        )

    def _run_one(self, project: Project) -> ProjectResult | None:
        if self._aborted.is_set():
            return None
        try:
            return self.check_project(project)
        except ResolutionError as e:
            if self.fail_fast:
                self._aborted.set()
                raise
            logger.error("Skipping %s: %s", project.name, e)
            return ProjectResult(project=project.name, decision=None, error=str(e))
        except TriggerError:
            self._aborted.set()
            raise

    def run(self, projects: list[Project]) -> RunReport:
        """Check every project.

        Args:
            projects: Projects to check, in manifest order.

        Returns:
            RunReport with one result per project, in the order given.

        Raises:
            ResolutionError: In fail-fast mode, for the first stream that fails.
            TriggerError: In fail-fast mode, for the first failed dispatch.
        """
        self._aborted.clear()
        logger.info(
            "Checking %d projects (workers=%d, dry_run=%s)",
            len(projects),
            self.workers,
            self.dry_run,
        )

        if self.workers > 1 and len(projects) > 1:
            results = self._run_parallel(projects)
        else:
            results = []
            for project in tqdm(
                projects, desc="Projects", unit="project", disable=not self.show_progress
            ):
                result = self._run_one(project)
                if result is not None:
                    results.append(result)

        report = RunReport(results=results)
        logger.info(
            "Run complete: %d checked, %d need rebuild, %d failed",
            len(report.results),
            len(report.rebuilds),
            len(report.failed),
        )
        return report

    def _run_parallel(self, projects: list[Project]) -> list[ProjectResult]:
        """Check projects on a thread pool.

        The first error cancels projects that have not started yet; projects
        already running finish without dispatching rebuilds.
        """
        results: dict[int, ProjectResult] = {}
        executor = ThreadPoolExecutor(max_workers=self.workers)
        try:
            future_to_index = {
                executor.submit(self._run_one, project): index
                for index, project in enumerate(projects)
            }
            with tqdm(
                total=len(projects), desc="Projects", unit="project", disable=not self.show_progress
            ) as pbar:
                for future in as_completed(future_to_index):
                    result = future.result()
                    if result is not None:
                        results[future_to_index[future]] = result
                    pbar.update(1)
        except BaseException:
            self._aborted.set()
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        return [results[i] for i in sorted(results)]
