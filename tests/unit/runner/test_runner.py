"""Unit tests for CheckRunner."""

import threading
from unittest.mock import MagicMock

import pytest

from streamcheck.detector import DriftDecision, DriftDetector, DriftReport, StreamDrift
from streamcheck.manifest import Project
from streamcheck.resolver import ResolutionError
from streamcheck.runner import CheckRunner, ProjectResult, RunReport
from streamcheck.trigger import RebuildTrigger, TriggerAck, TriggerError


def _project(name: str) -> Project:
    return Project(name=name, branch="main", build_workflow="build.yml")


def _report(name: str, drifted: bool) -> DriftReport:
    if drifted:
        return DriftReport(
            project=name,
            decision=DriftDecision.NEEDS_REBUILD,
            drifted=[StreamDrift("base", "new", "old")],
        )
    return DriftReport(project=name, decision=DriftDecision.NO_ACTION_NEEDED)


def _resolution_error(project: str) -> ResolutionError:
    return ResolutionError("boom", project=project, source_name="base", kind="github")


@pytest.fixture
def detector() -> MagicMock:
    return MagicMock(spec=DriftDetector)


@pytest.fixture
def trigger() -> MagicMock:
    trigger = MagicMock(spec=RebuildTrigger)
    trigger.trigger_project.side_effect = lambda p: TriggerAck(
        repo=p.name, workflow_id=p.build_workflow, ref=p.branch, status_code=204
    )
    return trigger


def _outcomes(detector: MagicMock, outcomes: dict) -> None:
    """Map project names to a drift flag, or to an exception to raise."""

    def detect(project: Project) -> DriftReport:
        outcome = outcomes[project.name]
        if isinstance(outcome, Exception):
            raise outcome
        return _report(project.name, outcome)

    detector.detect.side_effect = detect


@pytest.mark.unit
class TestCheckProject:
    """Tests for check_project."""

    def test_no_drift_does_not_trigger(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": False})
        runner = CheckRunner(detector, trigger)

        result = runner.check_project(_project("o/a"))

        assert result == ProjectResult(project="o/a", decision=DriftDecision.NO_ACTION_NEEDED)
        trigger.trigger_project.assert_not_called()

    def test_drift_triggers_rebuild(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": True})
        runner = CheckRunner(detector, trigger)

        result = runner.check_project(_project("o/a"))

        assert result.triggered is True
        assert result.drifted == ["base"]
        trigger.trigger_project.assert_called_once_with(_project("o/a"))

    def test_dry_run_does_not_trigger(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": True})
        runner = CheckRunner(detector, trigger, dry_run=True)

        result = runner.check_project(_project("o/a"))

        assert result.decision == DriftDecision.NEEDS_REBUILD
        assert result.triggered is False
        trigger.trigger_project.assert_not_called()

    def test_trigger_failure_raises_in_fail_fast(
        self, detector: MagicMock, trigger: MagicMock
    ) -> None:
        _outcomes(detector, {"o/a": True})
        trigger.trigger_project.side_effect = TriggerError("denied", project="o/a")
        runner = CheckRunner(detector, trigger)

        with pytest.raises(TriggerError):
            runner.check_project(_project("o/a"))

    def test_trigger_failure_keeps_decision(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": True})
        trigger.trigger_project.side_effect = TriggerError("denied", project="o/a")
        runner = CheckRunner(detector, trigger, fail_fast=False)

        result = runner.check_project(_project("o/a"))

        assert result.decision == DriftDecision.NEEDS_REBUILD
        assert result.triggered is False
        assert result.error == "denied"


@pytest.mark.unit
class TestRunSequential:
    """Tests for sequential runs."""

    def test_results_in_manifest_order(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": False, "o/b": True, "o/c": False})
        runner = CheckRunner(detector, trigger)

        report = runner.run([_project("o/a"), _project("o/b"), _project("o/c")])

        assert [r.project for r in report.results] == ["o/a", "o/b", "o/c"]
        assert [r.project for r in report.rebuilds] == ["o/b"]
        assert report.failed == []

    def test_first_error_aborts_run(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": True, "o/b": _resolution_error("o/b"), "o/c": True})
        runner = CheckRunner(detector, trigger)

        with pytest.raises(ResolutionError):
            runner.run([_project("o/a"), _project("o/b"), _project("o/c")])

        checked = [c.args[0].name for c in detector.detect.call_args_list]
        assert checked == ["o/a", "o/b"]
        trigger.trigger_project.assert_called_once_with(_project("o/a"))

    def test_no_fail_fast_records_error_and_continues(
        self, detector: MagicMock, trigger: MagicMock
    ) -> None:
        _outcomes(detector, {"o/a": _resolution_error("o/a"), "o/b": True})
        runner = CheckRunner(detector, trigger, fail_fast=False)

        report = runner.run([_project("o/a"), _project("o/b")])

        failed = report.results[0]
        assert failed.decision is None
        assert failed.failed
        assert "boom" in failed.error
        assert report.results[1].triggered is True

    def test_rerun_after_error_starts_clean(
        self, detector: MagicMock, trigger: MagicMock
    ) -> None:
        runner = CheckRunner(detector, trigger)
        _outcomes(detector, {"o/a": _resolution_error("o/a")})
        with pytest.raises(ResolutionError):
            runner.run([_project("o/a")])

        _outcomes(detector, {"o/a": True})
        report = runner.run([_project("o/a")])

        assert report.results[0].triggered is True


@pytest.mark.unit
class TestRunParallel:
    """Tests for runs on a thread pool."""

    def test_results_in_manifest_order(self, detector: MagicMock, trigger: MagicMock) -> None:
        names = [f"o/p{i}" for i in range(8)]
        _outcomes(detector, {name: i % 2 == 0 for i, name in enumerate(names)})
        runner = CheckRunner(detector, trigger, workers=4)

        report = runner.run([_project(n) for n in names])

        assert [r.project for r in report.results] == names
        assert trigger.trigger_project.call_count == 4

    def test_first_error_is_raised(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": False, "o/b": _resolution_error("o/b")})
        runner = CheckRunner(detector, trigger, workers=2)

        with pytest.raises(ResolutionError) as exc_info:
            runner.run([_project("o/a"), _project("o/b")])

        assert exc_info.value.project == "o/b"

    def test_error_cancels_pending_projects(self, detector: MagicMock, trigger: MagicMock) -> None:
        runner = CheckRunner(detector, trigger, workers=2)
        slow_started = threading.Event()

        def detect(project: Project) -> DriftReport:
            if project.name == "o/fail":
                slow_started.wait(timeout=5)
                raise _resolution_error(project.name)
            slow_started.set()
            # In flight when the error lands; finishes after the abort.
            runner._aborted.wait(timeout=5)
            return _report(project.name, True)

        detector.detect.side_effect = detect
        projects = [_project("o/fail"), _project("o/slow")] + [
            _project(f"o/pending{i}") for i in range(5)
        ]

        with pytest.raises(ResolutionError):
            runner.run(projects)

        checked = {c.args[0].name for c in detector.detect.call_args_list}
        assert not any(name.startswith("o/pending") for name in checked)
        trigger.trigger_project.assert_not_called()

    def test_no_fail_fast_parallel(self, detector: MagicMock, trigger: MagicMock) -> None:
        _outcomes(detector, {"o/a": _resolution_error("o/a"), "o/b": False, "o/c": True})
        runner = CheckRunner(detector, trigger, fail_fast=False, workers=3)

        report = runner.run([_project("o/a"), _project("o/b"), _project("o/c")])

        assert [r.project for r in report.failed] == ["o/a"]
        assert [r.project for r in report.rebuilds] == ["o/c"]


@pytest.mark.unit
class TestReportSerialization:
    """Tests for result records."""

    def test_project_result_to_dict(self) -> None:
        result = ProjectResult(
            project="o/a",
            decision=DriftDecision.NEEDS_REBUILD,
            triggered=True,
            drifted=["base"],
        )

        assert result.to_dict() == {
            "project": "o/a",
            "decision": "needs_rebuild",
            "triggered": True,
            "drifted": ["base"],
            "error": None,
        }

    def test_run_report_to_dict(self) -> None:
        report = RunReport(
            results=[
                ProjectResult(project="o/a", decision=DriftDecision.NO_ACTION_NEEDED),
                ProjectResult(project="o/b", decision=None, error="boom"),
            ]
        )

        data = report.to_dict()

        assert data["rebuilds"] == 0
        assert data["failed"] == 1
        assert data["projects"][1]["decision"] is None
