"""CLI entry point for streamcheck.

Commands:
- check: resolve every stream, compare, and dispatch rebuilds
- validate: check the manifest without touching any registry or API
- resolve: print the resolved versions of one project's streams
"""

from __future__ import annotations

import json
import sys
from collections import Counter
from pathlib import Path

import click

from streamcheck import __version__
from streamcheck.config import ConfigError, Settings
from streamcheck.detector import DriftDecision, DriftDetector
from streamcheck.github import GitHubClient
from streamcheck.logging import setup_logging
from streamcheck.manifest import (
    HostedBranch,
    MalformedCoordinateError,
    Manifest,
    ManifestError,
    Project,
    find_manifest,
    load_manifest,
)
from streamcheck.registry import RegistryClient
from streamcheck.resolver import ResolutionError, Resolver
from streamcheck.runner import CheckRunner, RunReport
from streamcheck.trigger import RebuildTrigger, TriggerError

manifest_option = click.option(
    "-m",
    "--manifest",
    "manifest_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to streams.json / streams.yaml (auto-detected if not specified)",
)


def _load(manifest_path: Path | None) -> Manifest:
    if manifest_path is None:
        manifest_path = find_manifest()
    return load_manifest(manifest_path)


def _configure_logging(settings: Settings, log_dir: Path | None, verbose: bool) -> None:
    setup_logging(
        log_dir=log_dir or settings.log_dir,
        level=settings.log_level,
        verbose=verbose,
    )


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """streamcheck - rebuild projects whose upstreams have moved."""


@main.command()
@manifest_option
@click.option(
    "-p",
    "--project",
    "project_names",
    multiple=True,
    help="Only check this project (repeatable)",
)
@click.option("--dry-run", is_flag=True, help="Report drift without triggering rebuilds")
@click.option(
    "--no-fail-fast",
    is_flag=True,
    help="Keep checking other projects when one fails",
)
@click.option(
    "--workers",
    "num_workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of projects checked in parallel (default: STREAMCHECK_WORKERS or 1)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the run report as JSON")
@click.option(
    "--log-dir",
    "log_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for log files",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def check(
    manifest_path: Path | None,
    project_names: tuple[str, ...],
    dry_run: bool,
    no_fail_fast: bool,
    num_workers: int | None,
    as_json: bool,
    log_dir: Path | None,
    verbose: bool,
) -> None:
    """Check projects for drift and trigger rebuilds."""
    try:
        settings = Settings.from_env()
        _configure_logging(settings, log_dir, verbose)

        manifest = _load(manifest_path)
        if project_names:
            projects = [manifest.get_project(name) for name in project_names]
        else:
            projects = manifest.projects
    except (ConfigError, ManifestError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    workers = num_workers if num_workers is not None else settings.workers
    github = GitHubClient(token=settings.github_token, base_url=settings.github_api_url)
    registry = RegistryClient()
    runner = CheckRunner(
        detector=DriftDetector(Resolver(registry=registry, github=github)),
        trigger=RebuildTrigger(github),
        dry_run=dry_run,
        fail_fast=not no_fail_fast,
        workers=workers,
        show_progress=workers > 1 and not as_json,
    )

    try:
        report = runner.run(projects)
    except ResolutionError as e:
        click.echo(f"Resolution error: {e}", err=True)
        sys.exit(1)
    except TriggerError as e:
        click.echo(f"Trigger error: {e}", err=True)
        sys.exit(1)
    finally:
        github.close()
        registry.close()

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report, dry_run)

    if report.failed:
        sys.exit(1)


def _print_report(report: RunReport, dry_run: bool) -> None:
    for result in report.results:
        if result.decision is None:
            click.echo(f"{result.project}: FAILED ({result.error})", err=True)
        elif result.decision == DriftDecision.NO_ACTION_NEEDED:
            click.echo(f"{result.project}: no update needed")
        elif result.triggered:
            click.echo(f"{result.project}: rebuild triggered ({', '.join(result.drifted)})")
        elif result.error:
            click.echo(f"{result.project}: rebuild FAILED ({result.error})", err=True)
        else:
            suffix = " [dry run]" if dry_run else ""
            click.echo(f"{result.project}: rebuild needed ({', '.join(result.drifted)}){suffix}")

    click.echo(
        f"\n{len(report.results)} checked, {len(report.rebuilds)} need rebuild, "
        f"{len(report.failed)} failed"
    )


def _manifest_problems(project: Project) -> list[str]:
    problems = []
    try:
        project.owner_and_name()
    except MalformedCoordinateError as e:
        problems.append(f"project name: {e}")

    for side, sources in (("upstream", project.upstreams), ("downstream", project.downstreams)):
        for source in sources:
            if isinstance(source, HostedBranch):
                try:
                    source.owner_and_name()
                except MalformedCoordinateError as e:
                    problems.append(f"{side} '{source.name}': {e}")
    return problems


def _duplicate_names(project: Project) -> list[str]:
    notes = []
    for side, sources in (("upstream", project.upstreams), ("downstream", project.downstreams)):
        counts = Counter(source.name for source in sources)
        notes.extend(f"{side} '{name}' listed {n} times" for name, n in counts.items() if n > 1)
    return notes


@main.command()
@manifest_option
def validate(manifest_path: Path | None) -> None:
    """Validate the manifest without resolving anything."""
    try:
        manifest = _load(manifest_path)
    except ManifestError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Manifest: {manifest.path}")
    click.echo(f"Projects: {len(manifest.projects)}")

    failed = False
    for project in manifest.projects:
        shared = {s.name for s in project.upstreams} & {s.name for s in project.downstreams}
        click.echo(
            f"\n  {project.name} ({project.build_workflow}@{project.branch}): "
            f"{len(project.upstreams)} upstreams, {len(project.downstreams)} downstreams, "
            f"{len(shared)} paired"
        )
        for problem in _manifest_problems(project):
            failed = True
            click.echo(f"    Error: {problem}", err=True)
        for note in _duplicate_names(project):
            click.echo(f"    Note: {note} (the last one wins)")

    if failed:
        sys.exit(1)
    click.echo("\nManifest valid!")


@main.command()
@manifest_option
@click.argument("project_name")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def resolve(manifest_path: Path | None, project_name: str, verbose: bool) -> None:
    """Print the resolved version of every stream of PROJECT_NAME.

    Nothing is compared and no rebuild is triggered.
    """
    try:
        settings = Settings.from_env()
        _configure_logging(settings, None, verbose)
        project = _load(manifest_path).get_project(project_name)
    except (ConfigError, ManifestError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    github = GitHubClient(token=settings.github_token, base_url=settings.github_api_url)
    registry = RegistryClient()
    resolver = Resolver(registry=registry, github=github)
    try:
        for side, sources in (
            ("upstream", project.upstreams),
            ("downstream", project.downstreams),
        ):
            for source in sources:
                ref = resolver.resolve(source, project=project.name)
                version = "<label missing>" if ref.label_missing else ref.version
                click.echo(f"{side:<10} {ref.name:<24} {ref.kind:<7} {version}")
    except ResolutionError as e:
        click.echo(f"Resolution error: {e}", err=True)
        sys.exit(1)
    finally:
        github.close()
        registry.close()


if __name__ == "__main__":
    main()
