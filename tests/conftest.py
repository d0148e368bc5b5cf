"""Shared pytest fixtures and configuration."""

import logging
from unittest.mock import MagicMock

import pytest

from streamcheck.github import GitHubClient
from streamcheck.manifest import HostedBranch, Project, RegistryImage
from streamcheck.registry import RegistryClient


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


@pytest.fixture(autouse=True)
def _reset_streamcheck_logger():
    """Detach handlers installed by setup_logging so tests don't leak them."""
    yield
    logger = logging.getLogger("streamcheck")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def mock_registry() -> MagicMock:
    """Registry transport double. Images carry no labels unless configured."""
    registry = MagicMock(spec=RegistryClient)
    registry.inspect_labels.return_value = {}
    return registry


@pytest.fixture
def mock_github() -> MagicMock:
    """GitHub transport double."""
    return MagicMock(spec=GitHubClient)


@pytest.fixture
def base_image() -> RegistryImage:
    return RegistryImage(name="base", image="x", tag="1", label="rev")


@pytest.fixture
def base_branch() -> HostedBranch:
    return HostedBranch(name="base", repo="o/r", branch="main")


@pytest.fixture
def project(base_image: RegistryImage, base_branch: HostedBranch) -> Project:
    """Project P: image label upstream paired with a branch downstream."""
    return Project(
        name="owner/app",
        branch="main",
        build_workflow="build.yml",
        upstreams=(base_image,),
        downstreams=(base_branch,),
    )
