"""Runner - Checks every project of a manifest and triggers rebuilds."""

from streamcheck.runner.models import ProjectResult, RunReport
from streamcheck.runner.runner import CheckRunner

__all__ = [
    "CheckRunner",
    "ProjectResult",
    "RunReport",
]
