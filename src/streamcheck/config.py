"""Runtime settings for streamcheck.

Settings come from the environment; command line flags override them.
Docker daemon settings are read by the docker SDK itself from
``DOCKER_HOST``, ``DOCKER_TLS_VERIFY`` and ``DOCKER_CERT_PATH``.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass

from streamcheck.github.client import DEFAULT_API_URL


class ConfigError(Exception):
    """Raised when a setting is invalid."""


def get_github_token(environ: Mapping[str, str] | None = None) -> str:
    """Get GitHub token from environment or gh CLI.

    Returns:
        The token, or an empty string if none is available.
    """
    env = os.environ if environ is None else environ
    token = env.get("GITHUB_TOKEN", "")
    if token:
        return token
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return ""


@dataclass
class Settings:
    """streamcheck runtime settings.

    Attributes:
        github_token: Token for GitHub API calls. Required to dispatch workflows.
        github_api_url: GitHub API base URL.
        workers: Number of projects checked concurrently.
        log_dir: Directory for log files (None uses the logging default).
        log_level: Log level name (None uses the logging default).
    """

    github_token: str = ""
    github_api_url: str = DEFAULT_API_URL
    workers: int = 1
    log_dir: str | None = None
    log_level: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Environment to read. Defaults to ``os.environ``.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ

        raw_workers = env.get("STREAMCHECK_WORKERS", "1")
        try:
            workers = int(raw_workers)
        except ValueError as e:
            raise ConfigError(
                f"STREAMCHECK_WORKERS must be an integer, got {raw_workers!r}"
            ) from e
        if workers < 1:
            raise ConfigError(f"STREAMCHECK_WORKERS must be at least 1, got {workers}")

        return cls(
            github_token=get_github_token(env),
            github_api_url=env.get("STREAMCHECK_GITHUB_API_URL", DEFAULT_API_URL),
            workers=workers,
            log_dir=env.get("STREAMCHECK_LOG_DIR"),
            log_level=env.get("STREAMCHECK_LOG_LEVEL"),
        )
