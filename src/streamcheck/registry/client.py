"""RegistryClient - Pulls container images and reads their config labels."""

from __future__ import annotations

import logging
from typing import Any

import docker
import requests
from docker.errors import DockerException, ImageNotFound

from streamcheck.registry.exceptions import ImageInspectError, ImagePullError, RegistryError

logger = logging.getLogger("streamcheck.registry")


class RegistryClient:
    """Talks to the local Docker daemon, which pulls from remote registries.

    The daemon's image store is the only state: pulled images are cached
    there between calls.
    """

    def __init__(self, client: docker.DockerClient | None = None) -> None:
        """Initialize the registry client.

        Args:
            client: Docker client to use. Created with ``docker.from_env()``
                    on first use if not given.
        """
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        """Get or create the Docker client."""
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                raise RegistryError(f"Could not connect to Docker daemon: {e}") from e
        return self._client

    def close(self) -> None:
        """Close the Docker client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def ensure_image_pulled(self, image: str, tag: str) -> None:
        """Pull ``image:tag`` so the local copy matches the registry.

        Args:
            image: Image repository.
            tag: Image tag.

        Raises:
            ImagePullError: If the pull fails.
        """
        reference = f"{image}:{tag}"
        logger.info("Pulling %s", reference)
        try:
            for event in self.client.api.pull(image, tag=tag, stream=True, decode=True):
                self._log_pull_event(reference, event)
        except (DockerException, requests.exceptions.RequestException) as e:
            logger.error("Failed to pull %s: %s", reference, e)
            raise ImagePullError(f"Failed to pull '{reference}': {e}") from e

    def _log_pull_event(self, reference: str, event: dict[str, Any]) -> None:
        if "error" in event:
            logger.error("Failed to pull %s: %s", reference, event["error"])
            raise ImagePullError(f"Failed to pull '{reference}': {event['error']}")
        status = event.get("status", "")
        layer = event.get("id")
        if layer:
            logger.debug("%s: %s %s", reference, layer, status)
        else:
            logger.debug("%s: %s", reference, status)

    def inspect_labels(self, image: str, tag: str) -> dict[str, str]:
        """Read the config labels of a local image.

        Args:
            image: Image repository.
            tag: Image tag.

        Returns:
            Label mapping, empty if the image has no labels.

        Raises:
            ImageInspectError: If the image is not present or cannot be inspected.
        """
        reference = f"{image}:{tag}"
        try:
            labels = self.client.images.get(reference).labels
        except ImageNotFound as e:
            raise ImageInspectError(f"Image '{reference}' is not present locally") from e
        except (DockerException, requests.exceptions.RequestException) as e:
            logger.error("Failed to inspect %s: %s", reference, e)
            raise ImageInspectError(f"Failed to inspect '{reference}': {e}") from e
        return dict(labels or {})
