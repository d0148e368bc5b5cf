"""Registry - Pulls container images and reads their labels."""

from streamcheck.registry.client import RegistryClient
from streamcheck.registry.exceptions import ImageInspectError, ImagePullError, RegistryError

__all__ = [
    "ImageInspectError",
    "ImagePullError",
    "RegistryClient",
    "RegistryError",
]
