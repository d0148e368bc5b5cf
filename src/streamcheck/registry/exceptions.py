"""Custom exceptions for the registry transport."""


class RegistryError(Exception):
    """Base exception for registry errors."""


class ImagePullError(RegistryError):
    """Image could not be pulled from its registry."""


class ImageInspectError(RegistryError):
    """Local image could not be inspected."""
