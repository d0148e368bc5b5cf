"""Custom exceptions for manifest loading."""


class ManifestError(Exception):
    """Manifest is missing, unreadable or structurally invalid."""


class MalformedCoordinateError(ManifestError):
    """Repository coordinate is not in ``owner/name`` form."""
