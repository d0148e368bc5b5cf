"""Custom exceptions for the Resolver."""


class ResolutionError(Exception):
    """A reference source could not be resolved to a version.

    Attributes:
        project: Project whose source failed ("" when resolved standalone).
        source_name: Logical name of the source.
        kind: Source kind (``docker`` or ``github``).
    """

    def __init__(self, message: str, project: str, source_name: str, kind: str) -> None:
        super().__init__(message)
        self.message = message
        self.project = project
        self.source_name = source_name
        self.kind = kind

    def __str__(self) -> str:
        origin = f"{self.kind} stream '{self.source_name}'"
        if self.project:
            origin = f"{origin} of project '{self.project}'"
        return f"{origin}: {self.message}"
