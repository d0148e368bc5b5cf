"""Custom exceptions for the Rebuild Trigger."""


class TriggerError(Exception):
    """Rebuild could not be dispatched.

    Attributes:
        project: Repository the rebuild was meant for.
    """

    def __init__(self, message: str, project: str) -> None:
        super().__init__(message)
        self.project = project
