# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain errors raised by the service and repository layers.

Controllers map them onto HTTP status codes:
    InvalidInputError      → 400
    VolunteerNotFoundError → 404
    PersistenceError       → 503
"""


class InvalidInputError(ValueError):
    """A mandatory field is missing or blank, or the email is malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class VolunteerNotFoundError(KeyError):
    """No volunteer exists with the requested id."""

    def __init__(self, volunteer_id: str) -> None:
        super().__init__(volunteer_id)
        self.volunteer_id = volunteer_id

    def __str__(self) -> str:
        return f"Volunteer not found with id '{self.volunteer_id}'"


class PersistenceError(RuntimeError):
    """The durable mirror could not be read or written."""

    def __init__(self, message: str, path: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause
