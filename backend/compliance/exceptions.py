"""Domain errors raised by services and mapped to HTTP responses in main."""


class ComplianceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ComplianceError):
    status_code = 404

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class ValidationError(ComplianceError):
    status_code = 400


class PermissionDenied(ComplianceError):
    status_code = 403


class ConflictError(ComplianceError):
    """The record changed since the caller read it."""

    status_code = 409


class PersistenceError(ComplianceError):
    """Storage-layer failure. Never retried; the unit of work was rolled back."""

    status_code = 500

    def __init__(self, message: str = "Persistence failure", original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message)
