# Overview: Exception types shared by services and routes.

"""
Console error hierarchy.

Services raise these; routes map them to HTTP statuses. Anything else that
escapes a service is treated as an unexpected 500.
"""
from __future__ import annotations


class ConsoleError(Exception):
    """Base class for errors the console reports to the caller."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ConsoleError, ValueError):
    """400-level input problem, optionally tied to one field."""
    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class NotFoundError(ConsoleError):
    """Fetch-by-id returned nothing."""
    status_code = 404


class BackendError(ConsoleError):
    """A store call failed. The message is safe to show to the user."""
    status_code = 500


class AccessDeniedError(ConsoleError):
    """The acting admin lacks the required role."""
    status_code = 403


class SelfProtectionError(ConsoleError):
    """An admin tried to deactivate or delete their own record."""
    status_code = 400


def error_response(exc: ConsoleError):
    return exc.to_dict(), exc.status_code
