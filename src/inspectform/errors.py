"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a machine readable ``code`` and the HTTP status it maps
to. Routes never build error responses by hand; they raise one of these and
the handler installed in :func:`inspectform.app.create_app` renders it.
"""

from __future__ import annotations

from typing import Any


class InspectionError(Exception):
    """Base class for all handled application errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "code": self.code,
            "message": self.message,
            **self.details,
        }


class ValidationError(InspectionError):
    """One or more user-correctable, field-scoped problems."""

    status_code = 400

    def __init__(self, errors: list[dict[str, str]], message: str = "Validation failed") -> None:
        self.errors = errors
        super().__init__(message, code="VALIDATION_ERROR", details={"errors": errors})

    @classmethod
    def single(cls, field: str, reason: str) -> "ValidationError":
        return cls([{"field": field, "reason": reason}])


class DuplicateError(InspectionError):
    status_code = 409

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(
            f"{field} is already registered",
            code="DUPLICATE",
            details={"errors": [{"field": field, "reason": "already registered"}]},
        )


class AuthenticationError(InspectionError):
    # Same message for unknown user and wrong password.
    status_code = 401

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(InspectionError):
    status_code = 401

    def __init__(self, message: str = "Login required") -> None:
        super().__init__(message, code="NOT_AUTHENTICATED")


class NotFoundError(InspectionError):
    status_code = 404

    def __init__(self, resource: str, key: str) -> None:
        self.resource = resource
        self.key = key
        super().__init__(f"{resource} not found: {key}", code="NOT_FOUND")


class TransportError(InspectionError):
    """Storage or upstream failure; the client is expected to retry."""

    status_code = 503

    def __init__(self, message: str = "Could not save, please try again") -> None:
        super().__init__(message, code="TRANSPORT_ERROR")


class RateLimitError(InspectionError):
    status_code = 429

    def __init__(self, message: str = "Too many requests, please try again later") -> None:
        super().__init__(message, code="RATE_LIMITED")
