"""Custom service layer errors."""

from __future__ import annotations


class ServiceError(Exception):
    """Base error for service-layer failures.

    Every subclass carries the HTTP status and a short ``kind`` so the web
    layer can turn it into the JSON error envelope without inspecting it.
    """

    status = 500
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Raised when the input is malformed or out of range."""

    status = 400
    kind = "validation"


class NotFoundError(ServiceError):
    """Raised when an entity is not found."""

    status = 404
    kind = "not_found"


class ConflictError(ServiceError):
    """Raised when the write would duplicate an existing record."""

    status = 409
    kind = "conflict"


class PreconditionError(ServiceError):
    """Raised when the entity is not in a state that allows the operation."""

    status = 400
    kind = "precondition"


class AuthenticationError(ServiceError):
    """Raised when credentials are wrong."""

    status = 401
    kind = "unauthorized"


class AccountLockedError(ServiceError):
    """Raised while an account is temporarily locked after failed logins."""

    status = 423
    kind = "locked"


class TransactionError(ServiceError):
    """Raised when a persistence step fails and the transaction is rolled back."""

    status = 500
    kind = "transaction"


__all__ = [
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "PreconditionError",
    "TransactionError",
    "AuthenticationError",
    "AccountLockedError",
]
