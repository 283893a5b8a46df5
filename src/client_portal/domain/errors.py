"""Structured errors raised by portal operations."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Externally visible error kinds."""

    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENT = "invalid-argument"
    NOT_FOUND = "not-found"
    PERMISSION_DENIED = "permission-denied"
    DEADLINE_EXCEEDED = "deadline-exceeded"
    FAILED_PRECONDITION = "failed-precondition"
    INTERNAL = "internal"


class PortalError(Exception):
    """Base error carrying a kind and a user-facing message."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(PortalError):
    """The operation needs a signed-in photographer."""

    kind = ErrorKind.UNAUTHENTICATED


class InvalidArgumentError(PortalError):
    """Missing or malformed input."""

    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(PortalError):
    """A referenced document does not exist."""

    kind = ErrorKind.NOT_FOUND


class PermissionDeniedError(PortalError):
    """The caller may not perform the operation."""

    kind = ErrorKind.PERMISSION_DENIED


class TokenDisabledError(PermissionDeniedError):
    """The presented token does not match or the link was disabled."""


class SectionLockedError(PermissionDeniedError):
    """The section was submitted and can no longer be edited."""


class TokenExpiredError(PortalError):
    """The portal link is past its expiry."""

    kind = ErrorKind.DEADLINE_EXCEEDED


class FailedPreconditionError(PortalError):
    """The section's current state does not permit the transition."""

    kind = ErrorKind.FAILED_PRECONDITION


class InternalError(PortalError):
    """Unexpected failure, reported without storage details."""

    kind = ErrorKind.INTERNAL
