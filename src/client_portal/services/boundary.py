"""Operation boundary: input guards and error wrapping."""

import functools
import logging
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from client_portal.domain.errors import (
    InternalError,
    InvalidArgumentError,
    PortalError,
    UnauthenticatedError,
)
from client_portal.domain.models import SectionKind, StepId

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def portal_operation(name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log failures of an operation and hide unexpected ones behind Internal."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except PortalError as exc:
                logger.warning(
                    "Operation %s failed: %s",
                    name,
                    exc.message,
                    extra={"operation": name, "kind": exc.kind.value},
                )
                raise
            except Exception as exc:
                logger.exception(
                    "Operation %s failed unexpectedly", name, extra={"operation": name}
                )
                raise InternalError(f"Failed to {name}.") from exc

        return wrapper

    return decorator


def require_text(value: str | None, message: str) -> str:
    """Return ``value`` stripped, or fail InvalidArgument when blank."""
    if value is None or not value.strip():
        raise InvalidArgumentError(message)
    return value.strip()


def require_project_id(project_id: str | None) -> str:
    """Validate a project id used to build document paths."""
    cleaned = require_text(project_id, "Project ID is required.")
    if "/" in cleaned:
        raise InvalidArgumentError("Project ID is malformed.")
    return cleaned


def require_user(user_id: str | None) -> str:
    """Fail Unauthenticated unless a photographer id was resolved."""
    if not user_id:
        raise UnauthenticatedError("User must be authenticated.")
    return user_id


def require_section(section_id: str | None) -> SectionKind:
    """Parse an editable section id."""
    cleaned = require_text(section_id, "Section ID is required.")
    try:
        return SectionKind(cleaned)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown section: {cleaned}.") from exc


def require_step(step_id: str | None) -> StepId:
    """Parse a portal step id, pseudo-steps included."""
    cleaned = require_text(step_id, "Step ID is required.")
    try:
        return StepId(cleaned)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown step: {cleaned}.") from exc
