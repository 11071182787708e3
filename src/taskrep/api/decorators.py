"""Route handler decorators for common patterns.

Usage:
    @router.delete("/{status_id}")
    @handle_workflow_errors("delete_status")
    async def delete_status(status_id: str) -> dict:
        await store.delete_status(status_id)  # EntityNotFoundError -> 404
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

import structlog
from fastapi import HTTPException

from taskrep.errors import (
    DependencyConstraintError,
    DuplicateTransitionError,
    EntityNotFoundError,
    InvalidTransitionError,
    TaskRepError,
    ValidationError,
    WorkflowGraphError,
)

log = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")

_STATUS_CODES: list[tuple[type[TaskRepError], int]] = [
    (EntityNotFoundError, 404),
    (DuplicateTransitionError, 409),
    (InvalidTransitionError, 400),
    (DependencyConstraintError, 400),
    (WorkflowGraphError, 400),
    (ValidationError, 400),
]


def error_status_code(error: TaskRepError) -> int:
    """HTTP status for a domain error (500 if unmapped)."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


def handle_workflow_errors(
    operation: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that translates TaskRep errors into HTTP errors.

    The response detail carries the error message plus its structured
    details, e.g. the allowed targets of an invalid transition.

    Args:
        operation: Name used in log events

    Returns:
        Decorated function raising HTTPException for domain errors
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except TaskRepError as e:
                status_code = error_status_code(e)
                log.info(f"{operation}_rejected", status_code=status_code, error=e.message)
                raise HTTPException(
                    status_code=status_code,
                    detail={"message": e.message, **e.details},
                ) from e

        return wrapper

    return decorator
