"""Custom exceptions for the TaskRep workflow service."""


class TaskRepError(Exception):
    """Base exception for all TaskRep errors."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntityNotFoundError(TaskRepError):
    """Raised when a requested status or transition does not exist."""

    def __init__(self, entity_type: str, identifier: str) -> None:
        super().__init__(
            f"{entity_type} not found: {identifier}",
            details={"entity_type": entity_type, "identifier": identifier},
        )


class ValidationError(TaskRepError):
    """Raised when input validation fails."""


class DuplicateTransitionError(TaskRepError):
    """Raised when a transition between two statuses already exists."""

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(
            f"Transition already exists: {from_status} -> {to_status}",
            details={"from_status": from_status, "to_status": to_status},
        )


class InvalidTransitionError(TaskRepError):
    """Raised when a task status change is not permitted by the workflow."""

    def __init__(
        self,
        from_status: str,
        to_status: str,
        allowed: list[str] | None = None,
    ) -> None:
        allowed_str = f" Allowed: {allowed}" if allowed else ""
        super().__init__(
            f"Invalid transition: {from_status} -> {to_status}.{allowed_str}",
            details={
                "from_status": from_status,
                "to_status": to_status,
                "allowed_transitions": allowed or [],
            },
        )


class DependencyConstraintError(TaskRepError):
    """Raised when a task change violates its dependency task's state."""


class WorkflowGraphError(TaskRepError):
    """Raised when the transition graph cannot be reduced to a single sequence."""

    def __init__(
        self,
        message: str,
        *,
        cycles: list[list[str]] | None = None,
        branch_points: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(
            message,
            details={
                "cycles": cycles or [],
                "branch_points": branch_points or {},
            },
        )
        self.cycles = cycles or []
        self.branch_points = branch_points or {}
