"""Task workflow engine for status changes against the configured transitions."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from taskrep.config import Settings
from taskrep.config import settings as default_settings
from taskrep.errors import DependencyConstraintError, InvalidTransitionError, ValidationError
from taskrep.models.tasks import Task
from taskrep.tasks.ordering import forward_status_order
from taskrep.tasks.sequencer import WorkflowSequencer, status_key

if TYPE_CHECKING:
    from taskrep.store import TransitionStore

log = structlog.get_logger()


@dataclass
class StatusChange:
    """Outcome of validating a status change."""

    from_status: str
    to_status: str
    changed: bool
    moving_backwards: bool = False


class TaskWorkflowEngine:
    """Validates and applies task status changes.

    Every call takes a fresh snapshot from the store, so edits to the
    transition list apply to the next change without reloading the engine.
    """

    def __init__(self, store: "TransitionStore", settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or default_settings
        self._key = status_key(self._settings.case_sensitive_match)

    async def _sequencer(self) -> WorkflowSequencer:
        return WorkflowSequencer(
            await self._store.snapshot(),
            case_sensitive=self._settings.case_sensitive_match,
        )

    def _resolve_current(self, current_status: str | None) -> str:
        if current_status and current_status.strip():
            return current_status
        return self._settings.default_status

    def _is_completed(self, status: str | None) -> bool:
        # Completion ignores case whatever case_sensitive_match says
        if status is None:
            return False
        return status.strip().casefold() == self._settings.completed_status.casefold()

    def _is_moving_backwards(
        self, sequencer: WorkflowSequencer, from_status: str, to_status: str
    ) -> bool:
        if not self._settings.strict_workflow:
            return sequencer.is_moving_backwards(from_status, to_status)

        sequence = forward_status_order(
            sequencer.transitions, case_sensitive=sequencer.case_sensitive
        )
        positions = {self._key(name): i for i, name in enumerate(sequence)}
        from_index = positions.get(self._key(from_status))
        to_index = positions.get(self._key(to_status))
        return from_index is not None and to_index is not None and to_index < from_index

    async def available_statuses(self, current_status: str | None) -> list[str]:
        """Statuses to offer for a task: the current one, then allowed targets.

        Args:
            current_status: Task's status (blank falls back to the default status)

        Returns:
            Current status first, followed by allowed next statuses without
            blanks or repeats of the current status.
        """
        current = self._resolve_current(current_status)
        sequencer = await self._sequencer()
        allowed = [
            s
            for s in sequencer.allowed_next_statuses(current)
            if s.strip() and self._key(s) != self._key(current)
        ]
        return [current, *allowed]

    async def validate_status_change(
        self,
        current_status: str | None,
        target_status: str,
    ) -> StatusChange:
        """Check a status change against the workflow.

        Args:
            current_status: Task's status (blank falls back to the default status)
            target_status: Desired status

        Returns:
            StatusChange describing the move; ``changed`` is False for a no-op.

        Raises:
            InvalidTransitionError: If no transition permits the move
        """
        current = self._resolve_current(current_status)
        if self._key(current) == self._key(target_status):
            return StatusChange(from_status=current, to_status=target_status, changed=False)

        sequencer = await self._sequencer()
        if not sequencer.is_transition_allowed(current, target_status):
            raise InvalidTransitionError(
                from_status=current,
                to_status=target_status,
                allowed=sequencer.allowed_next_statuses(current),
            )

        backwards = self._is_moving_backwards(sequencer, current, target_status)
        if backwards:
            log.warning(
                "Status change moves backwards",
                from_status=current,
                to_status=target_status,
            )
        return StatusChange(
            from_status=current,
            to_status=target_status,
            changed=True,
            moving_backwards=backwards,
        )

    async def transition_task(
        self,
        task: Task,
        target_status: str,
        dependency: Task | None = None,
    ) -> Task:
        """Move a task to a new status with validation.

        Entering the completed status stamps ``actual_completion_date``;
        leaving it clears the stamp.

        Args:
            task: Task to move
            target_status: Desired status
            dependency: The task ``task.dependency_task_id`` points at, if loaded

        Returns:
            Updated copy of the task

        Raises:
            InvalidTransitionError: If no transition permits the move
            DependencyConstraintError: If completing before the dependency completes
            ValidationError: If ``dependency`` is not the task's dependency
        """
        log.info("Transitioning task", task_id=task.id, target_status=target_status)

        if dependency is not None and dependency.id != task.dependency_task_id:
            raise ValidationError(
                f"Task {dependency.id} is not a dependency of task {task.id}",
                details={"task_id": task.id, "dependency_task_id": task.dependency_task_id},
            )

        change = await self.validate_status_change(task.status, target_status)
        if not change.changed:
            return task.model_copy()

        if self._is_completed(target_status) and not self.can_complete_dependent(dependency):
            raise DependencyConstraintError(
                f"Cannot complete task {task.id} before its dependency "
                f"{dependency.id} is completed",
                details={
                    "task_id": task.id,
                    "dependency_task_id": dependency.id,
                    "dependency_status": dependency.status,
                },
            )

        now = datetime.now(UTC)
        updates: dict = {"status": target_status, "updated_at": now}
        if self._is_completed(target_status):
            updates["actual_completion_date"] = now
        elif self._is_completed(change.from_status):
            updates["actual_completion_date"] = None

        updated = task.model_copy(update=updates)
        log.info(
            "Task transitioned",
            task_id=task.id,
            from_status=change.from_status,
            to_status=target_status,
            moving_backwards=change.moving_backwards,
        )
        return updated

    def can_complete_dependent(self, dependency: Task | None) -> bool:
        """A task may complete once its dependency (if any) is completed."""
        return dependency is None or self._is_completed(dependency.status)

    @staticmethod
    def is_invalid_start_date(selected: datetime | None, dependency: Task | None) -> bool:
        """A task may not start before its dependency is due."""
        if selected is None or dependency is None or dependency.due_date is None:
            return False
        return selected < dependency.due_date
