"""In-memory status catalog and transition store.

Holds the configurable task statuses and the permitted transitions between
them. All mutation goes through an ``asyncio.Lock``; reads hand out copies,
so a snapshot given to the sequencer is never changed underneath it.
"""

import asyncio
import json
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import pydantic
import structlog

from taskrep.errors import DuplicateTransitionError, EntityNotFoundError, ValidationError
from taskrep.models.workflow import StatusTransition, WorkflowDocument, WorkflowStatus
from taskrep.tasks.sequencer import status_key

log = structlog.get_logger()

_UPDATABLE_FIELDS = frozenset({"name", "description", "color", "sequence_order", "is_default"})


@dataclass
class StatusDeletionPreview:
    """What deleting a status would affect."""

    status_name: str
    task_count: int
    available_statuses: list[WorkflowStatus]
    has_transitions: bool


class TransitionStore:
    """Async in-memory store for workflow statuses and transitions."""

    def __init__(self, *, case_sensitive: bool = True) -> None:
        self._statuses: dict[str, WorkflowStatus] = {}
        self._transitions: list[StatusTransition] = []
        self._lock = asyncio.Lock()
        self._key = status_key(case_sensitive)

    # =========================================================================
    # Statuses
    # =========================================================================

    async def list_statuses(self) -> list[WorkflowStatus]:
        """All statuses ordered by ``sequence_order``."""
        async with self._lock:
            return self._ordered_statuses()

    async def get_status(self, status_id: str) -> WorkflowStatus:
        async with self._lock:
            return self._require_status(status_id).model_copy()

    async def get_status_by_name(self, name: str) -> WorkflowStatus | None:
        async with self._lock:
            status = self._find_by_name(name)
            return status.model_copy() if status else None

    async def get_default_status(self) -> WorkflowStatus | None:
        async with self._lock:
            for status in self._ordered_statuses():
                if status.is_default:
                    return status
            return None

    async def create_status(
        self,
        name: str,
        description: str | None = None,
        color: str | None = None,
        sequence_order: int | None = None,
        is_default: bool = False,
    ) -> WorkflowStatus:
        """Add a status to the catalog.

        Without an explicit ``sequence_order`` the status goes to the end.
        Marking it default clears the flag on every other status.

        Raises:
            ValidationError: If the name is blank or already taken
        """
        async with self._lock:
            if not name.strip():
                raise ValidationError("Status name must not be blank")
            if self._find_by_name(name):
                raise ValidationError(
                    f"Status already exists: {name}", details={"name": name}
                )
            if sequence_order is None:
                sequence_order = self._next_sequence_order()

            fields: dict = {
                "name": name,
                "description": description,
                "sequence_order": sequence_order,
                "is_default": is_default,
            }
            if color:
                fields["color"] = color
            status = WorkflowStatus(**fields)
            if is_default:
                self._clear_default()
            self._statuses[status.id] = status

        log.info("Status created", status_id=status.id, name=name, sequence_order=sequence_order)
        return status.model_copy()

    async def update_status(self, status_id: str, **fields: object) -> WorkflowStatus:
        """Update a status; a rename is carried over to its transitions.

        Only the fields passed are changed. Passing ``description=None``
        clears the description. The result is validated like a new status.

        Args:
            status_id: Status to update
            **fields: Any of name, description, color, sequence_order, is_default

        Raises:
            EntityNotFoundError: If the status does not exist
            ValidationError: If a field is unknown or invalid, or the new name
                is blank or taken by another status
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown status fields: {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )

        async with self._lock:
            current = self._require_status(status_id)
            name = fields.get("name")
            if isinstance(name, str) and name != current.name:
                if not name.strip():
                    raise ValidationError("Status name must not be blank")
                existing = self._find_by_name(name)
                if existing and existing.id != status_id:
                    raise ValidationError(
                        f"Status already exists: {name}", details={"name": name}
                    )

            try:
                updated = WorkflowStatus.model_validate(
                    {**current.model_dump(), **fields, "updated_at": datetime.now(UTC)}
                )
            except pydantic.ValidationError as e:
                raise ValidationError(
                    f"Invalid status update: {e.error_count()} error(s)",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                ) from e

            if updated.name != current.name:
                self._rename_in_transitions(current.name, updated.name)
            if updated.is_default and not current.is_default:
                self._clear_default()
            self._statuses[status_id] = updated

        log.info("Status updated", status_id=status_id, fields=sorted(fields))
        return updated.model_copy()

    async def delete_status(self, status_id: str) -> int:
        """Delete a status and every transition touching it.

        Returns:
            Number of transitions removed

        Raises:
            EntityNotFoundError: If the status does not exist
        """
        async with self._lock:
            status = self._require_status(status_id)
            del self._statuses[status_id]
            name = self._key(status.name)
            kept = [
                t
                for t in self._transitions
                if self._key(t.from_status) != name and self._key(t.to_status) != name
            ]
            removed = len(self._transitions) - len(kept)
            self._transitions = kept

        log.info(
            "Status deleted",
            status_id=status_id,
            name=status.name,
            transitions_removed=removed,
        )
        return removed

    async def deletion_preview(
        self,
        status_id: str,
        task_statuses: Iterable[str] = (),
    ) -> StatusDeletionPreview:
        """Describe the impact of deleting a status.

        Args:
            status_id: Status to delete
            task_statuses: Current status of every task, used for the count

        Raises:
            EntityNotFoundError: If the status does not exist
        """
        async with self._lock:
            status = self._require_status(status_id)
            name = self._key(status.name)
            return StatusDeletionPreview(
                status_name=status.name,
                task_count=sum(1 for s in task_statuses if self._key(s) == name),
                available_statuses=[s for s in self._ordered_statuses() if s.id != status_id],
                has_transitions=any(
                    self._key(t.from_status) == name or self._key(t.to_status) == name
                    for t in self._transitions
                ),
            )

    # =========================================================================
    # Transitions
    # =========================================================================

    async def list_transitions(self) -> list[StatusTransition]:
        """All transitions in creation order."""
        async with self._lock:
            return list(self._transitions)

    async def snapshot(self) -> tuple[StatusTransition, ...]:
        """Immutable copy of the transitions for one round of sequencing."""
        async with self._lock:
            return tuple(self._transitions)

    async def create_transition(self, from_status: str, to_status: str) -> StatusTransition:
        """Permit moving tasks from one status to another.

        Raises:
            ValidationError: If a name is blank or both names are the same
            EntityNotFoundError: If either status is not in the catalog
            DuplicateTransitionError: If the transition already exists
        """
        async with self._lock:
            if not from_status.strip() or not to_status.strip():
                raise ValidationError("Both from_status and to_status are required")
            if self._key(from_status) == self._key(to_status):
                raise ValidationError(
                    "A transition must connect two different statuses",
                    details={"from_status": from_status, "to_status": to_status},
                )

            source = self._find_by_name(from_status)
            if source is None:
                raise EntityNotFoundError("Status", from_status)
            target = self._find_by_name(to_status)
            if target is None:
                raise EntityNotFoundError("Status", to_status)

            pair = (self._key(source.name), self._key(target.name))
            if any(self._pair_key(t) == pair for t in self._transitions):
                raise DuplicateTransitionError(source.name, target.name)

            transition = StatusTransition(from_status=source.name, to_status=target.name)
            self._transitions.append(transition)

        log.info(
            "Transition created",
            transition_id=transition.id,
            from_status=transition.from_status,
            to_status=transition.to_status,
        )
        return transition

    async def delete_transition(self, transition_id: str) -> None:
        """Remove a transition.

        Raises:
            EntityNotFoundError: If the transition does not exist
        """
        async with self._lock:
            for index, transition in enumerate(self._transitions):
                if transition.id == transition_id:
                    del self._transitions[index]
                    break
            else:
                raise EntityNotFoundError("Transition", transition_id)

        log.info("Transition deleted", transition_id=transition_id)

    # =========================================================================
    # Bulk load
    # =========================================================================

    async def load(
        self,
        statuses: Iterable[WorkflowStatus],
        transitions: Iterable[StatusTransition],
    ) -> None:
        """Replace the whole catalog with a snapshot.

        Status names referenced by transitions but missing from ``statuses``
        are registered at the end of the sequence. Transitions are kept as
        given, including duplicates and self-loops.
        """
        async with self._lock:
            self._statuses = {s.id: s for s in statuses}
            self._transitions = list(transitions)

            added = 0
            for transition in self._transitions:
                for name in (transition.from_status, transition.to_status):
                    if name.strip() and self._find_by_name(name) is None:
                        status = WorkflowStatus(
                            name=name, sequence_order=self._next_sequence_order()
                        )
                        self._statuses[status.id] = status
                        added += 1

        log.info(
            "Workflow loaded",
            statuses=len(self._statuses),
            transitions=len(self._transitions),
            inferred_statuses=added,
        )

    async def load_document(self, document: WorkflowDocument) -> None:
        await self.load(document.statuses, document.transitions)

    # =========================================================================
    # Helpers (caller holds the lock)
    # =========================================================================

    def _ordered_statuses(self) -> list[WorkflowStatus]:
        ordered = sorted(self._statuses.values(), key=lambda s: (s.sequence_order, s.created_at))
        return [s.model_copy() for s in ordered]

    def _require_status(self, status_id: str) -> WorkflowStatus:
        status = self._statuses.get(status_id)
        if status is None:
            raise EntityNotFoundError("Status", status_id)
        return status

    def _pair_key(self, transition: StatusTransition) -> tuple[str, str]:
        return (self._key(transition.from_status), self._key(transition.to_status))

    def _find_by_name(self, name: str) -> WorkflowStatus | None:
        wanted = self._key(name)
        return next((s for s in self._statuses.values() if self._key(s.name) == wanted), None)

    def _next_sequence_order(self) -> int:
        return max((s.sequence_order for s in self._statuses.values()), default=0) + 1

    def _clear_default(self) -> None:
        for status_id, status in self._statuses.items():
            if status.is_default:
                self._statuses[status_id] = status.model_copy(update={"is_default": False})

    def _rename_in_transitions(self, old_name: str, new_name: str) -> None:
        old = self._key(old_name)
        renamed: list[StatusTransition] = []
        for transition in self._transitions:
            updates = {}
            if self._key(transition.from_status) == old:
                updates["from_status"] = new_name
            if self._key(transition.to_status) == old:
                updates["to_status"] = new_name
            renamed.append(transition.model_copy(update=updates) if updates else transition)
        self._transitions = renamed


def load_workflow_file(path: Path) -> WorkflowDocument:
    """Read a workflow snapshot from JSON.

    Accepts either a bare array of transition objects, as served by
    ``/task-status-transitions``, or an object with ``statuses`` and
    ``transitions`` keys.

    Raises:
        OSError: If the file cannot be read
        ValidationError: If the content is not a valid workflow snapshot
    """
    raw = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}: {e}", details={"path": str(path)}) from e

    if isinstance(data, list):
        data = {"transitions": data}
    try:
        document = WorkflowDocument.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"Invalid workflow file {path}: {e.error_count()} error(s)",
            details={
                "path": str(path),
                "errors": e.errors(include_url=False, include_context=False),
            },
        ) from e

    log.debug(
        "Workflow file read",
        path=str(path),
        statuses=len(document.statuses),
        transitions=len(document.transitions),
    )
    return document
