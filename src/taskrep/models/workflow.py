"""Workflow models: configurable task statuses and the transitions between them."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_STATUS_COLOR = "#6b7280"  # Neutral gray


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StatusTransition(BaseModel):
    """A permitted directed edge between two statuses.

    Identity is the ordered ``(from_status, to_status)`` pair. Records are
    immutable once loaded; the store replaces rather than edits them.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, description="Transition UUID")
    from_status: str = Field(..., description="Source status name")
    to_status: str = Field(..., description="Destination status name")
    created_at: datetime = Field(default_factory=_utcnow, description="When the edge was added")

    @property
    def pair(self) -> tuple[str, str]:
        """The ``(from_status, to_status)`` identity of this edge."""
        return (self.from_status, self.to_status)


class WorkflowStatus(BaseModel):
    """A named workflow state a task can occupy."""

    id: str = Field(default_factory=_new_id, description="Status UUID")
    name: str = Field(..., min_length=1, description="Display name, e.g. 'In Progress'")
    description: str | None = Field(default=None, description="What the status means")
    color: str = Field(default=DEFAULT_STATUS_COLOR, description="Badge color (hex)")
    sequence_order: int = Field(default=0, description="Position in the status list")
    is_default: bool = Field(default=False, description="Assigned to new tasks")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Status name must not be blank")
        return value


class WorkflowDocument(BaseModel):
    """A workflow snapshot as exchanged in files: statuses plus transitions."""

    statuses: list[WorkflowStatus] = Field(default_factory=list)
    transitions: list[StatusTransition] = Field(default_factory=list)
