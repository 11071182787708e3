"""Task model as seen by the workflow engine."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field


class Task(BaseModel):
    """A work item whose status moves through the configured workflow.

    Only the fields the workflow engine reads or stamps are modelled here;
    assignment, teams and time tracking belong to the wider application.
    """

    id: str = Field(default_factory=lambda: str(uuid4()), description="Task UUID")
    title: str = Field(..., max_length=200, description="Task title")
    description: str = Field(default="", description="Detailed description")
    status: str = Field(default="New", description="Current status name")
    priority: int | None = Field(default=None, description="Priority (lower is more urgent)")

    # Scheduling
    start_date: datetime | None = Field(default=None, description="Planned start")
    due_date: datetime | None = Field(default=None, description="Due date")
    dependency_task_id: str | None = Field(
        default=None, description="Task that must complete before this one"
    )

    # Status timestamps
    actual_completion_date: datetime | None = Field(default=None, description="When completed")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
