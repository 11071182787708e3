"""Pydantic models for the TaskRep workflow service."""

from taskrep.models.tasks import Task
from taskrep.models.workflow import (
    DEFAULT_STATUS_COLOR,
    StatusTransition,
    WorkflowDocument,
    WorkflowStatus,
)

__all__ = [
    "DEFAULT_STATUS_COLOR",
    "StatusTransition",
    "Task",
    "WorkflowDocument",
    "WorkflowStatus",
]
