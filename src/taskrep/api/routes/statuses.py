"""Task status catalog endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from taskrep.api.decorators import handle_workflow_errors
from taskrep.api.dependencies import get_transition_store
from taskrep.models.workflow import WorkflowStatus
from taskrep.store import TransitionStore

router = APIRouter(prefix="/task-statuses", tags=["task-statuses"])


class CreateStatusRequest(BaseModel):
    """Request to add a status."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    color: str | None = None
    sequence_order: int | None = None
    is_default: bool = False


class UpdateStatusRequest(BaseModel):
    """Request to update status fields."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    color: str | None = None
    sequence_order: int | None = None
    is_default: bool | None = None


class DeleteStatusResponse(BaseModel):
    """Response from deleting a status."""

    success: bool
    status_id: str
    transitions_removed: int


@router.get("", response_model=list[WorkflowStatus])
async def list_statuses(
    store: TransitionStore = Depends(get_transition_store),
) -> list[WorkflowStatus]:
    """List statuses in sequence order."""
    return await store.list_statuses()


@router.get("/default", response_model=WorkflowStatus)
async def get_default_status(
    store: TransitionStore = Depends(get_transition_store),
) -> WorkflowStatus:
    """Get the status assigned to new tasks."""
    status = await store.get_default_status()
    if status is None:
        raise HTTPException(status_code=404, detail="No default status configured")
    return status


@router.post("", response_model=WorkflowStatus, status_code=201)
@handle_workflow_errors("create_status")
async def create_status(
    request: CreateStatusRequest,
    store: TransitionStore = Depends(get_transition_store),
) -> WorkflowStatus:
    """Add a status to the catalog."""
    return await store.create_status(
        name=request.name,
        description=request.description,
        color=request.color,
        sequence_order=request.sequence_order,
        is_default=request.is_default,
    )


@router.patch("/{status_id}", response_model=WorkflowStatus)
@handle_workflow_errors("update_status")
async def update_status(
    status_id: str,
    request: UpdateStatusRequest,
    store: TransitionStore = Depends(get_transition_store),
) -> WorkflowStatus:
    """Update a status; renames carry over to transitions."""
    return await store.update_status(status_id, **request.model_dump(exclude_unset=True))


@router.delete("/{status_id}", response_model=DeleteStatusResponse)
@handle_workflow_errors("delete_status")
async def delete_status(
    status_id: str,
    store: TransitionStore = Depends(get_transition_store),
) -> DeleteStatusResponse:
    """Delete a status and the transitions that touch it."""
    removed = await store.delete_status(status_id)
    return DeleteStatusResponse(success=True, status_id=status_id, transitions_removed=removed)
