"""Task status transition endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from taskrep.api.decorators import handle_workflow_errors
from taskrep.api.dependencies import get_transition_store
from taskrep.models.workflow import StatusTransition
from taskrep.store import TransitionStore

router = APIRouter(prefix="/task-status-transitions", tags=["task-status-transitions"])


class CreateTransitionRequest(BaseModel):
    """Request to permit a status transition."""

    from_status: str
    to_status: str


@router.get("", response_model=list[StatusTransition])
async def list_transitions(
    store: TransitionStore = Depends(get_transition_store),
) -> list[StatusTransition]:
    """List transitions in creation order."""
    return await store.list_transitions()


@router.post("", response_model=StatusTransition, status_code=201)
@handle_workflow_errors("create_transition")
async def create_transition(
    request: CreateTransitionRequest,
    store: TransitionStore = Depends(get_transition_store),
) -> StatusTransition:
    """Permit moving tasks between two existing statuses."""
    return await store.create_transition(request.from_status, request.to_status)


@router.delete("/{transition_id}")
@handle_workflow_errors("delete_transition")
async def delete_transition(
    transition_id: str,
    store: TransitionStore = Depends(get_transition_store),
) -> dict[str, bool]:
    """Remove a transition."""
    await store.delete_transition(transition_id)
    return {"success": True}
