"""Workflow query endpoints.

Read-only questions answered against a fresh snapshot of the transitions:
the derived status sequence, allowed next statuses, transition checks and
structural analysis of the transition graph.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from taskrep.api.decorators import handle_workflow_errors
from taskrep.api.dependencies import get_sequencer, get_settings, get_transition_store
from taskrep.config import Settings
from taskrep.store import TransitionStore
from taskrep.tasks.ordering import analyze_workflow, order_statuses, strict_status_sequence
from taskrep.tasks.sequencer import WorkflowSequencer
from taskrep.tasks.workflow import TaskWorkflowEngine

log = structlog.get_logger()

router = APIRouter(prefix="/workflow", tags=["workflow"])


# =============================================================================
# Request/Response Models
# =============================================================================


class SequenceResponse(BaseModel):
    """Derived status sequence."""

    sequence: list[str]
    case_sensitive: bool


class NextStatusesResponse(BaseModel):
    """Statuses reachable in one step."""

    status: str
    allowed: list[str]
    terminal: bool


class TransitionCheckRequest(BaseModel):
    """A proposed status change."""

    from_status: str
    to_status: str


class TransitionCheckResponse(BaseModel):
    """Whether a status change is permitted and which way it goes."""

    from_status: str
    to_status: str
    allowed: bool
    moving_backwards: bool


class StatusChangeRequest(BaseModel):
    """A task status change to validate."""

    current_status: str | None = None
    target_status: str


class StatusChangeResponse(BaseModel):
    """Validated status change."""

    from_status: str
    to_status: str
    changed: bool
    moving_backwards: bool


class AvailableStatusesResponse(BaseModel):
    """Statuses to offer for a task in a given status."""

    current_status: str
    statuses: list[str]


class OrderResponse(BaseModel):
    """Topological status order."""

    ordered_statuses: list[str]
    unordered_statuses: list[str] = []
    warnings: list[str] = []


class AnalysisResponse(BaseModel):
    """Structural report on the transition graph."""

    statuses: list[str]
    sequence: list[str]
    start_statuses: list[str]
    terminal_statuses: list[str]
    self_loops: list[str]
    duplicate_transitions: list[tuple[str, str]]
    cycles: list[list[str]]
    branch_points: dict[str, list[str]]
    unreachable_statuses: list[str]
    is_linear: bool


# =============================================================================
# Sequencing
# =============================================================================


@router.get("/sequence", response_model=SequenceResponse)
async def get_sequence(
    sequencer: WorkflowSequencer = Depends(get_sequencer),
) -> SequenceResponse:
    """Best-effort linear status sequence."""
    return SequenceResponse(sequence=sequencer.sequence(), case_sensitive=sequencer.case_sensitive)


@router.get("/next", response_model=NextStatusesResponse)
async def get_next_statuses(
    status: Annotated[str, Query(description="Current status name")],
    sequencer: WorkflowSequencer = Depends(get_sequencer),
) -> NextStatusesResponse:
    """Statuses a task may move to from ``status``."""
    allowed = sequencer.allowed_next_statuses(status)
    return NextStatusesResponse(status=status, allowed=allowed, terminal=not allowed)


@router.post("/check", response_model=TransitionCheckResponse)
async def check_transition(
    request: TransitionCheckRequest,
    sequencer: WorkflowSequencer = Depends(get_sequencer),
) -> TransitionCheckResponse:
    """Check a proposed transition without applying it."""
    return TransitionCheckResponse(
        from_status=request.from_status,
        to_status=request.to_status,
        allowed=sequencer.is_transition_allowed(request.from_status, request.to_status),
        moving_backwards=sequencer.is_moving_backwards(request.from_status, request.to_status),
    )


# =============================================================================
# Task status changes
# =============================================================================


@router.get("/available", response_model=AvailableStatusesResponse)
async def get_available_statuses(
    status: Annotated[str | None, Query(description="Task's current status")] = None,
    store: TransitionStore = Depends(get_transition_store),
    settings: Settings = Depends(get_settings),
) -> AvailableStatusesResponse:
    """Statuses a status picker should offer, current status first."""
    statuses = await TaskWorkflowEngine(store, settings).available_statuses(status)
    return AvailableStatusesResponse(current_status=statuses[0], statuses=statuses)


@router.post("/validate", response_model=StatusChangeResponse)
@handle_workflow_errors("validate_status_change")
async def validate_status_change(
    request: StatusChangeRequest,
    store: TransitionStore = Depends(get_transition_store),
    settings: Settings = Depends(get_settings),
) -> StatusChangeResponse:
    """Validate a task status change; 400 lists the allowed targets."""
    change = await TaskWorkflowEngine(store, settings).validate_status_change(
        request.current_status, request.target_status
    )
    return StatusChangeResponse(
        from_status=change.from_status,
        to_status=change.to_status,
        changed=change.changed,
        moving_backwards=change.moving_backwards,
    )


# =============================================================================
# Graph analysis
# =============================================================================


@router.get("/order", response_model=OrderResponse)
@handle_workflow_errors("order_statuses")
async def get_status_order(
    strict: Annotated[bool, Query(description="Reject cycles and branches")] = False,
    allow_branches: Annotated[bool, Query(description="In strict mode, tolerate branches")] = False,
    sequencer: WorkflowSequencer = Depends(get_sequencer),
) -> OrderResponse:
    """Topological status order."""
    if strict:
        ordered = strict_status_sequence(
            sequencer.transitions,
            allow_branches=allow_branches,
            case_sensitive=sequencer.case_sensitive,
        )
        return OrderResponse(ordered_statuses=ordered)

    result = order_statuses(sequencer.transitions, case_sensitive=sequencer.case_sensitive)
    return OrderResponse(
        ordered_statuses=result.ordered_statuses,
        unordered_statuses=result.unordered_statuses,
        warnings=result.warnings,
    )


@router.get("/analysis", response_model=AnalysisResponse)
async def get_analysis(
    sequencer: WorkflowSequencer = Depends(get_sequencer),
) -> AnalysisResponse:
    """How far the transitions are from a single linear chain."""
    analysis = analyze_workflow(sequencer.transitions, case_sensitive=sequencer.case_sensitive)
    if not analysis.is_linear:
        log.info(
            "Workflow is not a linear chain",
            cycles=len(analysis.cycles),
            branch_points=len(analysis.branch_points),
        )
    return AnalysisResponse(
        statuses=analysis.statuses,
        sequence=analysis.sequence,
        start_statuses=analysis.start_statuses,
        terminal_statuses=analysis.terminal_statuses,
        self_loops=analysis.self_loops,
        duplicate_transitions=analysis.duplicate_transitions,
        cycles=analysis.cycles,
        branch_points=analysis.branch_points,
        unreachable_statuses=analysis.unreachable_statuses,
        is_linear=analysis.is_linear,
    )
