"""Task workflow: status sequencing, graph analysis and status changes."""

from taskrep.tasks.ordering import (
    CycleResult,
    StatusOrderResult,
    WorkflowAnalysis,
    analyze_workflow,
    detect_status_cycles,
    find_branch_points,
    forward_status_order,
    order_statuses,
    strict_status_sequence,
)
from taskrep.tasks.sequencer import (
    WorkflowSequencer,
    get_allowed_next_statuses,
    get_status_sequence,
    is_moving_backwards,
    is_transition_allowed,
)
from taskrep.tasks.workflow import StatusChange, TaskWorkflowEngine

__all__ = [
    "CycleResult",
    "StatusChange",
    "StatusOrderResult",
    "TaskWorkflowEngine",
    "WorkflowAnalysis",
    "WorkflowSequencer",
    "analyze_workflow",
    "detect_status_cycles",
    "find_branch_points",
    "forward_status_order",
    "get_allowed_next_statuses",
    "get_status_sequence",
    "is_moving_backwards",
    "is_transition_allowed",
    "order_statuses",
    "strict_status_sequence",
]
