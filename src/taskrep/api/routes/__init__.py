"""API route modules."""

from taskrep.api.routes.statuses import router as statuses_router
from taskrep.api.routes.transitions import router as transitions_router
from taskrep.api.routes.workflow import router as workflow_router

__all__ = [
    "statuses_router",
    "transitions_router",
    "workflow_router",
]
