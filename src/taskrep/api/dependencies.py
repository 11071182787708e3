"""FastAPI dependencies for the workflow routes."""

from fastapi import Depends, Request

from taskrep.config import Settings
from taskrep.store import TransitionStore
from taskrep.tasks.sequencer import WorkflowSequencer


def get_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_transition_store(request: Request) -> TransitionStore:
    """The store backing this app instance."""
    return request.app.state.store


async def get_sequencer(
    store: TransitionStore = Depends(get_transition_store),
    settings: Settings = Depends(get_settings),
) -> WorkflowSequencer:
    """Sequencer over a fresh snapshot of the store."""
    return WorkflowSequencer(
        await store.snapshot(),
        case_sensitive=settings.case_sensitive_match,
    )
