"""Wizard session and step navigation endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, status

from ...wizard.models import SessionConfig
from ...wizard.session import WizardSession, session_store
from ..deps import get_session, wizard_controller

router = APIRouter()
logger = structlog.get_logger("api.sessions")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session() -> dict[str, Any]:
    """Start a new wizard session."""
    session = session_store.create()
    return session.to_dict()


@router.get("/{session_id}")
async def get_session_state(session: WizardSession = Depends(get_session)) -> dict[str, Any]:
    """Current step and state of a wizard session."""
    return session.to_dict()


@router.delete("/{session_id}")
async def delete_session(session: WizardSession = Depends(get_session)) -> dict[str, str]:
    """Discard a wizard session and everything it holds."""
    session_store.delete(session.session_id)
    return {"message": "Session deleted"}


@router.put("/{session_id}/config")
async def configure(
    config: SessionConfig,
    session: WizardSession = Depends(get_session)
) -> dict[str, Any]:
    """Store the Vault connection settings."""
    wizard_controller.configure(session, config)
    return session.to_dict()


@router.post("/{session_id}/steps/next")
async def next_step(session: WizardSession = Depends(get_session)) -> dict[str, Any]:
    """Advance to the next wizard step."""
    wizard_controller.advance(session)
    return session.to_dict()


@router.post("/{session_id}/steps/previous")
async def previous_step(session: WizardSession = Depends(get_session)) -> dict[str, Any]:
    """Go back to the previous wizard step."""
    wizard_controller.back(session)
    return session.to_dict()
