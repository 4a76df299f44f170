"""Vault authentication endpoint."""

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...wizard.session import WizardSession
from ..deps import get_session, wizard_controller

router = APIRouter()
logger = structlog.get_logger("api.auth")


class AuthRequest(BaseModel):
    """Credentials submitted on the authentication step."""
    token: str | None = None
    role_id: str | None = None
    secret_id: str | None = None


class AuthResponse(BaseModel):
    """Authentication step outcome."""
    state: str
    message: str
    authenticated: bool
    step: int


@router.post("/{session_id}/auth", response_model=AuthResponse)
async def authenticate(
    credentials: AuthRequest,
    session: WizardSession = Depends(get_session)
) -> AuthResponse:
    """Authenticate to Vault with the configured auth mode."""

    logger.info("Authentication requested", session_id=session.session_id)

    outcome = await wizard_controller.authenticate(session, **credentials.model_dump())

    return AuthResponse(
        state=outcome.state.value,
        message=outcome.message,
        authenticated=session.authenticated,
        step=session.step.value
    )
