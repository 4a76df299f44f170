"""Shared API dependencies."""

from fastapi import Path

from ..wizard.controller import WizardController
from ..wizard.session import WizardSession, session_store

wizard_controller = WizardController()


def get_session(session_id: str = Path(..., description="Wizard session ID")) -> WizardSession:
    """Resolve the wizard session named in the path."""
    return session_store.get(session_id)
