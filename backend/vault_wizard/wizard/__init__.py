"""Wizard session state and step coordination."""

from .models import AuthMode, SessionConfig, WizardStep

__all__ = ["AuthMode", "SessionConfig", "WizardStep"]
