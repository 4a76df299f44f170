"""Vault authentication step."""

from .controller import AuthenticationController, AuthOutcome, AuthState

__all__ = ["AuthenticationController", "AuthOutcome", "AuthState"]
