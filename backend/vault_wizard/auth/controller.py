"""Vault authentication step."""

from dataclasses import dataclass
from enum import Enum

import structlog

from ..errors import AuthError, ConnectivityError
from ..utils.logging import log_business_event
from ..vault.client import VaultBackend, vault_client
from ..wizard.models import AuthMode, SessionConfig

logger = structlog.get_logger("auth.controller")

UNREACHABLE_MESSAGE = "Vault server is not reachable"

TOKEN_ERROR_MESSAGES = {
    403: "Invalid Vault token or insufficient permissions",
    404: "Token lookup endpoint not found",
}

APPROLE_ERROR_MESSAGES = {
    400: "Invalid Role ID or Secret ID",
    404: "AppRole authentication is not enabled",
}


class AuthState(str, Enum):
    """Authentication step states."""
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class AuthOutcome:
    """Terminal result of one authentication attempt."""
    state: AuthState
    message: str

    @property
    def succeeded(self) -> bool:
        """True when authentication reached the success state."""
        return self.state == AuthState.SUCCESS


class AuthenticationController:
    """Drives token and AppRole authentication to success or error.

    Each ``authenticate`` call starts from idle, so the step can be re-run
    after the wizard moves back and forward. The only state carried between
    calls is the token written into the session config after AppRole login.
    """

    def __init__(self, backend: VaultBackend | None = None):
        """Initialize with a Vault backend (defaults to the HTTP client)."""
        self._backend = backend or vault_client
        self.state = AuthState.IDLE
        self.message: str | None = None

    async def authenticate(self, config: SessionConfig) -> AuthOutcome:
        """Run the authentication flow for the config's auth mode."""
        self.state = AuthState.AUTHENTICATING
        self.message = None

        logger.info("Authentication started",
                    server_url=config.server_url,
                    auth_mode=config.auth_mode.value)

        # Missing credentials fail before any network call
        missing = config.missing_credentials()
        if missing:
            return self._finish(AuthState.ERROR, missing)

        try:
            health = await self._backend.check_health(config.server_url)
            if not health.reachable:
                raise ConnectivityError(UNREACHABLE_MESSAGE)

            if config.auth_mode == AuthMode.TOKEN:
                await self._authenticate_token(config)
            else:
                await self._authenticate_approle(config)

        except ConnectivityError as e:
            return self._finish(AuthState.ERROR, e.message)
        except AuthError as e:
            return self._finish(AuthState.ERROR, self._describe_auth_error(config.auth_mode, e))

        log_business_event("vault_authenticated",
                           server_url=config.server_url,
                           auth_mode=config.auth_mode.value)
        return self._finish(AuthState.SUCCESS, "Authentication successful")

    async def _authenticate_token(self, config: SessionConfig) -> None:
        await self._backend.lookup_token(config.server_url, config.token, config.namespace)

    async def _authenticate_approle(self, config: SessionConfig) -> None:
        token = await self._backend.login_approle(
            config.server_url,
            config.role_id,
            config.secret_id,
            config.namespace
        )
        if not token:
            raise AuthError("No token received from AppRole authentication", code="NO_TOKEN")
        config.token = token

    @staticmethod
    def _describe_auth_error(mode: AuthMode, error: AuthError) -> str:
        if error.status is None or error.code == "NO_TOKEN":
            return error.message

        if mode == AuthMode.TOKEN:
            return TOKEN_ERROR_MESSAGES.get(error.status, f"Invalid Vault token (HTTP {error.status})")
        return APPROLE_ERROR_MESSAGES.get(error.status, f"AppRole authentication failed (HTTP {error.status})")

    def _finish(self, state: AuthState, message: str) -> AuthOutcome:
        self.state = state
        self.message = message
        if state == AuthState.ERROR:
            logger.warning("Authentication failed", reason=message)
        else:
            logger.info("Authentication succeeded")
        return AuthOutcome(state=state, message=message)
