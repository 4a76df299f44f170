"""Wizard step coordination."""

from collections.abc import Sequence

import structlog

from ..auth.controller import AuthenticationController, AuthOutcome
from ..errors import StepTransitionError, UploadInProgressError, ValidationError
from ..secrets.models import ParseResult
from ..upload.orchestrator import ProgressCallback, UploadResult
from ..vault.client import VaultBackend
from .models import SessionConfig, WizardStep
from .session import WizardSession

logger = structlog.get_logger("wizard.controller")


def next_step(session: WizardSession) -> WizardStep:
    """Step that follows the current one, if the session may move on."""
    if session.step == WizardStep.CONFIGURE:
        if session.config is None:
            raise StepTransitionError("Configure the Vault connection first")
    elif session.step == WizardStep.AUTHENTICATE:
        if not session.authenticated:
            raise StepTransitionError("Authenticate to Vault first")
    elif session.step == WizardStep.UPLOAD_FILE:
        if session.parse_errors:
            raise StepTransitionError("Fix the CSV validation errors first")
        if not session.records:
            raise StepTransitionError("Upload a CSV file with at least one secret first")
    else:
        raise StepTransitionError("Already at the last step")
    return WizardStep(session.step + 1)


def previous_step(session: WizardSession) -> WizardStep:
    """Step before the current one."""
    if session.step == WizardStep.CONFIGURE:
        raise StepTransitionError("Already at the first step")
    return WizardStep(session.step - 1)


def _ensure_idle(session: WizardSession) -> None:
    if session.orchestrator.is_uploading:
        raise UploadInProgressError("Wait for the running upload to finish")


class WizardController:
    """Applies each step's outcome to a wizard session."""

    def __init__(self, backend: VaultBackend | None = None):
        """Initialize with a Vault backend shared by the steps."""
        self._backend = backend

    def advance(self, session: WizardSession) -> WizardStep:
        """Move to the next step."""
        session.step = next_step(session)
        logger.info("Wizard advanced", session_id=session.session_id, step=session.step.name.lower())
        return session.step

    def back(self, session: WizardSession) -> WizardStep:
        """Move to the previous step."""
        session.step = previous_step(session)
        logger.info("Wizard moved back", session_id=session.session_id, step=session.step.name.lower())
        return session.step

    def configure(self, session: WizardSession, config: SessionConfig) -> None:
        """Store the connection settings; a new config needs a new login."""
        _ensure_idle(session)
        session.config = config
        session.authenticated = False
        logger.info("Wizard configured",
                    session_id=session.session_id,
                    server_url=config.server_url,
                    auth_mode=config.auth_mode.value)

    async def authenticate(self, session: WizardSession, **credentials: str | None) -> AuthOutcome:
        """Merge submitted credentials into the config and authenticate."""
        if session.config is None:
            raise StepTransitionError("Configure the Vault connection first")

        updates = {k: v for k, v in credentials.items() if v is not None}
        if updates:
            session.config = session.config.model_copy(update=updates)

        outcome = await AuthenticationController(self._backend).authenticate(session.config)
        session.authenticated = outcome.succeeded

        if outcome.succeeded and session.step == WizardStep.AUTHENTICATE:
            self.advance(session)
        return outcome

    def load_secrets(self, session: WizardSession, parsed: ParseResult) -> None:
        """Keep parsed records, even when some rows were rejected."""
        _ensure_idle(session)
        session.records = list(parsed.records)
        session.parse_errors = list(parsed.errors)
        session.orchestrator.load(session.records)
        logger.info("Secrets loaded",
                    session_id=session.session_id,
                    records=len(session.records),
                    secret_count=len(session.orchestrator.results),
                    errors=len(session.parse_errors))

    async def upload(
        self,
        session: WizardSession,
        on_progress: ProgressCallback | None = None
    ) -> Sequence[UploadResult]:
        """Upload the session's secrets."""
        if session.config is None or not session.authenticated:
            raise StepTransitionError("Authenticate to Vault before uploading")
        if session.parse_errors:
            raise ValidationError("Fix the CSV validation errors before uploading")
        if not session.records:
            raise ValidationError("No secrets to upload")

        if session.step == WizardStep.UPLOAD_FILE:
            self.advance(session)

        return await session.orchestrator.upload(session.config, session.records, on_progress)
