"""Error taxonomy for the secrets wizard."""


class WizardError(Exception):
    """Base exception for wizard errors."""

    code = "WIZARD_ERROR"
    status_code = 400

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ConnectivityError(WizardError):
    """Vault server could not be reached."""

    code = "CONNECTIVITY_ERROR"
    status_code = 502


class ValidationError(WizardError):
    """Malformed input: CSV content, missing config field or missing credential."""

    code = "VALIDATION_ERROR"
    status_code = 400


class VaultResponseError(WizardError):
    """Base for errors carrying a remote Vault status and body."""

    status_code = 502

    def __init__(self, message: str, status: int | None = None, body: str | None = None,
                 code: str | None = None):
        super().__init__(message, code)
        self.status = status
        self.body = body


class AuthError(VaultResponseError):
    """Vault rejected the token or the AppRole credentials."""

    code = "AUTH_ERROR"


class WriteError(VaultResponseError):
    """A single secret could not be written."""

    code = "WRITE_ERROR"


class SessionNotFoundError(WizardError):
    """Unknown or expired wizard session."""

    code = "SESSION_NOT_FOUND"
    status_code = 404


class StepTransitionError(WizardError):
    """The wizard cannot move to the requested step yet."""

    code = "STEP_NOT_ALLOWED"
    status_code = 409


class UploadInProgressError(WizardError):
    """An upload is already running for this session."""

    code = "UPLOAD_IN_PROGRESS"
    status_code = 409


class SessionLimitError(WizardError):
    """No session can be evicted to make room for a new one."""

    code = "SESSION_LIMIT"
    status_code = 503
