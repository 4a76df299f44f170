"""Wizard session models."""

from enum import Enum

from pydantic import BaseModel, Field, validator


class AuthMode(str, Enum):
    """Supported Vault authentication methods."""
    TOKEN = "token"
    APPROLE = "approle"


class WizardStep(int, Enum):
    """Wizard steps in display order."""
    CONFIGURE = 1
    AUTHENTICATE = 2
    UPLOAD_FILE = 3
    COMPLETE = 4


class SessionConfig(BaseModel):
    """Vault connection settings collected by the wizard.

    Credentials are optional at the model level; which of them are required
    depends on ``auth_mode`` and is checked by ``missing_credentials``.
    """

    server_url: str = Field(..., description="Vault server URL, e.g. https://vault.example.com")
    namespace: str | None = Field(default=None, description="Vault Enterprise namespace")
    secrets_path: str = Field(..., description="Mount and path secrets are written under, e.g. kv/data/app")
    auth_mode: AuthMode = Field(default=AuthMode.TOKEN, description="Authentication method")
    token: str | None = Field(default=None, description="Vault token (token mode, or derived from AppRole)")
    role_id: str | None = Field(default=None, description="AppRole role ID")
    secret_id: str | None = Field(default=None, description="AppRole secret ID")

    @validator("server_url")
    def validate_server_url(cls, v: str) -> str:
        """Require an http(s) URL and drop trailing slashes."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("Vault URL must start with http:// or https://")
        v = v.rstrip("/")
        if v in ("http:", "https:"):
            raise ValueError("Vault URL must include a host")
        return v

    @validator("secrets_path")
    def validate_secrets_path(cls, v: str) -> str:
        """Strip surrounding slashes and require a non-empty path."""
        v = v.strip().strip("/")
        if not v:
            raise ValueError("Secrets path is required")
        return v

    @validator("namespace")
    def normalize_namespace(cls, v: str | None) -> str | None:
        """Treat an empty namespace as no namespace."""
        if v is None:
            return None
        v = v.strip().strip("/")
        return v or None

    def missing_credentials(self) -> str | None:
        """Return the validation message for the chosen mode, or None."""
        if self.auth_mode == AuthMode.TOKEN:
            if not self.token:
                return "Token is required"
        elif not self.role_id or not self.secret_id:
            return "Role ID and Secret ID are required"
        return None

    def public_view(self) -> dict:
        """Config without credential values."""
        return {
            "server_url": self.server_url,
            "namespace": self.namespace,
            "secrets_path": self.secrets_path,
            "auth_mode": self.auth_mode.value,
            "has_token": bool(self.token),
        }
