"""Vault HTTP API integration."""

from .client import VaultBackend, VaultClient, build_approle_login_url, build_secret_url, vault_client
from .models import HealthState, HealthStatus

__all__ = [
    "VaultBackend",
    "VaultClient",
    "vault_client",
    "build_approle_login_url",
    "build_secret_url",
    "HealthState",
    "HealthStatus"
]
