"""Vault HTTP API client."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
import structlog
from aiohttp import ClientTimeout

from ..config.settings import settings
from ..errors import AuthError, ConnectivityError, WriteError
from .models import HealthState, HealthStatus

logger = structlog.get_logger("vault.client")

NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def build_approle_login_url(server_url: str, namespace: str | None = None) -> str:
    """URL of the AppRole login endpoint, namespace-prefixed when set."""
    if namespace:
        return f"{server_url}/v1/{namespace}/auth/approle/login"
    return f"{server_url}/v1/auth/approle/login"


def build_secret_url(server_url: str, secrets_path: str, name: str, namespace: str | None = None) -> str:
    """URL a named secret bundle is written to."""
    if namespace:
        return f"{server_url}/v1/{namespace}/{secrets_path}/{name}"
    return f"{server_url}/v1/{secrets_path}/{name}"


class VaultBackend(ABC):
    """Operations the wizard needs from a Vault-compatible server.

    None of the operations retry. Failures surface the remote status code
    and body unchanged on the raised error.
    """

    @abstractmethod
    async def check_health(self, server_url: str) -> HealthStatus:
        """Probe server reachability. Never raises for an unreachable server."""
        pass

    @abstractmethod
    async def lookup_token(self, server_url: str, token: str, namespace: str | None = None) -> None:
        """Validate an existing token, raising AuthError when it is unusable."""
        pass

    @abstractmethod
    async def login_approle(
        self,
        server_url: str,
        role_id: str,
        secret_id: str,
        namespace: str | None = None
    ) -> str:
        """Exchange AppRole credentials for a client token."""
        pass

    @abstractmethod
    async def write_secret(
        self,
        server_url: str,
        secrets_path: str,
        namespace: str | None,
        token: str | None,
        name: str,
        bundle: dict[str, str]
    ) -> None:
        """Persist one named bundle, raising WriteError on failure."""
        pass


class VaultClient(VaultBackend):
    """aiohttp implementation of the Vault HTTP API."""

    def __init__(self, timeout_seconds: float | None = None, verify_tls: bool | None = None):
        """Initialize Vault client."""
        config = settings.get_vault_client_config()
        self._timeout = ClientTimeout(
            total=timeout_seconds if timeout_seconds is not None else config["timeout_seconds"]
        )
        self._verify_tls = verify_tls if verify_tls is not None else config["verify_tls"]

    def _session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(ssl=self._verify_tls)
        return aiohttp.ClientSession(timeout=self._timeout, connector=connector)

    @staticmethod
    def _headers(token: str | None = None, namespace: str | None = None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["X-Vault-Token"] = token
        if namespace:
            headers["X-Vault-Namespace"] = namespace
        return headers

    async def check_health(self, server_url: str) -> HealthStatus:
        """Probe /v1/sys/health."""
        url = f"{server_url}/v1/sys/health"

        try:
            async with self._session() as session:
                async with session.get(url) as response:
                    health = HealthStatus.from_status_code(response.status)

        except NETWORK_ERRORS as e:
            logger.warning("Vault health check failed", server_url=server_url, error=str(e))
            return HealthStatus(state=HealthState.UNREACHABLE, error=str(e) or type(e).__name__)

        logger.info("Vault health checked",
                    server_url=server_url,
                    state=health.state.value,
                    status=health.status_code)
        return health

    async def lookup_token(self, server_url: str, token: str, namespace: str | None = None) -> None:
        """Validate a token with /v1/auth/token/lookup-self."""
        url = f"{server_url}/v1/auth/token/lookup-self"

        try:
            async with self._session() as session:
                async with session.get(url, headers=self._headers(token, namespace)) as response:
                    if 200 <= response.status < 300:
                        logger.info("Vault token validated", server_url=server_url)
                        return

                    response_text = await response.text()
                    logger.warning("Vault token lookup rejected",
                                   server_url=server_url,
                                   status=response.status)
                    raise AuthError(
                        f"Token lookup failed: HTTP {response.status}",
                        status=response.status,
                        body=response_text
                    )

        except NETWORK_ERRORS as e:
            logger.error("Error contacting Vault for token lookup", server_url=server_url, error=str(e))
            raise ConnectivityError(f"Could not contact Vault: {str(e) or type(e).__name__}") from e

    async def login_approle(
        self,
        server_url: str,
        role_id: str,
        secret_id: str,
        namespace: str | None = None
    ) -> str:
        """Log in through the AppRole auth method and return the client token."""
        url = build_approle_login_url(server_url, namespace)
        payload = {"role_id": role_id, "secret_id": secret_id}

        try:
            async with self._session() as session:
                async with session.post(url, headers=self._headers(), json=payload) as response:
                    if not 200 <= response.status < 300:
                        response_text = await response.text()
                        logger.warning("AppRole login rejected",
                                       server_url=server_url,
                                       status=response.status)
                        raise AuthError(
                            f"AppRole login failed: HTTP {response.status}",
                            status=response.status,
                            body=response_text
                        )

                    try:
                        data: Any = await response.json(content_type=None)
                    except ValueError:
                        data = None

        except NETWORK_ERRORS as e:
            logger.error("Error contacting Vault for AppRole login", server_url=server_url, error=str(e))
            raise ConnectivityError(f"Could not contact Vault: {str(e) or type(e).__name__}") from e

        auth = data.get("auth") if isinstance(data, dict) else None
        token = auth.get("client_token") if isinstance(auth, dict) else None

        if not token:
            logger.warning("AppRole login returned no client token", server_url=server_url)
            raise AuthError(
                "No token received from AppRole authentication",
                status=response.status,
                code="NO_TOKEN"
            )

        logger.info("AppRole login succeeded", server_url=server_url)
        return token

    async def write_secret(
        self,
        server_url: str,
        secrets_path: str,
        namespace: str | None,
        token: str | None,
        name: str,
        bundle: dict[str, str]
    ) -> None:
        """POST {"data": bundle} to the secret's path."""
        if not token:
            raise WriteError("Missing Vault token, authenticate before uploading", code="NO_TOKEN")

        url = build_secret_url(server_url, secrets_path, name, namespace)

        try:
            async with self._session() as session:
                async with session.post(url, headers=self._headers(token), json={"data": bundle}) as response:
                    if 200 <= response.status < 300:
                        logger.info("Secret stored", secret_name=name, key_count=len(bundle))
                        return

                    response_text = await response.text()
                    logger.error("Failed to store secret",
                                 secret_name=name,
                                 status=response.status,
                                 response=response_text)
                    raise WriteError(
                        f"HTTP {response.status}: {response_text}",
                        status=response.status,
                        body=response_text
                    )

        except NETWORK_ERRORS as e:
            logger.error("Error writing secret", secret_name=name, error=str(e))
            raise WriteError(str(e) or type(e).__name__) from e


vault_client = VaultClient()
