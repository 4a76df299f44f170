"""Global test configuration and fixtures."""

import asyncio
from typing import AsyncGenerator

import pytest
from unittest.mock import AsyncMock
from aiohttp import web
from aiohttp.test_utils import TestServer

from vault_wizard.config.settings import Settings
from vault_wizard.errors import WriteError
from vault_wizard.secrets.models import SecretRecord
from vault_wizard.vault.client import VaultBackend
from vault_wizard.vault.models import HealthState, HealthStatus
from vault_wizard.wizard.models import AuthMode, SessionConfig


# Test settings override
@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        environment="test",
        debug=True,
        log_level="DEBUG",
        structured_logging=False,
        vault_timeout_seconds=5,
    )


@pytest.fixture
def token_config() -> SessionConfig:
    """Session config for token authentication."""
    return SessionConfig(
        server_url="https://vault.example.com",
        secrets_path="kv/data/app",
        auth_mode=AuthMode.TOKEN,
        token="hvs.test-token",
    )


@pytest.fixture
def approle_config() -> SessionConfig:
    """Session config for AppRole authentication."""
    return SessionConfig(
        server_url="https://vault.example.com",
        namespace="team-a",
        secrets_path="kv/data/app",
        auth_mode=AuthMode.APPROLE,
        role_id="test-role-id",
        secret_id="test-secret-id",
    )


@pytest.fixture
def sample_records() -> list[SecretRecord]:
    """Three rows spread over two secret names."""
    return [
        SecretRecord(name="api", key="db_url", value="postgres://x", line=2),
        SecretRecord(name="api", key="api_key", value="sk-1", line=3),
        SecretRecord(name="web", key="redis_url", value="redis://y", line=4),
    ]


# Mock fixtures for the Vault backend
@pytest.fixture
def mock_vault() -> AsyncMock:
    """Mocked Vault backend that accepts everything."""
    mock = AsyncMock(spec=VaultBackend)
    mock.check_health.return_value = HealthStatus(state=HealthState.HEALTHY, status_code=200)
    mock.lookup_token.return_value = None
    mock.login_approle.return_value = "hvs.approle-token"
    mock.write_secret.return_value = None
    return mock


class RecordingVaultBackend(VaultBackend):
    """In-process backend that records the order of write calls."""

    def __init__(self, failures: dict[str, WriteError] | None = None):
        self.events: list[tuple[str, str]] = []
        self.writes: list[dict] = []
        self.failures = failures or {}

    async def check_health(self, server_url):
        return HealthStatus(state=HealthState.HEALTHY, status_code=200)

    async def lookup_token(self, server_url, token, namespace=None):
        return None

    async def login_approle(self, server_url, role_id, secret_id, namespace=None):
        return "hvs.recorded"

    async def write_secret(self, server_url, secrets_path, namespace, token, name, bundle):
        self.events.append(("start", name))
        await asyncio.sleep(0)
        self.writes.append({
            "server_url": server_url,
            "secrets_path": secrets_path,
            "namespace": namespace,
            "token": token,
            "name": name,
            "bundle": dict(bundle),
        })
        self.events.append(("end", name))
        if name in self.failures:
            raise self.failures[name]


@pytest.fixture
def recording_vault() -> RecordingVaultBackend:
    """Backend recording write order."""
    return RecordingVaultBackend()


@pytest.fixture
def make_recording_vault():
    """Factory for recording backends with per-name write failures."""
    return RecordingVaultBackend


# Component test fixtures (local fake Vault over HTTP)
class FakeVault:
    """State and request log of the fake Vault server."""

    def __init__(self):
        self.health_status = 200
        self.valid_token = "hvs.valid"
        self.requests: list[dict] = []
        self.write_failures: dict[str, tuple[int, str]] = {}
        self.url = ""

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/v1/sys/health", self.health)
        app.router.add_get("/v1/auth/token/lookup-self", self.lookup_self)
        app.router.add_post("/v1/auth/approle/login", self.approle_login)
        app.router.add_post("/v1/{namespace}/auth/approle/login", self.approle_login)
        app.router.add_post("/v1/{path:.+}", self.write)
        return app

    async def _record(self, request: web.Request) -> dict:
        body = await request.json() if request.can_read_body else None
        entry = {
            "method": request.method,
            "path": request.path,
            "headers": dict(request.headers),
            "json": body,
        }
        self.requests.append(entry)
        return entry

    async def health(self, request: web.Request) -> web.Response:
        await self._record(request)
        return web.json_response({"initialized": True}, status=self.health_status)

    async def lookup_self(self, request: web.Request) -> web.Response:
        await self._record(request)
        if request.headers.get("X-Vault-Token") == self.valid_token:
            return web.json_response({"data": {"policies": ["default"]}})
        return web.Response(status=403, text='{"errors":["permission denied"]}')

    async def approle_login(self, request: web.Request) -> web.Response:
        entry = await self._record(request)
        body = entry["json"] or {}
        if body.get("role_id") == "no-token-role":
            return web.json_response({"auth": None})
        if body.get("role_id") == "role" and body.get("secret_id") == "secret":
            return web.json_response({"auth": {"client_token": "hvs.from-approle"}})
        return web.Response(status=400, text='{"errors":["invalid role or secret ID"]}')

    async def write(self, request: web.Request) -> web.Response:
        await self._record(request)
        name = request.path.rsplit("/", 1)[-1]
        if name in self.write_failures:
            status, text = self.write_failures[name]
            return web.Response(status=status, text=text)
        return web.Response(status=204)


@pytest.fixture
async def fake_vault() -> AsyncGenerator[FakeVault, None]:
    """Fake Vault HTTP server on a local port."""
    vault = FakeVault()
    server = TestServer(vault.build_app())
    await server.start_server()
    vault.url = f"http://{server.host}:{server.port}"
    yield vault
    await server.close()


# Test markers
pytest.mark.unit = pytest.mark.unit
pytest.mark.component = pytest.mark.component
pytest.mark.smoke = pytest.mark.smoke
