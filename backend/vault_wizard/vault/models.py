"""Vault client result types."""

from dataclasses import dataclass
from enum import Enum

# Status codes returned by /v1/sys/health for a server that answers but is
# not fully active: rate limited (429), DR secondary (472), performance
# standby (473), not initialized (501), sealed (503).
DEGRADED_HEALTH_CODES = frozenset({429, 472, 473, 501, 503})


class HealthState(str, Enum):
    """Reachability of a Vault server."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNREACHABLE = "unreachable"


@dataclass
class HealthStatus:
    """Result of a Vault health check."""
    state: HealthState
    status_code: int | None = None
    error: str | None = None

    @property
    def reachable(self) -> bool:
        """True for healthy and degraded servers."""
        return self.state != HealthState.UNREACHABLE

    @classmethod
    def from_status_code(cls, status_code: int) -> "HealthStatus":
        """Classify an HTTP status code from /v1/sys/health."""
        if status_code == 200:
            return cls(state=HealthState.HEALTHY, status_code=status_code)
        if status_code in DEGRADED_HEALTH_CODES:
            return cls(state=HealthState.DEGRADED, status_code=status_code)
        return cls(
            state=HealthState.UNREACHABLE,
            status_code=status_code,
            error=f"Unexpected health status {status_code}"
        )
