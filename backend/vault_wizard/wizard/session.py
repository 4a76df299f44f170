"""In-memory wizard session store."""

import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import structlog

from ..config.settings import settings
from ..errors import SessionLimitError, SessionNotFoundError
from ..secrets.models import SecretRecord
from ..upload.orchestrator import UploadOrchestrator
from ..vault.client import VaultBackend
from .models import SessionConfig, WizardStep

logger = structlog.get_logger("wizard.session")


@dataclass
class WizardSession:
    """State shared by the wizard steps of one browser session."""
    session_id: str
    orchestrator: UploadOrchestrator
    step: WizardStep = WizardStep.CONFIGURE
    config: SessionConfig | None = None
    records: list[SecretRecord] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)
    authenticated: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_seen: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Session state without credentials or secret values."""
        return {
            "session_id": self.session_id,
            "step": self.step.value,
            "step_name": self.step.name.lower(),
            "config": self.config.public_view() if self.config else None,
            "authenticated": self.authenticated,
            "record_count": len(self.records),
            "parse_errors": self.parse_errors,
            "upload": self.orchestrator.summary().model_dump(),
            "created_at": self.created_at.isoformat(),
        }


class SessionStore:
    """Keeps wizard sessions in memory, expiring idle ones."""

    def __init__(
        self,
        backend: VaultBackend | None = None,
        ttl_minutes: int | None = None,
        max_sessions: int | None = None
    ):
        """Initialize the store."""
        self._backend = backend
        self._sessions: OrderedDict[str, WizardSession] = OrderedDict()
        self._ttl = timedelta(minutes=ttl_minutes or settings.session_ttl_minutes)
        self._max_sessions = max_sessions or settings.max_sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> WizardSession:
        """Create a session, evicting the least recently used idle one when full."""
        self.cleanup()

        while len(self._sessions) >= self._max_sessions:
            evicted_id = next(
                (sid for sid, s in self._sessions.items() if not s.orchestrator.is_uploading),
                None
            )
            if evicted_id is None:
                raise SessionLimitError("Too many wizard sessions are uploading, try again later")
            del self._sessions[evicted_id]
            logger.warning("Wizard session evicted", session_id=evicted_id)

        session = WizardSession(
            session_id=uuid.uuid4().hex,
            orchestrator=UploadOrchestrator(self._backend)
        )
        self._sessions[session.session_id] = session
        logger.info("Wizard session created", session_id=session.session_id)
        return session

    def get(self, session_id: str) -> WizardSession:
        """Return a live session or raise SessionNotFoundError."""
        session = self._sessions.get(session_id)
        if session is None or self._expired(session):
            if session is not None:
                del self._sessions[session_id]
            raise SessionNotFoundError(f"Wizard session '{session_id}' not found or expired")

        session.last_seen = datetime.utcnow()
        self._sessions.move_to_end(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        """Drop a session. Returns False when it did not exist."""
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Wizard session deleted", session_id=session_id)
        return removed

    def cleanup(self) -> int:
        """Remove expired sessions and return how many were removed."""
        expired = [sid for sid, session in self._sessions.items() if self._expired(session)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Expired wizard sessions removed", count=len(expired))
        return len(expired)

    def _expired(self, session: WizardSession) -> bool:
        # An upload in progress keeps its session alive
        if session.orchestrator.is_uploading:
            return False
        return datetime.utcnow() - session.last_seen > self._ttl


session_store = SessionStore()
