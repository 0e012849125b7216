"""Session state for the request/challenge/attestation handshake."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from enum import Enum
from http.cookies import Morsel, SimpleCookie

from semver import Version

logger = logging.getLogger(__name__)

KBS_SESSION_ID = "kbs-session-id"


@dataclass
class Request:
    """The opening request of a client."""

    version: str
    tee: str
    extra_params: str = ""


@dataclass
class Challenge:
    """The challenge returned to a client."""

    nonce: str
    extra_params: str = ""


class SessionState(Enum):
    AUTHED = "authed"
    ATTESTED = "attested"


@dataclass
class Session:
    """A client session, first authenticated and later attested."""

    id: str
    timeout: datetime
    state: SessionState = SessionState.AUTHED
    _request: Request | None = field(default=None, repr=False)
    _challenge: Challenge | None = field(default=None, repr=False)
    attestation_claims: str | None = None
    token: str | None = None

    @property
    def request(self) -> Request:
        if self.state is not SessionState.AUTHED or self._request is None:
            raise RuntimeError("unexpected status")
        return self._request

    @property
    def challenge(self) -> Challenge:
        if self.state is not SessionState.AUTHED or self._challenge is None:
            raise RuntimeError("unexpected status")
        return self._challenge

    def cookie(self) -> Morsel:
        """The session cookie carrying the id and the expiry time."""
        jar = SimpleCookie()
        jar[KBS_SESSION_ID] = self.id
        morsel = jar[KBS_SESSION_ID]
        morsel["expires"] = format_datetime(self.timeout.astimezone(timezone.utc), usegmt=True)
        return morsel

    def is_expired(self) -> bool:
        return self.timeout < datetime.now(timezone.utc)

    def attest(self, attestation_claims: str, token: str) -> None:
        """Move an authenticated session to the attested state."""
        if self.state is SessionState.ATTESTED:
            logger.warning("session already attested.")
            return
        self.state = SessionState.ATTESTED
        self.attestation_claims = attestation_claims
        self.token = token
        self._request = None
        self._challenge = None


def _caret_upper(base: Version) -> Version:
    if base.major > 0:
        return Version(base.major + 1, 0, 0)
    if base.minor > 0:
        return Version(0, base.minor + 1, 0)
    return Version(0, 0, base.patch + 1)


def _requirement_matches(version: Version, requirement: str) -> bool:
    for part in (p.strip() for p in requirement.split(",")):
        if not part:
            continue
        if part.startswith("^") or part[0].isdigit():
            base = Version.parse(part.lstrip("^").strip())
            if not base <= version < _caret_upper(base):
                return False
            continue
        if part.startswith("=") and not part.startswith("=="):
            part = "=" + part
        if not version.match(part.replace(" ", "")):
            return False
    return True


def new_session(request: Request, timeout: int, challenge: Challenge, version_req: str) -> Session:
    """Start an authenticated session lasting ``timeout`` minutes."""
    version = Version.parse(request.version)
    if not _requirement_matches(version, version_req):
        raise ValueError(f"Invalid Request version {request.version}")
    return Session(
        id=uuid.uuid4().hex,
        timeout=datetime.now(timezone.utc) + timedelta(minutes=timeout),
        _request=request,
        _challenge=challenge,
    )


class SessionMap:
    """Thread-safe map of session id to session."""

    def __init__(self) -> None:
        self.sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def insert(self, session: Session) -> None:
        """Add a session; an existing session with the same id is kept."""
        with self._lock:
            self.sessions.setdefault(session.id, session)

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self.sessions.get(session_id)