import secrets
import time
from dataclasses import dataclass, field

import bcrypt

from fleet_portal.config import settings
from fleet_portal.models.user import User, UserRole


@dataclass
class PortalSession:
    """What the portal remembers about a signed-in user between requests."""

    user_id: int
    email: str
    name: str
    role: UserRole
    created_at: float = field(default_factory=time.time)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def expired(self, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return now - self.created_at > settings.SESSION_MAX_AGE


# Keyed by the value of the session cookie.
_sessions: dict[str, PortalSession] = {}


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def create_session(user: User) -> str:
    """Open a session for ``user`` and return its cookie token."""
    token = secrets.token_urlsafe(32)
    _sessions[token] = PortalSession(
        user_id=user.id,
        email=user.email,
        name=user.full_name,
        role=user.role,
    )
    return token


def validate_session(token: str) -> PortalSession | None:
    """Return the live session for ``token``; expired ones are dropped."""
    session = _sessions.get(token)
    if session is None:
        return None
    if session.expired():
        _sessions.pop(token, None)
        return None
    return session


def destroy_session(token: str) -> None:
    _sessions.pop(token, None)


def destroy_user_sessions(user_id: int) -> int:
    """Sign ``user_id`` out everywhere. Returns how many sessions were dropped."""
    tokens = [t for t, s in _sessions.items() if s.user_id == user_id]
    for token in tokens:
        _sessions.pop(token, None)
    return len(tokens)


def clear_sessions() -> None:
    _sessions.clear()
