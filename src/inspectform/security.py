from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

import bcrypt

from inspectform.utils import new_session_token, now_utc

Clock = Callable[[], datetime]


def hash_password(password: str, rounds: int) -> str:
    # bcrypt only looks at the first 72 bytes.
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        return False


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class SessionContext:
    """What a request handler knows about the caller's session."""

    token: str | None
    session: Session | None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def user_id(self) -> str | None:
        return self.session.user_id if self.session else None


ANONYMOUS = SessionContext(token=None, session=None)


class SessionStore:
    """In-process session table keyed by opaque token."""

    def __init__(self, ttl: timedelta, clock: Clock = now_utc) -> None:
        self._ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, user_id: str) -> Session:
        now = self._clock()
        session = Session(
            token=new_session_token(),
            user_id=user_id,
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._purge_expired(now)
            self._sessions[session.token] = session
        return session

    def _purge_expired(self, now: datetime) -> None:
        # Caller holds the lock.
        expired = [token for token, item in self._sessions.items() if item.expires_at <= now]
        for token in expired:
            del self._sessions[token]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, token: str | None) -> Session | None:
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.expires_at <= self._clock():
                del self._sessions[token]
                return None
            return session

    def touch(self, token: str | None) -> Session | None:
        """Return the live session for ``token`` with its expiry pushed forward."""
        session = self.get(token)
        if session is None:
            return None
        refreshed = Session(
            token=session.token,
            user_id=session.user_id,
            created_at=session.created_at,
            expires_at=self._clock() + self._ttl,
        )
        with self._lock:
            if session.token in self._sessions:
                self._sessions[session.token] = refreshed
        return refreshed

    def delete(self, token: str | None) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def context(self, token: str | None) -> SessionContext:
        session = self.get(token)
        if session is None:
            return ANONYMOUS
        return SessionContext(token=token, session=session)
