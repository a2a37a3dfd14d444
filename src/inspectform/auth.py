from __future__ import annotations

import logging
import re
from typing import Any

from inspectform.errors import (
    AuthenticationError,
    AuthorizationError,
    DuplicateError,
    ValidationError,
)
from inspectform.security import (
    Session,
    SessionContext,
    SessionStore,
    hash_password,
    verify_password,
)
from inspectform.storage import Storage
from inspectform.utils import new_ulid, now_utc, to_iso

logger = logging.getLogger(__name__)

ID_NUMBER_PATTERN = re.compile(r"^\d{10}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_SYMBOLS = frozenset("!@#$%^&*()_+-=[]{};':\"\\|,.<>/?~`")
PASSWORD_MIN_LENGTH = 8

REGISTRATION_FIELDS = {"id_number": "idNumber"}


def normalize_username(value: Any) -> str:
    return str(value or "").strip()


def normalize_email(value: Any) -> str:
    return str(value or "").strip().lower()


def password_problems(password: str) -> list[str]:
    problems: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"must be at least {PASSWORD_MIN_LENGTH} characters")
    missing: list[str] = []
    if not any(ch.islower() for ch in password):
        missing.append("lowercase")
    if not any(ch.isupper() for ch in password):
        missing.append("uppercase")
    if not any(ch.isdigit() for ch in password):
        missing.append("digit")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        missing.append("symbol")
    if missing:
        problems.append("missing " + "/".join(missing))
    return problems


def validate_registration(fields: dict[str, Any]) -> list[dict[str, str]]:
    """Check every registration field and return all violations found."""
    errors: list[dict[str, str]] = []

    def fail(field: str, reason: str) -> None:
        errors.append({"field": field, "reason": reason})

    id_number = str(fields.get("idNumber") or "")
    if not ID_NUMBER_PATTERN.match(id_number):
        fail("idNumber", "must be exactly 10 digits")

    if not normalize_username(fields.get("username")):
        fail("username", "is required")

    if not EMAIL_PATTERN.match(normalize_email(fields.get("email"))):
        fail("email", "must look like name@example.com")

    password = str(fields.get("password") or "")
    for problem in password_problems(password):
        fail("password", problem)

    if str(fields.get("confirmPassword") or "") != password:
        fail("confirmPassword", "does not match password")

    if not str(fields.get("signature") or "").strip():
        fail("signature", "is required")

    return errors


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": user["id"],
        "idNumber": user["id_number"],
        "username": user["username"],
        "email": user["email"],
        "signature": user.get("signature", ""),
        "createdAt": to_iso(user["created_at"]),
    }


class AuthService:
    def __init__(self, storage: Storage, sessions: SessionStore, bcrypt_rounds: int) -> None:
        self._storage = storage
        self._sessions = sessions
        self._rounds = bcrypt_rounds
        # Compared against when the username is unknown so both paths cost a hash.
        self._dummy_hash = hash_password("dummy-password", bcrypt_rounds)

    def login(self, username: str, password: str) -> Session:
        username = normalize_username(username)
        user = self._storage.users.get_user_by_username(username)
        if user is None:
            verify_password(password, self._dummy_hash)
            logger.warning("Login failed for %r", username)
            raise AuthenticationError()
        if not verify_password(password, user["password_hash"]):
            logger.warning("Login failed for %r", username)
            raise AuthenticationError()
        session = self._sessions.create(user["id"])
        logger.info("User %r logged in", username)
        return session

    def refresh_session(self, token: str | None) -> Session | None:
        """Return the session for `token` with its expiry slid forward, or None."""
        try:
            return self._sessions.touch(token)
        except Exception:
            logger.exception("Session check failed")
            return None

    def check_session(self, token: str | None) -> bool:
        return self.refresh_session(token) is not None

    def logout(self, token: str | None) -> None:
        self._sessions.delete(token)

    def register(self, fields: dict[str, Any]) -> dict[str, Any]:
        errors = validate_registration(fields)
        if errors:
            raise ValidationError(errors)
        user = {
            "id": new_ulid(),
            "id_number": str(fields["idNumber"]),
            "username": normalize_username(fields["username"]),
            "email": normalize_email(fields["email"]),
            "password_hash": hash_password(str(fields["password"]), self._rounds),
            "signature": str(fields["signature"]),
            "created_at": now_utc(),
        }
        try:
            self._storage.users.create_user(user)
        except DuplicateError as exc:
            raise DuplicateError(REGISTRATION_FIELDS.get(exc.field, exc.field)) from exc
        logger.info("Registered user %r", user["username"])
        return public_user(user)

    def current_user(self, context: SessionContext) -> dict[str, Any]:
        if not context.is_authenticated:
            raise AuthorizationError()
        user = self._storage.users.get_user(context.user_id or "")
        if user is None:
            raise AuthorizationError()
        return public_user(user)
