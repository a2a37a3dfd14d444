from __future__ import annotations

from fastapi import Depends, Request

from inspectform.auth import AuthService
from inspectform.errors import AuthorizationError, ValidationError
from inspectform.security import SessionContext
from inspectform.storage import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def session_token(request: Request) -> str | None:
    return request.cookies.get(request.app.state.settings.session_cookie_name)


def get_session_context(request: Request) -> SessionContext:
    return request.app.state.sessions.context(session_token(request))


def require_session(context: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not context.is_authenticated:
        raise AuthorizationError()
    return context


async def read_json_object(request: Request) -> dict:
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        raise ValidationError.single("body", "must be a JSON object")
    return payload
