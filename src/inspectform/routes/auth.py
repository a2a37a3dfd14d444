from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from inspectform.auth import AuthService
from inspectform.config import Settings
from inspectform.deps import (
    get_auth_service,
    get_session_context,
    read_json_object,
    session_token,
)
from inspectform.security import Session, SessionContext

router = APIRouter()


def set_session_cookie(response: Response, settings: Settings, session: Session) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        session.token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.session_cookie_name, httponly=True, samesite="lax")


@router.get("/api/auth/check", tags=["api/auth"])
async def api_check_session(
    request: Request, auth: AuthService = Depends(get_auth_service)
) -> JSONResponse:
    session = auth.refresh_session(session_token(request))
    response = JSONResponse({"isAuthenticated": session is not None})
    if session is not None:
        # Keep the cookie lifetime in step with the slid server-side expiry.
        set_session_cookie(response, request.app.state.settings, session)
    return response


@router.post("/api/auth/login", tags=["api/auth"])
async def api_login(request: Request, auth: AuthService = Depends(get_auth_service)) -> JSONResponse:
    payload = await read_json_object(request)
    session = auth.login(str(payload.get("username", "")), str(payload.get("password", "")))
    response = JSONResponse({"success": True})
    set_session_cookie(response, request.app.state.settings, session)
    return response


@router.post("/api/auth/register", tags=["api/auth"])
async def api_register(
    request: Request, auth: AuthService = Depends(get_auth_service)
) -> JSONResponse:
    payload = await read_json_object(request)
    auth.register(payload)
    return JSONResponse({"success": True})


@router.post("/api/auth/logout", tags=["api/auth"])
async def api_logout(request: Request, auth: AuthService = Depends(get_auth_service)) -> JSONResponse:
    auth.logout(session_token(request))
    response = JSONResponse({"success": True})
    clear_session_cookie(response, request.app.state.settings)
    return response


@router.get("/api/user", tags=["api/auth"])
async def api_current_user(
    context: SessionContext = Depends(get_session_context),
    auth: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    return JSONResponse(auth.current_user(context))
