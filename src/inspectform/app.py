from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any

import markupsafe
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from inspectform.auth import AuthService
from inspectform.config import BASE_DIR, Settings
from inspectform.errors import InspectionError
from inspectform.middleware import SecurityHeadersMiddleware
from inspectform.navigation import LoginRequired
from inspectform.ratelimit import create_limiter, enforce_rate_limit
from inspectform.renderer import render_field
from inspectform.routes.auth import router as auth_router
from inspectform.routes.forms import router as forms_router
from inspectform.routes.views import router as views_router
from inspectform.security import Clock, SessionStore
from inspectform.storage import init_storage
from inspectform.utils import now_utc

logger = logging.getLogger(__name__)


def _tojson_attr(value: Any) -> markupsafe.Markup:
    return markupsafe.Markup(markupsafe.escape(json.dumps(value, ensure_ascii=False)))


def _is_api_request(request: Request) -> bool:
    return request.url.path.startswith("/api/")


async def inspection_error_handler(request: Request, exc: InspectionError) -> Response:
    if _is_api_request(request):
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request, "error.html", {"message": exc.message}, status_code=exc.status_code
    )


async def login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    return RedirectResponse(exc.location, status_code=303)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = InspectionError("Something went wrong, please try again")
    return JSONResponse(error.to_dict(), status_code=error.status_code)


def create_app(settings: Settings | None = None, clock: Clock | None = None) -> FastAPI:
    settings = settings or Settings()
    storage = init_storage(settings)
    sessions = SessionStore(timedelta(minutes=settings.session_ttl_minutes), clock=clock or now_utc)
    limiter = create_limiter(settings)

    app = FastAPI(
        title="Inspection Forms",
        dependencies=[Depends(enforce_rate_limit)],
        openapi_tags=[
            {"name": "views", "description": "Server-rendered pages"},
            {"name": "api/auth", "description": "REST API: sessions and accounts"},
            {"name": "api/forms", "description": "REST API: form templates"},
            {"name": "api/submissions", "description": "REST API: submissions"},
            {"name": "system", "description": "System"},
        ],
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.sessions = sessions
    app.state.auth_service = AuthService(storage, sessions, settings.bcrypt_rounds)
    app.state.limiter = limiter

    templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
    templates.env.filters["tojson_attr"] = _tojson_attr
    templates.env.globals["render_field"] = render_field
    app.state.templates = templates

    app.add_exception_handler(InspectionError, inspection_error_handler)
    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Last added runs first.
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(auth_router)
    app.include_router(forms_router)
    app.include_router(views_router)

    @app.get("/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
