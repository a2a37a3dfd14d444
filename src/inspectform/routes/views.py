from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from inspectform.auth import AuthService
from inspectform.builder import BuilderState
from inspectform.deps import get_auth_service, get_storage, session_token
from inspectform.errors import (
    AuthenticationError,
    DuplicateError,
    TransportError,
    ValidationError,
)
from inspectform.navigation import LOGIN_PATH, resolve_redirect_target, view_guard
from inspectform.renderer import collect_submission, load_template, submit
from inspectform.routes.auth import clear_session_cookie, set_session_cookie
from inspectform.security import SessionContext
from inspectform.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()

REGISTER_FIELDS = ("idNumber", "username", "email", "password", "confirmPassword", "signature")


def _field_errors(errors: list[dict[str, str]]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for error in errors:
        grouped.setdefault(error["field"], []).append(error["reason"])
    return grouped


@router.get("/login", response_class=HTMLResponse, tags=["views"])
async def login_page(request: Request) -> HTMLResponse:
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "next": resolve_redirect_target(request.query_params.get("next")),
            "registered": bool(request.query_params.get("registered")),
            "error": None,
        },
    )


@router.post("/login", response_class=HTMLResponse, tags=["views"])
async def login_submit(
    request: Request, auth: AuthService = Depends(get_auth_service)
) -> HTMLResponse:
    templates = request.app.state.templates
    form_data = await request.form()
    next_path = resolve_redirect_target(form_data.get("next"))
    try:
        session = auth.login(str(form_data.get("username", "")), str(form_data.get("password", "")))
    except AuthenticationError as exc:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"next": next_path, "registered": False, "error": exc.message},
            status_code=exc.status_code,
        )
    response = RedirectResponse(next_path, status_code=303)
    set_session_cookie(response, request.app.state.settings, session)
    return response


@router.get("/register", response_class=HTMLResponse, tags=["views"])
async def register_page(request: Request) -> HTMLResponse:
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request, "register.html", {"values": {}, "field_errors": {}}
    )


@router.post("/register", response_class=HTMLResponse, tags=["views"])
async def register_submit(
    request: Request, auth: AuthService = Depends(get_auth_service)
) -> HTMLResponse:
    templates = request.app.state.templates
    form_data = await request.form()
    fields = {name: str(form_data.get(name, "")) for name in REGISTER_FIELDS}
    try:
        auth.register(fields)
    except (ValidationError, DuplicateError) as exc:
        # Passwords are never echoed back into the page.
        values = {k: v for k, v in fields.items() if k not in {"password", "confirmPassword"}}
        return templates.TemplateResponse(
            request,
            "register.html",
            {"values": values, "field_errors": _field_errors(exc.details["errors"])},
            status_code=exc.status_code,
        )
    return RedirectResponse(f"{LOGIN_PATH}?registered=1", status_code=303)


@router.post("/logout", tags=["views"])
async def logout_submit(
    request: Request, auth: AuthService = Depends(get_auth_service)
) -> RedirectResponse:
    auth.logout(session_token(request))
    response = RedirectResponse(LOGIN_PATH, status_code=303)
    clear_session_cookie(response, request.app.state.settings)
    return response


@router.get("/", response_class=HTMLResponse, tags=["views"])
async def home(
    request: Request,
    storage: Storage = Depends(get_storage),
    _: SessionContext = Depends(view_guard),
) -> HTMLResponse:
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request, "index.html", {"forms": storage.forms.list_forms()}
    )


@router.get("/forms/{form_name}", response_class=HTMLResponse, tags=["views"])
async def form_page(
    request: Request,
    form_name: str,
    storage: Storage = Depends(get_storage),
    _: SessionContext = Depends(view_guard),
) -> HTMLResponse:
    templates = request.app.state.templates
    template = load_template(storage, form_name)
    return templates.TemplateResponse(
        request, "form.html", {"template": template, "errors": []}
    )


@router.post("/forms/{form_name}", response_class=HTMLResponse, tags=["views"])
async def form_submit(
    request: Request,
    form_name: str,
    storage: Storage = Depends(get_storage),
    context: SessionContext = Depends(view_guard),
) -> HTMLResponse:
    templates = request.app.state.templates
    template = load_template(storage, form_name)
    form_data = await request.form()
    values = collect_submission(template, form_data)
    try:
        submit(storage, template.name, values, submitted_by=context.user_id)
    except ValidationError as exc:
        messages = [f"{error['field']}: {error['reason']}" for error in exc.errors]
        return templates.TemplateResponse(
            request,
            "form.html",
            {"template": template, "errors": messages},
            status_code=exc.status_code,
        )
    except TransportError as exc:
        return templates.TemplateResponse(
            request,
            "form.html",
            {"template": template, "errors": [exc.message]},
            status_code=exc.status_code,
        )
    return templates.TemplateResponse(request, "submission_done.html", {"template": template})


@router.get("/forms/{form_name}/builder", response_class=HTMLResponse, tags=["views"])
async def builder_page(
    request: Request,
    form_name: str,
    storage: Storage = Depends(get_storage),
    _: SessionContext = Depends(view_guard),
) -> HTMLResponse:
    templates = request.app.state.templates
    template = load_template(storage, form_name)
    state = BuilderState(form_name=template.name, elements=tuple(template.elements))
    context: dict[str, Any] = {
        "template": template,
        "state": state.to_dict(),
    }
    return templates.TemplateResponse(request, "builder.html", context)
