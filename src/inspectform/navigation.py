"""Decides, per navigation, whether a view may render without a session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlencode, urlsplit

from fastapi import Depends, Request

from inspectform.deps import get_session_context
from inspectform.security import SessionContext

LOGIN_PATH = "/login"
PUBLIC_VIEWS = frozenset({"/login", "/register"})


class NavigationState(str, Enum):
    LOADING = "loading"
    RENDER = "render"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class Navigation:
    state: NavigationState
    location: str | None = None


def is_public_view(path: str) -> bool:
    return path in PUBLIC_VIEWS


def login_url(next_path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'next': next_path})}"


def resolve_navigation(path: str, is_authenticated: bool | None) -> Navigation:
    """``is_authenticated`` is None while the session check is still pending."""
    if is_public_view(path):
        return Navigation(NavigationState.RENDER)
    if is_authenticated is None:
        return Navigation(NavigationState.LOADING)
    if is_authenticated:
        return Navigation(NavigationState.RENDER)
    return Navigation(NavigationState.REDIRECT, login_url(path))


def resolve_redirect_target(next_path: Any, default: str = "/") -> str:
    candidate = str(next_path or "").strip()
    if not candidate:
        return default
    if not candidate.startswith("/") or candidate.startswith("//"):
        return default
    parsed = urlsplit(candidate)
    if parsed.scheme or parsed.netloc:
        return default
    if parsed.path in PUBLIC_VIEWS:
        return default
    if parsed.query:
        return f"{parsed.path}?{parsed.query}"
    return parsed.path


class LoginRequired(Exception):
    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(location)


def request_path(request: Request) -> str:
    if request.url.query:
        return f"{request.url.path}?{request.url.query}"
    return request.url.path


def view_guard(
    request: Request, context: SessionContext = Depends(get_session_context)
) -> SessionContext:
    """Dependency for protected HTML views; redirects anonymous callers to login."""
    navigation = resolve_navigation(request.url.path, context.is_authenticated)
    if navigation.state is NavigationState.REDIRECT:
        raise LoginRequired(login_url(request_path(request)))
    return context
