from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError

from inspectform.config import Settings, ensure_dirs
from inspectform.presets import DEFAULT_FORMS
from inspectform.repo_json import JSONStorage
from inspectform.repo_sqlite import SQLiteStorage
from inspectform.utils import now_utc

logger = logging.getLogger(__name__)

# Failures a store may raise while reading or writing its backing file.
STORAGE_ERRORS = (OSError, ValueError, SQLAlchemyError)


class UserRepository(Protocol):
    def create_user(self, user: dict[str, Any]) -> None: ...

    def get_user(self, user_id: str) -> dict[str, Any] | None: ...

    def get_user_by_username(self, username: str) -> dict[str, Any] | None: ...


class FormRepository(Protocol):
    def list_forms(self) -> list[dict[str, Any]]: ...

    def get_form(self, name: str) -> dict[str, Any] | None: ...

    def create_form(self, form: dict[str, Any]) -> None: ...

    def update_form(self, name: str, updates: dict[str, Any]) -> dict[str, Any]: ...


class SubmissionRepository(Protocol):
    def list_submissions(self, form_name: str) -> list[dict[str, Any]]: ...

    def create_submission(self, submission: dict[str, Any]) -> None: ...


class Storage(Protocol):
    users: UserRepository
    forms: FormRepository
    submissions: SubmissionRepository


def seed_default_forms(storage: Storage) -> int:
    existing = {form["name"] for form in storage.forms.list_forms()}
    created = 0
    for preset in DEFAULT_FORMS:
        if preset["name"] in existing:
            continue
        now = now_utc()
        storage.forms.create_form(
            {
                "name": preset["name"],
                "title": preset["title"],
                "elements": [dict(element) for element in preset["elements"]],
                "created_at": now,
                "updated_at": now,
            }
        )
        created += 1
    if created:
        logger.info("Seeded %d predefined form(s)", created)
    return created


def init_storage(settings: Settings, seed: bool = True) -> Storage:
    ensure_dirs(settings)
    if settings.storage_backend == "sqlite":
        storage: Storage = SQLiteStorage(settings.sqlite_path)
    else:
        storage = JSONStorage(settings.json_path)
    if seed:
        seed_default_forms(storage)
    return storage
