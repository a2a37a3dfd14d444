from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from filelock import FileLock
from tinydb import Query, TinyDB

from inspectform.errors import DuplicateError
from inspectform.utils import now_utc, parse_dt, to_iso

UNIQUE_USER_KEYS = ("username", "email", "id_number")


class JSONRepoBase:
    def __init__(self, path: Path, lock: FileLock) -> None:
        self._path = path
        self._lock = lock

    @contextmanager
    def _db(self) -> Iterable[TinyDB]:
        with self._lock:
            db = TinyDB(self._path)
            try:
                yield db
            finally:
                db.close()


class JSONUserRepo(JSONRepoBase):
    def create_user(self, user: dict[str, Any]) -> None:
        record = self._to_record(user)
        with self._db() as db:
            table = db.table("users")
            for key in UNIQUE_USER_KEYS:
                if table.contains(Query()[key] == record[key]):
                    raise DuplicateError(key)
            table.insert(record)

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("users").get(Query().id == user_id)
        return self._from_record(item) if item else None

    def get_user_by_username(self, username: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("users").get(Query().username == username)
        return self._from_record(item) if item else None

    @staticmethod
    def _to_record(user: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": user["id"],
            "id_number": user["id_number"],
            "username": user["username"],
            "email": user["email"],
            "password_hash": user["password_hash"],
            "signature": user["signature"],
            "created_at": to_iso(user.get("created_at") or now_utc()),
        }

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "id_number": record["id_number"],
            "username": record["username"],
            "email": record["email"],
            "password_hash": record["password_hash"],
            "signature": record.get("signature", ""),
            "created_at": parse_dt(record.get("created_at")),
        }


class JSONFormRepo(JSONRepoBase):
    def list_forms(self) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("forms").all()
        forms = [self._from_record(item) for item in items]
        return sorted(forms, key=lambda x: x["name"])

    def get_form(self, name: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("forms").get(Query().name == name)
        return self._from_record(item) if item else None

    def create_form(self, form: dict[str, Any]) -> None:
        record = self._to_record(form)
        with self._db() as db:
            table = db.table("forms")
            if table.contains(Query().name == record["name"]):
                raise DuplicateError("name")
            table.insert(record)

    def update_form(self, name: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._db() as db:
            table = db.table("forms")
            item = table.get(Query().name == name)
            if not item:
                raise KeyError(name)
            item.update(self._to_record(updates, partial=True))
            table.update(item, Query().name == name)
        return self._from_record(item)

    @staticmethod
    def _to_record(form: dict[str, Any], partial: bool = False) -> dict[str, Any]:
        record: dict[str, Any] = {}
        for key, value in form.items():
            if key in {"created_at", "updated_at"}:
                record[key] = to_iso(value) if isinstance(value, datetime) else value
            else:
                record[key] = value
        if not partial:
            record.setdefault("created_at", to_iso(now_utc()))
            record.setdefault("updated_at", to_iso(now_utc()))
        return record

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": record["name"],
            "title": record.get("title") or record["name"],
            "elements": list(record.get("elements", [])),
            "created_at": parse_dt(record.get("created_at")),
            "updated_at": parse_dt(record.get("updated_at")),
        }


class JSONSubmissionRepo(JSONRepoBase):
    def list_submissions(self, form_name: str) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("submissions").search(Query().form_name == form_name)
        submissions = [self._from_record(item) for item in items]
        return sorted(submissions, key=lambda x: x["created_at"], reverse=True)

    def create_submission(self, submission: dict[str, Any]) -> None:
        record = self._to_record(submission)
        with self._db() as db:
            db.table("submissions").insert(record)

    @staticmethod
    def _to_record(submission: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": submission["id"],
            "form_name": submission["form_name"],
            "values": submission["values"],
            "submitted_by": submission.get("submitted_by"),
            "created_at": to_iso(submission["created_at"]),
        }

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "form_name": record["form_name"],
            "values": record.get("values", {}),
            "submitted_by": record.get("submitted_by"),
            "created_at": parse_dt(record.get("created_at")),
        }


class JSONStorage:
    def __init__(self, path: Path) -> None:
        self._lock = FileLock(f"{path}.lock")
        self.users = JSONUserRepo(path, self._lock)
        self.forms = JSONFormRepo(path, self._lock)
        self.submissions = JSONSubmissionRepo(path, self._lock)
