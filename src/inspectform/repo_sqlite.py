from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from inspectform.errors import DuplicateError
from inspectform.models import Base, FormModel, SubmissionModel, UserModel
from inspectform.utils import dumps_json, ensure_aware, loads_json, now_utc


class SQLiteUserRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def create_user(self, user: dict[str, Any]) -> None:
        with self._Session() as session:
            existing = (
                session.query(UserModel)
                .filter(
                    or_(
                        UserModel.username == user["username"],
                        UserModel.email == user["email"],
                        UserModel.id_number == user["id_number"],
                    )
                )
                .first()
            )
            if existing:
                raise DuplicateError(self._duplicate_key(existing, user))
            session.add(
                UserModel(
                    id=user["id"],
                    id_number=user["id_number"],
                    username=user["username"],
                    email=user["email"],
                    password_hash=user["password_hash"],
                    signature=user["signature"],
                    created_at=user.get("created_at") or now_utc(),
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateError("username") from exc

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(UserModel, user_id)
            return self._to_dict(row) if row else None

    def get_user_by_username(self, username: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.query(UserModel).filter(UserModel.username == username).first()
            return self._to_dict(row) if row else None

    @staticmethod
    def _duplicate_key(row: UserModel, user: dict[str, Any]) -> str:
        if row.username == user["username"]:
            return "username"
        if row.email == user["email"]:
            return "email"
        return "id_number"

    @staticmethod
    def _to_dict(row: UserModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "id_number": row.id_number,
            "username": row.username,
            "email": row.email,
            "password_hash": row.password_hash,
            "signature": row.signature or "",
            "created_at": ensure_aware(row.created_at),
        }


class SQLiteFormRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_forms(self) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = session.query(FormModel).order_by(FormModel.name.asc()).all()
            return [self._to_dict(row) for row in rows]

    def get_form(self, name: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(FormModel, name)
            return self._to_dict(row) if row else None

    def create_form(self, form: dict[str, Any]) -> None:
        with self._Session() as session:
            if session.get(FormModel, form["name"]):
                raise DuplicateError("name")
            now = now_utc()
            row = FormModel(
                name=form["name"],
                title=form.get("title") or form["name"],
                elements_json=dumps_json(form.get("elements", [])),
                created_at=form.get("created_at") or now,
                updated_at=form.get("updated_at") or now,
            )
            session.add(row)
            session.commit()

    def update_form(self, name: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._Session() as session:
            row = session.get(FormModel, name)
            if not row:
                raise KeyError(name)
            for key, value in updates.items():
                if key == "elements":
                    row.elements_json = dumps_json(value)
                else:
                    setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return self._to_dict(row)

    @staticmethod
    def _to_dict(row: FormModel) -> dict[str, Any]:
        return {
            "name": row.name,
            "title": row.title or row.name,
            "elements": loads_json(row.elements_json) or [],
            "created_at": ensure_aware(row.created_at),
            "updated_at": ensure_aware(row.updated_at),
        }


class SQLiteSubmissionRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_submissions(self, form_name: str) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = (
                session.query(SubmissionModel)
                .filter(SubmissionModel.form_name == form_name)
                .order_by(SubmissionModel.created_at.desc())
                .all()
            )
            return [self._to_dict(row) for row in rows]

    def create_submission(self, submission: dict[str, Any]) -> None:
        with self._Session() as session:
            row = SubmissionModel(
                id=submission["id"],
                form_name=submission["form_name"],
                values_json=dumps_json(submission["values"]),
                submitted_by=submission.get("submitted_by"),
                created_at=submission["created_at"],
            )
            session.add(row)
            session.commit()

    @staticmethod
    def _to_dict(row: SubmissionModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "form_name": row.form_name,
            "values": loads_json(row.values_json) or {},
            "submitted_by": row.submitted_by,
            "created_at": ensure_aware(row.created_at),
        }


class SQLiteStorage:
    def __init__(self, db_path: Path) -> None:
        self._engine = create_engine(f"sqlite:///{db_path}", future=True)
        self._Session = sessionmaker(self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        self.users = SQLiteUserRepo(self._Session)
        self.forms = SQLiteFormRepo(self._Session)
        self.submissions = SQLiteSubmissionRepo(self._Session)
