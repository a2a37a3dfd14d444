from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    id_number = Column(String(10), unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    signature = Column(Text, nullable=False)
    created_at = Column(DateTime)


class FormModel(Base):
    __tablename__ = "forms"

    name = Column(String, primary_key=True)
    title = Column(String)
    elements_json = Column(Text)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class SubmissionModel(Base):
    __tablename__ = "submissions"

    id = Column(String, primary_key=True)
    form_name = Column(String, index=True)
    values_json = Column(Text)
    submitted_by = Column(String, nullable=True)
    created_at = Column(DateTime)
