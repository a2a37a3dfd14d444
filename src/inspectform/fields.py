from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from inspectform.utils import now_utc, to_iso

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"
    DATE = "date"
    SIGNATURE = "signature"

    @classmethod
    def parse(cls, value: Any) -> "FieldType | None":
        try:
            return cls(str(value))
        except ValueError:
            return None


@dataclass(frozen=True)
class FieldDescriptor:
    id: str
    type: FieldType | None
    content: str = ""
    # Stored type string, kept so unknown types survive a load/save cycle.
    raw_type: str = field(default="", compare=False)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FieldDescriptor":
        raw_type = str(raw.get("type", ""))
        field_type = FieldType.parse(raw_type)
        if field_type is None:
            logger.debug("Unknown field type %r on element %r", raw_type, raw.get("id"))
        return cls(
            id=str(raw.get("id", "")),
            type=field_type,
            content=str(raw.get("content", "")),
            raw_type=raw_type,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value if self.type else self.raw_type,
            "content": self.content,
        }


@dataclass
class FormTemplate:
    name: str
    title: str
    elements: list[FieldDescriptor]
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "FormTemplate":
        return cls(
            name=record["name"],
            title=record.get("title") or record["name"],
            elements=[FieldDescriptor.from_dict(item) for item in record.get("elements", [])],
            created_at=record.get("created_at") or now_utc(),
            updated_at=record.get("updated_at") or now_utc(),
        )

    def element_ids(self) -> list[str]:
        return [element.id for element in self.elements]

    def to_output(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "elements": [element.to_dict() for element in self.elements],
            "updatedAt": to_iso(self.updated_at),
        }


def parse_bool(value: Any) -> bool:
    return str(value).lower() in {"1", "true", "on", "yes"}
