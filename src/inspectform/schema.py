from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator

from inspectform.config import ELEMENT_ID_PATTERN
from inspectform.fields import FieldDescriptor, FieldType, FormTemplate

ELEMENTS_PAYLOAD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "elements": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "type": {"type": "string"},
                    "content": {"type": "string"},
                },
                "required": ["id", "type"],
            },
        },
    },
    "required": ["elements"],
}


def _error_field(error: Any, default: str) -> str:
    path = [str(part) for part in error.absolute_path]
    return ".".join(path) if path else default


def parse_elements(payload: Any) -> tuple[list[FieldDescriptor], list[dict[str, str]]]:
    """Validate a builder save payload and return the descriptors it holds.

    Errors are collected as ``{"field", "reason"}`` pairs; the descriptor list
    is only meaningful when no errors were returned.
    """
    validator = Draft7Validator(ELEMENTS_PAYLOAD_SCHEMA)
    schema_errors = sorted(validator.iter_errors(payload), key=lambda err: list(err.path))
    if schema_errors:
        return [], [
            {"field": _error_field(error, "elements"), "reason": error.message}
            for error in schema_errors
        ]

    errors: list[dict[str, str]] = []
    seen: set[str] = set()
    elements: list[FieldDescriptor] = []
    for index, raw in enumerate(payload["elements"]):
        loc = f"elements.{index}"
        element_id = raw["id"].strip()
        if not ELEMENT_ID_PATTERN.match(element_id):
            errors.append({"field": f"{loc}.id", "reason": "must start with a letter"})
        if element_id in seen:
            errors.append({"field": f"{loc}.id", "reason": f"duplicate id ({element_id})"})
        seen.add(element_id)
        if FieldType.parse(raw["type"]) is None:
            errors.append({"field": f"{loc}.type", "reason": f"unknown type ({raw['type']})"})
        elements.append(
            FieldDescriptor.from_dict({**raw, "id": element_id, "content": raw.get("content", "")})
        )

    if not elements:
        errors.append({"field": "elements", "reason": "at least one element is required"})
    return elements, errors


def build_property(descriptor: FieldDescriptor) -> dict[str, Any]:
    if descriptor.type is FieldType.CHECKBOX:
        return {"type": "boolean", "title": descriptor.content}
    # Browsers submit an empty string for an untouched date input, so dates stay plain strings.
    return {"type": "string", "title": descriptor.content}


def submission_schema(template: FormTemplate) -> dict[str, Any]:
    properties = {
        element.id: build_property(element)
        for element in template.elements
        if element.type is not None
    }
    return {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }


def validate_submission(template: FormTemplate, values: Any) -> list[dict[str, str]]:
    """Check the shape of submitted values; no required or format rules apply."""
    if not isinstance(values, dict):
        return [{"field": "values", "reason": "must be an object"}]
    validator = Draft7Validator(submission_schema(template))
    errors = sorted(validator.iter_errors(values), key=lambda err: list(err.path))
    return [{"field": _error_field(error, "values"), "reason": error.message} for error in errors]
