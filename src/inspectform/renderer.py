from __future__ import annotations

import logging
from typing import Any, Mapping

import markupsafe

from inspectform.errors import NotFoundError, TransportError, ValidationError
from inspectform.fields import FieldDescriptor, FieldType, FormTemplate, parse_bool
from inspectform.schema import validate_submission
from inspectform.storage import STORAGE_ERRORS, Storage
from inspectform.utils import new_ulid, now_utc, to_iso

logger = logging.getLogger(__name__)


def _render_text(descriptor: FieldDescriptor) -> markupsafe.Markup:
    return markupsafe.Markup(
        '<label class="field field-text">{label}'
        '<input type="text" name="{id}" placeholder="{label}"></label>'
    ).format(id=descriptor.id, label=descriptor.content)


def _render_checkbox(descriptor: FieldDescriptor) -> markupsafe.Markup:
    return markupsafe.Markup(
        '<label class="field field-checkbox">'
        '<input type="checkbox" name="{id}" value="true"> {label}</label>'
    ).format(id=descriptor.id, label=descriptor.content)


def _render_date(descriptor: FieldDescriptor) -> markupsafe.Markup:
    return markupsafe.Markup(
        '<label class="field field-date">{label}'
        '<input type="date" name="{id}"></label>'
    ).format(id=descriptor.id, label=descriptor.content)


def _render_signature(descriptor: FieldDescriptor) -> markupsafe.Markup:
    return markupsafe.Markup(
        '<div class="field field-signature"><span>{label}</span>'
        '<canvas class="signature-pad" data-target="{id}" width="400" height="150"></canvas>'
        '<input type="hidden" name="{id}"></div>'
    ).format(id=descriptor.id, label=descriptor.content)


RENDERERS = {
    FieldType.TEXT: _render_text,
    FieldType.CHECKBOX: _render_checkbox,
    FieldType.DATE: _render_date,
    FieldType.SIGNATURE: _render_signature,
}


def render_field(descriptor: FieldDescriptor) -> markupsafe.Markup:
    # Elements with an unrecognised type render as nothing.
    if descriptor.type is None:
        logger.debug("Skipping element %r with unknown type %r", descriptor.id, descriptor.raw_type)
        return markupsafe.Markup("")
    return RENDERERS[descriptor.type](descriptor)


def load_template(storage: Storage, form_name: str) -> FormTemplate:
    record = storage.forms.get_form(form_name)
    if not record:
        raise NotFoundError("Form", form_name)
    return FormTemplate.from_record(record)


def collect_submission(template: FormTemplate, form_data: Mapping[str, Any]) -> dict[str, Any]:
    """Turn browser form input into a ``{element id: value}`` mapping."""
    values: dict[str, Any] = {}
    for element in template.elements:
        if element.type is None:
            continue
        raw_value = form_data.get(element.id)
        if element.type is FieldType.CHECKBOX:
            # Unchecked boxes are absent from the form body.
            values[element.id] = parse_bool(raw_value) if raw_value is not None else False
        else:
            values[element.id] = str(raw_value) if raw_value is not None else ""
    return values


def submit(
    storage: Storage,
    form_name: str,
    values: Any,
    submitted_by: str | None = None,
) -> dict[str, Any]:
    template = load_template(storage, form_name)
    errors = validate_submission(template, values)
    if errors:
        raise ValidationError(errors)
    submission = {
        "id": new_ulid(),
        "form_name": template.name,
        "values": values,
        "submitted_by": submitted_by,
        "created_at": now_utc(),
    }
    try:
        storage.submissions.create_submission(submission)
    except STORAGE_ERRORS as exc:
        logger.exception("Storing submission for %r failed", form_name)
        raise TransportError() from exc
    logger.info("Stored submission %s for form %r", submission["id"], form_name)
    return submission


def submission_output(submission: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": submission["id"],
        "formName": submission["form_name"],
        "values": submission.get("values", {}),
        "submittedBy": submission.get("submitted_by"),
        "createdAt": to_iso(submission["created_at"]),
    }
