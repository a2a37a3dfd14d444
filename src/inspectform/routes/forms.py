from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from inspectform.builder import move_element
from inspectform.deps import get_storage, read_json_object, require_session
from inspectform.errors import NotFoundError, ValidationError
from inspectform.fields import FieldDescriptor
from inspectform.renderer import load_template, submission_output, submit
from inspectform.schema import parse_elements
from inspectform.security import SessionContext
from inspectform.storage import Storage
from inspectform.utils import now_utc

logger = logging.getLogger(__name__)

router = APIRouter()


def _index(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError.single(key, "must be an integer")
    return value


@router.get("/api/forms", tags=["api/forms"])
async def api_list_forms(storage: Storage = Depends(get_storage)) -> JSONResponse:
    forms = storage.forms.list_forms()
    return JSONResponse([{"name": form["name"], "title": form["title"]} for form in forms])


@router.get("/api/forms/{form_name}", tags=["api/forms"])
async def api_get_form(form_name: str, storage: Storage = Depends(get_storage)) -> JSONResponse:
    return JSONResponse(load_template(storage, form_name).to_output())


@router.put("/api/forms/{form_name}", tags=["api/forms"])
async def api_save_form(
    form_name: str,
    request: Request,
    storage: Storage = Depends(get_storage),
    context: SessionContext = Depends(require_session),
) -> JSONResponse:
    payload = await read_json_object(request)
    elements, errors = parse_elements(payload)
    if errors:
        raise ValidationError(errors)
    updates: dict[str, Any] = {
        "elements": [element.to_dict() for element in elements],
        "updated_at": now_utc(),
    }
    if "title" in payload and str(payload["title"]).strip():
        updates["title"] = str(payload["title"]).strip()
    try:
        storage.forms.update_form(form_name, updates)
    except KeyError as exc:
        raise NotFoundError("Form", form_name) from exc
    logger.info("Form %r saved by user %s", form_name, context.user_id)
    return JSONResponse(load_template(storage, form_name).to_output())


@router.post("/api/forms/{form_name}/builder/move", tags=["api/forms"])
async def api_move_element(
    form_name: str,
    request: Request,
    storage: Storage = Depends(get_storage),
    _: SessionContext = Depends(require_session),
) -> JSONResponse:
    payload = await read_json_object(request)
    from_index = _index(payload, "from")
    to_index = _index(payload, "to")
    if "elements" in payload:
        current, errors = parse_elements({"elements": payload["elements"]})
        if errors:
            raise ValidationError(errors)
    else:
        current = load_template(storage, form_name).elements
    size = len(current)
    for key, index in (("from", from_index), ("to", to_index)):
        if not 0 <= index < size:
            raise ValidationError.single(key, f"must be between 0 and {size - 1}")
    moved: list[FieldDescriptor] = move_element(current, from_index, to_index)
    return JSONResponse({"elements": [element.to_dict() for element in moved]})


@router.post("/api/forms/{form_name}/submit", tags=["api/submissions"])
async def api_submit_form(
    form_name: str,
    request: Request,
    storage: Storage = Depends(get_storage),
    context: SessionContext = Depends(require_session),
) -> JSONResponse:
    payload = await read_json_object(request)
    values = payload.get("values", payload)
    submission = submit(storage, form_name, values, submitted_by=context.user_id)
    return JSONResponse({"success": True, "submissionId": submission["id"]})


@router.get("/api/forms/{form_name}/submissions", tags=["api/submissions"])
async def api_list_submissions(
    form_name: str,
    storage: Storage = Depends(get_storage),
    _: SessionContext = Depends(require_session),
) -> JSONResponse:
    template = load_template(storage, form_name)
    submissions = storage.submissions.list_submissions(template.name)
    return JSONResponse([submission_output(item) for item in submissions])
