"""
SVG Holder Backend — SVG Route Handlers
=========================================

What:  The CRUD + search endpoints under the configured API prefix (/api/svgs).
How:   Extracts form fields, JSON bodies, path and query parameters, delegates
       to SvgService, and wraps results in success envelopes. Failures are
       raised as application exceptions and formatted by the global handlers.
Who:   Called by the gallery client (app.client) and any other HTTP consumer.

Route Inventory:
    GET    /api/svgs            list all records (newest first)
    GET    /api/svgs/search?q=  search name/description
    GET    /api/svgs/{id}       single record
    POST   /api/svgs            multipart upload: name, description, svgFile
    PUT    /api/svgs/{id}       JSON or form body: name, description
    DELETE /api/svgs/{id}       hard delete

/search is declared before /{svg_id} so it is never captured as an id.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from app.schemas.svg import (
    StatusEnvelope,
    SvgEnvelope,
    SvgListEnvelope,
    SvgUpdateRequest,
)
from app.services.svg_service import SvgService
from app.exceptions import ValidationError
from app.services.validation import WRONG_TYPE_MESSAGE, SvgValidator, UploadCandidate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["SVGs"])

_ERRORS = {
    400: {"description": "Validation error", "model": StatusEnvelope},
    404: {"description": "SVG not found", "model": StatusEnvelope},
    500: {"description": "Server error", "model": StatusEnvelope},
}


def get_svg_service(request: Request) -> SvgService:
    """Dependency: the service instance built by create_app()."""
    return request.app.state.svg_service


async def read_upload(file: UploadFile, validator: SvgValidator) -> UploadCandidate:
    """
    Buffer an uploaded file, never holding more than max_file_size + 1 bytes.

    The file type is checked first, then the declared part size, then a
    bounded read catches parts whose size was not declared. Bodies far over
    the cap never get here (UploadLimitMiddleware).

    Raises:
        ValidationError: not an SVG, or larger than the configured maximum
    """
    if not validator.is_svg_upload(file.filename, file.content_type):
        raise ValidationError(
            message=WRONG_TYPE_MESSAGE,
            field="svgFile",
            context={"filename": file.filename, "content_type": file.content_type},
        )
    validator.check_size(file.size)
    content = await file.read(validator.max_file_size + 1)
    validator.check_size(len(content))
    return UploadCandidate(
        filename=file.filename or "",
        content_type=file.content_type,
        content=content,
    )


FORM_MEDIA_TYPES = {"application/x-www-form-urlencoded", "multipart/form-data"}

_UPDATE_BODY_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "New display name"},
        "description": {"type": "string", "description": "New description"},
    },
}


def _form_text(value) -> Optional[str]:
    return value if isinstance(value, str) else None


async def read_update_payload(request: Request) -> SvgUpdateRequest:
    """
    Dependency: name/description from a JSON body or from form fields.

    An empty body yields empty fields, so the validation layer reports the
    missing values. A body that is neither a form nor a JSON object of
    strings is a malformed request.
    """
    media_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if media_type in FORM_MEDIA_TYPES:
        form = await request.form()
        return SvgUpdateRequest(
            name=_form_text(form.get("name")),
            description=_form_text(form.get("description")),
        )

    body = await request.body()
    if not body.strip():
        return SvgUpdateRequest()
    try:
        return SvgUpdateRequest.model_validate_json(body)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))


@router.get(
    "",
    response_model=SvgListEnvelope,
    response_model_exclude_none=True,
    responses={500: _ERRORS[500]},
    summary="List all SVGs",
)
@router.get("/", include_in_schema=False, response_model=SvgListEnvelope, response_model_exclude_none=True)
async def list_svgs(service: SvgService = Depends(get_svg_service)) -> SvgListEnvelope:
    records = await service.list_svgs()
    return SvgListEnvelope(success=True, data=records)


@router.get(
    "/search",
    response_model=SvgListEnvelope,
    response_model_exclude_none=True,
    responses={400: _ERRORS[400], 500: _ERRORS[500]},
    summary="Search SVGs by name or description",
    description="Case-insensitive substring match against name and description, newest first.",
)
async def search_svgs(
    q: Optional[str] = Query(default=None, description="Text to look for"),
    service: SvgService = Depends(get_svg_service),
) -> SvgListEnvelope:
    records = await service.search_svgs(q)
    return SvgListEnvelope(success=True, data=records)


@router.get(
    "/{svg_id}",
    response_model=SvgEnvelope,
    response_model_exclude_none=True,
    responses={404: _ERRORS[404], 500: _ERRORS[500]},
    summary="Get a single SVG by ID",
)
async def get_svg(
    svg_id: str,
    service: SvgService = Depends(get_svg_service),
) -> SvgEnvelope:
    """
    svg_id is taken as a plain string: a malformed id is a 404 like any
    unknown id, not a request validation error.
    """
    record = await service.get_svg(svg_id)
    return SvgEnvelope(success=True, data=record)


@router.post(
    "",
    status_code=201,
    response_model=SvgEnvelope,
    response_model_exclude_none=True,
    responses={400: _ERRORS[400], 500: _ERRORS[500]},
    summary="Upload a new SVG",
    description="Multipart form with `name`, `description` and the file in `svgFile` (max 5MB).",
)
@router.post(
    "/",
    status_code=201,
    include_in_schema=False,
    response_model=SvgEnvelope,
    response_model_exclude_none=True,
)
async def create_svg(
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    svg_file: Optional[UploadFile] = File(default=None, alias="svgFile"),
    service: SvgService = Depends(get_svg_service),
) -> SvgEnvelope:
    """
    Processing Steps:
        1. Buffer the file with the size cap enforced (transport edge)
        2. SvgService validates fields, type, size and content, then inserts
        3. Return 201 with the stored record
    """
    upload: Optional[UploadCandidate] = None
    if svg_file is not None:
        try:
            upload = await read_upload(svg_file, service.validator)
        finally:
            await svg_file.close()

        logger.info(
            "Received upload: filename=%s, size=%d bytes",
            upload.filename or "unknown",
            upload.size,
        )

    record = await service.create_svg(name, description, upload)
    return SvgEnvelope(success=True, message="SVG uploaded successfully", data=record)


@router.put(
    "/{svg_id}",
    response_model=SvgEnvelope,
    response_model_exclude_none=True,
    responses=_ERRORS,
    summary="Update an SVG's name and description",
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": _UPDATE_BODY_SCHEMA},
                "application/x-www-form-urlencoded": {"schema": _UPDATE_BODY_SCHEMA},
            },
        },
    },
)
async def update_svg(
    svg_id: str,
    payload: SvgUpdateRequest = Depends(read_update_payload),
    service: SvgService = Depends(get_svg_service),
) -> SvgEnvelope:
    record = await service.update_svg(svg_id, payload.name, payload.description)
    return SvgEnvelope(success=True, message="SVG updated successfully", data=record)


@router.delete(
    "/{svg_id}",
    response_model=StatusEnvelope,
    response_model_exclude_none=True,
    responses={404: _ERRORS[404], 500: _ERRORS[500]},
    summary="Delete an SVG",
)
async def delete_svg(
    svg_id: str,
    service: SvgService = Depends(get_svg_service),
) -> StatusEnvelope:
    await service.delete_svg(svg_id)
    return StatusEnvelope(success=True, message="SVG deleted successfully")
