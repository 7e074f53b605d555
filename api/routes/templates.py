from __future__ import annotations

import uuid
from typing import NoReturn

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from catalog.errors import (
    DuplicateError,
    NotFoundError,
    TemplateError,
    UnauthorizedError,
    ValidationError,
)
from catalog.importer import load_csv_rows, run_import
from catalog.service import TemplateService
from shared.db import get_db
from shared.models import TemplateCategory, User

from ..dependencies import get_current_user, get_template_service
from ..schemas.imports import ImportResponse
from ..schemas.templates import (
    DuplicateTemplateRequest,
    LaunchRequest,
    LaunchResponse,
    TemplateCreateRequest,
    TemplateFromTaskRequest,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdateRequest,
    VisibilityUpdateRequest,
)

router = APIRouter(prefix="/templates", tags=["templates"])

ERROR_STATUS: dict[type[TemplateError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DuplicateError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
}


def raise_http(exc: TemplateError) -> NoReturn:
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            raise HTTPException(status_code=code, detail=exc.message) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc


@router.get("", response_model=TemplateListResponse)
def list_templates(
    category: TemplateCategory | None = Query(None),
    search: str | None = Query(None, max_length=200),
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> TemplateListResponse:
    records = service.list_templates(current_user.id, category=category, search=search or None)
    templates = [TemplateResponse.from_record(record) for record in records]
    return TemplateListResponse(templates=templates, count=len(templates))


@router.post("/import", response_model=ImportResponse)
def import_templates(
    file: UploadFile = File(...),
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ImportResponse:
    raw = file.file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="CSV must be UTF-8 encoded") from exc

    try:
        batch, report = run_import(
            session,
            load_csv_rows(text),
            requested_by=current_user.id,
            source=file.filename or "upload",
        )
    except TemplateError as exc:
        raise_http(exc)
    return ImportResponse.from_report(batch.id, report)


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: uuid.UUID,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> TemplateResponse:
    try:
        record = service.get_template(template_id, current_user.id)
    except TemplateError as exc:
        raise_http(exc)
    return TemplateResponse.from_record(record)


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_template(
    payload: TemplateCreateRequest,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> TemplateResponse:
    try:
        record = service.create_template(
            current_user.id,
            name=payload.name,
            objective=payload.objective,
            conversion_method=payload.conversion_method,
            targeting=payload.targeting.to_domain(),
            budget=payload.budget.to_domain(),
            ad_copy=payload.ad_copy.to_domain(),
            category=payload.category,
            description=payload.description,
            image_url=payload.image_url,
        )
    except TemplateError as exc:
        raise_http(exc)
    return TemplateResponse.from_record(record)


@router.post("/from-task/{task_id}", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_from_task(
    task_id: uuid.UUID,
    payload: TemplateFromTaskRequest,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> TemplateResponse:
    try:
        record = service.create_from_task(
            task_id,
            current_user.id,
            payload.name,
            category=payload.category,
            description=payload.description,
        )
    except TemplateError as exc:
        raise_http(exc)
    return TemplateResponse.from_record(record)


@router.put("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: uuid.UUID,
    payload: TemplateUpdateRequest,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> TemplateResponse:
    try:
        record = service.update_template(template_id, current_user.id, payload.to_changes())
    except TemplateError as exc:
        raise_http(exc)
    return TemplateResponse.from_record(record)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: uuid.UUID,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> Response:
    try:
        service.delete_template(template_id, current_user.id)
    except TemplateError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{template_id}/duplicate", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def duplicate_template(
    template_id: uuid.UUID,
    payload: DuplicateTemplateRequest | None = None,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> TemplateResponse:
    try:
        record = service.duplicate_template(template_id, current_user.id, payload.name if payload else None)
    except TemplateError as exc:
        raise_http(exc)
    return TemplateResponse.from_record(record)


@router.put("/{template_id}/visibility", response_model=TemplateResponse)
def set_visibility(
    template_id: uuid.UUID,
    payload: VisibilityUpdateRequest,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> TemplateResponse:
    try:
        record = service.set_visibility(template_id, current_user.id, payload.visibility)
    except TemplateError as exc:
        raise_http(exc)
    return TemplateResponse.from_record(record)


@router.post("/{template_id}/launch", response_model=LaunchResponse)
def launch_template(
    template_id: uuid.UUID,
    payload: LaunchRequest | None = None,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(get_current_user),
) -> LaunchResponse:
    overrides = payload.to_overrides() if payload else {}
    try:
        launch = service.launch(template_id, current_user.id, overrides)
    except TemplateError as exc:
        raise_http(exc)
    return LaunchResponse.from_payload(launch)
