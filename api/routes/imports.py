from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from shared.db import get_db
from shared.models import ImportBatch, ImportLog, User

from ..dependencies import get_current_user
from ..schemas.imports import ImportLogEntry, ImportLogListResponse

router = APIRouter(prefix="/templates/imports", tags=["imports"])


@router.get("/{batch_id}/logs", response_model=ImportLogListResponse)
def list_import_logs(
    batch_id: uuid.UUID,
    limit: int = Query(100, ge=1, le=500),
    after: uuid.UUID | None = Query(None),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
) -> ImportLogListResponse:
    batch = session.get(ImportBatch, batch_id)
    if not batch or batch.requested_by != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import not found")

    query = select(ImportLog).where(ImportLog.batch_id == batch_id)

    if after is not None:
        cursor = session.get(ImportLog, after)
        if not cursor or cursor.batch_id != batch_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cursor not found")

        query = query.where(
            or_(
                ImportLog.created_at > cursor.created_at,
                and_(
                    ImportLog.created_at == cursor.created_at,
                    ImportLog.id > cursor.id,
                ),
            )
        )

    query = query.order_by(ImportLog.created_at.asc(), ImportLog.id.asc()).limit(limit)
    logs = session.scalars(query).all()

    entries = [ImportLogEntry.model_validate(row) for row in logs]
    next_cursor = logs[-1].id if logs and len(logs) == limit else None

    return ImportLogListResponse(logs=entries, next_cursor=next_cursor)
