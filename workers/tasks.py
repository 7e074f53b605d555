"""Celery tasks for bulk template imports."""
from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from celery import shared_task
from celery.utils.log import get_task_logger

from catalog.errors import ValidationError
from catalog.importer import load_csv_rows, run_import
from shared.db import get_sync_session

logger = get_task_logger(__name__)


@shared_task(name="templates.import_csv")
def import_csv_task(csv_text: str, requested_by: Optional[str] = None) -> Dict[str, Any]:
    """Import a CSV document and return the batch summary."""

    rows = load_csv_rows(csv_text)
    owner = uuid.UUID(requested_by) if requested_by else None

    with get_sync_session() as session:
        try:
            batch, report = run_import(session, rows, requested_by=owner, source="worker")
        except ValidationError as exc:
            logger.warning("Rejected import from %s: %s", requested_by or "system", exc)
            raise

    logger.info("Import batch %s finished: %s", batch.id, report.message)
    summary = report.to_dict()
    summary["batch_id"] = str(batch.id)
    return summary
