"""Bulk CSV import shared by the API, the Celery worker and the CLI."""
from __future__ import annotations

import csv
import io
import uuid
from datetime import UTC, datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from shared.config import get_settings
from shared.logs import emit_log
from shared.models import ImportBatch, ImportStatus

from .errors import ValidationError
from .repository import TemplateRepository
from .result import ImportReport
from .service import TemplateService


def load_csv_rows(text: str) -> List[Dict[str, str]]:
    """Parse CSV text into stripped dictionaries, skipping blank lines."""

    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    rows = []
    for row in reader:
        # Columns beyond the header land under a ``None`` key.
        cleaned = {key.strip(): (value or "").strip() for key, value in row.items() if key is not None}
        if any(cleaned.values()):
            rows.append(cleaned)
    return rows


def check_batch_size(rows: Sequence[Dict[str, str]]) -> None:
    limit = get_settings().import_max_rows
    if not rows:
        raise ValidationError("CSV file is empty", rule="batch_empty")
    if len(rows) > limit:
        raise ValidationError(f"Maximum {limit} templates per upload", rule="batch_size")


def run_import(
    session: Session,
    rows: Sequence[Dict[str, str]],
    *,
    requested_by: Optional[uuid.UUID] = None,
    source: str = "upload",
) -> Tuple[ImportBatch, ImportReport]:
    """Import ``rows`` as system templates and keep an auditable batch log."""

    check_batch_size(rows)
    batch = ImportBatch(
        id=uuid.uuid4(),
        requested_by=requested_by,
        source=source,
        status=ImportStatus.RUNNING,
        total_rows=len(rows),
    )
    session.add(batch)
    session.commit()
    emit_log(session, batch.id, f"Starting import of {len(rows)} rows", metadata={"source": source})

    service = TemplateService(TemplateRepository(session))
    try:
        report = service.import_rows(rows)
    except Exception as exc:
        session.rollback()
        batch.status = ImportStatus.FAILED
        batch.finished_at = datetime.now(UTC)
        session.commit()
        emit_log(session, batch.id, "Import failed", level="error", metadata={"error": str(exc)})
        raise

    for outcome in report.skipped:
        emit_log(
            session,
            batch.id,
            f"Row {outcome.row} skipped: {outcome.reason}",
            level="warning",
            metadata=outcome.to_dict(),
        )

    batch.status = ImportStatus.COMPLETED
    batch.imported = report.imported
    batch.skipped = len(report.skipped)
    batch.finished_at = datetime.now(UTC)
    session.commit()
    emit_log(
        session,
        batch.id,
        report.message,
        metadata={"duplicates": service.duplicates.summary()["suppressed"], "imported": report.imported},
    )
    return batch, report


__all__ = ["check_batch_size", "load_csv_rows", "run_import"]
