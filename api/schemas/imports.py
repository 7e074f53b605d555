from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from catalog.result import ImportReport, RowStatus


class SkippedRow(BaseModel):
    row: int
    name: str
    status: str
    reason: str = ""


class ImportResponse(BaseModel):
    batch_id: UUID
    message: str
    imported: int = 0
    duplicates: int = 0
    invalid: int = 0
    failed: int = 0
    skipped: List[SkippedRow] = Field(default_factory=list)

    @classmethod
    def from_report(cls, batch_id: UUID, report: ImportReport) -> "ImportResponse":
        return cls(
            batch_id=batch_id,
            message=report.message,
            imported=report.imported,
            duplicates=report.count(RowStatus.DUPLICATE),
            invalid=report.count(RowStatus.INVALID),
            failed=report.count(RowStatus.FAILED),
            skipped=[
                SkippedRow(row=outcome.row, name=outcome.name, status=outcome.status.value, reason=outcome.reason)
                for outcome in report.skipped
            ],
        )


class ImportLogEntry(BaseModel):
    id: UUID
    batch_id: UUID
    created_at: datetime
    level: str
    message: str
    metadata: Dict[str, Any] = Field(default_factory=dict, alias="data")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ImportLogListResponse(BaseModel):
    logs: List[ImportLogEntry] = Field(default_factory=list)
    next_cursor: Optional[UUID] = None
