"""Per-row outcomes produced by a bulk template import."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RowStatus(str, Enum):
    IMPORTED = "imported"
    DUPLICATE = "duplicate"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass(slots=True)
class RowOutcome:
    """What happened to one CSV row."""

    row: int
    name: str
    status: RowStatus
    reason: str = ""
    template_id: Optional[uuid.UUID] = None

    def is_skipped(self) -> bool:
        return self.status is not RowStatus.IMPORTED

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "row": self.row,
            "name": self.name,
            "status": self.status.value,
        }
        if self.reason:
            payload["reason"] = self.reason
        if self.template_id:
            payload["template_id"] = str(self.template_id)
        return payload


@dataclass
class ImportReport:
    outcomes: List[RowOutcome] = field(default_factory=list)

    def add(self, outcome: RowOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def imported(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is RowStatus.IMPORTED)

    @property
    def skipped(self) -> List[RowOutcome]:
        return [outcome for outcome in self.outcomes if outcome.is_skipped()]

    def count(self, status: RowStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def message(self) -> str:
        return f"Import complete. {self.imported} templates imported, {len(self.skipped)} skipped."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "imported": self.imported,
            "duplicates": self.count(RowStatus.DUPLICATE),
            "invalid": self.count(RowStatus.INVALID),
            "failed": self.count(RowStatus.FAILED),
            "skipped": [outcome.to_dict() for outcome in self.skipped],
        }
