"""Duplicate guard for template ingestion."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, TYPE_CHECKING

from shared.models import TemplateCategory

if TYPE_CHECKING:  # pragma: no cover
    from .repository import TemplateStore


@dataclass
class DuplicateStats:
    """Aggregate statistics captured by the duplicate guard."""

    evaluated: int = 0
    suppressed: int = 0
    collisions: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "evaluated": self.evaluated,
            "suppressed": self.suppressed,
            "collisions": self.collisions,
        }


class DuplicateDetector:
    """Exact (name, category) lookup against the template store.

    Names are compared after trimming and are case-sensitive; there is no
    fuzzy matching, so near-duplicates are allowed through.  The check and the
    later insert are not atomic: two concurrent imports of the same pair can
    both pass.
    """

    def __init__(self, store: "TemplateStore") -> None:
        self.store = store
        self._stats = DuplicateStats()

    def is_duplicate(self, name: str, category: TemplateCategory) -> bool:
        candidate = (name or "").strip()
        self._stats.evaluated += 1
        matches = self.store.find_by_name_and_category(candidate, category)
        if not matches:
            return False
        self._stats.suppressed += 1
        self._stats.collisions.append(
            {
                "name": candidate,
                "category": category.value,
                "existing_ids": [str(match.id) for match in matches],
            }
        )
        return True

    def summary(self) -> Dict[str, Any]:
        return self._stats.as_dict()


__all__ = ["DuplicateDetector", "DuplicateStats"]
