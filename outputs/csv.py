"""Helpers for writing import reports to CSV."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

import pandas as pd

REPORT_COLUMNS: Sequence[str] = ("row", "name", "status", "reason", "template_id")


def write_records(
    path: Path,
    records: Iterable[Mapping[str, object]],
    columns: Optional[Sequence[str]] = None,
) -> Path:
    """Write ``records`` to ``path``; missing columns are left blank."""

    df = pd.DataFrame(list(records), columns=list(columns) if columns else None)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path


def write_import_report(path: Path, outcomes: Iterable[Mapping[str, object]]) -> Path:
    return write_records(path, outcomes, columns=REPORT_COLUMNS)
