"""CLI hook that imports a template CSV into the configured database."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from outputs.csv import write_import_report
from shared.db import get_sync_session

from .errors import ValidationError
from .importer import load_csv_rows, run_import
from .result import ImportReport


def import_file(csv_path: Path, report_path: Optional[Path] = None) -> ImportReport:
    rows = load_csv_rows(csv_path.read_text(encoding="utf-8"))
    with get_sync_session() as session:
        _, report = run_import(session, rows, source=csv_path.name)
    if report_path is not None:
        write_import_report(report_path, [outcome.to_dict() for outcome in report.outcomes])
    return report


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Import ad templates from a CSV file.")
    parser.add_argument("csv", type=Path)
    parser.add_argument("--report", type=Path, default=None, help="Write per-row outcomes to this CSV")
    args = parser.parse_args(argv)

    try:
        report = import_file(args.csv, args.report)
    except ValidationError as exc:
        print(f"FAIL import: {exc}")
        sys.exit(2)

    print(report.message)
    for outcome in report.skipped:
        print(f"- row {outcome.row} ({outcome.name}): {outcome.status.value.upper()} {outcome.reason}")
    if report.skipped:
        sys.exit(1)


if __name__ == "__main__":
    main()
