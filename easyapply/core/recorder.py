"""
结果记录：每个 URL 追加一行到 CSV（只追加，每次写入都单独打开/关闭文件）。
"""

from __future__ import annotations

import csv
from pathlib import Path

from ..models.job_record import JobRecord

CSV_HEADER = (
    "version",
    "timestamp_start",
    "timestamp_end",
    "status",
    "company",
    "job_title",
    "source",
    "url",
    "resume_used",
    "notes",
    "job_id",
)


class OutcomeRecorder:
    """
    Append-only outcome log.

    IO errors are not caught: losing the audit trail aborts the batch.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def ensure_file(self) -> None:
        """Create the file with its header unless it already exists."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            return
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            csv.writer(f, lineterminator="\n").writerow(CSV_HEADER)

    def append(self, record: JobRecord) -> None:
        self.ensure_file()
        with open(self.path, "a", encoding="utf-8", newline="") as f:
            csv.writer(f, lineterminator="\n").writerow(record.to_row())

    def read_rows(self, limit: int | None = None) -> list[dict]:
        """Recorded rows, newest first."""
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        rows.reverse()
        return rows[:limit] if limit else rows
