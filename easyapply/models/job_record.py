from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


CSV_FORMAT_VERSION = 1
# job board label when the page was never classified
DEFAULT_SOURCE = "Other"


class JobStatus(str, Enum):
    FILLED = "filled"
    SUBMITTED = "submitted"
    CLICKED = "clicked"
    SKIPPED = "skipped"
    ERROR = "error"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. ``2024-05-01T09:30:00.123Z``."""
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def make_job_id(url: str, started_at: str) -> str:
    """Short fingerprint used to correlate CSV rows with narration logs."""
    return hashlib.sha1(f"{url}{started_at}".encode("utf-8")).hexdigest()[:12]


@dataclass
class JobRecord:
    """
    单个 URL 的处理结果。

    以 ``error`` 作为悲观默认值创建，处理过程中原地更新，结束时只落盘一次。
    """

    url: str
    started_at: datetime
    job_id: str
    status: JobStatus = JobStatus.ERROR
    ended_at: datetime | None = None
    company: str = ""
    job_title: str = ""
    source: str = DEFAULT_SOURCE
    resume_used: str = ""
    notes: str = ""

    @classmethod
    def start(
        cls, url: str, *, resume_used: str = "", now: datetime | None = None
    ) -> "JobRecord":
        started_at = now or utc_now()
        return cls(
            url=url,
            started_at=started_at,
            job_id=make_job_id(url, format_timestamp(started_at)),
            resume_used=resume_used,
        )

    def finish(self, now: datetime | None = None) -> None:
        self.ended_at = now or utc_now()

    @property
    def duration_seconds(self) -> float:
        end = self.ended_at or utc_now()
        return (end - self.started_at).total_seconds()

    def to_row(self) -> list[str]:
        ended = self.ended_at or self.started_at
        return [
            str(CSV_FORMAT_VERSION),
            format_timestamp(self.started_at),
            format_timestamp(ended),
            self.status.value,
            self.company or "",
            self.job_title or "",
            self.source or "",
            self.url,
            self.resume_used or "",
            self.notes or "",
            self.job_id,
        ]
