"""
运行叙述日志：打印到控制台，并按 job_id 写入 job_logs 表便于事后排查。
"""

from __future__ import annotations

from typing import Callable, Optional

from ..db.database import get_session
from ..models.job_log import JobLog

LogFn = Callable[[str, str], None]

LOG_PREFIX = "[easyapply]"


def null_log(message: str, level: str = "info") -> None:
    return None


def make_logger(
    job_id: Optional[str] = None,
    *,
    persist: bool = True,
    verbose: bool = True,
) -> LogFn:
    """
    Build a ``log_fn(message, level)`` for one URL (or the batch when
    ``job_id`` is None). ``debug`` lines are dropped unless ``verbose``.
    """

    def _log(message: str, level: str = "info") -> None:
        if level == "debug" and not verbose:
            return
        if persist:
            with get_session() as session:
                session.add(JobLog(job_id=job_id, level=level, message=message))
        tag = f"{LOG_PREFIX} [job={job_id}]" if job_id else LOG_PREFIX
        print(f"{tag} [{level.upper()}] {message}")

    return _log
