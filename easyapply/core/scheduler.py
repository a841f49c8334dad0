"""
批次调度器：在后台线程中运行一个批次，并拒绝并发的第二个批次。

“批次运行中”标记由请求处理层持有（app.py 中的单例），核心流程本身不含全局状态。
"""

from __future__ import annotations

from threading import Lock, Thread
from typing import Callable, Optional, Sequence

from ..models.profile import Profile
from .batch_runner import run_batch
from .narration import LogFn, make_logger

BatchRunnerFn = Callable[..., object]


class BatchScheduler:
    """
    单批次调度器。

    ``try_start`` 返回 False 表示已有批次在运行。
    """

    def __init__(
        self,
        runner: Optional[BatchRunnerFn] = None,
        log_fn: Optional[LogFn] = None,
    ) -> None:
        self._runner = runner or run_batch
        self._log = log_fn or make_logger(None, persist=False)
        self._lock = Lock()
        self._running = False
        self._thread: Optional[Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def try_start(
        self,
        urls: Sequence[str],
        *,
        auto_submit: bool = False,
        profile: Optional[Profile] = None,
    ) -> bool:
        with self._lock:
            if self._running:
                return False
            self._running = True
        self._thread = Thread(
            target=self._run,
            args=(list(urls), auto_submit, profile),
            daemon=True,
        )
        self._thread.start()
        return True

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self, urls: list[str], auto_submit: bool, profile: Optional[Profile]) -> None:
        try:
            self._runner(urls, auto_submit=auto_submit, profile=profile)
        except Exception as e:
            self._log(f"Batch error: {e}", "error")
        finally:
            with self._lock:
                self._running = False
