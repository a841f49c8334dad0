"""
表单稳定性检测：轮询 input/select/textarea 数量，直到连续几次不再变化。
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from playwright.sync_api import Page

from .narration import LogFn, null_log

FORM_CONTROL_SELECTOR = "input, select, textarea"


def wait_for_form_stability(
    page: Page,
    max_wait_ms: int = 5000,
    *,
    poll_interval_ms: int = 500,
    stable_polls: int = 3,
    log_fn: Optional[LogFn] = None,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """
    Return True once the control count was unchanged for ``stable_polls``
    consecutive polls, False when ``max_wait_ms`` runs out first.
    """
    log = log_fn or null_log
    previous: Optional[int] = None
    stable_count = 0
    start = clock()

    while (clock() - start) * 1000 < max_wait_ms:
        current = page.locator(FORM_CONTROL_SELECTOR).count()
        if current == previous:
            stable_count += 1
            if stable_count >= stable_polls:
                elapsed = int((clock() - start) * 1000)
                log(f"form: stable with {current} fields after {elapsed}ms")
                return True
        else:
            stable_count = 0
            if previous is not None:
                log(f"form: field count changed from {previous} to {current}", "debug")
        previous = current
        page.wait_for_timeout(poll_interval_ms)

    log(f"form: timeout waiting for stability, final count: {previous}", "warn")
    return False
