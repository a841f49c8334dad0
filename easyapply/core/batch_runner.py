"""
批量执行：单浏览器、单标签页，严格按顺序逐个处理 URL。
"""

from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from ..config import BatchSettings, load_settings, load_user_profile
from ..models.profile import Profile
from .applier import LogFactory, apply_to_url
from .browser_manager import BrowserManager
from .narration import make_logger
from .recorder import OutcomeRecorder


def run_batch(
    urls: Sequence[str],
    *,
    auto_submit: bool = False,
    profile: Optional[Profile] = None,
    settings: Optional[BatchSettings] = None,
    recorder: Optional[OutcomeRecorder] = None,
    browser_manager: Optional[BrowserManager] = None,
    log_factory: LogFactory = make_logger,
) -> Counter[str]:
    """
    Process ``urls`` one after another and return a status tally.

    Profile problems raise :class:`ProfileConfigError` before the browser is
    started. Callers guarantee no two batches run at the same time.
    """
    if not urls:
        raise ValueError("run_batch() needs at least one URL")

    settings = settings or load_settings()
    recorder = recorder or OutcomeRecorder(settings.csv_path)
    recorder.ensure_file()
    profile = profile or load_user_profile()

    log = log_factory(None)
    manager = browser_manager or BrowserManager(settings.browser, log_fn=log)
    session = manager.launch()
    log(f"batch: starting {len(urls)} URL(s)")

    tally: Counter[str] = Counter()
    try:
        for i, url in enumerate(urls, start=1):
            log(f"--- job {i}/{len(urls)} ---")
            page = session.ensure_page()
            record = apply_to_url(
                page,
                url,
                profile=profile,
                settings=settings,
                recorder=recorder,
                auto_submit=auto_submit,
                log_factory=log_factory,
            )
            tally[record.status.value] += 1
    finally:
        session.close()
        log(f"batch: finished {dict(tally)}")
    return tally
