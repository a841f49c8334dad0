"""
单个 URL 的填表流程（状态机）。

NAVIGATE → STABILIZE → EXTRACT_META → FILL → HOLD_FOR_REVIEW → RECORD

- 任一步骤抛出的异常都在 URL 边界被捕获，记为 error，不影响后续 URL
- RECORD 在 finally 中执行，保证每个 URL 恰好落盘一行
"""

from __future__ import annotations

from typing import Callable, Optional

from playwright.sync_api import Error as PlaywrightError, Page

from ..config import BatchSettings
from ..models.job_record import JobRecord, JobStatus
from ..models.profile import Profile
from .form_probe import log_form_fields
from .narration import LogFn, make_logger, null_log
from .page_meta import extract_meta
from .recorder import OutcomeRecorder
from .registry import FIELDS
from .resolver import (
    LABEL_STRATEGIES,
    NAME_DETECTION_STRATEGIES,
    find_submit_control,
    locate,
    resolve,
    same_element,
    structural_matches,
    write_text,
)
from .stability import wait_for_form_stability

HOLD_BANNER_ID = "__ea_hold_banner"

HOLD_BANNER_SCRIPT = """
(msg) => {
  if (document.getElementById("__ea_hold_banner")) return;
  const wrap = document.createElement("div");
  wrap.id = "__ea_hold_banner";
  Object.assign(wrap.style, {
    position: "fixed",
    right: "16px",
    bottom: "16px",
    zIndex: "2147483647",
    background: "rgba(17,24,39,0.96)",
    color: "#fff",
    padding: "10px 12px",
    borderRadius: "10px",
    font: "13px/1.3 system-ui, -apple-system, Segoe UI, Roboto, sans-serif",
    boxShadow: "0 6px 24px rgba(0,0,0,0.3)",
  });
  wrap.textContent = msg;
  document.body.appendChild(wrap);
}
"""

LogFactory = Callable[[Optional[str]], LogFn]


def fill_names(
    page: Page,
    profile: Profile,
    *,
    log_fn: Optional[LogFn] = None,
    timeout_ms: int = 3000,
) -> dict[str, bool]:
    """
    姓名字段三选一：
    1. 同时找到名、姓控件 → 分别填写
    2. 两者都没有但有严格的全名控件 → 填 "名 姓"
    3. 否则按标签分别尝试名、姓
    """
    log = log_fn or null_log
    first = locate(page, FIELDS["first_name"], NAME_DETECTION_STRATEGIES)
    last = locate(page, FIELDS["last_name"], NAME_DETECTION_STRATEGIES)
    if first and last and same_element(first.locator, last.locator, timeout_ms=timeout_ms):
        # one control matched both patterns, e.g. placeholder="First and last name"
        log(f"detect: first/last name resolve to one control ({first.via})", "debug")
        first = last = None
    log(
        f"detect: firstName={'yes' if first else 'no'} lastName={'yes' if last else 'no'}",
        "debug",
    )

    if first and last:
        filled_first = write_text(first.locator, profile.first_name, timeout_ms=timeout_ms)
        filled_last = write_text(last.locator, profile.last_name, timeout_ms=timeout_ms)
        log(f"fill: {'ok  ' if filled_first else 'fail'} firstName → {first.via}")
        log(f"fill: {'ok  ' if filled_last else 'fail'} lastName → {last.via}")
        return {"first_name": filled_first, "last_name": filled_last}

    if not first and not last:
        full = locate(page, FIELDS["full_name"], (structural_matches,))
        if full:
            filled = write_text(full.locator, profile.full_name, timeout_ms=timeout_ms)
            log(f"fill: {'ok  ' if filled else 'fail'} fullName → {full.via}")
            return {"full_name": filled}

    results: dict[str, bool] = {}
    for field_name, match, value in (
        ("first_name", first, profile.first_name),
        ("last_name", last, profile.last_name),
    ):
        if match and write_text(match.locator, value, timeout_ms=timeout_ms):
            log(f"fill: ok   {field_name} → {match.via}")
            results[field_name] = True
            continue
        results[field_name] = resolve(
            page,
            field_name,
            value,
            log_fn=log,
            strategies=LABEL_STRATEGIES,
            timeout_ms=timeout_ms,
        )
    return results


def field_values(profile: Profile, settings: BatchSettings) -> list[tuple[str, str]]:
    """Remaining fields in fill order, with configured defaults applied."""
    return [
        ("email", profile.email),
        ("phone", profile.phone),
        ("salary", profile.salary or settings.default_for("salary")),
        ("linkedin", profile.linkedin),
        ("github", profile.github),
        ("website", profile.website or profile.personal_url or profile.linkedin),
        ("cv", profile.resume_file_path),
        ("gender", profile.gender),
        ("country", profile.location or settings.default_for("country")),
        ("tax_residence", profile.tax_residence or settings.default_for("tax_residence")),
        ("notice_period", profile.notice_period or settings.default_for("notice_period")),
        ("referred_by", profile.referred_by),
    ]


def fill_form(
    page: Page,
    profile: Profile,
    *,
    settings: BatchSettings,
    log_fn: Optional[LogFn] = None,
) -> dict[str, bool]:
    """Fill every known field once; a miss never stops the remaining fields."""
    log = log_fn or null_log
    timeout_ms = settings.action_timeout_ms
    results = fill_names(page, profile, log_fn=log, timeout_ms=timeout_ms)
    for field_name, value in field_values(profile, settings):
        results[field_name] = resolve(
            page, field_name, value, log_fn=log, timeout_ms=timeout_ms
        )
    filled = sum(1 for ok in results.values() if ok)
    log(f"fill: {filled}/{len(results)} fields filled")
    return results


def show_hold_banner(page: Page, message: str) -> None:
    page.evaluate(HOLD_BANNER_SCRIPT, message)


def _auto_submit(
    page: Page,
    record: JobRecord,
    *,
    settings: BatchSettings,
    auto_submit: bool,
    log: LogFn,
) -> None:
    submit = find_submit_control(page)
    if submit is None:
        record.status = JobStatus.SKIPPED
        record.notes = "no submit control found"
        log("submit: no submit control found, skipping", "warn")
        return
    if not auto_submit:
        record.status = JobStatus.SKIPPED
        record.notes = f"submit control found ({submit.via}) but auto-submit is off"
        log("submit: auto-submit is off, not clicking")
        return

    submit.locator.click(timeout=settings.action_timeout_ms)
    record.status = JobStatus.CLICKED
    record.notes = f"clicked submit control via {submit.via}"
    log(f"submit: clicked {submit.via}")
    page.wait_for_timeout(settings.post_submit_wait_ms)


def hold_for_review(
    page: Page,
    record: JobRecord,
    *,
    settings: BatchSettings,
    auto_submit: bool = False,
    log_fn: Optional[LogFn] = None,
) -> None:
    """
    Terminal automated step.

    ``manual`` mode shows a banner and blocks until the operator closes the
    tab (no timeout). ``auto_submit`` mode clicks a submit control when the
    batch asked for it, otherwise marks the URL skipped.
    """
    log = log_fn or null_log
    if settings.auto_submit_mode:
        _auto_submit(page, record, settings=settings, auto_submit=auto_submit, log=log)
        return

    if auto_submit:
        log("submit: auto-submit requested but review_mode is manual, holding", "warn")
    show_hold_banner(page, settings.hold_banner)
    log("submit: form filled, user must manually submit and close tab")
    try:
        page.wait_for_event("close", timeout=0)
    except PlaywrightError as e:
        record.status = JobStatus.ERROR
        record.notes = f"error waiting for tab close: {_error_note(e)}"
        log("submit: error waiting for tab close", "error")
        return
    record.status = JobStatus.SUBMITTED
    record.notes = "form submitted and tab closed by user"
    log("submit: tab closed by user, marking as submitted")


def _error_note(exc: BaseException) -> str:
    # playwright appends a multi-line "Call log:" section
    message = str(exc).split("\nCall log:", 1)[0].strip()
    return message or exc.__class__.__name__


def _navigate(page: Page, url: str, settings: BatchSettings, log: LogFn) -> None:
    log(f"nav: {url}")
    page.goto(url, wait_until="domcontentloaded", timeout=settings.navigation_timeout_ms)
    # 给客户端渲染框架一点挂载时间
    page.wait_for_timeout(settings.settle_ms)


def apply_to_url(
    page: Page,
    url: str,
    *,
    profile: Profile,
    settings: BatchSettings,
    recorder: OutcomeRecorder,
    auto_submit: bool = False,
    log_factory: LogFactory = make_logger,
) -> JobRecord:
    """
    Drive one URL through the whole lifecycle and append its outcome row.

    Returns the recorded :class:`JobRecord`. Only recorder IO errors escape.
    """
    record = JobRecord.start(url, resume_used=profile.resume_file_path)
    log = log_factory(record.job_id)
    try:
        _navigate(page, url, settings, log)

        stable = wait_for_form_stability(
            page,
            settings.stability_timeout_ms,
            poll_interval_ms=settings.stability_poll_ms,
            log_fn=log,
        )
        if not stable:
            log("form: form may still be loading, proceeding with current state")

        meta = extract_meta(page, log)
        record.company = meta.company
        record.job_title = meta.title
        record.source = meta.source

        if settings.debug_fields:
            log_form_fields(page, log)

        fill_form(page, profile, settings=settings, log_fn=log)
        record.status = JobStatus.FILLED
        record.notes = "form filled, awaiting review"

        hold_for_review(
            page, record, settings=settings, auto_submit=auto_submit, log_fn=log
        )
    except Exception as e:
        record.status = JobStatus.ERROR
        record.notes = _error_note(e)
        log(f"ERROR: {record.notes}", "error")
    finally:
        record.finish()
        recorder.append(record)
        log(
            f"done: status={record.status.value} "
            f"duration={record.duration_seconds:.1f}s"
        )
    return record
