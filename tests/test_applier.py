from __future__ import annotations

import csv

import pytest
from playwright.sync_api import Error as PlaywrightError

from fake_page import FakeElement, FakePage

from easyapply.core.applier import (
    HOLD_BANNER_SCRIPT,
    apply_to_url,
    field_values,
    fill_form,
    fill_names,
)
from easyapply.core.form_probe import FORM_FIELDS_SCRIPT
from easyapply.core.recorder import OutcomeRecorder
from easyapply.models.job_record import JobStatus

JOB_URL = "https://boards.greenhouse.io/acme/jobs/123"


def _text(name: str, label: str = "", **attrs) -> FakeElement:
    return FakeElement("input", attrs={"name": name, **attrs}, label=label)


def _application_form():
    submit = FakeElement("button", text="Submit application")
    elements = {
        "first": _text("first_name", "First name"),
        "last": _text("last_name", "Last name"),
        "email": _text("email", "Email", type="email"),
        "phone": _text("phone", "Phone", type="tel"),
        "cv": FakeElement("input", attrs={"type": "file"}, label="Resume", visible=False),
        "male": FakeElement("input", attrs={"type": "radio"}, label="Male"),
        "female": FakeElement("input", attrs={"type": "radio"}, label="Female"),
        "country": FakeElement(
            "select", label="Country", options=[("DE", "Germany"), ("FR", "France")]
        ),
        "submit": submit,
    }
    gender = FakeElement(
        "fieldset",
        role="group",
        name="Gender",
        children=[elements["male"], elements["female"]],
    )
    page = FakePage(
        [
            elements["first"],
            elements["last"],
            elements["email"],
            elements["phone"],
            elements["cv"],
            gender,
            elements["country"],
            submit,
        ],
        meta={"ogTitle": "Backend Engineer", "siteName": "Acme"},
    )
    return page, elements


# ---------------------------------------------------------------------------
# name precedence
# ---------------------------------------------------------------------------


def test_split_name_controls_win_over_full_name(profile):
    first = _text("firstName", "First name")
    last = _text("lastName", "Last name")
    full = _text("fullName", "Full name")
    page = FakePage([first, last, full])

    results = fill_names(page, profile)

    assert results == {"first_name": True, "last_name": True}
    assert first.value == "Jane"
    assert last.value == "Doe"
    assert full.value == ""


def test_full_name_only(profile):
    full = FakeElement("input", attrs={"autocomplete": "name"}, label="Full name")
    page = FakePage([full])

    assert fill_names(page, profile) == {"full_name": True}
    assert full.value == "Jane Doe"


def test_combined_name_control_gets_full_name(profile):
    combined = FakeElement(
        "input",
        attrs={"autocomplete": "name", "placeholder": "First and last name"},
        label="Full name",
    )
    page = FakePage([combined])

    assert fill_names(page, profile) == {"full_name": True}
    assert combined.value == "Jane Doe"


def test_combined_name_control_without_strict_match_is_left_alone(profile):
    combined = _text("first_last_name")
    page = FakePage([combined])

    assert fill_names(page, profile) == {"first_name": False, "last_name": False}
    assert combined.value == ""


def test_first_name_only_leaves_full_name_alone(profile):
    first = _text("first_name")
    full = _text("fullName", "Full name")
    page = FakePage([first, full])

    results = fill_names(page, profile)

    assert results == {"first_name": True, "last_name": False}
    assert first.value == "Jane"
    assert full.value == ""


def test_names_found_by_label_only(profile):
    given = _text("q1", "Given name")
    family = _text("q2", "Family name")
    page = FakePage([given, family])

    assert fill_names(page, profile) == {"first_name": True, "last_name": True}
    assert given.value == "Jane"
    assert family.value == "Doe"


# ---------------------------------------------------------------------------
# field filling
# ---------------------------------------------------------------------------


def test_field_values_apply_configured_defaults(profile, settings):
    values = dict(field_values(profile, settings))
    assert values["salary"] == "Flexible"
    assert values["country"] == "Germany"
    assert values["tax_residence"] == "Germany"
    assert values["notice_period"] == "Immediate"
    assert values["website"] == profile.linkedin
    assert values["cv"] == profile.resume_file_path


def test_website_fallback_order(profile, settings):
    from dataclasses import replace

    values = dict(field_values(replace(profile, personal_url="https://jane.dev"), settings))
    assert values["website"] == "https://jane.dev"

    both = replace(profile, website="https://janedoe.io", personal_url="https://jane.dev")
    values = dict(field_values(both, settings))
    assert values["website"] == "https://janedoe.io"

    values = dict(field_values(replace(profile, linkedin=""), settings))
    assert values["website"] == ""


def test_fill_form_populates_known_fields(profile, settings, captured_logs):
    page, el = _application_form()

    results = fill_form(page, profile, settings=settings, log_fn=captured_logs)

    assert el["first"].value == "Jane"
    assert el["last"].value == "Doe"
    assert el["email"].value == "jane@example.com"
    assert el["phone"].value == "+49 30 1234567"
    assert el["cv"].files == profile.resume_file_path
    assert el["female"].checked is True
    assert el["male"].checked is False
    assert el["country"].value == "DE"
    assert el["submit"].clicks == 0
    assert results["github"] is False
    assert results["salary"] is False
    assert any("fields filled" in msg for _, msg in captured_logs.lines)


# ---------------------------------------------------------------------------
# per-URL lifecycle
# ---------------------------------------------------------------------------


def _rows(settings):
    with open(settings.csv_path, encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


def test_manual_review_records_submitted(profile, settings, captured_logs):
    page, el = _application_form()
    recorder = OutcomeRecorder(settings.csv_path)

    record = apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=recorder,
        log_factory=captured_logs.factory,
    )

    assert record.status is JobStatus.SUBMITTED
    assert record.notes == "form submitted and tab closed by user"
    assert page.visited == [JOB_URL]
    assert page.closed is True
    assert (HOLD_BANNER_SCRIPT, settings.hold_banner) in page.evaluations
    assert el["submit"].clicks == 0

    rows = _rows(settings)
    assert len(rows) == 1
    assert rows[0]["status"] == "submitted"
    assert rows[0]["company"] == "Acme"
    assert rows[0]["job_title"] == "Backend Engineer"
    assert rows[0]["source"] == "Greenhouse"
    assert rows[0]["resume_used"] == profile.resume_file_path
    assert rows[0]["job_id"] == record.job_id


def test_manual_mode_ignores_auto_submit_request(profile, settings, captured_logs):
    page, el = _application_form()

    record = apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=OutcomeRecorder(settings.csv_path),
        auto_submit=True,
        log_factory=captured_logs.factory,
    )

    assert record.status is JobStatus.SUBMITTED
    assert el["submit"].clicks == 0
    assert any(level == "warn" and "review_mode is manual" in msg for level, msg in captured_logs.lines)


def test_navigation_failure_records_error(profile, settings, captured_logs):
    page = FakePage(
        goto_error=f"net::ERR_NAME_NOT_RESOLVED at {JOB_URL}\nCall log:\n  - navigating"
    )

    record = apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=OutcomeRecorder(settings.csv_path),
        log_factory=captured_logs.factory,
    )

    assert record.status is JobStatus.ERROR
    assert record.notes == f"net::ERR_NAME_NOT_RESOLVED at {JOB_URL}"
    rows = _rows(settings)
    assert rows[0]["status"] == "error"
    assert rows[0]["notes"] == record.notes
    assert rows[0]["company"] == ""
    assert rows[0]["source"] == "Other"


def test_tab_wait_failure_records_error(profile, settings, captured_logs):
    class CrashingPage(FakePage):
        def wait_for_event(self, event, timeout=None):
            raise PlaywrightError("Target page, context or browser has been closed")

    page = CrashingPage([_text("email", "Email", type="email")])

    record = apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=OutcomeRecorder(settings.csv_path),
        log_factory=captured_logs.factory,
    )

    assert record.status is JobStatus.ERROR
    assert record.notes.startswith("error waiting for tab close:")


def test_auto_submit_clicks_submit_control(profile, settings, captured_logs):
    settings.review_mode = "auto_submit"
    page, el = _application_form()

    record = apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=OutcomeRecorder(settings.csv_path),
        auto_submit=True,
        log_factory=captured_logs.factory,
    )

    assert record.status is JobStatus.CLICKED
    assert el["submit"].clicks == 1
    assert page.closed is False
    assert _rows(settings)[0]["status"] == "clicked"


def test_auto_submit_mode_with_flag_off_skips(profile, settings, captured_logs):
    settings.review_mode = "auto_submit"
    page, el = _application_form()

    record = apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=OutcomeRecorder(settings.csv_path),
        auto_submit=False,
        log_factory=captured_logs.factory,
    )

    assert record.status is JobStatus.SKIPPED
    assert "auto-submit is off" in record.notes
    assert el["submit"].clicks == 0


def test_auto_submit_without_submit_control_skips(profile, settings, captured_logs):
    settings.review_mode = "auto_submit"
    page = FakePage([_text("email", "Email", type="email")])

    record = apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=OutcomeRecorder(settings.csv_path),
        auto_submit=True,
        log_factory=captured_logs.factory,
    )

    assert record.status is JobStatus.SKIPPED
    assert record.notes == "no submit control found"


def test_debug_fields_dump_runs_when_enabled(profile, settings, captured_logs):
    settings.debug_fields = True
    page, _ = _application_form()

    apply_to_url(
        page,
        JOB_URL,
        profile=profile,
        settings=settings,
        recorder=OutcomeRecorder(settings.csv_path),
        log_factory=captured_logs.factory,
    )

    assert any(script == FORM_FIELDS_SCRIPT for script, _ in page.evaluations)


def test_recorder_failure_escapes(profile, settings, captured_logs):
    class BrokenRecorder(OutcomeRecorder):
        def append(self, record):
            raise OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        apply_to_url(
            FakePage(),
            JOB_URL,
            profile=profile,
            settings=settings,
            recorder=BrokenRecorder(settings.csv_path),
            log_factory=captured_logs.factory,
        )
