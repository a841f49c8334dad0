"""
表单结构探测：列出可见控件，方便排查陌生招聘平台的页面结构。
"""

from __future__ import annotations

from typing import Optional

from playwright.sync_api import Page

from .narration import LogFn, null_log

COMMON_FIELD_KEYWORDS = [
    "linkedin",
    "github",
    "twitter",
    "portfolio",
    "website",
    "url",
    "phone",
    "email",
    "salary",
    "experience",
    "education",
    "skills",
]

FORM_FIELDS_SCRIPT = """
() => Array.from(document.querySelectorAll("input, select, textarea"))
  .map((el) => ({
    tag: el.tagName.toLowerCase(),
    type: el.type || "text",
    name: el.name || "",
    id: el.id || "",
    placeholder: el.placeholder || "",
    label: (el.labels && el.labels[0] && el.labels[0].textContent || "").trim(),
    ariaLabel: el.getAttribute("aria-label") || "",
    dataField: el.getAttribute("data-field") || "",
    dataName: el.getAttribute("data-name") || "",
    visible: el.offsetParent !== null,
  }))
  .filter((f) => f.visible)
"""

_SEARCHED_ATTRS = ("name", "id", "placeholder", "label", "ariaLabel", "dataField", "dataName")


def describe_form_fields(page: Page) -> list[dict]:
    return list(page.evaluate(FORM_FIELDS_SCRIPT) or [])


def match_keywords(fields: list[dict]) -> dict[str, list[dict]]:
    """Group fields by the common keywords found in any of their attributes."""
    detected: dict[str, list[dict]] = {}
    for keyword in COMMON_FIELD_KEYWORDS:
        hits = [
            f
            for f in fields
            if any(keyword in str(f.get(attr) or "").lower() for attr in _SEARCHED_ATTRS)
        ]
        if hits:
            detected[keyword] = hits
    return detected


def _describe(f: dict) -> str:
    return (
        f'{f.get("tag")}[type="{f.get("type")}"] name="{f.get("name")}" id="{f.get("id")}" '
        f'placeholder="{f.get("placeholder")}" label="{f.get("label")}" '
        f'aria-label="{f.get("ariaLabel")}"'
    )


def log_form_fields(page: Page, log_fn: Optional[LogFn] = None) -> None:
    """Narrate the visible controls at debug level; never raises."""
    log = log_fn or null_log
    try:
        fields = describe_form_fields(page)
    except Exception as e:
        log(f"debug: error analyzing form fields: {e}", "debug")
        return

    log(f"debug: found {len(fields)} visible form fields", "debug")
    for f in fields:
        log(f"  {_describe(f)}", "debug")

    detected = match_keywords(fields)
    if not detected:
        log("debug: no fields found matching common field type keywords", "debug")
        return
    for keyword, hits in detected.items():
        log(f"  {keyword.upper()}: {len(hits)} field(s)", "debug")
