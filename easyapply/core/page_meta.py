"""
页面元信息提取（仅用于日志/审计，不参与流程控制）。

- title: og:title → twitter:title → <h1> → document.title，截断到 160 字符
- company: JSON-LD JobPosting.hiringOrganization.name → og:site_name → 域名
- source: 按域名子串匹配已知招聘平台
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

from playwright.sync_api import Page

from ..models.job_record import DEFAULT_SOURCE
from .narration import LogFn, null_log

TITLE_MAX_LENGTH = 160

# first match wins; substrings must not collide
SOURCE_TABLE: tuple[tuple[tuple[str, ...], str], ...] = (
    (("greenhouse.io",), "Greenhouse"),
    (("lever.co",), "Lever"),
    (("myworkdayjobs",), "Workday"),
    (("personio", "join.com"), "Personio"),
    (("smartrecruiters",), "SmartRecruiters"),
    (("linkedin.com",), "LinkedIn"),
)

META_SCRIPT = """
() => {
  const content = (sel) => {
    const el = document.querySelector(sel);
    if (!el) return null;
    return el.content || el.innerText || null;
  };
  const h1 = document.querySelector("h1");
  return {
    ogTitle: content('meta[property="og:title"]'),
    twitterTitle: content('meta[name="twitter:title"]'),
    h1: h1 ? h1.innerText : null,
    documentTitle: document.title || null,
    siteName: content('meta[property="og:site_name"]'),
    ldJson: Array.from(
      document.querySelectorAll('script[type="application/ld+json"]')
    ).map((s) => s.textContent || ""),
  };
}
"""


@dataclass
class PageMeta:
    company: str = ""
    title: str = ""
    source: str = DEFAULT_SOURCE


def classify_source(host: str) -> str:
    host = (host or "").lower()
    for needles, name in SOURCE_TABLE:
        if any(needle in host for needle in needles):
            return name
    return DEFAULT_SOURCE


def _is_job_posting(obj: dict) -> bool:
    kind = obj.get("@type")
    if isinstance(kind, list):
        return "JobPosting" in kind
    return kind == "JobPosting"


def _walk_ld(node: Any) -> Iterable[dict]:
    if isinstance(node, list):
        for item in node:
            yield from _walk_ld(item)
    elif isinstance(node, dict):
        yield node
        if "@graph" in node:
            yield from _walk_ld(node["@graph"])


def company_from_ld_json(blobs: Iterable[str]) -> Optional[str]:
    for blob in blobs:
        try:
            data = json.loads(blob or "{}")
        except ValueError:
            continue
        for obj in _walk_ld(data):
            if not _is_job_posting(obj):
                continue
            org = obj.get("hiringOrganization")
            name = org.get("name") if isinstance(org, dict) else None
            if name:
                return str(name).strip()
    return None


def build_meta(raw: dict, url: str) -> PageMeta:
    """Resolve title/company/source from the raw values gathered in the page."""
    title = ""
    for key in ("ogTitle", "twitterTitle", "h1", "documentTitle"):
        candidate = (raw.get(key) or "").strip()
        if candidate:
            title = candidate
            break

    host = urlparse(url).hostname or ""
    company = (
        company_from_ld_json(raw.get("ldJson") or [])
        or (raw.get("siteName") or "").strip()
        or (host[4:] if host.startswith("www.") else host)
    )
    return PageMeta(
        company=company,
        title=title[:TITLE_MAX_LENGTH],
        source=classify_source(host),
    )


def extract_meta(page: Page, log_fn: Optional[LogFn] = None) -> PageMeta:
    """Never raises; any failure yields the default ``PageMeta``."""
    log = log_fn or null_log
    try:
        raw = page.evaluate(META_SCRIPT) or {}
        meta = build_meta(raw, page.url)
    except Exception as e:
        log(f"meta: extraction failed: {e}", "debug")
        return PageMeta()
    log(f'meta: company="{meta.company}" title="{meta.title}" source={meta.source}')
    return meta
