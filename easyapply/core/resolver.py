"""
字段解析模块：把语义字段映射到页面上的具体控件并写入值。

策略链（命中即停）：
1. 结构化选择器（name/id/placeholder 子串）
2. <label> / aria-label
3. 无障碍角色名（textbox / combobox）
4. 附近文本启发式（仅通用字段）
5. 字段自带的兜底选择器（LinkedIn → 任意 URL 输入框，CV → 任意文件输入框）

每个探测都返回 Match 或 None，不用异常表示“没找到”；resolve() 对外只返回 bool。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Sequence

from playwright.sync_api import Error as PlaywrightError, Locator, Page

from .narration import LogFn, null_log
from .registry import (
    SUBMIT_LABELS,
    SUBMIT_SELECTORS,
    FieldKind,
    SemanticField,
    get_field,
)

DEFAULT_ACTION_TIMEOUT_MS = 3000
# only the first few matches of a query are probed for visibility
MAX_CANDIDATES = 5

ROLE_NAMES: dict[FieldKind, tuple[str, ...]] = {
    FieldKind.TEXT: ("textbox",),
    FieldKind.SELECT: ("combobox",),
}
GROUP_ROLES = ("group", "radiogroup")


@dataclass
class Match:
    locator: Locator
    via: str


Strategy = Callable[[Page, SemanticField], Iterator[Match]]


def _pick(locator: Locator, *, visible: bool = True) -> Optional[Locator]:
    """First element of ``locator`` (first visible one unless ``visible`` is False)."""
    try:
        count = locator.count()
    except PlaywrightError:
        return None
    for i in range(min(count, MAX_CANDIDATES)):
        candidate = locator.nth(i)
        if not visible:
            return candidate
        try:
            if candidate.is_visible():
                return candidate
        except PlaywrightError:
            continue
    return None


def _needs_visibility(field: SemanticField) -> bool:
    # styled uploaders hide the real <input type=file>
    return field.kind is not FieldKind.FILE


def find_first_visible(page: Page, selectors: Iterable[str]) -> Optional[Match]:
    for selector in selectors:
        found = _pick(page.locator(selector))
        if found is not None:
            return Match(found, f"selector {selector}")
    return None


def structural_matches(page: Page, field: SemanticField) -> Iterator[Match]:
    for selector in field.patterns:
        found = _pick(page.locator(selector))
        if found is not None:
            yield Match(found, f"selector {selector}")


def label_matches(page: Page, field: SemanticField) -> Iterator[Match]:
    visible = _needs_visibility(field)
    for label in field.labels:
        found = _pick(page.get_by_label(label, exact=False), visible=visible)
        if found is not None:
            yield Match(found, f'label "{label}"')


def role_name_matches(page: Page, field: SemanticField) -> Iterator[Match]:
    for role in ROLE_NAMES.get(field.kind, ()):
        for label in field.labels:
            found = _pick(page.get_by_role(role, name=label, exact=False))
            if found is not None:
                yield Match(found, f'role {role} "{label}"')


def nearby_text_matches(page: Page, field: SemanticField) -> Iterator[Match]:
    if not field.nearby_text:
        return
    found = _pick(page.locator(f"text={field.nearby_text} >> .. >> input"))
    if found is not None:
        yield Match(found, f'nearby text "{field.nearby_text}"')


def fallback_matches(page: Page, field: SemanticField) -> Iterator[Match]:
    visible = _needs_visibility(field)
    for selector in field.fallbacks:
        found = _pick(page.locator(selector), visible=visible)
        if found is not None:
            yield Match(found, f"fallback {selector}")


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    structural_matches,
    label_matches,
    role_name_matches,
    nearby_text_matches,
    fallback_matches,
)
LABEL_STRATEGIES: tuple[Strategy, ...] = (label_matches, role_name_matches)
NAME_DETECTION_STRATEGIES: tuple[Strategy, ...] = (
    structural_matches,
    label_matches,
    role_name_matches,
)


SAME_ELEMENT_SCRIPT = "(a, b) => a === b"


def same_element(a: Locator, b: Locator, *, timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS) -> bool:
    """True when both locators resolve to the same DOM node."""
    try:
        handle = b.element_handle(timeout=timeout_ms)
        return bool(a.evaluate(SAME_ELEMENT_SCRIPT, handle, timeout=timeout_ms))
    except PlaywrightError:
        return False


def strategies_for(field: SemanticField) -> tuple[Strategy, ...]:
    if field.kind is FieldKind.FILE:
        return (label_matches, fallback_matches)
    if field.kind is FieldKind.CHOICE:
        return ()
    return DEFAULT_STRATEGIES


def locate(
    page: Page,
    field: SemanticField | str,
    strategies: Optional[Sequence[Strategy]] = None,
) -> Optional[Match]:
    """Find a control for ``field`` without writing to it."""
    target = field if isinstance(field, SemanticField) else get_field(field)
    for strategy in strategies or strategies_for(target):
        for match in strategy(page, target):
            return match
    return None


# ---------------------------------------------------------------------------
# writers
# ---------------------------------------------------------------------------


def write_text(locator: Locator, value: str, *, timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS) -> bool:
    try:
        locator.fill(value, timeout=timeout_ms)
        return True
    except PlaywrightError:
        pass
    # dropdown-like controls reject fill(); type the value instead
    try:
        locator.press_sequentially(value, timeout=timeout_ms)
        return True
    except PlaywrightError:
        return False


def write_select(locator: Locator, value: str, *, timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS) -> bool:
    attempts = (
        lambda: locator.select_option(label=value, timeout=timeout_ms),
        lambda: locator.select_option(value=value, timeout=timeout_ms),
        lambda: locator.fill(value, timeout=timeout_ms),
        lambda: locator.press_sequentially(value, timeout=timeout_ms),
    )
    for attempt in attempts:
        try:
            attempt()
            return True
        except PlaywrightError:
            continue
    return False


def write_file(locator: Locator, path: str, *, timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS) -> bool:
    try:
        locator.set_input_files(path, timeout=timeout_ms)
        return True
    except PlaywrightError:
        return False


def _check(locator: Locator, timeout_ms: int) -> bool:
    try:
        locator.check(timeout=timeout_ms)
        return True
    except PlaywrightError:
        pass
    try:
        locator.click(timeout=timeout_ms)
        return True
    except PlaywrightError:
        return False


WRITERS = {
    FieldKind.TEXT: write_text,
    FieldKind.SELECT: write_select,
    FieldKind.FILE: write_file,
}


# ---------------------------------------------------------------------------
# resolution
# ---------------------------------------------------------------------------


def resolve(
    page: Page,
    field: SemanticField | str,
    value: Optional[str],
    *,
    log_fn: Optional[LogFn] = None,
    strategies: Optional[Sequence[Strategy]] = None,
    timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS,
) -> bool:
    """
    Locate and populate the control for ``field``.

    An empty ``value`` is a no-op. Driver failures are reported as False,
    never raised.
    """
    target = field if isinstance(field, SemanticField) else get_field(field)
    log = log_fn or null_log
    if not value:
        log(f"fill: skip {target.name} – empty value", "debug")
        return False
    if target.kind is FieldKind.CHOICE:
        return resolve_choice(page, target, value, log_fn=log, timeout_ms=timeout_ms)

    writer = WRITERS[target.kind]
    try:
        for strategy in strategies or strategies_for(target):
            for match in strategy(page, target):
                if writer(match.locator, value, timeout_ms=timeout_ms):
                    log(f"fill: ok   {target.name} via {match.via}")
                    return True
                log(f"fill: write rejected for {target.name} via {match.via}", "debug")
    except Exception as e:
        log(f"fill: error {target.name}: {e}", "warn")
        return False
    log(f"fill: miss {target.name}", "debug")
    return False


def _pick_radio(scope, option: str) -> Optional[Locator]:
    # exact first so "Male" does not land on "Female"
    for exact in (True, False):
        found = _pick(scope.get_by_role("radio", name=option, exact=exact), visible=False)
        if found is not None:
            return found
    return None


def resolve_choice(
    page: Page,
    field: SemanticField,
    option: Optional[str],
    *,
    log_fn: Optional[LogFn] = None,
    timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS,
) -> bool:
    """
    Pick a radio option: inside a group labelled like ``field`` first, then
    anywhere on the page.
    """
    log = log_fn or null_log
    if not option:
        log(f"radio: skip {field.name} – empty value", "debug")
        return False
    try:
        for label in field.labels:
            for role in GROUP_ROLES:
                group = _pick(page.get_by_role(role, name=label, exact=False), visible=False)
                if group is None:
                    continue
                radio = _pick_radio(group, option)
                if radio is not None and _check(radio, timeout_ms):
                    log(f'radio: ok   {field.name}="{option}" via {role} "{label}"')
                    return True

        # 全局兜底：可能选中其他问题里同名的选项
        radio = _pick_radio(page, option)
        if radio is not None and _check(radio, timeout_ms):
            log(f'radio: ok   {field.name}="{option}" (global)')
            return True
    except Exception as e:
        log(f"radio: error {field.name}: {e}", "warn")
        return False
    log(f'radio: miss {field.name}="{option}"', "debug")
    return False


def find_submit_control(page: Page) -> Optional[Match]:
    """Submit-like button by localized name, then a literal submit input."""
    for label in SUBMIT_LABELS:
        found = _pick(page.get_by_role("button", name=label, exact=False))
        if found is not None:
            return Match(found, f'button "{label}"')
    return find_first_visible(page, SUBMIT_SELECTORS)
