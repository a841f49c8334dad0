"""
浏览器管理模块：统一管理 Playwright 浏览器启动、profile 与事件日志。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from playwright.sync_api import Browser, BrowserContext, Page, sync_playwright

from ..config import BrowserSettings
from .narration import LogFn, null_log


@dataclass
class BrowserSession:
    playwright: Any
    context: BrowserContext
    page: Page
    browser: Optional[Browser] = None
    log_fn: LogFn = null_log

    def ensure_page(self) -> Page:
        """
        Current tab, or a fresh one when the operator closed it during review.
        Only one tab is in use at a time.
        """
        if self.page.is_closed():
            self.page = self.context.new_page()
            attach_page_listeners(self.page, self.log_fn)
        return self.page

    def close(self) -> None:
        try:
            self.context.close()
        finally:
            try:
                if self.browser is not None:
                    self.browser.close()
            finally:
                self.playwright.stop()


def attach_page_listeners(page: Page, log_fn: LogFn) -> None:
    """采集页面基础错误信息，写入日志便于排查。"""
    page.on(
        "console",
        lambda msg: log_fn(f"[console:{msg.type}] {msg.text}", "debug")
        if msg.type in ("error", "warning")
        else None,
    )
    page.on("pageerror", lambda exc: log_fn(f"[pageerror] {exc}", "debug"))


class BrowserManager:
    """
    管理浏览器生命周期与配置，避免业务流程中重复拼装启动参数。
    """

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        log_fn: Optional[LogFn] = None,
    ) -> None:
        self._settings = settings or BrowserSettings()
        self._log = log_fn or null_log

    def launch(self) -> BrowserSession:
        """启动浏览器并返回单标签页会话。"""
        cfg = self._settings
        launch_args: dict[str, Any] = {
            "headless": cfg.headless,
            "slow_mo": cfg.slow_mo if cfg.slow_mo > 0 else None,
            "executable_path": cfg.executable_path,
        }
        # 清理 None 参数
        launch_args = {k: v for k, v in launch_args.items() if v is not None}

        playwright = sync_playwright().start()
        browser: Optional[Browser] = None
        try:
            if cfg.user_data_dir:
                user_data_dir = str(Path(cfg.user_data_dir).expanduser())
                context = playwright.chromium.launch_persistent_context(
                    user_data_dir, **launch_args
                )
                self._log(f"✓ 使用持久化 profile: {user_data_dir}", "info")
            else:
                browser = playwright.chromium.launch(**launch_args)
                context = browser.new_context()
        except Exception:
            playwright.stop()
            raise

        context.on(
            "requestfailed",
            lambda req: self._log(f"[requestfailed] {req.method} {req.url}", "debug"),
        )
        page = context.pages[0] if context.pages else context.new_page()
        attach_page_listeners(page, self._log)

        return BrowserSession(
            playwright=playwright,
            context=context,
            page=page,
            browser=browser,
            log_fn=self._log,
        )
