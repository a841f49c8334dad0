"""
Configuration module for loading the operator profile and runner settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..models.profile import Profile, ProfileConfigError


# Config directory path
CONFIG_DIR = Path(__file__).parent
PACKAGE_DIR = CONFIG_DIR.parent
BASE_DIR = PACKAGE_DIR.parent
SETTINGS_PATH = PACKAGE_DIR / "config.yaml"
USER_PROFILE_PATH = CONFIG_DIR / "user_profile.yaml"

DEFAULT_HOLD_BANNER = (
    "EasyApply: Fill missing fields and submit. "
    "When done, CLOSE this tab to continue the batch."
)

REVIEW_MODES = ("manual", "auto_submit")

__all__ = [
    "BASE_DIR",
    "BatchSettings",
    "BrowserSettings",
    "Profile",
    "ProfileConfigError",
    "load_settings",
    "load_user_profile",
    "resolve_profile_path",
]


def _default_fill_values() -> dict[str, str]:
    return {
        "country": "Germany",
        "tax_residence": "Germany",
        "notice_period": "Immediate",
        "salary": "Flexible",
    }


@dataclass
class BrowserSettings:
    headless: bool = False
    slow_mo: int = 0
    user_data_dir: Optional[str] = None
    executable_path: Optional[str] = None


@dataclass
class BatchSettings:
    """
    Resolved runner settings (``config.yaml``).

    Every key is optional; missing keys keep the defaults below.
    """

    browser: BrowserSettings = field(default_factory=BrowserSettings)
    settle_ms: int = 1200
    navigation_timeout_ms: int = 30000
    stability_timeout_ms: int = 5000
    stability_poll_ms: int = 500
    action_timeout_ms: int = 3000
    post_submit_wait_ms: int = 1500
    debug_fields: bool = True
    review_mode: str = "manual"
    hold_banner: str = DEFAULT_HOLD_BANNER
    csv_path: Path = BASE_DIR / "output" / "applied.csv"
    fill_defaults: dict[str, str] = field(default_factory=_default_fill_values)

    @property
    def auto_submit_mode(self) -> bool:
        return self.review_mode == "auto_submit"

    def default_for(self, field_name: str) -> str:
        return str(self.fill_defaults.get(field_name) or "")


def _read_yaml(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_settings(path: str | Path | None = None) -> BatchSettings:
    """
    Load runner settings from YAML.

    A missing or unreadable file yields the defaults, like the browser
    settings loader always has.
    """
    settings_path = Path(path) if path else SETTINGS_PATH
    if not settings_path.exists():
        return BatchSettings()
    try:
        data = _read_yaml(settings_path) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"⚠️ Failed to read settings {settings_path}: {e}")
        return BatchSettings()
    return settings_from_dict(data)


def settings_from_dict(data: dict) -> BatchSettings:
    browser_cfg = data.get("browser") or {}
    runner_cfg = data.get("runner") or {}
    output_cfg = data.get("output") or {}

    settings = BatchSettings(
        browser=BrowserSettings(
            headless=bool(browser_cfg.get("headless", False)),
            slow_mo=int(browser_cfg.get("slow_mo", 0) or 0),
            user_data_dir=browser_cfg.get("user_data_dir") or None,
            executable_path=browser_cfg.get("executable_path") or None,
        )
    )
    for key in (
        "settle_ms",
        "navigation_timeout_ms",
        "stability_timeout_ms",
        "stability_poll_ms",
        "action_timeout_ms",
        "post_submit_wait_ms",
    ):
        if runner_cfg.get(key) is not None:
            setattr(settings, key, int(runner_cfg[key]))
    if "debug_fields" in runner_cfg:
        settings.debug_fields = bool(runner_cfg["debug_fields"])
    if runner_cfg.get("hold_banner"):
        settings.hold_banner = str(runner_cfg["hold_banner"])

    review_mode = str(runner_cfg.get("review_mode") or "manual").strip().lower()
    if review_mode not in REVIEW_MODES:
        raise ValueError(
            f"Unknown review_mode: {review_mode} (expected one of {REVIEW_MODES})"
        )
    settings.review_mode = review_mode

    csv_path = output_cfg.get("csv_path")
    if csv_path:
        resolved = Path(csv_path).expanduser()
        settings.csv_path = resolved if resolved.is_absolute() else BASE_DIR / resolved

    overrides = data.get("fill_defaults")
    if isinstance(overrides, dict):
        for key, value in overrides.items():
            settings.fill_defaults[str(key)] = "" if value is None else str(value)
    return settings


def resolve_profile_path(path: str | Path | None = None) -> Path:
    if path:
        return Path(path).expanduser()
    env_path = os.getenv("EASYAPPLY_PROFILE")
    if env_path:
        return Path(env_path).expanduser()
    return USER_PROFILE_PATH


def load_user_profile(
    path: str | Path | None = None,
    *,
    base_dir: Path | None = None,
) -> Profile:
    """
    Load and validate the operator profile.

    The document is YAML (plain JSON also parses). Missing required keys or a
    missing resume file raise :class:`ProfileConfigError`.

    Returns:
        Profile: immutable profile with an absolute ``resume_file_path``
    """
    profile_path = resolve_profile_path(path)
    if not profile_path.exists():
        raise ProfileConfigError(f"User profile not found: {profile_path}")
    try:
        data = _read_yaml(profile_path)
    except (OSError, yaml.YAMLError) as e:
        raise ProfileConfigError(f"Failed to load user profile: {e}") from e
    if not isinstance(data, dict):
        raise ProfileConfigError(f"User profile must be a mapping: {profile_path}")
    return Profile.from_mapping(
        data, base_dir=base_dir or BASE_DIR, source=str(profile_path)
    )
