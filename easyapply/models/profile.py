from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping


# profile document key -> Profile attribute
PROFILE_KEYS: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "resumeFilePath": "resume_file_path",
    "phone": "phone",
    "personalUrl": "personal_url",
    "linkedin": "linkedin",
    "github": "github",
    "website": "website",
    "gender": "gender",
    "location": "location",
    "taxResidence": "tax_residence",
    "noticePeriod": "notice_period",
    "salary": "salary",
    "referredBy": "referred_by",
}

REQUIRED_KEYS = ("firstName", "lastName", "email", "resumeFilePath")

# older profile documents used "resumePath"
KEY_ALIASES = {"resumePath": "resumeFilePath"}


class ProfileConfigError(ValueError):
    """Fatal profile problem, raised before any URL is processed."""


@dataclass(frozen=True)
class Profile:
    """操作者的个人资料。整个批次内只读。"""

    first_name: str
    last_name: str
    email: str
    resume_file_path: str
    phone: str = ""
    personal_url: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""
    gender: str = ""
    location: str = ""
    tax_residence: str = ""
    notice_period: str = ""
    salary: str = ""
    referred_by: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        base_dir: Path,
        source: str = "profile",
    ) -> "Profile":
        """
        Build a profile from a camelCase document.

        ``resumeFilePath`` is resolved against ``base_dir`` unless it is
        already absolute, and must point at an existing file.
        """
        normalized: dict[str, str] = {}
        for key, raw in data.items():
            key = KEY_ALIASES.get(key, key)
            if key not in PROFILE_KEYS or raw is None:
                continue
            normalized[key] = str(raw).strip()

        for key in REQUIRED_KEYS:
            if not normalized.get(key):
                raise ProfileConfigError(f'Missing "{key}" in {source}')

        resume = Path(normalized["resumeFilePath"]).expanduser()
        if not resume.is_absolute():
            resume = base_dir / resume
        resume = resume.resolve()
        if not resume.is_file():
            raise ProfileConfigError(f"Resume file not found: {resume}")
        normalized["resumeFilePath"] = str(resume)

        kwargs = {PROFILE_KEYS[k]: v for k, v in normalized.items()}
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
