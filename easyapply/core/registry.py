"""
字段标签/选择器注册表。

职责：
- 每个语义字段的多语言标签（按优先级排序，越具体越靠前）
- 姓名、邮箱、电话、社交链接等字段的结构化选择器（name/id/placeholder 子串）
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence


class FieldKind(str, Enum):
    TEXT = "text"
    SELECT = "select"
    CHOICE = "choice"
    FILE = "file"


@dataclass(frozen=True)
class SemanticField:
    name: str
    kind: FieldKind
    labels: tuple[str, ...]
    patterns: tuple[str, ...] = ()
    # lowercase keyword for the nearby-text heuristic; None disables it
    nearby_text: str | None = None
    # selectors tried after every label/role strategy missed
    fallbacks: tuple[str, ...] = ()


def generate_field_selectors(field_type: str, variations: Iterable[str] = ()) -> list[str]:
    """
    Attribute-substring selectors for a keyword and its variations, e.g.
    ``linkedin`` + ``linked_in``.
    """
    selectors: list[str] = []
    for keyword in (field_type, *variations):
        selectors.extend(
            [
                f'input[name*="{keyword}" i]',
                f'input[id*="{keyword}" i]',
                f'input[placeholder*="{keyword}" i]',
                f'input[data-field*="{keyword}" i]',
                f'input[data-name*="{keyword}" i]',
            ]
        )
    return selectors


FIRST_NAME_SELECTORS = (
    "input[name*=first i]",
    "input[id*=first i]",
    "input[placeholder*=first i]",
    'input[name*="firstName"]',
    'input[id*="firstName"]',
    'input[name*="first_name"]',
    'input[id*="first_name"]',
)
LAST_NAME_SELECTORS = (
    "input[name*=last i]",
    "input[id*=last i]",
    "input[placeholder*=last i]",
    'input[name*="lastName"]',
    'input[id*="lastName"]',
    'input[name*="last_name"]',
    'input[id*="last_name"]',
)
FULL_NAME_STRICT_SELECTORS = (
    'input[autocomplete="name"]',
    'input[name="fullName"]',
    'input[id="fullName"]',
    'input[name="fullname"]',
    'input[id="fullname"]',
    'input[placeholder*="full name" i]',
    'input[aria-label*="full name" i]',
    'input[name*="full_name"]',
    'input[id*="full_name"]',
)

URL_FIELD_SELECTORS = (
    'input[type="url"], input[placeholder*="url" i], input[name*="url" i]',
)

GENERIC_FILE_SELECTORS = ("input[type=file]",)

SUBMIT_LABELS = (
    "Submit application",
    "Submit Application",
    "Submit",
    "Apply now",
    "Apply",
    "Send application",
    "Jetzt bewerben",
    "Bewerbung absenden",
    "Absenden",
    "Bewerben",
    "Postuler",
    "Envoyer",
)
SUBMIT_SELECTORS = (
    "input[type=submit]",
    "button[type=submit]",
)


FIELDS: dict[str, SemanticField] = {
    "first_name": SemanticField(
        name="first_name",
        kind=FieldKind.TEXT,
        labels=("First name", "Given name", "Vorname", "Prénom", "First Name", "Firstname"),
        patterns=FIRST_NAME_SELECTORS,
    ),
    "last_name": SemanticField(
        name="last_name",
        kind=FieldKind.TEXT,
        labels=(
            "Last name",
            "Family name",
            "Surname",
            "Nachname",
            "Nom",
            "Last Name",
            "Lastname",
        ),
        patterns=LAST_NAME_SELECTORS,
    ),
    "full_name": SemanticField(
        name="full_name",
        kind=FieldKind.TEXT,
        labels=("Full name", "Your full name", "Name (full)", "Full Name", "Name"),
        patterns=FULL_NAME_STRICT_SELECTORS,
    ),
    "email": SemanticField(
        name="email",
        kind=FieldKind.TEXT,
        labels=("Email", "E-mail", "Email address", "E-Mail", "E-mail address", "Email Address"),
        patterns=('input[type="email"]', *generate_field_selectors("email")),
        nearby_text="email",
    ),
    "phone": SemanticField(
        name="phone",
        kind=FieldKind.TEXT,
        labels=("Phone", "Phone number", "Telefon", "Téléphone", "Phone Number", "Mobile", "Telephone"),
        patterns=(
            'input[type="tel"]',
            *generate_field_selectors("phone", ["mobile", "telephone"]),
        ),
        nearby_text="phone",
    ),
    "salary": SemanticField(
        name="salary",
        kind=FieldKind.TEXT,
        labels=(
            "Salary expectations",
            "What are your salary expectations",
            "Salary (EUR)",
            "Expected salary",
            "Gehaltsvorstellung",
            "Salary",
        ),
        patterns=(
            *generate_field_selectors("salary"),
            'select[name*="salary" i]',
            'select[id*="salary" i]',
        ),
        nearby_text="salary",
    ),
    "linkedin": SemanticField(
        name="linkedin",
        kind=FieldKind.TEXT,
        labels=("LinkedIn", "LinkedIn profile", "LinkedIn URL", "LinkedIn Profile"),
        patterns=tuple(
            generate_field_selectors(
                "linkedin",
                ["linked_in", "social_linkedin", "profile_linkedin", "url_linkedin"],
            )
        ),
        nearby_text="linkedin",
        fallbacks=URL_FIELD_SELECTORS,
    ),
    "github": SemanticField(
        name="github",
        kind=FieldKind.TEXT,
        labels=("GitHub", "GitHub profile", "GitHub URL", "GitHub Profile", "Github", "Github profile"),
        patterns=tuple(
            generate_field_selectors(
                "github", ["git_hub", "social_github", "profile_github", "url_github"]
            )
        ),
        nearby_text="github",
    ),
    "website": SemanticField(
        name="website",
        kind=FieldKind.TEXT,
        labels=("Personal URL", "Website", "Portfolio", "Personal site", "Homepage", "Website URL"),
        patterns=tuple(
            generate_field_selectors("website", ["portfolio", "homepage", "personal_url"])
        ),
        nearby_text="website",
    ),
    "cv": SemanticField(
        name="cv",
        kind=FieldKind.FILE,
        labels=("Curriculum vitae", "CV", "Resume", "Lebenslauf", "Resume/CV", "Cover Letter"),
        fallbacks=GENERIC_FILE_SELECTORS,
    ),
    "gender": SemanticField(
        name="gender",
        kind=FieldKind.CHOICE,
        labels=("Gender", "Gender to which you identify as", "Geschlecht"),
    ),
    "country": SemanticField(
        name="country",
        kind=FieldKind.SELECT,
        labels=(
            "What country do you currently live in",
            "Country",
            "Current country",
            "Location",
        ),
    ),
    "tax_residence": SemanticField(
        name="tax_residence",
        kind=FieldKind.SELECT,
        labels=("Tax residence", "Where is your tax residence", "Steuerlicher Wohnsitz"),
    ),
    "notice_period": SemanticField(
        name="notice_period",
        kind=FieldKind.TEXT,
        labels=("Notice period", "What is your notice period", "Kündigungsfrist"),
    ),
    "referred_by": SemanticField(
        name="referred_by",
        kind=FieldKind.TEXT,
        labels=("Were you referred", "Referral", "Referred by"),
    ),
}


def get_field(name: str) -> SemanticField:
    try:
        return FIELDS[name]
    except KeyError:
        raise KeyError(f"Unknown semantic field: {name}") from None


def labels_of(name: str) -> Sequence[str]:
    return get_field(name).labels


def structural_patterns_of(name: str) -> Sequence[str]:
    return get_field(name).patterns
