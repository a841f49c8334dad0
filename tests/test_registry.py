from __future__ import annotations

import pytest

from easyapply.core.registry import (
    FIELDS,
    FieldKind,
    generate_field_selectors,
    get_field,
    labels_of,
    structural_patterns_of,
)


def test_generate_field_selectors_covers_every_attribute_and_variation():
    selectors = generate_field_selectors("linkedin", ["linked_in"])
    assert 'input[name*="linkedin" i]' in selectors
    assert 'input[data-name*="linked_in" i]' in selectors
    assert len(selectors) == 10


def test_labels_are_ordered_most_specific_first():
    country = labels_of("country")
    assert country.index("What country do you currently live in") < country.index("Country")
    salary = labels_of("salary")
    assert salary[-1] == "Salary"


def test_generic_fields_enable_nearby_text_and_name_fields_do_not():
    for name in ("email", "phone", "salary", "linkedin", "github", "website"):
        assert get_field(name).nearby_text == name
    for name in ("first_name", "last_name", "full_name", "gender", "cv"):
        assert get_field(name).nearby_text is None


def test_website_patterns_do_not_match_generic_url_fields():
    assert not any('"url"' in p for p in structural_patterns_of("website"))


def test_field_kinds():
    assert FIELDS["cv"].kind is FieldKind.FILE
    assert FIELDS["gender"].kind is FieldKind.CHOICE
    assert FIELDS["country"].kind is FieldKind.SELECT
    assert FIELDS["tax_residence"].kind is FieldKind.SELECT
    assert FIELDS["notice_period"].kind is FieldKind.TEXT


def test_unknown_field_raises_key_error():
    with pytest.raises(KeyError, match="Unknown semantic field"):
        get_field("shoe_size")
