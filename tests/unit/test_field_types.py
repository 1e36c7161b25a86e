"""Unit tests for field types, transforms and per-type validation."""

from datetime import date

import pytest

from vellum.contexts.templating.field_types import (
    FieldType,
    apply_transforms,
    format_date,
    format_field_value,
    format_phone,
    parse_date,
    validate_field_value,
)


@pytest.mark.unit
def test_field_type_values():
    """Test the closed set of field types."""
    assert "multi-select" in FieldType.values()
    assert len(FieldType.values()) == 10
    with pytest.raises(ValueError):
        FieldType("rich-text")


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2020-03-15", date(2020, 3, 15)),
        ("2020-03", date(2020, 3, 1)),
        ("2020", date(2020, 1, 1)),
        ("Mar 2020", date(2020, 3, 1)),
        ("March 2020", date(2020, 3, 1)),
        (2019, date(2019, 1, 1)),
        ("soon", None),
        (None, None),
    ],
)
def test_parse_date(raw, expected):
    """Test accepted date input shapes."""
    assert parse_date(raw) == expected


@pytest.mark.unit
def test_format_date():
    """Test date output formats and passthrough of unparseable values."""
    assert format_date("2020-03", "MMM YYYY") == "Mar 2020"
    assert format_date("2020-03", "Month YYYY") == "March 2020"
    assert format_date("2016", "YYYY") == "2016"
    assert format_date("2020-03-15") == "2020-03-15"
    assert format_date("Present", "MMM YYYY") == "Present"


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("555-123-4567", "(555) 123-4567"),
        ("5551234567", "(555) 123-4567"),
        ("+1 555 123 4567", "+1 (555) 123-4567"),
        ("12345", "12345"),
    ],
)
def test_format_phone(raw, expected):
    """Test phone normalization."""
    assert format_phone(raw) == expected


@pytest.mark.unit
def test_apply_transforms_order():
    """Test that transforms run in fixed order and are reported."""
    value, applied = apply_transforms("jANE doe", {"lowercase": True, "title_case": True})

    assert applied == ["title_case", "lowercase"]
    assert value == "jane doe"


@pytest.mark.unit
def test_apply_transforms_lists():
    """Test that transforms apply element-wise to lists."""
    value, applied = apply_transforms(
        ["2020-03", "2016-06"], {"date_formatting": True, "date_format": "MMM YYYY"}
    )

    assert value == ["Mar 2020", "Jun 2016"]
    assert applied == ["date_format"]


@pytest.mark.unit
def test_apply_transforms_without_formatting():
    """Test that a field without formatting flags is untouched."""
    assert apply_transforms("Value", None) == ("Value", [])


@pytest.mark.unit
def test_text_length_rules():
    """Test min-length, max-length and pattern rules for text."""
    rules = {"min-length": 2, "max-length": 5}

    assert validate_field_value(FieldType.TEXT, "abc", rules).valid
    assert not validate_field_value(FieldType.TEXT, "a", rules).valid

    too_long = validate_field_value(FieldType.TEXT, "abcdefg", rules)
    assert not too_long.valid
    assert too_long.suggested_value == "abcde"

    assert not validate_field_value(FieldType.TEXT, "abc", {"pattern": r"^\d+$"}).valid


@pytest.mark.unit
def test_email_and_url():
    """Test email and URL validation with suggestions."""
    assert validate_field_value(FieldType.EMAIL, "jane@example.com").valid
    bad_email = validate_field_value(FieldType.EMAIL, "jane-at-example")
    assert not bad_email.valid
    assert bad_email.suggested_value == "name@example.com"

    assert validate_field_value(FieldType.URL, "https://example.com").valid
    bad_url = validate_field_value(FieldType.URL, "example.com")
    assert not bad_url.valid
    assert bad_url.suggested_value == "https://example.com"


@pytest.mark.unit
def test_number_bounds():
    """Test number parsing and min/max rules."""
    assert validate_field_value(FieldType.NUMBER, 3.7, {"min": 0, "max": 4.0}).valid
    assert validate_field_value(FieldType.NUMBER, "3", {}).valid

    over = validate_field_value(FieldType.NUMBER, 5, {"max": 4.0})
    assert not over.valid
    assert over.suggested_value == 4.0

    assert not validate_field_value(FieldType.NUMBER, "three").valid
    assert not validate_field_value(FieldType.NUMBER, True).valid


@pytest.mark.unit
def test_boolean_and_multi_select():
    """Test boolean strictness and multi-select list requirement."""
    assert validate_field_value(FieldType.BOOLEAN, False).valid
    assert not validate_field_value(FieldType.BOOLEAN, "yes").valid

    assert validate_field_value(FieldType.MULTI_SELECT, ["Python", "SQL"]).valid
    single = validate_field_value(FieldType.MULTI_SELECT, "Python")
    assert not single.valid
    assert single.suggested_value == ["Python"]


@pytest.mark.unit
def test_lists_validate_element_wise():
    """Test that the first failing element decides a list's result."""
    assert validate_field_value(FieldType.DATE, ["Mar 2020", "2016"]).valid
    assert not validate_field_value(FieldType.DATE, ["Mar 2020", "someday"]).valid


@pytest.mark.unit
def test_format_field_value():
    """Test output coercion per field type."""
    assert format_field_value(FieldType.NUMBER, "3") == 3
    assert format_field_value(FieldType.NUMBER, 3.5) == 3.5
    assert format_field_value(FieldType.BOOLEAN, 1) is True
    assert format_field_value(FieldType.DATE, date(2020, 3, 1)) == "2020-03-01"
    assert format_field_value(FieldType.TEXT, None) == ""
    assert format_field_value(FieldType.MULTI_SELECT, ["a", None, 2]) == ["a", "2"]
