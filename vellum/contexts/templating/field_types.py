"""
Field types, value transforms, and per-type validation for data binding.

FieldType is a closed enum. validate_field_value() is the single dispatch point
for type rules and apply_transforms() applies formatting flags in a fixed order:
title case, date format, phone format, uppercase, lowercase.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from vellum.utils.timestamp import today

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-\(\)\.]+$")

# Accepted input shapes for date fields, tried in order
DATE_INPUT_FORMATS = ("%Y-%m-%d", "%Y-%m", "%Y", "%m/%d/%Y", "%b %Y", "%B %Y", "%d %b %Y")

# Output formats selectable via formatting.date_format
DATE_OUTPUT_FORMATS = {
    "MMM YYYY": "%b %Y",
    "Month YYYY": "%B %Y",
    "YYYY": "%Y",
    "MM/DD/YYYY": "%m/%d/%Y",
    "ISO": "%Y-%m-%d",
}


class FieldType(str, Enum):
    """Closed set of template field types."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    DATE = "date"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTI_SELECT = "multi-select"
    BOOLEAN = "boolean"

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


STRING_TYPES = (FieldType.TEXT, FieldType.TEXTAREA, FieldType.SELECT)


@dataclass
class FieldCheck:
    """
    Outcome of validating one field value.

    Attributes:
        valid: Whether the value satisfies the type rules
        message: Failure description (empty when valid)
        suggested_value: A value that would pass, when one can be proposed
    """

    valid: bool
    message: str = ""
    suggested_value: Any = None


# ============================================================================
# Date and phone helpers
# ============================================================================


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from the accepted input shapes.

    Returns:
        date, or None if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int) and 1000 <= value <= 9999:
        return date(value, 1, 1)
    if not isinstance(value, str):
        return None

    text = value.strip()
    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: Any, date_format: str = "ISO") -> Any:
    """Format a date-like value; unparseable values are returned unchanged."""
    parsed = parse_date(value)
    if parsed is None:
        return value
    return parsed.strftime(DATE_OUTPUT_FORMATS.get(date_format, DATE_OUTPUT_FORMATS["ISO"]))


def format_phone(value: Any) -> Any:
    """
    Normalize a phone number.

    10 digits -> "(XXX) XXX-XXXX"; more than 10 -> "+C (XXX) XXX-XXXX" with the
    leading digits as country code; anything else is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    digits = re.sub(r"\D", "", value)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) > 10:
        country, local = digits[:-10], digits[-10:]
        return f"+{country} ({local[:3]}) {local[3:6]}-{local[6:]}"
    return value


def _title_case(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split(" "))


# ============================================================================
# Transforms
# ============================================================================


def _map_scalar(value: Any, fn) -> Any:
    """Apply fn to a scalar or element-wise to a list, passing non-strings through."""
    if isinstance(value, list):
        return [_map_scalar(v, fn) for v in value]
    return fn(value)


def apply_transforms(value: Any, formatting: Optional[Dict[str, Any]]) -> Tuple[Any, List[str]]:
    """
    Apply a field's formatting flags in fixed order.

    Args:
        value: Raw bound value (scalar or list)
        formatting: Field formatting flags, e.g. {"title_case": True}

    Returns:
        Tuple of (transformed value, names of transforms applied)
    """
    if not formatting:
        return value, []

    applied = []

    if formatting.get("title_case"):
        value = _map_scalar(value, lambda v: _title_case(v) if isinstance(v, str) else v)
        applied.append("title_case")

    if formatting.get("date_formatting"):
        date_format = formatting.get("date_format", "ISO")
        value = _map_scalar(value, lambda v: format_date(v, date_format))
        applied.append("date_format")

    if formatting.get("phone_formatting"):
        value = _map_scalar(value, format_phone)
        applied.append("phone_format")

    if formatting.get("uppercase"):
        value = _map_scalar(value, lambda v: v.upper() if isinstance(v, str) else v)
        applied.append("uppercase")

    if formatting.get("lowercase"):
        value = _map_scalar(value, lambda v: v.lower() if isinstance(v, str) else v)
        applied.append("lowercase")

    return value, applied


# ============================================================================
# Validation
# ============================================================================


def _check_string_rules(value: Any, rules: Dict[str, Any]) -> FieldCheck:
    if not isinstance(value, str):
        return FieldCheck(False, "Value must be text", str(value) if value is not None else "")

    min_length = rules.get("min-length")
    if min_length is not None and len(value) < min_length:
        return FieldCheck(False, f"Must be at least {min_length} characters")

    max_length = rules.get("max-length")
    if max_length is not None and len(value) > max_length:
        return FieldCheck(False, f"Must be at most {max_length} characters", value[:max_length])

    pattern = rules.get("pattern")
    if pattern and not re.search(pattern, value):
        return FieldCheck(False, f"Does not match pattern {pattern}")

    return FieldCheck(True)


def _check_scalar(field_type: FieldType, value: Any, rules: Dict[str, Any]) -> FieldCheck:
    if field_type in STRING_TYPES:
        return _check_string_rules(value, rules)

    if field_type == FieldType.EMAIL:
        if isinstance(value, str) and EMAIL_PATTERN.match(value):
            return FieldCheck(True)
        return FieldCheck(False, "Invalid email address", "name@example.com")

    if field_type == FieldType.PHONE:
        if isinstance(value, str) and PHONE_PATTERN.match(value):
            return FieldCheck(True)
        return FieldCheck(False, "Invalid phone number", format_phone(str(value)))

    if field_type == FieldType.URL:
        parsed = urlparse(value) if isinstance(value, str) else None
        if parsed and parsed.scheme in ("http", "https") and parsed.netloc:
            return FieldCheck(True)
        suggestion = f"https://{value}" if isinstance(value, str) and value else None
        return FieldCheck(False, "Invalid URL", suggestion)

    if field_type == FieldType.DATE:
        if parse_date(value) is not None:
            return FieldCheck(True)
        return FieldCheck(False, "Invalid date", today())

    if field_type == FieldType.NUMBER:
        if isinstance(value, bool):
            return FieldCheck(False, "Value must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError):
            return FieldCheck(False, "Value must be a number", 0)
        if rules.get("min") is not None and number < rules["min"]:
            return FieldCheck(False, f"Must be at least {rules['min']}", rules["min"])
        if rules.get("max") is not None and number > rules["max"]:
            return FieldCheck(False, f"Must be at most {rules['max']}", rules["max"])
        return FieldCheck(True)

    if field_type == FieldType.BOOLEAN:
        if isinstance(value, bool):
            return FieldCheck(True)
        return FieldCheck(False, "Value must be true or false", bool(value))

    raise ValueError(f"Unhandled field type: {field_type}")


def validate_field_value(
    field_type: FieldType, value: Any, rules: Optional[Dict[str, Any]] = None
) -> FieldCheck:
    """
    Validate a bound value against its field type and rules.

    Lists are validated element-wise for scalar types (a list of companies bound
    to a text field); multi-select requires the value itself to be a list.

    Args:
        field_type: The field's FieldType
        value: Transformed value
        rules: Field validation rules (min-length, max-length, pattern, min, max)

    Returns:
        FieldCheck for the first failing element, or a passing FieldCheck
    """
    rules = rules or {}

    if field_type == FieldType.MULTI_SELECT:
        if isinstance(value, list):
            return FieldCheck(True)
        return FieldCheck(False, "Value must be a list", [value] if value is not None else [])

    if isinstance(value, list):
        for element in value:
            check = _check_scalar(field_type, element, rules)
            if not check.valid:
                return check
        return FieldCheck(True)

    return _check_scalar(field_type, value, rules)


def format_field_value(field_type: FieldType, value: Any) -> Any:
    """
    Coerce a validated value to its output representation.

    date -> ISO string for date objects, boolean -> bool, number -> int/float,
    multi-select and lists -> list of strings, everything else -> str.
    """
    if value is None:
        return ""

    if isinstance(value, list):
        if field_type in (FieldType.BOOLEAN, FieldType.NUMBER):
            return [format_field_value(field_type, v) for v in value]
        return [str(v) for v in value if v is not None]

    if field_type == FieldType.DATE and isinstance(value, (date, datetime)):
        return value.isoformat()
    if field_type == FieldType.BOOLEAN:
        return bool(value)
    if field_type == FieldType.NUMBER:
        number = float(value)
        return int(number) if number.is_integer() else number
    return str(value)
