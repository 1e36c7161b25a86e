"""
Template Validator

Checks a catalog template for structural integrity, layout sanity, styling and
accessibility, section consistency, and ATS configuration. Every check runs;
problems are reported as data and never raised.

Score: max(0, 100 - 10 * errors - 2 * warnings)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from vellum.contexts.templating.defaults import (
    ATS_APPROVED_FONTS,
    BODY_SIZE_RANGE_PX,
    BREAKPOINT_RANGES,
    HEADER_STYLES,
    HEADING_SIZE_RANGE_PX,
    KNOWN_PROHIBITED_ELEMENTS,
    LAYOUT_FORMATS,
    MARGIN_RANGE,
    MIN_CONTRAST_RATIO,
    PAGE_HEIGHT_RANGE,
    PAGE_WIDTH_RANGE,
    RECOMMENDED_SECTION_TYPES,
    REQUIRED_SECTION_FIELDS,
    REQUIRED_TEMPLATE_FIELDS,
    SECTION_TYPES,
    TEMPLATE_CATEGORIES,
)
from vellum.contexts.templating.field_types import FieldType
from vellum.contexts.templating.logger import _log_debug, _log_error

TEMPLATE_ID_PATTERN = re.compile(r"^[a-z0-9-]+$")
HEX_COLOR_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
UNIT_SUFFIX_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|in|pt|em|rem)?\s*$")

ERROR_PENALTY = 10
WARNING_PENALTY = 2


@dataclass
class ValidationIssue:
    """
    A single validation finding.

    Attributes:
        field: Dotted path of the offending template key
        message: Human-readable description
        code: Machine-readable code (e.g., "NON_ATS_FONT")
        severity: "error" or "warning"
        suggestion: Optional hint for fixing the problem
    """

    field: str
    message: str
    code: str
    severity: str
    suggestion: Optional[str] = None


@dataclass
class ValidationResult:
    """
    Result of template (or render-data) validation.

    Attributes:
        is_valid: True when there are no errors (warnings allowed)
        errors: Issues with severity "error"
        warnings: Issues with severity "warning"
        score: Quality score in [0, 100]
    """

    is_valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    score: float = 100.0

    @property
    def codes(self) -> List[str]:
        """All issue codes, errors first."""
        return [i.code for i in self.errors] + [i.code for i in self.warnings]


class IssueCollector:
    """Accumulates issues while the checks run."""

    def __init__(self):
        self.errors: List[ValidationIssue] = []
        self.warnings: List[ValidationIssue] = []

    def error(self, field_path: str, message: str, code: str, suggestion: str = None) -> None:
        self.errors.append(ValidationIssue(field_path, message, code, "error", suggestion))

    def warning(self, field_path: str, message: str, code: str, suggestion: str = None) -> None:
        self.warnings.append(ValidationIssue(field_path, message, code, "warning", suggestion))

    def result(self) -> ValidationResult:
        score = max(0, 100 - ERROR_PENALTY * len(self.errors) - WARNING_PENALTY * len(self.warnings))
        return ValidationResult(
            is_valid=not self.errors, errors=self.errors, warnings=self.warnings, score=score
        )


def parse_measure(value: Any) -> Optional[float]:
    """
    Parse a numeric measure that may carry a unit suffix ("0.75in", "12px", 11).

    Returns:
        The numeric part, or None if the value is not a measure
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = UNIT_SUFFIX_PATTERN.match(value)
        if match:
            return float(match.group(1))
    return None


def _hex_to_rgb(color: str) -> tuple:
    if not isinstance(color, str) or not HEX_COLOR_PATTERN.match(color):
        raise ValueError(f"Not a hex color: {color!r}")
    digits = color[1:]
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return tuple(int(digits[i : i + 2], 16) for i in (0, 2, 4))


def relative_luminance(color: str) -> float:
    """WCAG 2.1 relative luminance of a hex color."""

    def channel(c: int) -> float:
        s = c / 255
        return s / 12.92 if s <= 0.03928 else ((s + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in _hex_to_rgb(color))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color_a: str, color_b: str) -> float:
    """
    WCAG 2.1 contrast ratio between two hex colors, in [1, 21].

    Raises:
        ValueError: If either color is not "#rgb" or "#rrggbb"
    """
    lighter, darker = sorted((relative_luminance(color_a), relative_luminance(color_b)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)


def _get(data: Any, *keys: str) -> Any:
    """Nested dict lookup returning None on any missing/non-dict step."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class TemplateValidator:
    """
    Validates catalog templates.

    Example:
        >>> result = TemplateValidator().validate(template)
        >>> result.is_valid, result.score
        (True, 96)
    """

    def validate(self, template: Dict[str, Any]) -> ValidationResult:
        """
        Run every check against a template.

        Args:
            template: Template dict as loaded from the catalog

        Returns:
            ValidationResult; an unexpected failure inside a check yields a
            single VALIDATION_ERROR and score 0
        """
        issues = IssueCollector()
        try:
            self._check_structure(template, issues)
            self._check_layout(template.get("layout"), issues)
            self._check_styling(template.get("styling"), issues)
            self._check_sections(template.get("sections"), issues)
            self._check_features(template.get("features"), issues)
            self._check_ats_config(template.get("ats_optimization"), issues)
            self._check_metadata(template.get("metadata"), issues)
            self._check_accessibility(template, issues)
        except Exception as e:
            _log_error(f"Template validation crashed: {type(e).__name__}: {e}")
            return ValidationResult(
                is_valid=False,
                errors=[
                    ValidationIssue(
                        "template",
                        f"Validation failed unexpectedly: {e}",
                        "VALIDATION_ERROR",
                        "error",
                    )
                ],
                score=0,
            )

        return issues.result()

    # ========================================================================
    # Individual checks
    # ========================================================================

    def _check_structure(self, template: Dict[str, Any], issues: IssueCollector) -> None:
        for key in REQUIRED_TEMPLATE_FIELDS:
            if key not in template or template[key] is None:
                issues.error(key, f"Missing required field: {key}", "MISSING_REQUIRED_FIELD")

        template_id = template.get("id")
        if template_id is not None and not (
            isinstance(template_id, str) and TEMPLATE_ID_PATTERN.match(template_id)
        ):
            issues.error(
                "id",
                "Template id must contain only lowercase letters, digits, and hyphens",
                "INVALID_ID_FORMAT",
                "Use kebab-case, e.g. 'professional-classic'",
            )

        name = template.get("name")
        if isinstance(name, str):
            if len(name.strip()) < 3:
                issues.error("name", "Template name must be at least 3 characters", "NAME_TOO_SHORT")
            elif len(name) > 100:
                issues.warning("name", "Template name exceeds 100 characters", "NAME_TOO_LONG")

        description = template.get("description")
        if isinstance(description, str):
            if len(description.strip()) < 10:
                issues.warning(
                    "description",
                    "Description should be at least 10 characters",
                    "DESCRIPTION_TOO_SHORT",
                )
            elif len(description) > 500:
                issues.warning(
                    "description", "Description exceeds 500 characters", "DESCRIPTION_TOO_LONG"
                )

        category = template.get("category")
        if category is not None and category not in TEMPLATE_CATEGORIES:
            issues.error(
                "category",
                f"Invalid category: {category}",
                "INVALID_CATEGORY",
                f"Use one of: {', '.join(TEMPLATE_CATEGORIES)}",
            )

    def _check_layout(self, layout: Any, issues: IssueCollector) -> None:
        if not isinstance(layout, dict):
            return

        if layout.get("format") not in LAYOUT_FORMATS:
            issues.error(
                "layout.format", f"Invalid layout format: {layout.get('format')}", "INVALID_LAYOUT_FORMAT"
            )
        if layout.get("header_style") not in HEADER_STYLES:
            issues.error(
                "layout.header_style",
                f"Invalid header style: {layout.get('header_style')}",
                "INVALID_HEADER_STYLE",
            )

        self._check_section_order(layout.get("section_order"), issues)

        spacing = layout.get("spacing") or {}
        for key in ("section", "item"):
            value = parse_measure(spacing.get(key))
            if value is not None and value < 0:
                issues.error(f"layout.spacing.{key}", f"{key} spacing must be >= 0", "INVALID_SPACING")
        line = parse_measure(spacing.get("line"))
        if line is not None and line < 1.0:
            issues.error("layout.spacing.line", "Line height must be >= 1.0", "INVALID_LINE_HEIGHT")

        dimensions = layout.get("dimensions") or {}
        width = parse_measure(dimensions.get("width"))
        if width is not None and not PAGE_WIDTH_RANGE[0] <= width <= PAGE_WIDTH_RANGE[1]:
            issues.error(
                "layout.dimensions.width",
                f"Page width {width}in outside {PAGE_WIDTH_RANGE[0]}-{PAGE_WIDTH_RANGE[1]}in",
                "INVALID_PAGE_WIDTH",
            )
        height = parse_measure(dimensions.get("height"))
        if height is not None and not PAGE_HEIGHT_RANGE[0] <= height <= PAGE_HEIGHT_RANGE[1]:
            issues.error(
                "layout.dimensions.height",
                f"Page height {height}in outside {PAGE_HEIGHT_RANGE[0]}-{PAGE_HEIGHT_RANGE[1]}in",
                "INVALID_PAGE_HEIGHT",
            )
        for side, raw in (dimensions.get("margins") or {}).items():
            margin = parse_measure(raw)
            if margin is not None and not MARGIN_RANGE[0] <= margin <= MARGIN_RANGE[1]:
                issues.error(
                    f"layout.dimensions.margins.{side}",
                    f"Margin {margin}in outside {MARGIN_RANGE[0]}-{MARGIN_RANGE[1]}in",
                    "INVALID_MARGIN",
                )

        responsiveness = layout.get("responsiveness") or {}
        for device, (low, high) in BREAKPOINT_RANGES.items():
            config = responsiveness.get(device)
            raw = config.get("breakpoint") if isinstance(config, dict) else config
            breakpoint = parse_measure(raw)
            if breakpoint is not None and not low <= breakpoint <= high:
                issues.warning(
                    f"layout.responsiveness.{device}",
                    f"{device} breakpoint {breakpoint}px outside {low}-{high}px",
                    f"INVALID_{device.upper()}_BREAKPOINT",
                )

    def _check_section_order(self, section_order: Any, issues: IssueCollector) -> None:
        if not isinstance(section_order, list) or not section_order:
            issues.error(
                "layout.section_order", "Section order must be a non-empty list", "INVALID_SECTION_ORDER"
            )
            return

        ids, orders = [], []
        for position, entry in enumerate(section_order, 1):
            if isinstance(entry, dict):
                ids.append(entry.get("id"))
                orders.append(entry.get("order", position))
            else:
                ids.append(entry)
                orders.append(position)

        if len(set(ids)) != len(ids):
            issues.error(
                "layout.section_order", "Section order contains duplicate ids", "DUPLICATE_SECTION_IDS"
            )

        if sorted(orders) != list(range(1, len(orders) + 1)):
            issues.warning(
                "layout.section_order",
                "Section order values should run sequentially from 1",
                "NON_SEQUENTIAL_ORDER",
            )

    def _check_styling(self, styling: Any, issues: IssueCollector) -> None:
        if not isinstance(styling, dict):
            return

        for role, code in (("heading", "MISSING_HEADING_FONT"), ("body", "MISSING_BODY_FONT")):
            font_name = _get(styling, "fonts", role, "name")
            if not font_name:
                issues.error(f"styling.fonts.{role}", f"Missing {role} font", code)
            elif font_name.lower() not in {f.lower() for f in ATS_APPROVED_FONTS}:
                issues.warning(
                    f"styling.fonts.{role}",
                    f"{role.capitalize()} font '{font_name}' is not ATS-approved",
                    "NON_ATS_FONT",
                    "Use a standard font such as Arial, Calibri, or Georgia",
                )

        primary_500 = _get(styling, "colors", "primary", "500")
        if not primary_500:
            issues.error("styling.colors.primary", "Missing primary color", "MISSING_PRIMARY_COLOR")

        text_primary = _get(styling, "colors", "text", "primary")
        if not text_primary:
            issues.error("styling.colors.text", "Missing primary text color", "MISSING_TEXT_COLOR")
        elif primary_500:
            ratio = self._safe_contrast(text_primary, primary_500)
            if ratio is not None and ratio < MIN_CONTRAST_RATIO:
                issues.warning(
                    "styling.colors.contrast",
                    f"Text/primary contrast {ratio:.2f} is below {MIN_CONTRAST_RATIO}",
                    "LOW_CONTRAST",
                    "Consider using colors with better contrast for accessibility",
                )

        for level, raw in (_get(styling, "sizes", "heading") or {}).items():
            size = parse_measure(raw)
            if size is not None and not HEADING_SIZE_RANGE_PX[0] <= size <= HEADING_SIZE_RANGE_PX[1]:
                issues.warning(
                    f"styling.sizes.heading.{level}", f"Heading size {raw} out of range", "INVALID_HEADING_SIZE"
                )
        for level, raw in (_get(styling, "sizes", "body") or {}).items():
            size = parse_measure(raw)
            if size is not None and not BODY_SIZE_RANGE_PX[0] <= size <= BODY_SIZE_RANGE_PX[1]:
                issues.warning(
                    f"styling.sizes.body.{level}", f"Body size {raw} out of range", "INVALID_BODY_SIZE"
                )

    def _check_sections(self, sections: Any, issues: IssueCollector) -> None:
        if not isinstance(sections, list) or not sections:
            issues.error("sections", "Template must define at least one section", "NO_SECTIONS")
            return

        seen_ids, seen_types = set(), set()
        for index, section in enumerate(sections):
            path = f"sections[{index}]"
            if not isinstance(section, dict):
                issues.error(path, "Section must be a mapping", "MISSING_SECTION_FIELD")
                continue

            for key in REQUIRED_SECTION_FIELDS:
                if key not in section:
                    issues.error(f"{path}.{key}", f"Section missing field: {key}", "MISSING_SECTION_FIELD")

            section_type = section.get("type")
            if "type" in section and section_type not in SECTION_TYPES:
                issues.error(f"{path}.type", f"Invalid section type: {section_type}", "INVALID_SECTION_TYPE")

            order = section.get("order")
            if isinstance(order, (int, float)) and order < 1:
                issues.error(f"{path}.order", "Section order must be >= 1", "INVALID_SECTION_ORDER")

            fields = _get(section, "content", "fields")
            if "content" in section and not fields:
                issues.warning(f"{path}.content.fields", "Section declares no fields", "NO_SECTION_FIELDS")
            for field_index, field_config in enumerate(fields or []):
                field_type = field_config.get("type") if isinstance(field_config, dict) else None
                if field_type not in FieldType.values():
                    issues.error(
                        f"{path}.content.fields[{field_index}].type",
                        f"Invalid field type: {field_type}",
                        "INVALID_FIELD_TYPE",
                    )

            section_id = section.get("id")
            if section_id in seen_ids:
                issues.error(f"{path}.id", f"Duplicate section id: {section_id}", "DUPLICATE_SECTION_ID")
            seen_ids.add(section_id)

            # custom sections may repeat
            if section_type in seen_types and section_type != "custom":
                issues.error(
                    f"{path}.type", f"Duplicate section type: {section_type}", "DUPLICATE_SECTION_TYPE"
                )
            seen_types.add(section_type)

        for recommended in RECOMMENDED_SECTION_TYPES:
            if recommended not in seen_types:
                issues.warning(
                    "sections",
                    f"Missing recommended section: {recommended}",
                    "MISSING_RECOMMENDED_SECTION",
                )

    def _check_features(self, features: Any, issues: IssueCollector) -> None:
        if not isinstance(features, dict):
            return

        for flag, code, label in (
            ("ats_optimized", "ATS_DISABLED", "ATS optimization"),
            ("mobile_optimized", "MOBILE_DISABLED", "Mobile optimization"),
            ("print_optimized", "PRINT_DISABLED", "Print optimization"),
        ):
            if not features.get(flag):
                issues.warning(f"features.{flag}", f"{label} is not enabled", code)

    def _check_ats_config(self, ats: Any, issues: IssueCollector) -> None:
        if not isinstance(ats, dict):
            return

        density = parse_measure(_get(ats, "keyword_density", "target_density"))
        if density is not None and not 1 <= density <= 5:
            issues.warning(
                "ats_optimization.keyword_density", "Target keyword density should be 1-5%", "INVALID_KEYWORD_DENSITY"
            )

        min_font = parse_measure(_get(ats, "font_optimization", "minimum_size"))
        if min_font is not None and not 8 <= min_font <= 12:
            issues.warning(
                "ats_optimization.font_optimization.minimum_size",
                "Minimum font size should be 8-12px",
                "INVALID_MIN_FONT_SIZE",
            )

        max_variants = parse_measure(_get(ats, "font_optimization", "maximum_variants"))
        if max_variants is not None and not 1 <= max_variants <= 4:
            issues.warning(
                "ats_optimization.font_optimization.maximum_variants",
                "Maximum font variants should be 1-4",
                "INVALID_MAX_FONT_VARIANTS",
            )

        min_margin = parse_measure(_get(ats, "margin_guidelines", "minimum"))
        if min_margin is not None and min_margin < 0.5:
            issues.warning(
                "ats_optimization.margin_guidelines.minimum",
                "Minimum margins should be at least 0.5in",
                "INVALID_MIN_MARGINS",
            )
        max_margin = parse_measure(_get(ats, "margin_guidelines", "maximum"))
        if max_margin is not None and max_margin > 1.5:
            issues.warning(
                "ats_optimization.margin_guidelines.maximum",
                "Maximum margins should be at most 1.5in",
                "INVALID_MAX_MARGINS",
            )

        for element in _get(ats, "structure_validation", "prohibited_elements") or []:
            if element not in KNOWN_PROHIBITED_ELEMENTS:
                issues.warning(
                    "ats_optimization.structure_validation.prohibited_elements",
                    f"Unknown prohibited element: {element}",
                    "UNKNOWN_PROHIBITED_ELEMENT",
                )

    def _check_metadata(self, metadata: Any, issues: IssueCollector) -> None:
        if not isinstance(metadata, dict):
            return

        if not metadata.get("version"):
            issues.warning("metadata.version", "Missing template version", "MISSING_VERSION")
        if not metadata.get("author"):
            issues.warning("metadata.author", "Missing template author", "MISSING_AUTHOR")

        rating = metadata.get("rating")
        if rating is not None and not (isinstance(rating, (int, float)) and 0 <= rating <= 5):
            issues.error("metadata.rating", "Rating must be between 0 and 5", "INVALID_RATING")

        downloads = metadata.get("downloads")
        if downloads is not None and not (isinstance(downloads, int) and downloads >= 0):
            issues.error("metadata.downloads", "Downloads must be a non-negative integer", "INVALID_DOWNLOADS")

        if "tags" in metadata and not isinstance(metadata["tags"], list):
            issues.error("metadata.tags", "Tags must be a list", "INVALID_TAGS_FORMAT")

    def _check_accessibility(self, template: Dict[str, Any], issues: IssueCollector) -> None:
        accessibility = _get(template, "features", "accessibility_features")
        if isinstance(accessibility, dict):
            if accessibility.get("wcag_compliant") is False:
                issues.warning(
                    "features.accessibility_features.wcag_compliant",
                    "Template is not marked WCAG compliant",
                    "NOT_WCAG_COMPLIANT",
                )
            if accessibility.get("font_scaling") is False:
                issues.warning(
                    "features.accessibility_features.font_scaling",
                    "Font scaling is disabled",
                    "NO_FONT_SCALING",
                )

        colors = _get(template, "styling", "colors")
        if not isinstance(colors, dict):
            return

        background = _get(colors, "background", "primary") or "#ffffff"
        audits = (
            ("text.primary", _get(colors, "text", "primary"), MIN_CONTRAST_RATIO),
            ("text.secondary", _get(colors, "text", "secondary"), MIN_CONTRAST_RATIO),
            # headings are large text, which WCAG allows at 3:1
            ("primary.500", _get(colors, "primary", "500"), 3.0),
        )
        for label, color, minimum in audits:
            if not color:
                continue
            ratio = self._safe_contrast(color, background)
            if ratio is not None and ratio < minimum:
                issues.warning(
                    f"styling.colors.{label}",
                    f"{label} on background has contrast {ratio:.2f} (needs {minimum})",
                    "COLOR_CONTRAST_ISSUE",
                    "Darken the color or lighten the background",
                )

    @staticmethod
    def _safe_contrast(color_a: str, color_b: str) -> Optional[float]:
        try:
            return contrast_ratio(color_a, color_b)
        except ValueError as e:
            _log_debug(f"Skipping contrast check: {e}")
            return None
