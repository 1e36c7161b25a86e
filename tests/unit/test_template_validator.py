"""Unit tests for TemplateValidator and its helpers."""

import pytest

from vellum.contexts.templating.template_validator import (
    TemplateValidator,
    contrast_ratio,
    parse_measure,
)


@pytest.mark.unit
def test_catalog_template_is_valid(classic_template):
    """Test that the professional-classic catalog template validates with one advisory."""
    result = TemplateValidator().validate(classic_template)

    assert result.is_valid
    assert result.errors == []
    # dark body text against the dark primary accent
    assert result.codes == ["LOW_CONTRAST"]
    assert result.score == 98


@pytest.mark.unit
def test_contrasting_primary_is_clean(classic_template):
    """Test that a primary color readable under the body text clears every issue."""
    classic_template["styling"]["colors"]["primary"]["500"] = "#4a8fd0"

    result = TemplateValidator().validate(classic_template)

    assert result.codes == []
    assert result.score == 100


@pytest.mark.unit
def test_missing_required_field_costs_ten(classic_template):
    """Test that one missing top-level field is one error and 10 points."""
    del classic_template["name"]

    result = TemplateValidator().validate(classic_template)

    assert not result.is_valid
    assert result.codes == ["MISSING_REQUIRED_FIELD"]
    assert result.errors[0].field == "name"
    assert result.score == 90


@pytest.mark.unit
def test_invalid_id_and_category(classic_template):
    """Test id format and category vocabulary checks."""
    classic_template["id"] = "Professional Classic"
    classic_template["category"] = "fancy"

    result = TemplateValidator().validate(classic_template)

    assert "INVALID_ID_FORMAT" in result.codes
    assert "INVALID_CATEGORY" in result.codes
    assert result.score == 80


@pytest.mark.unit
def test_non_ats_font_is_warning(classic_template):
    """Test that a non-approved font warns without invalidating."""
    classic_template["styling"]["fonts"]["heading"]["name"] = "Comic Sans MS"

    result = TemplateValidator().validate(classic_template)

    assert result.is_valid
    assert result.codes == ["NON_ATS_FONT", "LOW_CONTRAST"]
    assert result.score == 96


@pytest.mark.unit
def test_light_text_on_white_background(classic_template):
    """Test that light text on a white background is flagged against the background."""
    classic_template["styling"]["colors"]["text"]["primary"] = "#eeeeee"

    result = TemplateValidator().validate(classic_template)

    assert result.is_valid
    assert "COLOR_CONTRAST_ISSUE" in result.codes
    assert "LOW_CONTRAST" not in result.codes


@pytest.mark.unit
def test_page_geometry_limits(classic_template):
    """Test page width, height and margin ranges."""
    dimensions = classic_template["layout"]["dimensions"]
    dimensions["width"] = 20
    dimensions["height"] = "7in"
    dimensions["margins"]["top"] = 3

    result = TemplateValidator().validate(classic_template)

    assert {"INVALID_PAGE_WIDTH", "INVALID_PAGE_HEIGHT", "INVALID_MARGIN"} <= set(result.codes)
    assert len(result.errors) == 3


@pytest.mark.unit
def test_section_order_checks(classic_template):
    """Test duplicate ids and non-sequential ordering in layout.section_order."""
    order = classic_template["layout"]["section_order"]
    order[1] = {"id": "personal-info", "order": 9}

    result = TemplateValidator().validate(classic_template)

    assert "DUPLICATE_SECTION_IDS" in result.codes
    assert "NON_SEQUENTIAL_ORDER" in result.codes


@pytest.mark.unit
def test_empty_section_order(classic_template):
    """Test that an empty section order is an error."""
    classic_template["layout"]["section_order"] = []

    result = TemplateValidator().validate(classic_template)

    assert result.codes == ["INVALID_SECTION_ORDER", "LOW_CONTRAST"]


@pytest.mark.unit
def test_section_checks(classic_template):
    """Test section type, duplicate and field-type checks."""
    sections = classic_template["sections"]
    sections[1]["type"] = "hobbies"
    sections[2]["content"]["fields"][0]["type"] = "rich-text"
    sections.append(dict(sections[3]))

    result = TemplateValidator().validate(classic_template)

    assert "INVALID_SECTION_TYPE" in result.codes
    assert "INVALID_FIELD_TYPE" in result.codes
    assert "DUPLICATE_SECTION_ID" in result.codes
    assert "DUPLICATE_SECTION_TYPE" in result.codes


@pytest.mark.unit
def test_custom_sections_may_repeat(classic_template):
    """Test that several custom sections are not duplicates by type."""
    for section_id in ("volunteering", "awards"):
        classic_template["sections"].append(
            {
                "id": section_id,
                "name": section_id.title(),
                "type": "custom",
                "required": False,
                "order": 9,
                "content": {"fields": [{"id": "entry", "type": "text"}]},
            }
        )

    result = TemplateValidator().validate(classic_template)

    assert "DUPLICATE_SECTION_TYPE" not in result.codes
    assert result.is_valid


@pytest.mark.unit
def test_missing_recommended_section(classic_template):
    """Test that dropping the skills section warns."""
    classic_template["sections"] = [
        s for s in classic_template["sections"] if s["type"] != "skills"
    ]

    result = TemplateValidator().validate(classic_template)

    assert result.is_valid
    assert "MISSING_RECOMMENDED_SECTION" in result.codes


@pytest.mark.unit
def test_no_sections(classic_template):
    """Test that a template without sections is invalid."""
    classic_template["sections"] = []

    result = TemplateValidator().validate(classic_template)

    assert "NO_SECTIONS" in result.codes
    assert not result.is_valid


@pytest.mark.unit
def test_features_and_metadata(classic_template):
    """Test disabled feature warnings and metadata errors."""
    classic_template["features"]["ats_optimized"] = False
    classic_template["features"]["accessibility_features"]["wcag_compliant"] = False
    classic_template["metadata"]["rating"] = 7
    classic_template["metadata"]["tags"] = "ats"
    del classic_template["metadata"]["author"]

    result = TemplateValidator().validate(classic_template)

    assert {"ATS_DISABLED", "NOT_WCAG_COMPLIANT", "MISSING_AUTHOR"} <= {
        w.code for w in result.warnings
    }
    assert {"INVALID_RATING", "INVALID_TAGS_FORMAT"} == {e.code for e in result.errors}
    assert result.score == 100 - 2 * 10 - 4 * 2


@pytest.mark.unit
def test_ats_config_ranges(classic_template):
    """Test ATS optimization setting ranges."""
    ats = classic_template["ats_optimization"]
    ats["keyword_density"]["target_density"] = 9
    ats["margin_guidelines"]["minimum"] = 0.2
    ats["structure_validation"]["prohibited_elements"].append("emoji")

    result = TemplateValidator().validate(classic_template)

    assert result.is_valid
    assert set(result.codes) == {
        "INVALID_KEYWORD_DENSITY",
        "INVALID_MIN_MARGINS",
        "UNKNOWN_PROHIBITED_ELEMENT",
        "LOW_CONTRAST",
    }


@pytest.mark.unit
def test_score_never_negative():
    """Test that the score bottoms out at 0."""
    result = TemplateValidator().validate({"id": "BAD ID"})

    assert not result.is_valid
    assert result.score == 0


@pytest.mark.unit
def test_crash_reports_validation_error():
    """Test that an unexpected failure becomes a single VALIDATION_ERROR."""
    result = TemplateValidator().validate(None)

    assert result.codes == ["VALIDATION_ERROR"]
    assert result.score == 0
    assert not result.is_valid


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [(11, 11.0), ("0.75in", 0.75), ("12px", 12.0), (" 1.5 ", 1.5), ("wide", None), (True, None)],
)
def test_parse_measure(value, expected):
    """Test numeric parsing of measures with optional units."""
    assert parse_measure(value) == expected


@pytest.mark.unit
def test_contrast_ratio():
    """Test WCAG contrast ratio bounds and validation."""
    assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)
    assert contrast_ratio("#fff", "#ffffff") == pytest.approx(1.0)
    with pytest.raises(ValueError):
        contrast_ratio("black", "#ffffff")
