"""Unit tests for TemplateRenderer helpers and render-data validation."""

import pytest
from jinja2 import TemplateNotFound

from vellum.contexts.rendering.html_registry import HtmlTemplateRegistry
from vellum.contexts.rendering.renderer import (
    RenderOptions,
    TemplateRenderer,
    compute_checksum,
    display_date,
    has_section_data,
    join_date_range,
    section_sort_key,
)


class DictRegistry:
    """Minimal template lookup backed by a dict."""

    def __init__(self, templates):
        self.templates = templates

    def get(self, template_id):
        return self.templates.get(template_id)


@pytest.mark.unit
def test_compute_checksum():
    """Test the base-36 rolling hash."""
    assert compute_checksum("") == "0"
    assert compute_checksum("a") == "2p"
    assert compute_checksum("ab") == compute_checksum("a", "b")
    assert compute_checksum("ab") != compute_checksum("ba")


@pytest.mark.unit
def test_join_date_range():
    """Test date range display including ongoing roles."""
    assert join_date_range("Mar 2020", "Jan 2022") == "Mar 2020 - Jan 2022"
    assert join_date_range("Mar 2020", "", ongoing=True) == "Mar 2020 - Present"
    assert join_date_range("", "2016") == "2016"
    assert join_date_range("", "") == ""


@pytest.mark.unit
def test_display_date():
    """Test month-year display with bare years left alone."""
    assert display_date("2020-03") == "Mar 2020"
    assert display_date("Mar 2020") == "Mar 2020"
    assert display_date("2016") == "2016"


@pytest.mark.unit
def test_section_sort_key_tolerates_missing_order():
    """Test that sections without a numeric order sort last instead of failing."""
    sections = [
        {"id": "c", "order": None},
        {"id": "b", "order": 2},
        {"id": "d"},
        {"id": "a", "order": 1},
        {"id": "e", "order": "3"},
    ]

    ordered = [s["id"] for s in sorted(sections, key=section_sort_key)]

    assert ordered == ["a", "b", "c", "d", "e"]


@pytest.mark.unit
def test_has_section_data():
    """Test per-type rules for whether a resume fills a section."""
    resume = {"personal_info": {"full_name": "A"}, "summary": "  ", "experience": []}

    assert has_section_data(resume, {"id": "p", "type": "personal-info"})
    assert not has_section_data(resume, {"id": "s", "type": "summary"})
    assert not has_section_data(resume, {"id": "e", "type": "experience"})
    assert has_section_data({"awards": ["Best"]}, {"id": "awards", "type": "custom"})


@pytest.mark.unit
def test_validate_render_data_complete(classic_template, sample_resume):
    """Test that a complete resume passes with a perfect score."""
    result = TemplateRenderer(registry=DictRegistry({})).validate_render_data(
        classic_template, sample_resume
    )

    assert result.is_valid
    assert result.score == 100


@pytest.mark.unit
def test_validate_render_data_missing_sections(classic_template, sample_resume):
    """Test missing required sections, full name and email checks."""
    del sample_resume["experience"]
    del sample_resume["education"]
    sample_resume["personal_info"]["full_name"] = " "
    sample_resume["personal_info"]["email"] = "nope"

    result = TemplateRenderer(registry=DictRegistry({})).validate_render_data(
        classic_template, sample_resume
    )

    assert not result.is_valid
    assert [e.code for e in result.errors] == [
        "MISSING_REQUIRED_SECTION",
        "MISSING_REQUIRED_SECTION",
        "MISSING_FULL_NAME",
        "INVALID_EMAIL",
    ]
    assert [w.code for w in result.warnings] == ["NO_EXPERIENCE", "NO_EDUCATION"]
    # total = 4 + 2 + 10 = 16; (16 - 4 - 1) / 16
    assert result.score == round(11 / 16 * 100)


@pytest.mark.unit
def test_render_rejects_unknown_format(sample_resume):
    """Test that unsupported output formats are rejected up front."""
    renderer = TemplateRenderer(registry=DictRegistry({}))

    with pytest.raises(ValueError, match="Unsupported format"):
        renderer.render("professional-classic", sample_resume, RenderOptions(format="pdf"))
    assert renderer.get_supported_formats() == ["html", "preview"]


@pytest.mark.unit
def test_preview_placeholder_without_thumbnail(classic_template):
    """Test the loading placeholder for templates without a thumbnail."""
    del classic_template["preview"]
    renderer = TemplateRenderer(registry=DictRegistry({"professional-classic": classic_template}))

    assert "loading" in renderer.preview("professional-classic")


@pytest.mark.unit
def test_html_registry_caching():
    """Test partial loading, caching and missing partials."""
    registry = HtmlTemplateRegistry()

    assert registry.has_template("experience")
    assert not registry.has_template("table")

    first = registry.get_template("experience")
    assert registry.is_cached("experience")
    assert registry.get_template("experience") is first

    registry.clear_cache()
    assert not registry.is_cached("experience")

    with pytest.raises(TemplateNotFound):
        registry.get_template("table")
