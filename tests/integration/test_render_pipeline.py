"""
Integration tests for the render pipeline - catalog lookup, binding, CSS and HTML.
"""

import pytest

from vellum.contexts.rendering.renderer import (
    RenderOptimization,
    RenderOptions,
    TemplateRenderer,
)
from vellum.contexts.templating.exceptions import (
    RenderFailedError,
    TemplateNotFoundError,
    ValidationFailedError,
)


@pytest.fixture
def renderer(registry):
    return TemplateRenderer(registry=registry)


@pytest.mark.integration
def test_render_classic_resume(renderer, sample_resume):
    """Test rendering a complete resume with the classic template."""
    rendered = renderer.render("professional-classic", sample_resume)

    html = rendered.html
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>jane doe - Resume</title>" in html
    assert "<h1>Jane Doe</h1>" in html
    assert "jane.doe@example.com | (555) 123-4567" in html
    assert '<link rel="stylesheet" href="resume.css">' in html
    assert "Mar 2020 - Present" in html
    assert "Jun 2016 - Feb 2020" in html
    assert "Bachelor of Science in Computer Science" in html
    assert "<strong>Technical:</strong> Python, AWS, SQL, Docker" in html
    assert 'id="section-certifications"' not in html

    assert rendered.template_id == "professional-classic"
    assert rendered.warnings == []
    assert rendered.assets["fonts"][0]["family"] == "Arial"
    assert rendered.metadata.size["total"] == (
        rendered.metadata.size["html"] + rendered.metadata.size["css"]
    )
    assert rendered.metadata.rendering_time_ms > 0


@pytest.mark.integration
def test_sections_follow_template_order(renderer, sample_resume):
    """Test that sections appear in the template's declared order."""
    html = renderer.render("professional-classic", sample_resume).html

    positions = [
        html.index(f'id="section-{section_id}"')
        for section_id in ("summary", "experience", "education", "skills", "projects")
    ]
    assert positions == sorted(positions)


@pytest.mark.integration
def test_checksum_is_stable(renderer, sample_resume):
    """Test that identical inputs give identical checksums and different render ids."""
    first = renderer.render("professional-classic", sample_resume)
    second = renderer.render("professional-classic", sample_resume)

    assert first.metadata.checksum == second.metadata.checksum
    assert first.html == second.html
    assert first.id != second.id


@pytest.mark.integration
def test_customization_changes_output(renderer, sample_resume):
    """Test that customizations restyle the document and hide sections."""
    plain = renderer.render("professional-classic", sample_resume)
    options = RenderOptions(
        customizations={
            "color_scheme": {"primary": "#7b341e"},
            "sections": {"skills": {"visible": False}},
        }
    )

    custom = renderer.render("professional-classic", sample_resume, options)

    assert "#7b341e" in custom.css
    assert 'id="section-skills"' not in custom.html
    assert custom.metadata.checksum != plain.metadata.checksum


@pytest.mark.integration
def test_inline_and_minified(renderer, sample_resume):
    """Test inline CSS and minification."""
    options = RenderOptions(optimization=RenderOptimization(minify=True, inline_css=True))

    rendered = renderer.render("professional-classic", sample_resume, options)

    assert "<style>" in rendered.html
    assert "resume.css" not in rendered.html
    assert ">\n<" not in rendered.html
    assert "/*" not in rendered.css


@pytest.mark.integration
def test_preview_format_inlines_css(renderer, sample_resume):
    """Test that the preview format always inlines its stylesheet."""
    rendered = renderer.render(
        "modern-two-column", sample_resume, RenderOptions(format="preview")
    )

    assert "<style>" in rendered.html
    assert "layout-two-column preview" in rendered.html


@pytest.mark.integration
def test_missing_required_sections(renderer, sample_resume):
    """Test that a resume without experience and education cannot be rendered."""
    del sample_resume["experience"]
    del sample_resume["education"]

    with pytest.raises(ValidationFailedError) as exc_info:
        renderer.render("professional-classic", sample_resume)

    assert exc_info.value.details["codes"] == [
        "MISSING_REQUIRED_SECTION",
        "MISSING_REQUIRED_SECTION",
    ]
    assert exc_info.value.template_id == "professional-classic"


@pytest.mark.integration
def test_unknown_template(renderer, sample_resume):
    """Test that an unknown template id is reported as not found."""
    with pytest.raises(TemplateNotFoundError) as exc_info:
        renderer.render("no-such-template", sample_resume)

    assert exc_info.value.code == "TEMPLATE_NOT_FOUND"
    assert not exc_info.value.is_retryable


@pytest.mark.integration
def test_pipeline_failure_is_wrapped(registry, sample_resume):
    """Test that unexpected failures become retryable render errors."""

    def explode(resume):
        raise RuntimeError("processor crashed")

    renderer = TemplateRenderer(registry=registry, content_processors=[explode])

    with pytest.raises(RenderFailedError) as exc_info:
        renderer.render("professional-classic", sample_resume)

    assert isinstance(exc_info.value.original_error, RuntimeError)
    assert exc_info.value.is_retryable
    assert exc_info.value.to_dict()["code"] == "RENDER_FAILED"


@pytest.mark.integration
def test_content_processors_run_before_binding(registry, sample_resume):
    """Test that processors can rewrite the resume before rendering."""

    def shout_summary(resume):
        return {**resume, "summary": resume["summary"].upper()}

    renderer = TemplateRenderer(registry=registry, content_processors=[shout_summary])

    html = renderer.render("professional-classic", sample_resume).html

    assert "BACKEND ENGINEER WHO LED PLATFORM TEAMS" in html


@pytest.mark.integration
def test_custom_section(registry, classic_template, sample_resume):
    """Test rendering a runtime-registered template with a custom section."""
    classic_template["id"] = "classic-awards"
    classic_template["sections"].append(
        {
            "id": "awards",
            "name": "Awards",
            "type": "custom",
            "required": False,
            "order": 9,
            "content": {
                "fields": [{"id": "awards", "name": "Awards", "type": "multi-select", "required": False}]
            },
        }
    )
    registry.register(classic_template)
    sample_resume["awards"] = ["Engineer of the Year"]

    html = TemplateRenderer(registry=registry).render("classic-awards", sample_resume).html

    assert '<section class="resume-section section-custom" id="section-awards">' in html
    assert "<li>Engineer of the Year</li>" in html


@pytest.mark.integration
def test_body_field_formatting_reaches_html(registry, classic_template, sample_resume):
    """Test that formatting declared on a body-section field shows in the document."""
    classic_template["id"] = "classic-loud-titles"
    experience = next(s for s in classic_template["sections"] if s["id"] == "experience")
    position = next(f for f in experience["content"]["fields"] if f["id"] == "position")
    position["formatting"] = {"uppercase": True}
    registry.register(classic_template)

    html = TemplateRenderer(registry=registry).render("classic-loud-titles", sample_resume).html

    assert "<h3>SENIOR SOFTWARE ENGINEER</h3>" in html
    assert "<h3>SOFTWARE ENGINEER</h3>" in html
    assert "<h3>Software Engineer</h3>" not in html


@pytest.mark.integration
def test_failed_field_is_not_rendered_raw(renderer, sample_resume):
    """Test that values rejected during binding are left out of the document."""
    sample_resume["education"][0]["gpa"] = 7.5
    sample_resume["personal_info"]["linkedin"] = "linkedin-janedoe"

    rendered = renderer.render("professional-classic", sample_resume)

    assert 'class="gpa"' not in rendered.html
    assert "linkedin-janedoe" not in rendered.html
    assert "Bachelor of Science in Computer Science" in rendered.html
    assert any(w.startswith("education.gpa:") for w in rendered.warnings)


@pytest.mark.integration
def test_section_without_order_renders_last(registry, classic_template, sample_resume):
    """Test that a section with a null order is placed after ordered sections."""
    classic_template["id"] = "classic-unordered"
    summary = next(s for s in classic_template["sections"] if s["id"] == "summary")
    summary["order"] = None
    registry.register(classic_template)

    html = TemplateRenderer(registry=registry).render("classic-unordered", sample_resume).html

    assert html.index('id="section-projects"') < html.index('id="section-summary"')


@pytest.mark.integration
def test_preview_card(renderer):
    """Test the gallery preview card with demo data."""
    card = renderer.preview("professional-classic")

    assert 'data-template="professional-classic"' in card
    assert "/previews/professional-classic/thumb.png" in card
    assert "ATS Optimized" in card
    assert "John Doe, Senior Software Engineer" in card


@pytest.mark.integration
def test_preview_card_without_ats_badge(renderer, sample_resume):
    """Test a preview card for a template that is not ATS optimized."""
    card = renderer.preview("creative-sidebar", sample_resume)

    assert "ATS Optimized" not in card
    assert "jane doe, Senior Software Engineer" in card
