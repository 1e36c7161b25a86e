"""
Integration tests for ATS scoring across catalog templates and ATS-friendly re-rendering.
"""

import pytest

from vellum.contexts.rendering.renderer import RenderOptions, TemplateRenderer
from vellum.contexts.targeting.ats_optimizer import ATSOptimizer
from vellum.contexts.targeting.ats_results import ATSOptimizationRequest


@pytest.fixture(scope="module")
def optimizer():
    return ATSOptimizer()


@pytest.mark.integration
def test_catalog_templates_rank_by_ats_friendliness(optimizer, registry, sample_resume):
    """Test that the classic template outscores the creative one for the same resume."""
    scores = {}
    for template_id in registry.template_ids():
        request = ATSOptimizationRequest(resume=sample_resume, template=registry.get(template_id))
        scores[template_id] = optimizer.optimize_for_ats(request).overall_score

    assert scores["professional-classic"] > scores["creative-sidebar"]
    assert scores["modern-two-column"] > scores["creative-sidebar"]


@pytest.mark.integration
def test_job_description_targeting(optimizer, registry, sample_resume):
    """Test a targeted report against the classic template."""
    request = ATSOptimizationRequest(
        resume=sample_resume,
        template=registry.get("professional-classic"),
        job_description="Senior Python engineer with AWS, Docker and Kubernetes experience",
        target_company="Globex",
        industry="technology",
    )

    result = optimizer.optimize_for_ats(request)

    assert "kubernetes" in result.detailed_analysis.keyword_analysis.missing_keywords
    keyword_fixes = [o for o in result.optimizations if o.type == "keyword"]
    assert len(keyword_fixes) == 1
    assert "kubernetes" in keyword_fixes[0].implementation["keywords"]
    assert {r.category for r in result.recommendations} == {"format", "content", "keywords"}
    assert 0 < result.score_breakdown.keywords < 100


@pytest.mark.integration
def test_ats_friendly_version_renders_and_scores_higher(optimizer, registry, sample_resume):
    """Test that the ATS-friendly projection renders and improves the score."""
    creative = registry.get("creative-sidebar")
    before = optimizer.optimize_for_ats(
        ATSOptimizationRequest(resume=sample_resume, template=creative)
    )

    version = optimizer.generate_ats_friendly_version(creative)
    optimized_template = dict(version.optimized_template, id="creative-sidebar-ats")
    registry.register(optimized_template)

    after = optimizer.optimize_for_ats(
        ATSOptimizationRequest(
            resume=sample_resume,
            template=optimized_template,
            customization=version.optimized_customization,
        )
    )
    assert after.score_breakdown.formatting == 90
    assert after.overall_score > before.overall_score
    assert after.compatibility.overall_compatibility > before.compatibility.overall_compatibility

    rendered = TemplateRenderer(registry=registry).render(
        "creative-sidebar-ats",
        sample_resume,
        RenderOptions(customizations=version.optimized_customization),
    )
    assert "grid-template-columns: 60fr 40fr;" in rendered.css
    assert "font-family: Arial," in rendered.css
    assert "background: #ffffff" in rendered.css
    assert registry.get("creative-sidebar")["layout"]["columns"]["count"] == 3
