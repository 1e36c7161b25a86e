"""
ATS Optimizer

Scores a resume and template against heuristics that simulate applicant
tracking systems, and produces prioritized feedback.

optimize_for_ats() scatters seven independent analyses over a thread pool
(score breakdown, compatibility, optimizations, warnings, recommendations,
benchmark, detailed analysis) and gathers them within a timeout. Each
analysis is a pure module-level function of (request, reference); a branch
that fails or times out is logged and replaced with its neutral default.

Scores only consider values a template or customization actually declares:
a layout format name such as "two-column" earns no column bonus unless
layout.columns.count is set, and an undeclared background earns no
white-background bonus.
"""

import copy
import os
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from concurrent.futures import as_completed
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from dotenv import load_dotenv

from vellum.contexts.targeting.ats_results import (
    AchievementAnalysis,
    ActionVerbAnalysis,
    ATSCompatibility,
    ATSFriendlyVersion,
    ATSOptimization,
    ATSOptimizationRequest,
    ATSOptimizationResult,
    ATSRecommendation,
    ATSSystemResult,
    ATSWarning,
    BenchmarkComparison,
    ContentAnalysis,
    DetailedAnalysis,
    FormattingAnalysis,
    FormattingIssue,
    ImpactLanguageAnalysis,
    KeywordAnalysis,
    KeywordPlacement,
    QuantifiableResultsAnalysis,
    RealTimeScore,
    ScoreBreakdown,
    SectionAnalysis,
    StructureAnalysis,
)
from vellum.contexts.targeting.logger import (
    _log_debug,
    _log_error,
    log_branch_fallback,
    log_optimization_result,
)
from vellum.contexts.targeting.text_analysis import (
    average_sentence_length,
    categorize_achievements,
    count_occurrences,
    extract_achievements,
    extract_keywords,
    extract_resume_text,
    find_keyword_locations,
    find_matches,
    find_metrics,
    find_missing_metric_kinds,
    find_phrases,
    has_section,
    is_ats_friendly_font,
    keyword_density,
    keyword_importance,
    load_ats_reference,
)
from vellum.contexts.templating.defaults import STANDARD_RESUME_KEYS
from vellum.contexts.templating.exceptions import ServiceUnavailableError
from vellum.utils.event_logging import log_engine_event

load_dotenv()
DEFAULT_TIMEOUT_S = float(os.getenv("VELLUM_ATS_TIMEOUT_S", "10"))

WHITE_BACKGROUNDS = ("#ffffff", "#fff")
FRIENDLY_FONT = "Arial"
THIN_DESCRIPTION_CHARS = 30
MAX_ATS_COLUMNS = 2

COMPLETENESS_KEYS = ("personal_info", "summary", "experience", "education", "skills")
STRUCTURE_REQUIRED_KEYS = ("personal_info", "experience", "education", "skills")
EXPECTED_SECTION_KEYS = ("summary", "experience", "education", "skills")

# (id/type, heading) of the sections added to a template that has none
STANDARD_SECTIONS = (
    ("personal-info", "Contact Information"),
    ("summary", "Professional Summary"),
    ("experience", "Work Experience"),
    ("education", "Education"),
    ("skills", "Skills"),
)

SUMMARY_OPTIMIZATIONS = [
    "Start with a strong statement of your expertise",
    "Include 2-3 key achievements",
    "Tailor to the specific job you're applying for",
]
SUMMARY_BEST_PRACTICES = [
    "Keep it concise (50-150 characters)",
    "Use professional tone",
    "Include quantifiable achievements",
    "Highlight relevant skills and experience",
]
EXPERIENCE_OPTIMIZATIONS = [
    "Use action verbs to start bullet points",
    "Include quantifiable achievements",
    "Focus on results and impact",
    "Tailor descriptions to target job",
]
EXPERIENCE_BEST_PRACTICES = [
    "Use reverse chronological order",
    "Include company name and location",
    "Specify dates of employment",
    "Use bullet points for clarity",
]
SKILLS_OPTIMIZATIONS = [
    "Group skills by category",
    "Use the skill names that appear in the job description",
]
SKILLS_BEST_PRACTICES = [
    "List at least five relevant skills",
    "Spell out skills rather than using icons or ratings",
]
SUGGESTED_METRIC_ADDITIONS = [
    'Add percentage improvements (e.g., "increased efficiency by 25%")',
    "Include cost savings or revenue generation",
    "Mention project timelines or deadlines met",
    "Quantify team sizes or project scope",
]
IMPACT_IMPROVEMENTS = [
    "Replace passive language with action verbs",
    "Focus on results rather than responsibilities",
    "Use specific, quantifiable language",
    "Highlight achievements over duties",
]


def _get(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _clamp(score: float) -> float:
    return round(max(0.0, min(100.0, score)), 2)


def _resume_key(section_type: Any) -> str:
    return str(section_type or "").replace("-", "_")


def _section_sort_key(section: Dict[str, Any]) -> Tuple[int, float]:
    order = section.get("order")
    if isinstance(order, (int, float)) and not isinstance(order, bool):
        return (0, order)
    return (1, 0)


def _template_sections(template: Dict[str, Any]) -> List[Dict[str, Any]]:
    sections = (template or {}).get("sections") or []
    return [s for s in sections if isinstance(s, dict)] if isinstance(sections, list) else []


# ============================================================================
# Declared template/customization properties
# ============================================================================


def declared_heading_font(request: ATSOptimizationRequest) -> Optional[str]:
    """Customization heading font, else the template's heading font."""
    return _get(request.customization, "typography", "heading", "font_family") or _get(
        request.template, "styling", "fonts", "heading", "name"
    )


def declared_column_count(template: Dict[str, Any]) -> Optional[int]:
    count = _get(template, "layout", "columns", "count")
    if isinstance(count, int) and not isinstance(count, bool):
        return count
    return None


def declared_background(request: ATSOptimizationRequest) -> Optional[str]:
    """Customization background, else the template's primary background."""
    return _get(request.customization, "color_scheme", "background") or _get(
        request.template, "styling", "colors", "background", "primary"
    )


def is_white(color: Any) -> bool:
    return isinstance(color, str) and color.strip().lower() in WHITE_BACKGROUNDS


def has_complex_formatting(template: Dict[str, Any]) -> bool:
    """More than two declared layout columns."""
    count = declared_column_count(template)
    return count is not None and count > MAX_ATS_COLUMNS


def has_tables(template: Dict[str, Any]) -> bool:
    """A section, or a layout section_order entry, of type 'table'."""
    if any(section.get("type") == "table" for section in _template_sections(template)):
        return True
    section_order = _get(template, "layout", "section_order") or []
    return any(isinstance(entry, dict) and entry.get("type") == "table" for entry in section_order)


def has_custom_sections(resume: Dict[str, Any]) -> bool:
    """Non-empty top-level resume keys outside the standard set."""
    return any(value and key not in STANDARD_RESUME_KEYS for key, value in resume.items())


def derived_section_order(
    resume: Dict[str, Any], template: Dict[str, Any], reference: Dict[str, Any]
) -> List[str]:
    """
    Display names of the resume's sections in the order the template places them.

    Resume sections the template does not place follow in standard order.
    """
    names = reference["section_display_names"]
    keys: List[str] = []
    for section in sorted(_template_sections(template), key=_section_sort_key):
        key = _resume_key(section.get("type"))
        if key in names and key not in keys and has_section(resume, key):
            keys.append(key)
    for key in names:
        if key not in keys and has_section(resume, key):
            keys.append(key)
    return [names[key] for key in keys]


def missing_sections(resume: Dict[str, Any]) -> List[str]:
    return [key.capitalize() for key in EXPECTED_SECTION_KEYS if not has_section(resume, key)]


def missing_keywords(
    resume: Dict[str, Any], job_description: str, reference: Dict[str, Any]
) -> List[str]:
    job_keywords = extract_keywords(job_description, reference["keyword_categories"]["technical"])
    matched = set(find_matches(job_keywords, extract_resume_text(resume)))
    return [keyword for keyword in job_keywords if keyword not in matched]


# ============================================================================
# Sub-scores
# ============================================================================


def formatting_score(request: ATSOptimizationRequest, reference: Dict[str, Any]) -> float:
    score = 50
    if is_ats_friendly_font(declared_heading_font(request), reference["ats_friendly_fonts"]):
        score += 15
    columns = declared_column_count(request.template)
    if columns is not None and columns <= MAX_ATS_COLUMNS:
        score += 15
    if is_white(declared_background(request)):
        score += 10
    if has_complex_formatting(request.template):
        score -= 20
    return _clamp(score)


def keywords_score(request: ATSOptimizationRequest, reference: Dict[str, Any]) -> float:
    """Share of job-description keywords found in the resume; 50 without a job description."""
    if not request.job_description:
        return 50.0
    job_keywords = extract_keywords(
        request.job_description, reference["keyword_categories"]["technical"]
    )
    if not job_keywords:
        return 0.0
    matches = find_matches(job_keywords, extract_resume_text(request.resume))
    return _clamp(len(matches) / len(job_keywords) * 100)


def structure_score(request: ATSOptimizationRequest, reference: Dict[str, Any]) -> float:
    """
    Section order and coverage.

    The derived section order is compared position by position with the same
    sections arranged in the optimal order, for up to 20 points; having
    contact info, experience, education and skills adds 30.
    """
    optimal = reference["optimal_section_order"]
    order = derived_section_order(request.resume, request.template, reference)
    expected = sorted(order, key=optimal.index)
    matches = sum(1 for actual, wanted in zip(order, expected) if actual == wanted)

    score = 50 + 20 * matches / max(len(order), 1)
    if all(has_section(request.resume, key) for key in STRUCTURE_REQUIRED_KEYS):
        score += 30
    return _clamp(score)


def readability_score(request: ATSOptimizationRequest, reference: Dict[str, Any]) -> float:
    text = extract_resume_text(request.resume)
    score = 70
    average = average_sentence_length(text)
    if average is not None and average > 25:
        score -= 10
    if count_occurrences(text, reference["jargon"]) > 5:
        score -= 10
    return _clamp(score)


def completeness_score(request: ATSOptimizationRequest, reference: Dict[str, Any]) -> float:
    return _clamp(20 * sum(1 for key in COMPLETENESS_KEYS if has_section(request.resume, key)))


def relevance_score(request: ATSOptimizationRequest, reference: Dict[str, Any]) -> float:
    """Share of the industry's keyword list found in the resume; 50 when not applicable."""
    if not request.job_description or not request.industry:
        return 50.0
    industry = request.industry.strip().lower()
    keywords = reference["industry_keywords"].get(industry) or reference[
        "keyword_categories"
    ].get(industry)
    if not keywords:
        _log_debug(f"No keyword list for industry '{request.industry}'")
        return 50.0
    matches = find_matches(keywords, extract_resume_text(request.resume))
    return _clamp(len(matches) / len(keywords) * 100)


def calculate_score_breakdown(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> ScoreBreakdown:
    return ScoreBreakdown(
        formatting=formatting_score(request, reference),
        keywords=keywords_score(request, reference),
        structure=structure_score(request, reference),
        readability=readability_score(request, reference),
        completeness=completeness_score(request, reference),
        relevance=relevance_score(request, reference),
    )


def overall_score(breakdown: ScoreBreakdown, weights: Dict[str, float]) -> float:
    """Fixed-weight combination of the six sub-scores, rounded to 2 decimals."""
    return _clamp(sum(getattr(breakdown, name) * weight for name, weight in weights.items()))


# ============================================================================
# Compatibility, optimizations, warnings, recommendations, benchmark
# ============================================================================


def analyze_compatibility(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> ATSCompatibility:
    """
    Simulate parsing compatibility for each ATS in the roster.

    Each system starts at the base score and loses points for each detected
    condition it is known to struggle with.
    """
    config = reference["compatibility"]
    descriptions = reference["issue_descriptions"]
    friendly_font = is_ats_friendly_font(
        declared_heading_font(request), reference["ats_friendly_fonts"]
    )
    conditions = {
        "table_parsing": has_tables(request.template),
        "custom_sections": has_custom_sections(request.resume),
        "multi_column_layout": has_complex_formatting(request.template),
    }

    systems = []
    for system in reference["ats_systems"]:
        compatibility = config["base"]

        issues = []
        for issue in system["common_issues"]:
            if conditions.get(issue):
                compatibility -= config["penalties"][issue]
                issues.append(descriptions[issue])

        systems.append(
            ATSSystemResult(
                name=system["name"],
                market_share=system["market_share"],
                compatibility=_clamp(compatibility),
                specific_issues=issues,
                recommendations=list(system.get("recommendations", [])),
            )
        )

    total_share = sum(system.market_share for system in systems)
    overall = (
        round(sum(s.compatibility * s.market_share for s in systems) / total_share, 2)
        if total_share
        else 0.0
    )

    potential_issues = []
    if not friendly_font:
        potential_issues.append("Non-standard font may cause parsing issues")
    if conditions["multi_column_layout"]:
        potential_issues.append("Layouts with more than two columns may be read out of order")

    return ATSCompatibility(
        systems=systems,
        overall_compatibility=overall,
        potential_issues=potential_issues,
        guaranteed_parsing=overall / 100 > 0.8,
    )


def generate_optimizations(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> List[ATSOptimization]:
    optimizations = []

    if not is_ats_friendly_font(declared_heading_font(request), reference["ats_friendly_fonts"]):
        optimizations.append(
            ATSOptimization(
                type="formatting",
                priority="high",
                description="Use ATS-friendly fonts",
                action="Change font to Arial, Calibri, or Georgia",
                impact=15,
                implementation={"font_family": FRIENDLY_FONT},
            )
        )

    if request.job_description:
        missing = missing_keywords(request.resume, request.job_description, reference)
        if missing:
            optimizations.append(
                ATSOptimization(
                    type="keyword",
                    priority="high",
                    description="Add missing keywords from job description",
                    action=f"Include keywords: {', '.join(missing)}",
                    impact=20,
                    implementation={"keywords": missing},
                )
            )

    sections = missing_sections(request.resume)
    if sections:
        optimizations.append(
            ATSOptimization(
                type="structure",
                priority="medium",
                description="Add missing standard sections",
                action=f"Include sections: {', '.join(sections)}",
                impact=10,
                implementation={"sections": sections},
            )
        )

    return optimizations


def identify_warnings(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> List[ATSWarning]:
    warnings = []
    resume = request.resume

    if has_complex_formatting(request.template):
        warnings.append(
            ATSWarning(
                severity="high",
                message="Complex formatting may cause parsing issues",
                location="Template layout",
                resolution="Simplify layout and avoid tables or graphics",
            )
        )

    contact = resume.get("personal_info") or {}
    if not contact.get("email") or not contact.get("phone"):
        warnings.append(
            ATSWarning(
                severity="critical",
                message="Missing or incomplete contact information",
                location="Personal information",
                resolution="Add complete contact details including email and phone",
            )
        )

    experience = [exp for exp in resume.get("experience") or [] if isinstance(exp, dict)]
    if not experience:
        warnings.append(
            ATSWarning(
                severity="medium",
                message="Limited work experience details",
                location="Experience section",
                resolution="Add more details about your roles and achievements",
            )
        )
    elif any(
        len(str(exp.get("description") or "").strip()) < THIN_DESCRIPTION_CHARS
        for exp in experience
    ):
        warnings.append(
            ATSWarning(
                severity="medium",
                message="Experience descriptions are too brief",
                location="Experience section",
                resolution="Describe each role's responsibilities and measurable results",
            )
        )

    return warnings


def generate_recommendations(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> List[ATSRecommendation]:
    recommendations = [
        ATSRecommendation(
            category="format",
            recommendation="Use standard reverse-chronological format",
            reasoning="Most ATS systems are trained to recognize this format",
            expected_impact=15,
            difficulty="easy",
        ),
        ATSRecommendation(
            category="content",
            recommendation="Include quantifiable achievements",
            reasoning="Numbers and metrics make your impact clearer",
            expected_impact=20,
            difficulty="moderate",
        ),
    ]

    if request.job_description:
        recommendations.append(
            ATSRecommendation(
                category="keywords",
                recommendation="Mirror language from job description",
                reasoning="Improves keyword matching and relevance scoring",
                expected_impact=25,
                difficulty="easy",
            )
        )

    if request.target_company:
        recommendations.append(
            ATSRecommendation(
                category="content",
                recommendation=f"Research {request.target_company} and reflect its priorities",
                reasoning="Company-specific language signals fit to recruiters and keyword filters",
                expected_impact=10,
                difficulty="moderate",
            )
        )

    return recommendations


def compare_to_benchmark(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> BenchmarkComparison:
    """
    Compare the overall score with industry figures.

    Improvements name every sub-score below the top-performer level, weakest first.
    """
    benchmark = reference["benchmark"]
    breakdown = calculate_score_breakdown(request, reference)
    score = overall_score(breakdown, reference["score_weights"])
    top = benchmark["top_performers"]

    weak = sorted(
        (value, name)
        for name, value in vars(breakdown).items()
        if value < top and name in benchmark["improvements"]
    )
    return BenchmarkComparison(
        industry_average=benchmark["industry_average"],
        top_performers=top,
        your_score=score,
        percentile=_clamp((score - 50) / 40 * 100),
        improvements=[benchmark["improvements"][name] for _, name in weak],
    )


# ============================================================================
# Detailed analysis
# ============================================================================


def _summary_analysis(summary: str, reference: Dict[str, Any]) -> SectionAnalysis:
    action_verbs = {verb.lower() for verb in reference["keyword_categories"]["action_verbs"]}
    score = 50
    if 50 <= len(summary) <= 150:
        score += 30
    if any(word.strip(".,;:!?").lower() in action_verbs for word in summary.split()):
        score += 20

    issues = []
    if len(summary) < 50:
        issues.append("Summary is too short - aim for 50-150 characters")
    elif len(summary) > 200:
        issues.append("Summary is too long - consider condensing")

    return SectionAnalysis(
        section="summary",
        score=_clamp(score),
        issues=issues,
        optimizations=list(SUMMARY_OPTIMIZATIONS),
        best_practices=list(SUMMARY_BEST_PRACTICES),
    )


def _experience_analysis(experience: List[Any]) -> SectionAnalysis:
    entries = [exp for exp in experience if isinstance(exp, dict)]
    issues = []
    if not entries:
        issues.append("No work experience listed")

    score = 50 if entries else 0
    for index, exp in enumerate(entries, start=1):
        description = str(exp.get("description") or "").strip()
        if len(description) > 50:
            score += 10
        if not description:
            issues.append(f"Experience {index} has no description")
        elif len(description) < THIN_DESCRIPTION_CHARS:
            issues.append(f"Experience {index} description is too brief")

    return SectionAnalysis(
        section="experience",
        score=_clamp(score),
        issues=issues,
        optimizations=list(EXPERIENCE_OPTIMIZATIONS),
        best_practices=list(EXPERIENCE_BEST_PRACTICES),
    )


def _skills_analysis(skills: List[Any]) -> SectionAnalysis:
    issues = []
    if len(skills) < 5:
        issues.append("List at least five skills")
    return SectionAnalysis(
        section="skills",
        score=_clamp(len(skills) * 10),
        issues=issues,
        optimizations=list(SKILLS_OPTIMIZATIONS),
        best_practices=list(SKILLS_BEST_PRACTICES),
    )


def analyze_sections(resume: Dict[str, Any], reference: Dict[str, Any]) -> List[SectionAnalysis]:
    analyses = []
    if resume.get("summary"):
        analyses.append(_summary_analysis(str(resume["summary"]), reference))
    if isinstance(resume.get("experience"), list):
        analyses.append(_experience_analysis(resume["experience"]))
    if has_section(resume, "skills"):
        analyses.append(_skills_analysis(resume["skills"]))
    return analyses


def analyze_keywords(
    resume: Dict[str, Any], job_description: Optional[str], reference: Dict[str, Any]
) -> KeywordAnalysis:
    text = extract_resume_text(resume)
    known = list(dict.fromkeys(k for group in reference["keyword_categories"].values() for k in group))
    relevant = find_matches(known, text)
    density = keyword_density(relevant, text)
    word_count = max(len(text.split()), 1)

    placement = [
        KeywordPlacement(
            keyword=keyword,
            locations=find_keyword_locations(resume, keyword),
            density=round(density[keyword] / word_count, 4),
            importance=keyword_importance(keyword, reference["keyword_importance"]),
        )
        for keyword in relevant
    ]

    return KeywordAnalysis(
        total_keywords=len(relevant),
        relevant_keywords=relevant,
        missing_keywords=missing_keywords(resume, job_description, reference)
        if job_description
        else [],
        keyword_density=density,
        keyword_placement=placement,
    )


def analyze_formatting(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> FormattingAnalysis:
    issues = []
    font = declared_heading_font(request)
    friendly_font = is_ats_friendly_font(font, reference["ats_friendly_fonts"])
    if font and not friendly_font:
        issues.append(
            FormattingIssue(
                type="font",
                severity="high",
                description=f"Non-ATS friendly font detected: {font}",
                location="Typography settings",
                fix="Change to Arial, Calibri, or Georgia",
            )
        )
    if has_complex_formatting(request.template):
        issues.append(
            FormattingIssue(
                type="layout",
                severity="medium",
                description="Complex multi-column layout",
                location="Template layout",
                fix="Simplify to single or two-column layout",
            )
        )

    readability = 80
    if friendly_font:
        readability += 10
    columns = declared_column_count(request.template)
    if columns is not None and columns <= MAX_ATS_COLUMNS:
        readability += 10

    return FormattingAnalysis(
        issues=issues,
        recommendations=[issue.fix for issue in issues],
        compliance_score=_clamp(100 - 10 * len(issues)),
        readability_score=_clamp(readability),
    )


def analyze_structure(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> StructureAnalysis:
    """
    Compare the resume's section order with the optimal order.

    Redundant sections are optional template sections the resume has no data
    for; they would render as empty headings.
    """
    resume = request.resume
    missing = missing_sections(resume)
    redundant = [
        section.get("name") or section.get("id")
        for section in sorted(_template_sections(request.template), key=_section_sort_key)
        if not section.get("required")
        and _resume_key(section.get("type")) in reference["section_display_names"]
        and not has_section(resume, _resume_key(section.get("type")))
    ]

    recommendations = []
    if missing:
        recommendations.append(f"Add missing sections: {', '.join(missing)}")
    if redundant:
        recommendations.append(f"Consider removing redundant sections: {', '.join(redundant)}")

    return StructureAnalysis(
        section_order=derived_section_order(resume, request.template, reference),
        missing_sections=missing,
        redundant_sections=redundant,
        recommendations=recommendations,
        optimal_order=list(reference["optimal_section_order"]),
    )


def analyze_content(resume: Dict[str, Any], reference: Dict[str, Any]) -> ContentAnalysis:
    text = extract_resume_text(resume)

    used_verbs = find_phrases(text, reference["keyword_categories"]["action_verbs"])
    action_verbs = ActionVerbAnalysis(
        count=len(used_verbs),
        strength_score=_clamp(len(used_verbs) / 10 * 100),
        recommended_verbs=list(reference["recommended_verbs"]),
        weak_verbs=find_phrases(text, reference["weak_verbs"]),
    )

    metrics = find_metrics(text)
    quantifiable = QuantifiableResultsAnalysis(
        metrics_found=len(metrics),
        impact_score=_clamp(len(metrics) * 10),
        missing_metrics=find_missing_metric_kinds(text),
        suggested_additions=list(SUGGESTED_METRIC_ADDITIONS),
    )

    strong = find_phrases(text, reference["strong_phrases"])
    weak = find_phrases(text, reference["weak_phrases"])
    impact = ImpactLanguageAnalysis(
        score=_clamp(50 + 10 * len(strong) - 5 * len(weak)),
        strong_phrases=strong,
        weak_phrases=weak,
        improvements=list(IMPACT_IMPROVEMENTS) if weak else [],
    )

    achievements = extract_achievements(resume, reference["achievement_indicators"])
    categorized = categorize_achievements(achievements, reference["achievement_categories"])
    achievement_analysis = AchievementAnalysis(
        total_achievements=len(achievements),
        impact_score=_clamp(len(achievements) / 5 * 100),
        categorized_achievements=categorized,
        missing_categories=[name for name, found in categorized.items() if not found],
    )

    return ContentAnalysis(
        action_verbs=action_verbs,
        quantifiable_results=quantifiable,
        impact_language=impact,
        achievements=achievement_analysis,
    )


def perform_detailed_analysis(
    request: ATSOptimizationRequest, reference: Dict[str, Any]
) -> DetailedAnalysis:
    return DetailedAnalysis(
        section_analysis=analyze_sections(request.resume, reference),
        keyword_analysis=analyze_keywords(request.resume, request.job_description, reference),
        formatting_analysis=analyze_formatting(request, reference),
        structure_analysis=analyze_structure(request, reference),
        content_analysis=analyze_content(request.resume, reference),
    )


# ============================================================================
# Optimizer
# ============================================================================


def _ensure_dict(parent: Dict[str, Any], key: str) -> Dict[str, Any]:
    if not isinstance(parent.get(key), dict):
        parent[key] = {}
    return parent[key]


class ATSOptimizer:
    """
    ATS scoring and optimization service.

    Stateless apart from the reference data loaded at construction, so one
    instance can serve concurrent callers.

    Attributes:
        reference: ATS reference data (roster, vocabularies, weights)
        timeout_s: Upper bound on the scatter/gather in optimize_for_ats()
    """

    def __init__(self, reference_path: Path = None, timeout_s: Optional[float] = None):
        """
        Initialize the optimizer.

        Args:
            reference_path: ATS reference YAML. Defaults to VELLUM_ATS_REFERENCE_PATH
            timeout_s: Analysis timeout in seconds. Defaults to VELLUM_ATS_TIMEOUT_S (10)
        """
        self.reference = load_ats_reference(reference_path)
        self.timeout_s = DEFAULT_TIMEOUT_S if timeout_s is None else timeout_s

    def optimize_for_ats(self, request: ATSOptimizationRequest) -> ATSOptimizationResult:
        """
        Run the full ATS analysis.

        Args:
            request: Resume, template and optional targeting context

        Returns:
            ATSOptimizationResult

        Raises:
            ServiceUnavailableError: If the analysis cannot be assembled
        """
        start = time.perf_counter()
        template_id = None
        try:
            template_id = (request.template or {}).get("id") or "(unsaved)"
            branches: Dict[str, Tuple[Callable, Callable]] = {
                "score_breakdown": (calculate_score_breakdown, ScoreBreakdown),
                "compatibility": (analyze_compatibility, ATSCompatibility),
                "optimizations": (generate_optimizations, list),
                "warnings": (identify_warnings, list),
                "recommendations": (generate_recommendations, list),
                "benchmark_comparison": (compare_to_benchmark, BenchmarkComparison),
                "detailed_analysis": (perform_detailed_analysis, DetailedAnalysis),
            }
            gathered = self._gather(branches, request)
            result = ATSOptimizationResult(
                overall_score=overall_score(
                    gathered["score_breakdown"], self.reference["score_weights"]
                ),
                **gathered,
            )
        except Exception as e:
            _log_error(f"ATS optimization failed for {template_id}: {type(e).__name__}: {e}")
            raise ServiceUnavailableError(
                f"ATS optimization service unavailable: {e}", template_id=template_id
            ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        log_optimization_result(template_id, result, elapsed_ms)
        log_engine_event(
            event_type="ats_optimization_completed",
            template_id=template_id,
            source="targeting",
            overall_score=result.overall_score,
            overall_compatibility=result.compatibility.overall_compatibility,
            elapsed_ms=round(elapsed_ms, 1),
        )
        return result

    def _gather(
        self,
        branches: Dict[str, Tuple[Callable, Callable]],
        request: ATSOptimizationRequest,
    ) -> Dict[str, Any]:
        """Run every branch concurrently; failed or late branches get their defaults."""
        results: Dict[str, Any] = {}
        executor = ThreadPoolExecutor(max_workers=len(branches), thread_name_prefix="ats")
        future_to_branch = {
            executor.submit(analysis, request, self.reference): name
            for name, (analysis, _) in branches.items()
        }
        try:
            for future in as_completed(future_to_branch, timeout=self.timeout_s):
                name = future_to_branch[future]
                try:
                    results[name] = future.result()
                except Exception as e:
                    log_branch_fallback(name, f"{type(e).__name__}: {e}")
        except FutureTimeoutError:
            pending = [name for future, name in future_to_branch.items() if not future.done()]
            log_branch_fallback(", ".join(pending), f"timed out after {self.timeout_s}s")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for name, (_, default) in branches.items():
            if name not in results:
                results[name] = default()
        return results

    def get_realtime_ats_score(
        self, content: str, section: str, context: Optional[Dict[str, Any]] = None
    ) -> RealTimeScore:
        """
        Score a single section's text as it is being edited.

        Never raises: any failure yields score 0 with a "Scoring unavailable" issue.

        Args:
            content: Current section text
            section: Section type, e.g. "summary" or "experience"
            context: Optional {"job_description", "industry", "experience_level"}
        """
        try:
            context = context or {}
            job_description = context.get("job_description")
            keywords = (
                extract_keywords(job_description, self.reference["keyword_categories"]["technical"])
                if job_description
                else []
            )
            matches = find_matches(keywords, content)

            score = 50
            if len(content) > 0:
                score += 20
            if section == "summary" and 50 <= len(content) <= 150:
                score += 20
            if keywords:
                score += len(matches) / len(keywords) * 20

            issues = []
            if len(content) == 0:
                issues.append("Section is empty")
            elif section == "summary" and len(content) < 50:
                issues.append("Section content is too brief")

            suggestions = []
            if section == "summary" and job_description:
                suggestions.append("Include keywords from the job description")
            if section == "experience":
                suggestions.append("Use action verbs to start bullet points")
                suggestions.append("Include quantifiable achievements")

            return RealTimeScore(
                score=_clamp(score),
                issues=issues,
                suggestions=suggestions,
                keyword_matches=matches,
            )
        except Exception as e:
            _log_error(f"Real-time scoring failed for section '{section}': {e}")
            return RealTimeScore(score=0, issues=["Scoring unavailable"])

    def generate_ats_friendly_version(
        self, template: Dict[str, Any], customization: Optional[Dict[str, Any]] = None
    ) -> ATSFriendlyVersion:
        """
        Derive ATS-friendly copies of a template and customization.

        The inputs are never modified.

        Returns:
            ATSFriendlyVersion with the copies, the changes made and the
            estimated score improvement
        """
        optimized_template = copy.deepcopy(template)
        optimized_customization = copy.deepcopy(customization) if customization else {}
        request = ATSOptimizationRequest(
            resume={}, template=template, customization=customization
        )
        changes: List[str] = []
        improvement = 0

        if not is_ats_friendly_font(
            declared_heading_font(request), self.reference["ats_friendly_fonts"]
        ):
            typography = _ensure_dict(optimized_customization, "typography")
            for role in ("heading", "body"):
                _ensure_dict(typography, role)["font_family"] = FRIENDLY_FONT
            changes.append(f"Changed font to ATS-friendly {FRIENDLY_FONT}")
            improvement += 15

        if has_complex_formatting(template):
            layout = _ensure_dict(optimized_template, "layout")
            layout["columns"] = {"count": 2, "widths": [60, 40], "gutters": 20}
            changes.append("Reduced columns to 2 for better ATS parsing")
            improvement += 10

        background = declared_background(request)
        if background and not is_white(background):
            color_scheme = _ensure_dict(optimized_customization, "color_scheme")
            color_scheme["background"] = "#ffffff"
            color_scheme["text"] = "#000000"
            changes.append("Set background to white and text to black for maximum contrast")
            improvement += 8

        if not _template_sections(template):
            optimized_template["sections"] = [
                {
                    "id": section_type,
                    "name": name,
                    "type": section_type,
                    "required": section_type in ("personal-info", "experience"),
                    "order": order,
                    "content": {"fields": []},
                }
                for order, (section_type, name) in enumerate(STANDARD_SECTIONS, start=1)
            ]
            changes.append("Added standard ATS-friendly sections")
            improvement += 20

        _log_debug(f"ATS-friendly version: {len(changes)} changes, +{improvement} estimated")
        return ATSFriendlyVersion(
            optimized_template=optimized_template,
            optimized_customization=optimized_customization,
            changes=changes,
            score_improvement=improvement,
        )
