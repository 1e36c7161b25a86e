"""
ATS analysis data structures.

Requests and reports exchanged with ATSOptimizer. Reports are ephemeral:
they are computed fresh per request and never cached by the engine.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ATSOptimizationRequest:
    """
    Input to ATSOptimizer.optimize_for_ats().

    Attributes:
        resume: Resume dict (read-only)
        template: Template dict (read-only)
        customization: User customization overlay (optional)
        job_description: Job posting text used for keyword scoring (optional)
        target_company: Company being applied to (optional)
        industry: Industry key for relevance scoring, e.g. "technology" (optional)
        experience_level: Seniority hint, e.g. "senior" (optional)
    """

    resume: Dict[str, Any]
    template: Dict[str, Any]
    customization: Optional[Dict[str, Any]] = None
    job_description: Optional[str] = None
    target_company: Optional[str] = None
    industry: Optional[str] = None
    experience_level: Optional[str] = None


@dataclass
class ScoreBreakdown:
    """Six sub-scores, each in [0, 100]."""

    formatting: float = 50
    keywords: float = 50
    structure: float = 50
    readability: float = 50
    completeness: float = 50
    relevance: float = 50


@dataclass
class ATSSystemResult:
    name: str
    market_share: float
    compatibility: float
    specific_issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class ATSCompatibility:
    """
    Simulated parsing compatibility across the ATS roster.

    Attributes:
        systems: Per-system results
        overall_compatibility: Market-share weighted mean compatibility (0-100)
        potential_issues: Issues affecting every system
        guaranteed_parsing: overall_compatibility / 100 > 0.8
    """

    systems: List[ATSSystemResult] = field(default_factory=list)
    overall_compatibility: float = 0.0
    potential_issues: List[str] = field(default_factory=list)
    guaranteed_parsing: bool = False


@dataclass
class ATSOptimization:
    """
    A concrete change that should raise the ATS score.

    Attributes:
        type: "formatting", "keyword", "structure" or "content"
        priority: "critical", "high", "medium" or "low"
        description: What the change is
        action: What the user should do
        impact: Estimated score gain
        implementation: Machine-readable details of the change
    """

    type: str
    priority: str
    description: str
    action: str
    impact: int
    implementation: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ATSWarning:
    severity: str
    message: str
    location: str
    resolution: str


@dataclass
class ATSRecommendation:
    category: str
    recommendation: str
    reasoning: str
    expected_impact: int
    difficulty: str


@dataclass
class BenchmarkComparison:
    industry_average: float = 0.0
    top_performers: float = 0.0
    your_score: float = 0.0
    percentile: float = 0.0
    improvements: List[str] = field(default_factory=list)


@dataclass
class SectionAnalysis:
    section: str
    score: float
    issues: List[str] = field(default_factory=list)
    optimizations: List[str] = field(default_factory=list)
    best_practices: List[str] = field(default_factory=list)


@dataclass
class KeywordPlacement:
    keyword: str
    locations: List[str]
    density: float
    importance: str


@dataclass
class KeywordAnalysis:
    total_keywords: int = 0
    relevant_keywords: List[str] = field(default_factory=list)
    missing_keywords: List[str] = field(default_factory=list)
    keyword_density: Dict[str, int] = field(default_factory=dict)
    keyword_placement: List[KeywordPlacement] = field(default_factory=list)


@dataclass
class FormattingIssue:
    type: str
    severity: str
    description: str
    location: str
    fix: str


@dataclass
class FormattingAnalysis:
    issues: List[FormattingIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    compliance_score: float = 0.0
    readability_score: float = 0.0


@dataclass
class StructureAnalysis:
    section_order: List[str] = field(default_factory=list)
    missing_sections: List[str] = field(default_factory=list)
    redundant_sections: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    optimal_order: List[str] = field(default_factory=list)


@dataclass
class ActionVerbAnalysis:
    count: int = 0
    strength_score: float = 0.0
    recommended_verbs: List[str] = field(default_factory=list)
    weak_verbs: List[str] = field(default_factory=list)


@dataclass
class QuantifiableResultsAnalysis:
    metrics_found: int = 0
    impact_score: float = 0.0
    missing_metrics: List[str] = field(default_factory=list)
    suggested_additions: List[str] = field(default_factory=list)


@dataclass
class ImpactLanguageAnalysis:
    score: float = 0.0
    strong_phrases: List[str] = field(default_factory=list)
    weak_phrases: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)


@dataclass
class AchievementAnalysis:
    total_achievements: int = 0
    impact_score: float = 0.0
    categorized_achievements: Dict[str, List[str]] = field(default_factory=dict)
    missing_categories: List[str] = field(default_factory=list)


@dataclass
class ContentAnalysis:
    action_verbs: ActionVerbAnalysis = field(default_factory=ActionVerbAnalysis)
    quantifiable_results: QuantifiableResultsAnalysis = field(
        default_factory=QuantifiableResultsAnalysis
    )
    impact_language: ImpactLanguageAnalysis = field(default_factory=ImpactLanguageAnalysis)
    achievements: AchievementAnalysis = field(default_factory=AchievementAnalysis)


@dataclass
class DetailedAnalysis:
    """Per-section, keyword, formatting, structure, and content sub-reports."""

    section_analysis: List[SectionAnalysis] = field(default_factory=list)
    keyword_analysis: KeywordAnalysis = field(default_factory=KeywordAnalysis)
    formatting_analysis: FormattingAnalysis = field(default_factory=FormattingAnalysis)
    structure_analysis: StructureAnalysis = field(default_factory=StructureAnalysis)
    content_analysis: ContentAnalysis = field(default_factory=ContentAnalysis)


@dataclass
class ATSOptimizationResult:
    """
    Full ATS report for one (resume, template, job description) combination.

    Attributes:
        overall_score: Weighted combination of the six sub-scores (0-100)
        score_breakdown: The six sub-scores
        compatibility: Simulated per-system parsing compatibility
        optimizations: Prioritized changes with estimated impact
        warnings: Severity-tagged problems
        recommendations: General advice
        benchmark_comparison: Score relative to industry figures
        detailed_analysis: Section, keyword, formatting, structure and content reports
    """

    overall_score: float
    score_breakdown: ScoreBreakdown
    compatibility: ATSCompatibility
    optimizations: List[ATSOptimization]
    warnings: List[ATSWarning]
    recommendations: List[ATSRecommendation]
    benchmark_comparison: BenchmarkComparison
    detailed_analysis: DetailedAnalysis

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RealTimeScore:
    """Lightweight score for a single section while it is being edited."""

    score: float
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    keyword_matches: List[str] = field(default_factory=list)


@dataclass
class ATSFriendlyVersion:
    """
    ATS-friendly projection of a template and customization.

    Attributes:
        optimized_template: Modified copy of the template
        optimized_customization: Modified copy of the customization
        changes: Human-readable list of changes made
        score_improvement: Estimated score gain from the changes
    """

    optimized_template: Dict[str, Any]
    optimized_customization: Dict[str, Any]
    changes: List[str] = field(default_factory=list)
    score_improvement: int = 0
