"""
Text analysis helpers for ATS scoring.

Pure functions over resume dicts and plain text. Everything that needs
reference vocabularies (keyword lists, jargon, phrase lists) takes them as
arguments; load_ats_reference() supplies the bundled defaults.
"""

import os
import re
import string
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
ATS_REFERENCE_PATH = Path(
    os.getenv("VELLUM_ATS_REFERENCE_PATH", Path(__file__).parent / "ats_reference.yaml")
)

SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
QUANTIFIABLE_PATTERN = re.compile(r"\d+%|\$\d+|\d+\s+(?:years|months|people|teams)", re.IGNORECASE)
PERCENT_PATTERN = re.compile(r"\d+%|percent")
MONEY_PATTERN = re.compile(r"\$\d+")
DURATION_PATTERN = re.compile(r"\d+\s+(?:years|months)")

# Tokens this short are kept as keywords only when they are known terms
MIN_KEYWORD_LENGTH = 4


def load_ats_reference(config_path: Path = None) -> Dict[str, Any]:
    """
    Load ATS reference data (system roster, vocabularies, weights).

    Args:
        config_path: Path to reference YAML. Defaults to VELLUM_ATS_REFERENCE_PATH
            or the bundled ats_reference.yaml

    Returns:
        Reference data as a plain dict
    """
    if config_path is None:
        config_path = ATS_REFERENCE_PATH
    return OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(_as_text(v) for v in value)
    return str(value)


def _items(resume: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    items = resume.get(key) or []
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []


def extract_resume_text(resume: Dict[str, Any]) -> str:
    """
    Lowercased text used for keyword matching and readability.

    Covers the name, summary, experience descriptions, education degrees, and
    skill names. Each part goes on its own line.
    """
    personal = resume.get("personal_info") or {}
    parts = [
        _as_text(personal.get("full_name")),
        _as_text(resume.get("summary")),
        " ".join(_as_text(exp.get("description")) for exp in _items(resume, "experience")),
        " ".join(_as_text(edu.get("degree")) for edu in _items(resume, "education")),
        " ".join(_as_text(skill.get("name")) for skill in _items(resume, "skills")),
    ]
    return "\n".join(parts).lower()


def extract_keywords(text: Optional[str], known_terms: Iterable[str] = ()) -> List[str]:
    """
    Candidate keywords from free text such as a job description.

    Tokens are whitespace-separated words with surrounding punctuation stripped,
    lowercased and de-duplicated in order of first appearance. Tokens shorter
    than four characters survive only if they appear in known_terms.

    Example:
        >>> extract_keywords("React, Node.js, AWS", known_terms=["aws"])
        ['react', 'node.js', 'aws']
    """
    if not text:
        return []

    known = {term.lower() for term in known_terms}
    keywords: List[str] = []
    seen = set()
    for raw in text.split():
        token = raw.strip(string.punctuation).lower()
        if not token or token in seen:
            continue
        if len(token) >= MIN_KEYWORD_LENGTH or token in known:
            seen.add(token)
            keywords.append(token)
    return keywords


def find_matches(keywords: Iterable[str], text: str) -> List[str]:
    """Keywords that occur (case-insensitive substring) in text."""
    haystack = text.lower()
    return [keyword for keyword in keywords if keyword.lower() in haystack]


def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in SENTENCE_SPLIT_PATTERN.split(text) if s.strip()]


def average_sentence_length(text: str) -> Optional[float]:
    """Mean words per sentence, or None when the text has no sentences."""
    sentences = split_sentences(text)
    if not sentences:
        return None
    return sum(len(sentence.split()) for sentence in sentences) / len(sentences)


def count_occurrences(text: str, terms: Iterable[str]) -> int:
    """Total non-overlapping occurrences of every term in text (case-insensitive)."""
    haystack = text.lower()
    return sum(haystack.count(term.lower()) for term in terms)


def find_phrases(text: str, phrases: Iterable[str]) -> List[str]:
    haystack = text.lower()
    return [phrase for phrase in phrases if phrase.lower() in haystack]


def find_metrics(text: str) -> List[str]:
    """Quantified results such as '25%', '$5000' or '3 years'."""
    return [match.group(0) for match in QUANTIFIABLE_PATTERN.finditer(text)]


def find_missing_metric_kinds(text: str) -> List[str]:
    missing = []
    if not PERCENT_PATTERN.search(text):
        missing.append("Percentage-based metrics")
    if not MONEY_PATTERN.search(text):
        missing.append("Financial impact metrics")
    if not DURATION_PATTERN.search(text):
        missing.append("Time-based metrics")
    return missing


def is_ats_friendly_font(font: Optional[str], friendly_fonts: Iterable[str]) -> bool:
    """True when the font name contains one of the ATS-friendly font names."""
    if not font:
        return False
    lowered = font.lower()
    return any(name.lower() in lowered for name in friendly_fonts)


def has_section(resume: Dict[str, Any], key: str) -> bool:
    """
    Whether a resume has content for a standard section key.

    personal_info and summary count when truthy; list sections need at least
    one entry.
    """
    value = resume.get(key)
    if isinstance(value, list):
        return len(value) > 0
    return bool(value)


def extract_achievements(resume: Dict[str, Any], indicators: Iterable[str]) -> List[str]:
    """Experience-description sentences containing an achievement indicator."""
    indicators = [indicator.lower() for indicator in indicators]
    achievements = []
    for exp in _items(resume, "experience"):
        for sentence in split_sentences(_as_text(exp.get("description"))):
            lowered = sentence.lower()
            if any(indicator in lowered for indicator in indicators):
                achievements.append(sentence)
    return achievements


def categorize_achievements(
    achievements: Iterable[str], categories: Dict[str, List[str]]
) -> Dict[str, List[str]]:
    """
    Bucket achievements by category markers.

    An achievement lands in every category whose markers it contains, so the
    buckets may overlap. Every category is present in the result.
    """
    buckets: Dict[str, List[str]] = {name: [] for name in categories}
    for achievement in achievements:
        lowered = achievement.lower()
        for name, markers in categories.items():
            if any(marker.lower() in lowered for marker in markers):
                buckets[name].append(achievement)
    return buckets


def keyword_importance(keyword: str, importance: Dict[str, List[str]]) -> str:
    """Classify a keyword as high, medium or low importance by seniority markers."""
    lowered = keyword.lower()
    for level in ("high", "medium"):
        if any(marker in lowered for marker in importance.get(level, [])):
            return level
    return "low"


def find_keyword_locations(resume: Dict[str, Any], keyword: str) -> List[str]:
    """
    Human-readable places a keyword appears.

    Returns:
        Labels like "Summary", "Experience 2", "Skills 1"
    """
    needle = keyword.lower()
    locations = []
    if needle in _as_text(resume.get("summary")).lower():
        locations.append("Summary")
    for index, exp in enumerate(_items(resume, "experience"), start=1):
        if needle in _as_text(exp.get("description")).lower():
            locations.append(f"Experience {index}")
    for index, skill in enumerate(_items(resume, "skills"), start=1):
        if needle in _as_text(skill.get("name")).lower():
            locations.append(f"Skills {index}")
    return locations


def keyword_density(keywords: Iterable[str], text: str) -> Dict[str, int]:
    """Occurrence count of each keyword in text."""
    haystack = text.lower()
    return {keyword: len(re.findall(re.escape(keyword.lower()), haystack)) for keyword in keywords}
