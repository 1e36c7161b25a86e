"""Unit tests for ATS text analysis helpers."""

import pytest

from vellum.contexts.targeting.text_analysis import (
    average_sentence_length,
    categorize_achievements,
    extract_achievements,
    extract_keywords,
    extract_resume_text,
    find_keyword_locations,
    find_matches,
    find_metrics,
    find_missing_metric_kinds,
    has_section,
    is_ats_friendly_font,
    keyword_density,
    keyword_importance,
    load_ats_reference,
)


@pytest.fixture(scope="module")
def reference():
    return load_ats_reference()


@pytest.mark.unit
def test_reference_data(reference):
    """Test the bundled ATS reference data."""
    assert len(reference["ats_systems"]) == 8
    assert sum(reference["score_weights"].values()) == pytest.approx(1.0)
    assert reference["compatibility"]["base"] == 80


@pytest.mark.unit
def test_extract_resume_text(sample_resume):
    """Test that matching text covers name, summary, descriptions, degrees and skills."""
    text = extract_resume_text(sample_resume)

    assert text == text.lower()
    assert "jane doe" in text
    assert "bachelor of science" in text
    assert "docker" in text
    assert "release dashboard" not in text


@pytest.mark.unit
def test_extract_keywords():
    """Test tokenizing, de-duplication and the short-token rule."""
    assert extract_keywords("React, Node.js, AWS", known_terms=["aws"]) == ["react", "node.js", "aws"]
    assert extract_keywords("We need a Python dev and SQL. Python!", ["sql"]) == [
        "need",
        "python",
        "sql",
    ]
    assert extract_keywords("", ["aws"]) == []
    assert extract_keywords(None) == []


@pytest.mark.unit
def test_find_matches():
    """Test case-insensitive keyword matching."""
    assert find_matches(["react", "aws"], "Deployed on AWS Lambda") == ["aws"]


@pytest.mark.unit
def test_sentence_length():
    """Test mean words per sentence."""
    assert average_sentence_length("One two three. Four five!") == 2.5
    assert average_sentence_length("...") is None


@pytest.mark.unit
def test_metrics():
    """Test quantified result detection and missing metric kinds."""
    text = "Grew revenue 25% and saved $5000 over 3 years"

    assert find_metrics(text) == ["25%", "$5000", "3 years"]
    assert find_missing_metric_kinds(text) == []
    assert find_missing_metric_kinds("Grew sales 25%") == [
        "Financial impact metrics",
        "Time-based metrics",
    ]


@pytest.mark.unit
def test_ats_friendly_font(reference):
    """Test font matching against the friendly list."""
    fonts = reference["ats_friendly_fonts"]

    assert is_ats_friendly_font("Arial", fonts)
    assert is_ats_friendly_font("Arial Narrow", fonts)
    assert not is_ats_friendly_font("Comic Sans MS", fonts)
    assert not is_ats_friendly_font(None, fonts)


@pytest.mark.unit
def test_has_section():
    """Test that list sections need at least one entry."""
    resume = {"summary": "Engineer", "skills": [], "experience": [{"title": "x"}]}

    assert has_section(resume, "summary")
    assert has_section(resume, "experience")
    assert not has_section(resume, "skills")
    assert not has_section(resume, "education")


@pytest.mark.unit
def test_achievements(sample_resume, reference):
    """Test achievement extraction and overlapping categories."""
    achievements = extract_achievements(sample_resume, reference["achievement_indicators"])
    categorized = categorize_achievements(achievements, reference["achievement_categories"])

    assert len(achievements) == 4
    assert set(categorized) == set(reference["achievement_categories"])
    assert categorized["financial"] == []
    assert len(categorized["leadership"]) == 1
    assert len(categorized["customer"]) == 1


@pytest.mark.unit
def test_keyword_locations_and_density(sample_resume):
    """Test where keywords appear and how often."""
    assert find_keyword_locations(sample_resume, "python") == ["Experience 1", "Skills 1"]
    assert keyword_density(["aws"], "aws and AWS") == {"aws": 2}


@pytest.mark.unit
def test_keyword_importance(reference):
    """Test seniority-based importance levels."""
    importance = reference["keyword_importance"]

    assert keyword_importance("Senior Developer", importance) == "high"
    assert keyword_importance("analyst", importance) == "medium"
    assert keyword_importance("python", importance) == "low"
