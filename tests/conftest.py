"""Shared fixtures for the vellum test suite."""

import copy

import pytest
from omegaconf import OmegaConf

from vellum.contexts.templating.registries import TEMPLATE_CATALOG_PATH, TemplateRegistry
from vellum.contexts.templating.template_cache import TemplateCache


class FakeClock:
    """Manually advanced time source for TemplateCache."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def load_catalog_template(template_id: str) -> dict:
    path = TEMPLATE_CATALOG_PATH / f"{template_id}.yaml"
    return OmegaConf.to_container(OmegaConf.load(path), resolve=True)


SAMPLE_RESUME = {
    "personal_info": {
        "full_name": "jane doe",
        "title": "Senior Software Engineer",
        "email": "Jane.Doe@Example.com",
        "phone": "555-123-4567",
        "location": "Austin, TX",
        "linkedin": "https://linkedin.com/in/janedoe",
    },
    "summary": "Backend engineer who led platform teams and improved release reliability.",
    "experience": [
        {
            "title": "Senior Software Engineer",
            "company": "Acme Cloud",
            "location": "Austin, TX",
            "start_date": "2020-03",
            "current": True,
            "description": (
                "Led a team of 6 engineers building Python services on AWS. "
                "Reduced deployment time by 40% with automated pipelines."
            ),
            "achievements": ["Cut infrastructure spend by $120000 per year"],
        },
        {
            "title": "Software Engineer",
            "company": "Initech",
            "location": "Dallas, TX",
            "start_date": "2016-06",
            "end_date": "2020-02",
            "description": (
                "Developed internal APIs with SQL and Docker. "
                "Improved customer onboarding throughput for 3 years running."
            ),
        },
    ],
    "education": [
        {
            "institution": "University of Texas",
            "degree": "Bachelor of Science",
            "field": "Computer Science",
            "end_date": "2016",
            "gpa": 3.7,
        }
    ],
    "skills": [
        {"name": "Python", "category": "technical"},
        {"name": "AWS", "category": "technical"},
        {"name": "SQL", "category": "technical"},
        {"name": "Docker", "category": "technical"},
        {"name": "Leadership", "category": "soft skills"},
    ],
    "projects": [
        {
            "name": "Release Dashboard",
            "description": "Deployment health dashboard used by 40 engineers.",
            "technologies": ["Python", "React"],
        }
    ],
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def classic_template():
    """Fresh copy of the professional-classic catalog template."""
    return load_catalog_template("professional-classic")


@pytest.fixture
def creative_template():
    """Fresh copy of the creative-sidebar catalog template."""
    return load_catalog_template("creative-sidebar")


@pytest.fixture
def sample_resume():
    return copy.deepcopy(SAMPLE_RESUME)


@pytest.fixture
def registry():
    """Catalog registry with a private cache."""
    return TemplateRegistry(cache=TemplateCache(ttl_seconds=60, max_size=10))
