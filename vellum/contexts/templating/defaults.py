"""
Reference tables for template validation and data binding.

Provides the closed vocabularies (categories, layouts, section types), the
ATS-approved font list, and the field-id -> resume-path table used by the binder.
"""

from typing import Dict, Tuple

TEMPLATE_CATEGORIES = ("professional", "modern", "industry-specific", "academic", "creative")

LAYOUT_FORMATS = ("single-column", "two-column", "three-column", "hybrid", "sidebar")

HEADER_STYLES = ("centered", "left-aligned", "right-aligned", "sidebar", "modern")

SECTION_TYPES = (
    "personal-info",
    "summary",
    "experience",
    "education",
    "skills",
    "projects",
    "certifications",
    "languages",
    "custom",
)

RECOMMENDED_SECTION_TYPES = ("personal-info", "experience", "education", "skills")

ATS_APPROVED_FONTS = (
    "Arial",
    "Calibri",
    "Georgia",
    "Helvetica",
    "Times New Roman",
    "Verdana",
    "Trebuchet MS",
    "Lucida Sans Unicode",
    "Open Sans",
)

KNOWN_PROHIBITED_ELEMENTS = ("tables", "columns", "images", "headers", "footers", "page-breaks")

REQUIRED_TEMPLATE_FIELDS = (
    "id",
    "name",
    "description",
    "category",
    "layout",
    "styling",
    "sections",
    "features",
    "ats_optimization",
    "metadata",
)

REQUIRED_SECTION_FIELDS = ("id", "name", "type", "required", "order", "content")

# (min, max) widths in px for each responsive breakpoint
BREAKPOINT_RANGES = {
    "mobile": (320, 768),
    "tablet": (768, 1024),
    "desktop": (1024, 1920),
}

# Page geometry limits in inches
PAGE_WIDTH_RANGE = (6.0, 12.0)
PAGE_HEIGHT_RANGE = (8.0, 14.0)
MARGIN_RANGE = (0.25, 2.0)

HEADING_SIZE_RANGE_PX = (8, 72)
BODY_SIZE_RANGE_PX = (8, 24)

MIN_CONTRAST_RATIO = 4.5

# Resume paths per (section type, field id); list segments fan out over entries
FIELD_PATHS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "personal-info": {
        "full_name": ("personal_info", "full_name"),
        "name": ("personal_info", "full_name"),
        "title": ("personal_info", "title"),
        "email": ("personal_info", "email"),
        "phone": ("personal_info", "phone"),
        "location": ("personal_info", "location"),
        "linkedin": ("personal_info", "linkedin"),
        "website": ("personal_info", "website"),
    },
    "summary": {
        "summary": ("summary",),
        "content": ("summary",),
    },
    "experience": {
        "position": ("experience", "title"),
        "title": ("experience", "title"),
        "company": ("experience", "company"),
        "location": ("experience", "location"),
        "start_date": ("experience", "start_date"),
        "end_date": ("experience", "end_date"),
        "current": ("experience", "current"),
        "description": ("experience", "description"),
        "achievements": ("experience", "achievements"),
    },
    "education": {
        "degree": ("education", "degree"),
        "institution": ("education", "institution"),
        "field": ("education", "field"),
        "location": ("education", "location"),
        "start_date": ("education", "start_date"),
        "end_date": ("education", "end_date"),
        "graduation_year": ("education", "end_date"),
        "gpa": ("education", "gpa"),
    },
    "skills": {
        "skills": ("skills", "name"),
        "technical_skills": ("skills", "name"),
        "name": ("skills", "name"),
        "category": ("skills", "category"),
        "level": ("skills", "level"),
    },
    "projects": {
        "name": ("projects", "name"),
        "description": ("projects", "description"),
        "technologies": ("projects", "technologies"),
    },
    "certifications": {
        "name": ("certifications", "name"),
        "issuer": ("certifications", "issuer"),
        "date": ("certifications", "issue_date"),
        "issue_date": ("certifications", "issue_date"),
    },
    "languages": {
        "languages": ("languages", "name"),
        "name": ("languages", "name"),
        "proficiency": ("languages", "proficiency"),
    },
}

# Top-level resume keys the engine understands; anything else is a custom section
STANDARD_RESUME_KEYS = (
    "personal_info",
    "summary",
    "experience",
    "education",
    "skills",
    "projects",
    "certifications",
    "languages",
)

# Keys a customization may overlay onto a resume copy
CUSTOMIZATION_OVERLAY_KEYS = ("theme", "fonts", "layout", "sections")
