"""
VELLUM - Validated Engine for Layout, Lookup, and Usable Markup

A resume-platform core that turns a structured resume and a catalog template into
a rendered HTML document and scores it against simulated applicant tracking systems.

Architecture:
- Templating Context: Template catalog, caching, validation, and data binding
- Rendering Context: HTML/CSS generation and preview cards
- Targeting Context: ATS compatibility scoring and optimization feedback
"""

__version__ = "0.1.0"
