"""
Rendering Context

Responsibilities:
- Validates that a resume can fill a template's required sections
- Generates CSS from template styling and user customizations
- Assembles HTML documents and gallery preview cards from Jinja2 partials
- Computes checksums and size metrics for rendered output

Owns: HTML/CSS generation, section partials, preview cards
Never: Decides template content or scores ATS compatibility
"""
