"""
Templating Context

Responsibilities:
- Loads resume templates from the YAML catalog and caches them (TTL + LRU)
- Validates template structure, styling, accessibility, and ATS configuration
- Binds resume data into a template's section/field graph
- Applies user customizations and named presets as a non-destructive overlay

Owns: Template catalog, template cache, field type rules, data binding
Never: Produces HTML or scores ATS compatibility
"""
