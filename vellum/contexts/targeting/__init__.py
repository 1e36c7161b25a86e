"""
Targeting Context

Responsibilities:
- Scores a resume against heuristics simulating applicant tracking systems (ATS)
- Weighs formatting, keywords, structure, readability, completeness and relevance
- Simulates parsing compatibility for a fixed roster of named ATS products
- Emits prioritized optimizations, warnings, recommendations and benchmarks
- Derives ATS-friendly projections of a template and customization

Owns: ATS reference data, text analysis heuristics, scoring and compatibility logic
Never: Renders documents, mutates templates or resumes, or caches reports
"""
