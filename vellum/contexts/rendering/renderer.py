"""
Template Renderer

Turns a resume plus a catalog template into an HTML document:

1. Resolve the template (cache first, then catalog)
2. Check the resume can fill the template's required sections
3. Run content processors and bind data into the template's field graph
4. Generate CSS from the template styling merged with user customizations
5. Assemble HTML from Jinja2 partials, optionally minified and with inline CSS
6. Attach checksum, sizes, and timing metadata

Identical inputs produce identical checksums; render ids and timestamps are
not part of the checksummed content.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from vellum import __version__
from vellum.contexts.rendering.html_registry import HtmlTemplateRegistry
from vellum.contexts.rendering.logger import (
    _log_debug,
    log_render_failed,
    log_render_result,
    log_render_start,
)
from vellum.contexts.rendering.style_processor import build_css, minify_css, minify_html
from vellum.contexts.templating.customization import resolve_customization
from vellum.contexts.templating.data_binder import DataBinder, DataBindingResult, split_bound_values
from vellum.contexts.templating.exceptions import (
    RenderFailedError,
    TemplateNotFoundError,
    ValidationFailedError,
)
from vellum.contexts.templating.field_types import EMAIL_PATTERN, format_date
from vellum.contexts.templating.registries import TemplateRegistry
from vellum.contexts.templating.template_validator import (
    IssueCollector,
    ValidationResult,
)
from vellum.utils.event_logging import log_engine_event
from vellum.utils.timestamp import now

SUPPORTED_FORMATS = ("html", "preview")

HEADER_ALIGN_CLASSES = {
    "centered": "text-center",
    "left-aligned": "text-left",
    "right-aligned": "text-right",
}

# Resume key holding each section type's data; custom sections use their own id
SECTION_RESUME_KEYS = {
    "personal-info": "personal_info",
    "summary": "summary",
    "experience": "experience",
    "education": "education",
    "skills": "skills",
    "projects": "projects",
    "certifications": "certifications",
    "languages": "languages",
}

DEFAULT_HEADINGS = {
    "summary": "Professional Summary",
    "experience": "Professional Experience",
    "education": "Education",
    "skills": "Skills",
    "projects": "Projects",
    "certifications": "Certifications",
    "languages": "Languages",
}

LOADING_PLACEHOLDER = '<div class="template-preview loading">Loading preview...</div>'

DEMO_RESUME: Dict[str, Any] = {
    "personal_info": {
        "full_name": "John Doe",
        "title": "Senior Software Engineer",
        "email": "john.doe@example.com",
        "phone": "5551234567",
        "location": "San Francisco, CA",
        "linkedin": "https://linkedin.com/in/johndoe",
    },
    "summary": (
        "Software engineer with 8 years of experience building scalable web services "
        "and leading cross-functional teams."
    ),
    "experience": [
        {
            "title": "Senior Software Engineer",
            "company": "Tech Corp",
            "location": "San Francisco, CA",
            "start_date": "2020-01",
            "current": True,
            "description": "Led development of a microservices platform serving 2M users.",
            "achievements": ["Reduced deployment time by 60%", "Mentored 5 engineers"],
        }
    ],
    "education": [
        {
            "institution": "University of California",
            "degree": "Bachelor of Science",
            "field": "Computer Science",
            "end_date": "2016",
        }
    ],
    "skills": [
        {"name": "Python", "category": "technical"},
        {"name": "AWS", "category": "technical"},
        {"name": "Leadership", "category": "soft skills"},
    ],
}


@dataclass
class RenderOptimization:
    """
    Output optimizations.

    Attributes:
        minify: Strip comments and collapse whitespace in HTML and CSS
        inline_css: Embed the stylesheet in a <style> block instead of linking resume.css
        embed_images: Reserved for image embedding; resumes carry no images
        subset_fonts: Report only the font weights the stylesheet uses
    """

    minify: bool = False
    inline_css: bool = False
    embed_images: bool = False
    subset_fonts: bool = False


@dataclass
class RenderOptions:
    format: str = "html"
    optimization: RenderOptimization = field(default_factory=RenderOptimization)
    customizations: Optional[Dict[str, Any]] = None
    lang: str = "en"


@dataclass
class RenderMetadata:
    generated_at: str
    rendering_time_ms: float
    version: str
    checksum: str
    size: Dict[str, int]


@dataclass
class RenderedTemplate:
    """
    A rendered resume document.

    Attributes:
        id: Unique render id
        template_id: Template the document was rendered from
        html: Complete HTML document
        css: Stylesheet (also embedded in html when inline_css is set)
        javascript: Optional script payload (unused by the bundled templates)
        assets: {"fonts", "images", "icons"} referenced by the document
        warnings: Non-blocking problems found while rendering
        metadata: Timing, checksum, and size information
    """

    id: str
    template_id: str
    html: str
    css: str
    metadata: RenderMetadata
    javascript: Optional[str] = None
    assets: Dict[str, List[Any]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


@dataclass
class RenderContext:
    """Everything one render pass needs, built once per call."""

    render_id: str
    template: Dict[str, Any]
    resume: Dict[str, Any]
    options: RenderOptions
    started_at: str


def compute_checksum(*parts: str) -> str:
    """
    32-bit rolling hash of the given strings, in base 36.

    h = (h * 31 + ord(c)) mod 2**32 over every character in order.
    """
    value = 0
    for part in parts:
        for char in part:
            value = (value * 31 + ord(char)) & 0xFFFFFFFF

    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    encoded = ""
    while value:
        value, remainder = divmod(value, 36)
        encoded = digits[remainder] + encoded
    return encoded


def section_resume_key(section: Dict[str, Any]) -> str:
    return SECTION_RESUME_KEYS.get(section.get("type"), section.get("id"))


def has_section_data(resume: Dict[str, Any], section: Dict[str, Any]) -> bool:
    """
    Whether the resume has content for a template section.

    personal-info needs a non-empty mapping, summary non-blank text, and every
    other section type a non-empty list.
    """
    value = resume.get(section_resume_key(section))
    section_type = section.get("type")

    if section_type == "personal-info":
        return isinstance(value, dict) and bool(value)
    if section_type == "summary":
        return isinstance(value, str) and bool(value.strip())
    return isinstance(value, list) and len(value) > 0


def _declared_fields(section: Dict[str, Any]) -> List[Any]:
    content = section.get("content")
    fields = content.get("fields") if isinstance(content, dict) else None
    return fields if isinstance(fields, list) else []


def display_date(value: Any) -> str:
    """Format a date as "Mon YYYY"; bare years stay as they are."""
    text = str(value).strip()
    if text.isdigit() and len(text) == 4:
        return text
    return str(format_date(value, "MMM YYYY"))


def join_date_range(start_text: str, end_text: str, ongoing: bool = False) -> str:
    """Join already-formatted dates; ongoing ranges end in "Present"."""
    if ongoing:
        end_text = "Present"
    if start_text and end_text:
        return f"{start_text} - {end_text}"
    return str(start_text or end_text)


def section_sort_key(section: Dict[str, Any]) -> Tuple[int, float]:
    """Numeric orders first, ascending; missing or malformed orders last."""
    order = section.get("order")
    if isinstance(order, (int, float)) and not isinstance(order, bool):
        return (0, order)
    return (1, 0)


class TemplateRenderer:
    """
    Renders resumes into HTML documents and gallery preview cards.

    Args:
        registry: Template lookup (anything with get(template_id) -> Optional[dict])
        binder: DataBinder used for field binding
        html_registry: Jinja2 partial registry
        content_processors: Callables applied to the resume, in order, before binding
    """

    def __init__(
        self,
        registry: Optional[Any] = None,
        binder: Optional[DataBinder] = None,
        html_registry: Optional[HtmlTemplateRegistry] = None,
        content_processors: Optional[List[Callable[[Dict[str, Any]], Dict[str, Any]]]] = None,
    ):
        self.registry = registry if registry is not None else TemplateRegistry()
        self.binder = binder or DataBinder()
        self.html_registry = html_registry or HtmlTemplateRegistry()
        self.content_processors = list(content_processors or [])

    def get_supported_formats(self) -> List[str]:
        return list(SUPPORTED_FORMATS)

    # ========================================================================
    # Public operations
    # ========================================================================

    def render(
        self,
        template_id: str,
        resume: Dict[str, Any],
        options: Optional[RenderOptions] = None,
    ) -> RenderedTemplate:
        """
        Render a resume with a catalog template.

        Args:
            template_id: Catalog template id
            resume: Structured resume (not modified)
            options: Format, optimizations, and customizations

        Returns:
            RenderedTemplate

        Raises:
            ValueError: If options.format is not supported
            TemplateNotFoundError: If the template does not exist
            ValidationFailedError: If the resume cannot fill required sections
            RenderFailedError: For any other failure inside the pipeline
        """
        options = options or RenderOptions()
        if options.format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format '{options.format}'. Supported: {', '.join(SUPPORTED_FORMATS)}"
            )

        render_id = f"render_{uuid.uuid4().hex[:12]}"
        start = time.perf_counter()
        log_render_start(template_id, render_id, options.format)

        try:
            template = self._get_template(template_id)
            validation = self.validate_render_data(template, resume)
            if not validation.is_valid:
                raise ValidationFailedError(validation.errors, template_id=template_id)

            context = RenderContext(
                render_id=render_id,
                template=template,
                resume=self._process_content(resume),
                options=options,
                started_at=now(),
            )
            rendered = self._render_document(context, validation)
        except (TemplateNotFoundError, ValidationFailedError) as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log_render_failed(template_id, e, elapsed_ms)
            log_engine_event("render_failed", template_id, "rendering", code=e.code)
            raise
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log_render_failed(template_id, e, elapsed_ms)
            log_engine_event("render_failed", template_id, "rendering", code=RenderFailedError.code)
            raise RenderFailedError(template_id, e) from e

        rendered.metadata.rendering_time_ms = (time.perf_counter() - start) * 1000
        log_render_result(template_id, rendered)
        log_engine_event(
            "render_completed",
            template_id,
            "rendering",
            render_id=render_id,
            checksum=rendered.metadata.checksum,
            size_total=rendered.metadata.size["total"],
        )
        return rendered

    def validate(self, template_id: str, resume: Dict[str, Any]) -> ValidationResult:
        """
        Check whether a resume can be rendered with a template.

        Raises:
            TemplateNotFoundError: If the template does not exist
        """
        return self.validate_render_data(self._get_template(template_id), resume)

    def preview(self, template_id: str, resume: Optional[Dict[str, Any]] = None) -> str:
        """
        Gallery preview card for a template.

        Args:
            template_id: Catalog template id
            resume: Sample resume shown on the card (demo data when omitted)

        Returns:
            HTML fragment; a loading placeholder when the template has no thumbnail

        Raises:
            TemplateNotFoundError: If the template does not exist
        """
        template = self._get_template(template_id)
        thumbnail = (template.get("preview") or {}).get("thumbnail")
        if not thumbnail:
            _log_debug(f"{template_id} has no preview thumbnail")
            return LOADING_PLACEHOLDER

        personal = (resume or DEMO_RESUME).get("personal_info") or {}
        return self.html_registry.get_template("preview_card").render(
            template_id=template_id,
            thumbnail=thumbnail,
            name=template.get("name", template_id),
            description=template.get("description", ""),
            category=template.get("category", ""),
            ats_optimized=bool((template.get("features") or {}).get("ats_optimized")),
            sample_name=personal.get("full_name", ""),
            sample_title=personal.get("title", ""),
        )

    def validate_render_data(
        self, template: Dict[str, Any], resume: Dict[str, Any]
    ) -> ValidationResult:
        """
        Check a resume against a template's rendering requirements.

        Score: round((total - errors - 0.5 * warnings) / total * 100) with
        total = errors + warnings + 10.
        """
        issues = IssueCollector()

        for section in template.get("sections") or []:
            if section.get("required") and not has_section_data(resume, section):
                issues.error(
                    f"sections.{section.get('id')}",
                    f"Required section '{section.get('name', section.get('id'))}' has no data",
                    "MISSING_REQUIRED_SECTION",
                    f"Add {section.get('type')} information to your resume",
                )

        personal = resume.get("personal_info") or {}
        if not (personal.get("full_name") or "").strip():
            issues.error("personal_info.full_name", "Full name is required", "MISSING_FULL_NAME")

        email = personal.get("email")
        if email and not EMAIL_PATTERN.match(email):
            issues.error(
                "personal_info.email", f"Invalid email address: {email}", "INVALID_EMAIL"
            )

        if not resume.get("experience"):
            issues.warning(
                "experience", "No work experience listed", "NO_EXPERIENCE",
                "Add at least one position",
            )
        if not resume.get("education"):
            issues.warning(
                "education", "No education listed", "NO_EDUCATION", "Add your highest degree"
            )

        errors, warnings = len(issues.errors), len(issues.warnings)
        total = errors + warnings + 10
        return ValidationResult(
            is_valid=not issues.errors,
            errors=issues.errors,
            warnings=issues.warnings,
            score=round((total - errors - 0.5 * warnings) / total * 100),
        )

    # ========================================================================
    # Pipeline steps
    # ========================================================================

    def _get_template(self, template_id: str) -> Dict[str, Any]:
        template = self.registry.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def _process_content(self, resume: Dict[str, Any]) -> Dict[str, Any]:
        for processor in self.content_processors:
            resume = processor(resume)
        return resume

    def _render_document(
        self, context: RenderContext, validation: ValidationResult
    ) -> RenderedTemplate:
        template, resume, options = context.template, context.resume, context.options

        binding = self.binder.bind_data(template, resume, options.customizations)
        style = resolve_customization(template, options.customizations)

        css = build_css(style, template)
        if options.optimization.minify:
            css = minify_css(css)

        inline_css = options.optimization.inline_css or options.format == "preview"
        document = self.html_registry.get_template("document")
        html = document.render(
            lang=options.lang,
            title=f"{(resume.get('personal_info') or {}).get('full_name', '')} - Resume",
            inline_css=inline_css,
            # a customization value must not be able to close the style block
            css=css.replace("</", "<\\/"),
            stylesheet_href="resume.css",
            body_class=f"layout-{style['layout_format']}"
            + (" preview" if options.format == "preview" else ""),
            template_id=template.get("id", ""),
            header=self._build_header(template, resume, binding, style),
            sections=self._build_sections(template, resume, binding, style),
        )
        if options.optimization.minify:
            html = minify_html(html)

        html_size = len(html.encode("utf-8"))
        css_size = len(css.encode("utf-8"))

        warnings = [issue.message for issue in validation.warnings]
        warnings.extend(
            f"{error.section_id}.{error.field_id}: {error.message}"
            if error.field_id
            else f"{error.section_id}: {error.message}"
            for error in binding.errors
        )

        return RenderedTemplate(
            id=context.render_id,
            template_id=template.get("id", ""),
            html=html,
            css=css,
            assets={
                "fonts": self._font_assets(style, options.optimization.subset_fonts),
                "images": [],
                "icons": [],
            },
            warnings=warnings,
            metadata=RenderMetadata(
                generated_at=context.started_at,
                rendering_time_ms=0.0,
                version=__version__,
                checksum=compute_checksum(html, css),
                size={"html": html_size, "css": css_size, "total": html_size + css_size},
            ),
        )

    def _build_header(
        self,
        template: Dict[str, Any],
        resume: Dict[str, Any],
        binding: DataBindingResult,
        style: Dict[str, Any],
    ) -> Dict[str, Any]:
        personal = resume.get("personal_info") or {}
        bound: Dict[str, Any] = {}
        declared: Dict[str, str] = {}
        for section in template.get("sections") or []:
            if isinstance(section, dict) and section.get("type") == "personal-info":
                section_id = section.get("id")
                bound = binding.data.get(section_id) or {}
                for mapping in binding.transformation.mappings:
                    path = mapping.data_path
                    if mapping.section_id == section_id and len(path) == 2 and path[0] == "personal_info":
                        declared.setdefault(path[1], mapping.template_field)
                break

        # declared fields show only what survived binding
        def value(key: str) -> str:
            if key in declared:
                return str(bound.get(declared[key]) or "")
            return str(personal.get(key) or "")

        return {
            "full_name": value("full_name"),
            "title": value("title"),
            "contact": [
                value(key)
                for key in ("email", "phone", "location", "linkedin", "website")
                if value(key)
            ],
            "align_class": HEADER_ALIGN_CLASSES.get(style["header_style"], "text-left"),
        }

    def _build_sections(
        self,
        template: Dict[str, Any],
        resume: Dict[str, Any],
        binding: DataBindingResult,
        style: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        visibility = style.get("section_visibility") or {}
        sections = [
            section
            for section in template.get("sections") or []
            if isinstance(section, dict)
            and section.get("type") != "personal-info"
            and visibility.get(section.get("id"), True)
        ]
        sections.sort(key=section_sort_key)

        views = []
        for section in sections:
            section_type = section.get("type")
            if not self._section_present(section, resume, binding):
                continue

            data, preformatted = self._bound_section_data(section, resume, binding)
            if not has_section_data({section_resume_key(section): data}, section):
                continue

            partial_type = section_type if self.html_registry.has_template(section_type) else "custom"
            column = (section.get("layout") or {}).get("column")
            view = {
                "id": section.get("id"),
                "type": section_type,
                "heading": section.get("name") or DEFAULT_HEADINGS.get(section_type, section.get("id")),
                "css_class": f"section-{section_type}" + (f" column-{column}" if column else ""),
                "partial": self.html_registry.template_name(partial_type),
            }
            view.update(self._section_view(partial_type, data, preformatted))
            views.append(view)
        return views

    @staticmethod
    def _section_present(
        section: Dict[str, Any], resume: Dict[str, Any], binding: DataBindingResult
    ) -> bool:
        if not has_section_data(resume, section):
            return False
        if not _declared_fields(section) or binding.data.get(section.get("id")):
            return True
        # plain-string entries have no fields for the binder to reach
        raw = resume.get(section_resume_key(section))
        return isinstance(raw, list) and not any(isinstance(entry, dict) for entry in raw)

    def _bound_section_data(
        self, section: Dict[str, Any], resume: Dict[str, Any], binding: DataBindingResult
    ) -> Tuple[Any, Set[str]]:
        """
        Resume data for one section with the binder's output laid over it.

        Declared fields carry their bound (transformed and validated) values;
        a declared field that failed to bind is blanked rather than shown raw.
        Keys the template does not declare keep the resume's values.

        Returns:
            Tuple of (section data, entry keys whose dates are already formatted)
        """
        section_id = section.get("id")
        key = section_resume_key(section)
        raw = resume.get(key)
        bound = binding.data.get(section_id)
        bound = bound if isinstance(bound, dict) else {}

        data = raw
        if isinstance(raw, list):
            data = [dict(entry) if isinstance(entry, dict) else entry for entry in raw]
        preformatted: Set[str] = set()

        for mapping in binding.transformation.mappings:
            path = mapping.data_path
            if mapping.section_id != section_id or not path or path[0] != key:
                continue
            field_id = mapping.template_field

            if len(path) == 1:
                data = bound.get(field_id)
                continue
            if len(path) != 2 or not isinstance(raw, list):
                continue

            entry_key = path[1]
            values = split_bound_values(raw, path[1:], bound[field_id]) if field_id in bound else None
            for position, entry in enumerate(data):
                if not isinstance(entry, dict) or entry.get(entry_key) is None:
                    continue
                entry[entry_key] = values[position] if values is not None else ""
            if values is not None and "date_format" in (mapping.transform or "").split(","):
                preformatted.add(entry_key)

        return data, preformatted

    def _section_view(self, section_type: str, data: Any, preformatted: Set[str]) -> Dict[str, Any]:
        """Normalize section data into the shape a section partial expects."""

        def date_text(entry: Dict[str, Any], key: str) -> str:
            value = entry.get(key)
            if not value:
                return ""
            return str(value) if key in preformatted else display_date(value)

        def date_range(entry: Dict[str, Any], current: bool = False) -> str:
            ongoing = current or bool(entry.get("start_date") and entry.get("end_date") is None)
            return join_date_range(date_text(entry, "start_date"), date_text(entry, "end_date"), ongoing)

        if section_type == "summary":
            return {"content": data.strip()}

        if section_type == "experience":
            return {
                "entries": [
                    {
                        "title": job.get("title", ""),
                        "company": job.get("company", ""),
                        "location": job.get("location", ""),
                        "date_range": date_range(job, bool(job.get("current"))),
                        "description": job.get("description", ""),
                        "achievements": list(job.get("achievements") or []),
                    }
                    for job in data
                ]
            }

        if section_type == "education":
            entries = []
            for school in data:
                degree = school.get("degree", "")
                field_of_study = school.get("field")
                entries.append(
                    {
                        "degree_line": f"{degree} in {field_of_study}" if field_of_study else degree,
                        "institution": school.get("institution", ""),
                        "location": school.get("location", ""),
                        "date_range": date_range(school),
                        "gpa": school.get("gpa") or "",
                    }
                )
            return {"entries": entries}

        if section_type == "skills":
            groups: Dict[str, List[str]] = {}
            for skill in data:
                name = skill.get("name") if isinstance(skill, dict) else skill
                category = (skill.get("category") if isinstance(skill, dict) else None) or "technical"
                groups.setdefault(category, []).append(str(name))
            return {
                "groups": [
                    {"category": category.title(), "names": names} for category, names in groups.items()
                ]
            }

        if section_type == "projects":
            return {
                "entries": [
                    {
                        "name": project.get("name", ""),
                        "description": project.get("description", ""),
                        "technologies": list(project.get("technologies") or []),
                    }
                    for project in data
                ]
            }

        if section_type == "certifications":
            return {
                "entries": [
                    {
                        "name": cert.get("name", ""),
                        "issuer": cert.get("issuer", ""),
                        "date": date_text(cert, "issue_date"),
                    }
                    for cert in data
                ]
            }

        if section_type == "languages":
            return {
                "entries": [
                    {"name": lang.get("name", ""), "proficiency": lang.get("proficiency", "")}
                    if isinstance(lang, dict)
                    else {"name": str(lang), "proficiency": ""}
                    for lang in data
                ]
            }

        return {
            "entries": [
                entry
                if isinstance(entry, str)
                else ", ".join(str(v) for v in entry.values() if v)
                if isinstance(entry, dict)
                else str(entry)
                for entry in data
            ]
        }

    @staticmethod
    def _font_assets(style: Dict[str, Any], subset_fonts: bool) -> List[Dict[str, Any]]:
        fonts = []
        for role in ("heading", "body"):
            family = style["fonts"][role]["family"]
            if any(font["family"] == family for font in fonts):
                continue
            weights = [400, 700] if subset_fonts else [100, 200, 300, 400, 500, 600, 700, 800, 900]
            fonts.append({"family": family, "weights": weights})
        return fonts
