"""
Data Binder

Binds a structured resume into a template's section/field graph:

1. Derive field mappings (section type + field id -> resume path)
2. Overlay customizations onto a copy of the resume
3. Resolve, transform, validate, and format each field
4. Run optional enrichment services
5. Check the bound tree for empty required sections and fields

Binding never raises for missing or invalid data; problems are returned as
errors and warnings on the DataBindingResult.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from vellum.contexts.templating.defaults import FIELD_PATHS
from vellum.contexts.templating.exceptions import FieldBindingError, SectionBindingError
from vellum.contexts.templating.field_types import (
    FieldType,
    apply_transforms,
    format_field_value,
    validate_field_value,
)
from vellum.contexts.templating.logger import _log_debug, _log_warning, log_binding_result

# formatting flag -> transform name, in application order
TRANSFORM_FLAGS = (
    ("title_case", "title_case"),
    ("date_formatting", "date_format"),
    ("phone_formatting", "phone_format"),
    ("uppercase", "uppercase"),
    ("lowercase", "lowercase"),
)

# customization key -> key overlaid on the resume copy
CUSTOMIZATION_OVERLAY = {
    "color_scheme": "theme",
    "typography": "fonts",
    "layout": "layout",
    "sections": "sections",
}


@dataclass
class FieldMapping:
    """
    How one template field is fed from the resume.

    Attributes:
        template_field: Field id in the template
        section_id: Owning section id
        data_source: Where the data comes from (always "resume" for now)
        data_path: Key path into the resume; list steps fan out over entries
        transform: Comma-joined transform names, or None
        required: Whether the field is required
    """

    template_field: str
    section_id: str
    data_source: str
    data_path: Tuple[str, ...]
    transform: Optional[str]
    required: bool


@dataclass
class DataBindingError:
    section_id: str
    field_id: Optional[str]
    message: str
    code: str
    suggested_value: Any = None


@dataclass
class DataBindingWarning:
    section_id: str
    field_id: Optional[str]
    message: str
    code: str
    impact: str = ""


@dataclass
class TransformationRecord:
    """
    Audit trail of a binding run.

    Attributes:
        mappings: Every FieldMapping derived from the template
        conversions: One entry per applied transform
            ({"section_id", "field_id", "transform", "from", "to"})
        enrichments: Names of enrichment services that contributed data
    """

    mappings: List[FieldMapping] = field(default_factory=list)
    conversions: List[Dict[str, Any]] = field(default_factory=list)
    enrichments: List[str] = field(default_factory=list)


@dataclass
class BindingMetadata:
    bound_fields: int = 0
    total_fields: int = 0
    missing_required_fields: int = 0
    transformation_count: int = 0
    processing_time_ms: float = 0.0
    data_completeness: float = 0.0


@dataclass
class DataBindingResult:
    """
    Result of binding a resume into a template.

    Attributes:
        success: True when no errors were recorded
        data: section_id -> field_id -> value (None for sections that failed to bind)
        errors: Blocking problems
        warnings: Non-blocking problems
        transformation: Mappings, conversions, and enrichments applied
        metadata: Counts, timing, and completeness
    """

    success: bool
    data: Dict[str, Optional[Dict[str, Any]]]
    errors: List[DataBindingError] = field(default_factory=list)
    warnings: List[DataBindingWarning] = field(default_factory=list)
    transformation: TransformationRecord = field(default_factory=TransformationRecord)
    metadata: BindingMetadata = field(default_factory=BindingMetadata)


def resolve_path(data: Any, path: Sequence[str]) -> Any:
    """
    Walk a key path through nested dicts, fanning out over lists.

    Missing keys, None, or non-mapping steps yield None. When a step hits a
    list, the remainder of the path is resolved against every element and the
    non-None results are collected (nested lists are flattened).

    Example:
        >>> resolve_path({"experience": [{"company": "A"}, {"company": "B"}]},
        ...              ("experience", "company"))
        ['A', 'B']
    """
    current = data
    for index, key in enumerate(path):
        if isinstance(current, list):
            values = []
            for item in current:
                value = resolve_path(item, path[index:])
                if value is None:
                    continue
                if isinstance(value, list):
                    values.extend(value)
                else:
                    values.append(value)
            return values or None
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def split_bound_values(
    entries: List[Any], path: Sequence[str], bound_value: Any
) -> Optional[List[Any]]:
    """
    Hand a fanned-out bound list back to the entries it was read from.

    resolve_path() skips entries without a value and flattens list values, so
    each entry's share of bound_value is counted from its own raw value.

    Args:
        entries: The list the value was fanned out over (e.g. resume["experience"])
        path: Key path relative to one entry (e.g. ("title",))
        bound_value: The bound list for the field

    Returns:
        One value per entry (None where the entry had none), or None when the
        bound list does not line up with the entries
    """
    if not isinstance(bound_value, list):
        return None

    values: List[Any] = []
    position = 0
    for entry in entries:
        raw = resolve_path(entry, path)
        if raw is None:
            values.append(None)
        elif isinstance(raw, list):
            values.append(bound_value[position : position + len(raw)])
            position += len(raw)
        else:
            values.append(bound_value[position] if position < len(bound_value) else None)
            position += 1

    return values if position == len(bound_value) else None


def _section_fields(section: Dict[str, Any]) -> List[Any]:
    content = section.get("content")
    fields = content.get("fields") if isinstance(content, dict) else None
    return fields if isinstance(fields, list) else []


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


class DataBinder:
    """
    Binds resumes into templates.

    Args:
        enrichment_services: Objects with a ``name`` attribute and an
            ``enrich(bound_data, resume) -> {"success", "data", "warnings"}``
            method, run in order after binding
    """

    def __init__(self, enrichment_services: Optional[List[Any]] = None):
        self.enrichment_services = list(enrichment_services or [])

    def create_field_mappings(self, template: Dict[str, Any]) -> List[FieldMapping]:
        """Derive one FieldMapping per declared field, in template order."""
        mappings = []
        for section in template.get("sections") or []:
            mappings.extend(self._section_mappings(section))
        return mappings

    def _section_mappings(self, section: Dict[str, Any]) -> List[FieldMapping]:
        section_type = section.get("type")
        paths = FIELD_PATHS.get(section_type, {})
        mappings = []
        for field_config in _section_fields(section):
            if not isinstance(field_config, dict):
                continue
            field_id = field_config.get("id")
            path = paths.get(field_id)
            if path is None:
                path = (field_id,)
                _log_debug(
                    f"No path for {section_type}.{field_id}; falling back to top-level '{field_id}'"
                )

            formatting = field_config.get("formatting")
            flags = formatting if isinstance(formatting, dict) else {}
            transforms = [name for flag, name in TRANSFORM_FLAGS if flags.get(flag)]
            mappings.append(
                FieldMapping(
                    template_field=field_id,
                    section_id=section.get("id"),
                    data_source="resume",
                    data_path=path,
                    transform=",".join(transforms) or None,
                    required=bool(field_config.get("required")),
                )
            )
        return mappings

    def bind_data(
        self,
        template: Dict[str, Any],
        resume: Dict[str, Any],
        customizations: Optional[Dict[str, Any]] = None,
    ) -> DataBindingResult:
        """
        Bind a resume into a template.

        Args:
            template: Catalog template (not modified)
            resume: Structured resume (not modified)
            customizations: Optional TemplateCustomization overlay

        Returns:
            DataBindingResult with the bound tree and all diagnostics
        """
        start = time.perf_counter()
        result = DataBindingResult(success=False, data={})
        source = self._apply_customizations(resume, customizations)

        sections = template.get("sections") or []
        if not isinstance(sections, list):
            result.errors.append(
                DataBindingError(None, None, "Template sections must be a list", "SECTION_BINDING_ERROR")
            )
            sections = []

        for section in sections:
            section_id = section.get("id") if isinstance(section, dict) else None
            try:
                section_mappings = self._section_mappings(section)
                result.transformation.mappings.extend(section_mappings)
                mappings_by_key = {(m.section_id, m.template_field): m for m in section_mappings}
                result.data[section_id] = self._bind_section(section, source, mappings_by_key, result)
            except SectionBindingError as e:
                _log_warning(str(e))
                result.errors.append(
                    DataBindingError(section_id, None, e.message, "SECTION_BINDING_ERROR")
                )
                result.data[section_id] = None
            except Exception as e:
                _log_warning(f"Section {section_id} failed to bind: {e}")
                result.errors.append(
                    DataBindingError(
                        section_id, None, f"Section could not be bound: {e}", "SECTION_BINDING_ERROR"
                    )
                )
                result.data[section_id] = None

        self._run_enrichments(result, resume)
        self._check_bound_data(template, result)

        meta = result.metadata
        meta.total_fields = len(result.transformation.mappings)
        meta.bound_fields = sum(len(fields) for fields in result.data.values() if fields)
        meta.missing_required_fields = sum(
            1 for e in result.errors if e.code == "REQUIRED_FIELD_MISSING"
        )
        meta.transformation_count = len(result.transformation.conversions)
        meta.data_completeness = (
            meta.bound_fields / meta.total_fields * 100 if meta.total_fields else 0.0
        )
        meta.processing_time_ms = (time.perf_counter() - start) * 1000

        result.success = not result.errors
        log_binding_result(template.get("id", "<unknown>"), result)
        return result

    # ========================================================================
    # Binding steps
    # ========================================================================

    def _apply_customizations(
        self, resume: Dict[str, Any], customizations: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Shallow copy of the resume with presentation keys overlaid."""
        if not customizations:
            return resume

        overlaid = dict(resume)
        for source_key, target_key in CUSTOMIZATION_OVERLAY.items():
            if source_key in customizations:
                overlaid[target_key] = customizations[source_key]
        return overlaid

    def _bind_section(
        self,
        section: Dict[str, Any],
        resume: Dict[str, Any],
        mappings: Dict[Tuple[str, str], FieldMapping],
        result: DataBindingResult,
    ) -> Dict[str, Any]:
        section_id = section.get("id")
        content = section.get("content") or {}
        fields = content.get("fields") or []
        if not isinstance(fields, list):
            raise SectionBindingError("Section fields must be a list", section_id)

        placeholders = content.get("placeholders") or {}
        bound: Dict[str, Any] = {}

        for field_config in fields:
            if not isinstance(field_config, dict):
                _log_warning(f"Section {section_id} declares a malformed field: {field_config!r}")
                result.errors.append(
                    DataBindingError(
                        section_id,
                        None,
                        f"Field declaration must be a mapping, got {type(field_config).__name__}",
                        "FIELD_BINDING_ERROR",
                    )
                )
                continue

            field_id = field_config.get("id")
            try:
                self._bind_field(
                    section_id,
                    field_config,
                    mappings[(section_id, field_id)],
                    resume,
                    placeholders,
                    bound,
                    result,
                )
            except Exception as e:
                _log_warning(f"Field {section_id}.{field_id} failed to bind: {e}")
                result.errors.append(
                    DataBindingError(section_id, field_id, str(e), "FIELD_BINDING_ERROR")
                )

        return bound

    def _bind_field(
        self,
        section_id: str,
        field_config: Dict[str, Any],
        mapping: FieldMapping,
        resume: Dict[str, Any],
        placeholders: Dict[str, Any],
        bound: Dict[str, Any],
        result: DataBindingResult,
    ) -> None:
        field_id = mapping.template_field
        try:
            field_type = FieldType(field_config.get("type", "text"))
        except ValueError:
            raise FieldBindingError(
                f"Unknown field type: {field_config.get('type')}", section_id, field_id
            )

        value = resolve_path(resume, mapping.data_path)

        if value is None:
            if mapping.required:
                suggestion = field_config.get("placeholder", placeholders.get(field_id, ""))
                result.errors.append(
                    DataBindingError(
                        section_id,
                        field_id,
                        f"Required field '{field_config.get('name', field_id)}' is missing",
                        "REQUIRED_FIELD_MISSING",
                        suggested_value=suggestion,
                    )
                )
            else:
                result.warnings.append(
                    DataBindingWarning(
                        section_id,
                        field_id,
                        f"Optional field '{field_config.get('name', field_id)}' is empty",
                        "OPTIONAL_FIELD_MISSING",
                        impact="Section may appear incomplete",
                    )
                )
            return

        transformed, applied = apply_transforms(value, field_config.get("formatting"))
        for name in applied:
            result.transformation.conversions.append(
                {
                    "section_id": section_id,
                    "field_id": field_id,
                    "transform": name,
                    "from": value,
                    "to": transformed,
                }
            )

        check = validate_field_value(field_type, transformed, field_config.get("validation"))
        if not check.valid:
            result.errors.append(
                DataBindingError(
                    section_id,
                    field_id,
                    f"{field_config.get('name', field_id)}: {check.message}",
                    "FIELD_VALIDATION_ERROR",
                    suggested_value=check.suggested_value,
                )
            )
            return

        bound[field_id] = format_field_value(field_type, transformed)

    def _run_enrichments(self, result: DataBindingResult, resume: Dict[str, Any]) -> None:
        for service in self.enrichment_services:
            name = getattr(service, "name", type(service).__name__)
            try:
                outcome = service.enrich(result.data, resume)
                self._merge_enrichment(name, outcome, result)
            except Exception as e:
                _log_warning(f"Enrichment service {name} failed: {e}")
                result.warnings.append(
                    DataBindingWarning(
                        "enrichment",
                        None,
                        f"Enrichment '{name}' failed: {e}",
                        "ENRICHMENT_FAILED",
                        impact="Enriched data unavailable",
                    )
                )

    def _merge_enrichment(self, name: str, outcome: Dict[str, Any], result: DataBindingResult) -> None:
        if not isinstance(outcome, dict):
            raise TypeError(f"expected a dict outcome, got {type(outcome).__name__}")

        for message in outcome.get("warnings") or []:
            result.warnings.append(
                DataBindingWarning("enrichment", None, message, "ENRICHMENT_WARNING")
            )
        if outcome.get("success"):
            for section_id, extra in (outcome.get("data") or {}).items():
                if isinstance(result.data.get(section_id), dict):
                    result.data[section_id].update(extra)
                else:
                    result.data[section_id] = dict(extra)
            result.transformation.enrichments.append(name)

    def _check_bound_data(self, template: Dict[str, Any], result: DataBindingResult) -> None:
        sections = template.get("sections") or []
        for section in sections if isinstance(sections, list) else []:
            if not isinstance(section, dict):
                continue
            section_id = section.get("id")
            bound = result.data.get(section_id)
            if not isinstance(bound, dict):
                continue

            if section.get("required") and not bound:
                result.errors.append(
                    DataBindingError(
                        section_id,
                        None,
                        f"Required section '{section.get('name', section_id)}' has no data",
                        "REQUIRED_SECTION_EMPTY",
                    )
                )

            for field_config in _section_fields(section):
                if not isinstance(field_config, dict):
                    continue
                field_id = field_config.get("id")
                if field_config.get("required") and field_id in bound and _is_empty(bound[field_id]):
                    result.errors.append(
                        DataBindingError(
                            section_id,
                            field_id,
                            f"Required field '{field_config.get('name', field_id)}' is empty",
                            "REQUIRED_FIELD_EMPTY",
                        )
                    )
