"""
Templating Registries

Catalog registry for loading, validating, and caching resume templates.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from vellum.contexts.templating.exceptions import ValidationFailedError
from vellum.contexts.templating.logger import _log_debug, _log_info, log_validation_result
from vellum.contexts.templating.template_cache import TemplateCache
from vellum.contexts.templating.template_validator import (
    TEMPLATE_ID_PATTERN,
    TemplateValidator,
    ValidationResult,
)

load_dotenv()
TEMPLATE_CATALOG_PATH = Path(
    os.getenv("VELLUM_TEMPLATE_CATALOG_PATH", Path(__file__).parent / "catalog")
)


class TemplateRegistry:
    """
    Registry for catalog templates.

    Templates are stored as {catalog_path}/{template_id}.yaml and loaded with
    OmegaConf. Each template is validated once per load; invalid templates are
    never served. Loaded templates go through the shared TemplateCache, and
    templates registered at runtime live alongside the catalog files.
    """

    def __init__(
        self,
        catalog_path: Path = None,
        cache: Optional[TemplateCache] = None,
        validator: Optional[TemplateValidator] = None,
    ):
        """
        Initialize the template registry.

        Args:
            catalog_path: Directory of template YAML files. Defaults to
                          VELLUM_TEMPLATE_CATALOG_PATH from environment
            cache: Shared template cache (a private one is created if omitted)
            validator: Template validator (default TemplateValidator())
        """
        if catalog_path is None:
            catalog_path = TEMPLATE_CATALOG_PATH

        self.catalog_path = Path(catalog_path)
        self.cache = cache if cache is not None else TemplateCache()
        self.validator = validator or TemplateValidator()
        self._registered: Dict[str, Dict[str, Any]] = {}
        self._validations: Dict[str, ValidationResult] = {}

    def get_template_path(self, template_id: str) -> Path:
        """Path of a template's catalog file (which may not exist)."""
        return self.catalog_path / f"{template_id}.yaml"

    def get(self, template_id: str) -> Optional[Dict[str, Any]]:
        """
        Look up a template, loading and caching it if necessary.

        Args:
            template_id: Template identifier (e.g., 'professional-classic')

        Returns:
            Template dict, or None if no such template exists

        Raises:
            ValidationFailedError: If the catalog file fails validation
        """
        cached = self.cache.get(template_id)
        if cached is not None:
            return cached

        if template_id in self._registered:
            template = self._registered[template_id]
            self.cache.set(template_id, template)
            return template

        if not isinstance(template_id, str) or not TEMPLATE_ID_PATTERN.match(template_id):
            _log_debug(f"Rejected malformed template id: {template_id!r}")
            return None

        template_path = self.get_template_path(template_id)
        if not template_path.exists():
            return None

        template = OmegaConf.to_container(OmegaConf.load(template_path), resolve=True)
        validation = self._validate(template_id, template)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors, template_id=template_id)

        _log_info(f"Loaded template {template_id} from {template_path.name}")
        self.cache.set(template_id, template)
        return template

    def register(self, template: Dict[str, Any]) -> ValidationResult:
        """
        Add a template at runtime.

        Args:
            template: Template dict; must pass validation

        Returns:
            The template's ValidationResult

        Raises:
            ValidationFailedError: If the template has validation errors
            ValueError: If a template with the same id already exists
        """
        template_id = template.get("id")
        if template_id in self._registered or (
            isinstance(template_id, str) and self.get_template_path(template_id).exists()
        ):
            raise ValueError(f"Template already exists: {template_id}")

        validation = self._validate(template_id, template)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors, template_id=template_id)

        self._registered[template_id] = template
        self.cache.set(template_id, template)
        return validation

    def unregister(self, template_id: str) -> bool:
        """Remove a runtime-registered template. Returns True if it existed."""
        self.cache.delete(template_id)
        self._validations.pop(template_id, None)
        return self._registered.pop(template_id, None) is not None

    def get_validation(self, template_id: str) -> Optional[ValidationResult]:
        """Validation report from the template's most recent load, if any."""
        return self._validations.get(template_id)

    def template_ids(self) -> List[str]:
        """Ids of every catalog file and runtime registration, sorted."""
        ids = {path.stem for path in self.catalog_path.glob("*.yaml")}
        ids.update(self._registered)
        return sorted(ids)

    def list_templates(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Summaries of available templates.

        Args:
            category: Only include templates of this category (optional)

        Returns:
            List of {"id", "name", "category", "description"} dicts
        """
        summaries = []
        for template_id in self.template_ids():
            template = self.get(template_id)
            if template is None or (category and template.get("category") != category):
                continue
            summaries.append(
                {
                    "id": template_id,
                    "name": template.get("name"),
                    "category": template.get("category"),
                    "description": template.get("description"),
                }
            )
        return summaries

    def warm_cache(self, template_ids: Optional[List[str]] = None) -> int:
        """
        Preload templates into the cache.

        Returns:
            Number of templates loaded
        """
        loaded = 0
        for template_id in template_ids or self.template_ids():
            if self.get(template_id) is not None:
                loaded += 1
        _log_debug(f"Warmed cache with {loaded} templates")
        return loaded

    def _validate(self, template_id: str, template: Dict[str, Any]) -> ValidationResult:
        validation = self.validator.validate(template)
        self._validations[template_id] = validation
        log_validation_result(template_id, validation)
        return validation
