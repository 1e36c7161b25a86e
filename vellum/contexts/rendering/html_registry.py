"""
HTML Partial Registry

Loads and caches the Jinja2 partials used to assemble rendered resumes.
"""

import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateNotFound,
    select_autoescape,
)

load_dotenv()
HTML_TYPES_PATH = Path(os.getenv("VELLUM_HTML_TYPES_PATH", Path(__file__).parent / "types"))

TEMPLATE_FILENAME = "template.html.jinja"


class HtmlTemplateRegistry:
    """
    Registry for loading and caching Jinja2 HTML partials.

    Partials are stored in vellum/contexts/rendering/types/{type_name}/template.html.jinja.
    Section partials are named after section types (experience, skills, ...);
    "document" and "preview_card" wrap whole pages and gallery cards.
    """

    def __init__(self, types_base_path: Path = None):
        """
        Initialize the partial registry.

        Args:
            types_base_path: Base path for type directories. Defaults to
                           VELLUM_HTML_TYPES_PATH from environment
        """
        if types_base_path is None:
            types_base_path = HTML_TYPES_PATH

        self.types_base_path = Path(types_base_path)
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(self.types_base_path)),
            # Catches silent failures
            undefined=StrictUndefined,
            autoescape=select_autoescape(enabled_extensions=("html.jinja",), default=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def template_name(self, type_name: str) -> str:
        """Loader-relative name of a type's partial (usable with {% include %})."""
        return f"{type_name}/{TEMPLATE_FILENAME}"

    def has_template(self, type_name: str) -> bool:
        return self.get_template_path(type_name).exists()

    def get_template(self, type_name: str) -> Template:
        """
        Get a partial by type name, loading and caching it if necessary.

        Args:
            type_name: Name of the type (e.g., 'experience')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If the partial doesn't exist
            TemplateSyntaxError: If the partial has Jinja2 syntax errors
        """
        if type_name in self._cache:
            return self._cache[type_name]

        try:
            template = self.env.get_template(self.template_name(type_name))
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"HTML partial not found for type '{type_name}' at {self.get_template_path(type_name)}"
            ) from e

        self._cache[type_name] = template
        return template

    def get_template_path(self, type_name: str) -> Path:
        """
        Get the file path for a type's partial.

        Args:
            type_name: Name of the type (e.g., 'skills')

        Returns:
            Path to template file
        """
        return self.types_base_path / type_name / TEMPLATE_FILENAME

    def clear_cache(self):
        """Clear the partial cache."""
        self._cache.clear()

    def is_cached(self, type_name: str) -> bool:
        return type_name in self._cache
