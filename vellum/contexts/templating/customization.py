"""
Customization Overlay and Presets

Resolves the effective style of a template under a user customization, and
applies named customization presets. Templates are never modified: the
customization is merged over a projection of the template's defaults.

Examples:
    # Effective style for rendering and scoring
    >>> style = resolve_customization(template, {"typography": {"heading": {"font_family": "Georgia"}}})
    >>> style["fonts"]["heading"]["family"]
    'Georgia'

    # Apply multiple presets (later overrides earlier)
    >>> apply_presets({}, ["spacing_tight", "colors_warm"])
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
CUSTOMIZATION_PRESETS_PATH = Path(
    os.getenv(
        "VELLUM_CUSTOMIZATION_PRESETS_PATH",
        Path(__file__).parent / "customization_presets.yaml",
    )
)

# Column counts implied by layout formats when layout.columns is absent
FORMAT_COLUMNS = {
    "single-column": 1,
    "two-column": 2,
    "three-column": 3,
    "sidebar": 2,
    "hybrid": 2,
}


def _get(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _default(value: Any, fallback: Any) -> Any:
    return fallback if value is None else value


def _prune_none(data: Any) -> Any:
    """Drop None values recursively so they never override defaults."""
    if isinstance(data, dict):
        return {k: _prune_none(v) for k, v in data.items() if v is not None}
    return data


def template_style_defaults(template: Dict[str, Any]) -> Dict[str, Any]:
    """
    Project a template's layout and styling into the flat style shape.

    Returns:
        Dict with fonts, colors, spacing, margins, columns, header_style,
        layout_format, and section_visibility keys
    """
    layout = template.get("layout") or {}
    styling = template.get("styling") or {}
    layout_format = layout.get("format", "single-column")

    return {
        "fonts": {
            "heading": {
                "family": _get(styling, "fonts", "heading", "name") or "Arial",
                "stack": _get(styling, "fonts", "heading", "stack") or "sans-serif",
                "size": _get(styling, "sizes", "heading", "h1") or "24px",
            },
            "body": {
                "family": _get(styling, "fonts", "body", "name") or "Arial",
                "stack": _get(styling, "fonts", "body", "stack") or "sans-serif",
                "size": _get(styling, "sizes", "body", "base") or "11px",
            },
        },
        "colors": {
            "primary": _get(styling, "colors", "primary", "500") or "#000000",
            "secondary": _get(styling, "colors", "secondary", "500") or "#4a5568",
            "accent": _get(styling, "colors", "accent", "500") or "#2b6cb0",
            "text": _get(styling, "colors", "text", "primary") or "#000000",
            "text_secondary": _get(styling, "colors", "text", "secondary") or "#4a5568",
            "background": _get(styling, "colors", "background", "primary") or "#ffffff",
        },
        "spacing": {
            "section": _default(_get(layout, "spacing", "section"), 16),
            "item": _default(_get(layout, "spacing", "item"), 8),
            "line": _default(_get(layout, "spacing", "line"), 1.3),
        },
        "margins": {
            side: _get(layout, "dimensions", "margins", side) or 0.75
            for side in ("top", "right", "bottom", "left")
        },
        "columns": _get(layout, "columns", "count") or FORMAT_COLUMNS.get(layout_format, 1),
        "header_style": layout.get("header_style", "centered"),
        "layout_format": layout_format,
        "section_visibility": {
            section["id"]: bool(section.get("visible", _get(section, "visibility", "default") is not False))
            for section in template.get("sections") or []
            if isinstance(section, dict) and "id" in section
        },
    }


def customization_to_style(customization: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Translate a TemplateCustomization into the flat style shape (partial)."""
    if not customization:
        return {}

    typography = customization.get("typography") or {}
    layout = customization.get("layout") or {}
    color_scheme = customization.get("color_scheme") or {}

    style = {
        "fonts": {
            role: {
                "family": _get(typography, role, "font_family"),
                "size": _get(typography, role, "font_size"),
            }
            for role in ("heading", "body")
        },
        "colors": {
            "primary": color_scheme.get("primary"),
            "secondary": color_scheme.get("secondary"),
            "accent": color_scheme.get("accent"),
            "text": color_scheme.get("text"),
            "background": color_scheme.get("background"),
        },
        "spacing": layout.get("spacing"),
        "margins": layout.get("margins"),
        "columns": layout.get("columns"),
        "section_visibility": {
            section_id: bool(options.get("visible", True))
            for section_id, options in (customization.get("sections") or {}).items()
            if isinstance(options, dict)
        },
    }
    return _prune_none(style)


def resolve_customization(
    template: Dict[str, Any], customization: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Effective style of a template under a customization.

    The customization is deep-merged over the template's defaults; neither
    input is modified.

    Args:
        template: Catalog template
        customization: Optional TemplateCustomization

    Returns:
        Plain dict in the shape returned by template_style_defaults()
    """
    merged = OmegaConf.merge(
        OmegaConf.create(template_style_defaults(template)),
        OmegaConf.create(customization_to_style(customization)),
    )
    return OmegaConf.to_container(merged, resolve=True)


def load_customization_presets(config_path: Path = None) -> Dict[str, Any]:
    """
    Load customization presets and flatten to a single-level dict.

    Collapses nested structure: spacing.tight -> spacing_tight

    Args:
        config_path: Optional path (defaults to VELLUM_CUSTOMIZATION_PRESETS_PATH)

    Returns:
        Flattened dict mapping preset names to customization fragments
    """
    if config_path is None:
        config_path = CUSTOMIZATION_PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, config in presets.items():
            flattened[f"{category}_{name}"] = config

    return flattened


def apply_presets(
    customization: Optional[Dict[str, Any]],
    preset_names: List[str],
    config_path: Path = None,
) -> Dict[str, Any]:
    """
    Apply named presets to a customization.

    Presets are merged in order, later presets overriding earlier ones; the
    given customization is merged last so explicit user choices win.

    Args:
        customization: Existing customization (not modified), or None
        preset_names: Preset names (e.g., ["spacing_tight", "colors_warm"])
        config_path: Optional path to the presets YAML

    Returns:
        New customization dict

    Raises:
        ValueError: If a preset name is not found
    """
    presets = load_customization_presets(config_path)

    layers = []
    for preset_name in preset_names:
        if preset_name not in presets:
            available = sorted(presets)
            raise ValueError(f"Preset '{preset_name}' not found. Available presets: {available}")
        layers.append(OmegaConf.create(presets[preset_name]))

    layers.append(OmegaConf.create(_prune_none(customization or {})))
    return OmegaConf.to_container(OmegaConf.merge(*layers), resolve=True)
