"""
Stylesheet generation for rendered resumes.

Builds CSS from a resolved style (see templating.customization.resolve_customization)
in fixed blocks: base, layout, typography, color, spacing, responsive, print.
"""

import re
from typing import Any, Dict, List

from vellum.contexts.templating.template_validator import parse_measure

DEFAULT_MOBILE_BREAKPOINT = 768


def _px(value: Any, default: float) -> str:
    measure = parse_measure(value)
    return f"{measure if measure is not None else default:g}px"


def _font_stack(font: Dict[str, Any]) -> str:
    family = font.get("family", "Arial")
    stack = font.get("stack") or "sans-serif"
    if family.lower() in stack.lower():
        return stack
    quoted = f"'{family}'" if " " in family else family
    return f"{quoted}, {stack}"


def _base_block(style: Dict[str, Any]) -> str:
    margins = style["margins"]
    return (
        "* { box-sizing: border-box; margin: 0; padding: 0; }\n"
        ".resume {\n"
        "  max-width: 8.5in;\n"
        "  margin: 0 auto;\n"
        f"  padding: {margins['top']}in {margins['right']}in {margins['bottom']}in {margins['left']}in;\n"
        "}\n"
        ".resume ul { list-style: disc; padding-left: 1.2em; }\n"
    )


def _layout_block(style: Dict[str, Any], column_widths: List[Any]) -> str:
    columns = int(style.get("columns") or 1)
    if columns <= 1:
        return ".resume-body { display: block; }\n"

    if column_widths and len(column_widths) == columns:
        template_columns = " ".join(f"{parse_measure(w) or 1:g}fr" for w in column_widths)
    else:
        template_columns = " ".join(["1fr"] * columns)

    rules = [
        ".resume-body {\n"
        "  display: grid;\n"
        f"  grid-template-columns: {template_columns};\n"
        f"  column-gap: {_px(style['spacing'].get('item'), 8)};\n"
        "}\n"
    ]
    for column in range(1, columns + 1):
        rules.append(f".column-{column} {{ grid-column: {column}; }}\n")
    return "".join(rules)


def _typography_block(style: Dict[str, Any]) -> str:
    heading, body = style["fonts"]["heading"], style["fonts"]["body"]
    line_height = style["spacing"].get("line", 1.3)
    return (
        ".resume {\n"
        f"  font-family: {_font_stack(body)};\n"
        f"  font-size: {_px(body.get('size'), 11)};\n"
        f"  line-height: {line_height};\n"
        "}\n"
        ".resume h1, .resume h2, .resume h3 {\n"
        f"  font-family: {_font_stack(heading)};\n"
        "  font-weight: 700;\n"
        "}\n"
        f".resume h1 {{ font-size: {_px(heading.get('size'), 24)}; }}\n"
        ".resume h2 { font-size: 1.25em; text-transform: uppercase; }\n"
        ".resume h3 { font-size: 1.05em; }\n"
    )


def _color_block(style: Dict[str, Any]) -> str:
    colors = style["colors"]
    return (
        f".resume {{ color: {colors['text']}; background: {colors['background']}; }}\n"
        f".resume h1, .resume h2 {{ color: {colors['primary']}; }}\n"
        f".resume h2 {{ border-bottom: 1px solid {colors['accent']}; }}\n"
        f".resume .meta, .resume .contact {{ color: {colors.get('text_secondary', colors['secondary'])}; }}\n"
        f".resume a {{ color: {colors['accent']}; }}\n"
    )


def _spacing_block(style: Dict[str, Any]) -> str:
    spacing = style["spacing"]
    return (
        f".resume-section {{ margin-bottom: {_px(spacing.get('section'), 16)}; }}\n"
        f".resume-item {{ margin-bottom: {_px(spacing.get('item'), 8)}; }}\n"
        ".resume-header { margin-bottom: 1em; }\n"
    )


def _responsive_block(breakpoint: int) -> str:
    return (
        f"@media (max-width: {breakpoint}px) {{\n"
        "  .resume { padding: 0.5in 0.4in; }\n"
        "  .resume-body { display: block; }\n"
        "}\n"
        "@media print {\n"
        "  .resume { max-width: none; padding: 0; }\n"
        "  .resume-section { break-inside: avoid; }\n"
        "}\n"
    )


def build_css(style: Dict[str, Any], template: Dict[str, Any]) -> str:
    """
    Generate the stylesheet for a resolved style.

    Args:
        style: Resolved style from resolve_customization()
        template: Template supplying column widths and the mobile breakpoint

    Returns:
        CSS text
    """
    layout = template.get("layout") or {}
    column_widths = (layout.get("columns") or {}).get("widths") or []
    mobile = (layout.get("responsiveness") or {}).get("mobile")
    raw_breakpoint = mobile.get("breakpoint") if isinstance(mobile, dict) else mobile
    breakpoint = int(parse_measure(raw_breakpoint) or DEFAULT_MOBILE_BREAKPOINT)

    blocks = [
        "/* base */\n" + _base_block(style),
        "/* layout */\n" + _layout_block(style, column_widths),
        "/* typography */\n" + _typography_block(style),
        "/* color */\n" + _color_block(style),
        "/* spacing */\n" + _spacing_block(style),
        "/* responsive */\n" + _responsive_block(breakpoint),
    ]
    return "\n".join(blocks)


def minify_css(css: str) -> str:
    """Strip comments and redundant whitespace from CSS."""
    css = re.sub(r"/\*.*?\*/", "", css, flags=re.DOTALL)
    css = re.sub(r"\s+", " ", css)
    css = re.sub(r"\s*([{}:;,>])\s*", r"\1", css)
    css = css.replace(";}", "}")
    return css.strip()


def minify_html(html: str) -> str:
    """Strip comments and collapse whitespace between and around tags."""
    html = re.sub(r"<!--.*?-->", "", html, flags=re.DOTALL)
    html = re.sub(r">\s+<", "><", html)
    html = re.sub(r"\s+", " ", html)
    return html.strip()
