#!/usr/bin/env python3
"""
Render a resume to HTML with a catalog template.

Resumes are YAML (or JSON) files following the resume schema
(personal_info, summary, experience, education, skills, ...).

Examples:\n

    render_resume.py professional-classic data/resume.yaml

    render_resume.py modern-two-column data/resume.yaml -o outs/resume.html --minify

    render_resume.py professional-classic data/resume.yaml --preset colors_warm --preset spacing_tight

    render_resume.py creative-sidebar data/resume.yaml --format preview
"""

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from vellum.contexts.rendering.logger import setup_rendering_logger
from vellum.contexts.rendering.renderer import (
    SUPPORTED_FORMATS,
    RenderOptimization,
    RenderOptions,
    TemplateRenderer,
)
from vellum.contexts.templating.customization import apply_presets
from vellum.contexts.templating.exceptions import TemplateEngineError
from vellum.utils.timestamp import format_timestamp

load_dotenv()

app = typer.Typer(help="Render a resume to HTML with a catalog template.", add_completion=False)


@app.command()
def main(
    template_id: Annotated[str, typer.Argument(help="Catalog template id")],
    resume_file: Annotated[Path, typer.Argument(help="Resume YAML/JSON file")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output HTML path (default: <resume>.<template>.html)"),
    ] = None,
    output_format: Annotated[
        str, typer.Option("--format", help=f"Output format: {', '.join(SUPPORTED_FORMATS)}")
    ] = "html",
    presets: Annotated[
        Optional[List[str]],
        typer.Option("--preset", "-p", help="Customization preset (repeatable, later wins)"),
    ] = None,
    minify: Annotated[bool, typer.Option("--minify", help="Minify HTML and CSS")] = False,
    inline_css: Annotated[
        bool, typer.Option("--inline-css", help="Embed the stylesheet in the HTML")
    ] = False,
    log: Annotated[bool, typer.Option("--log", help="Write a session log under LOGS_PATH")] = False,
):
    """Render RESUME_FILE with TEMPLATE_ID and write the HTML document."""
    if not resume_file.exists():
        typer.secho(f"Error: Resume file not found: {resume_file}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if log:
        log_file = setup_rendering_logger(output_format=output_format)
        typer.echo(f"Logging to {log_file}")

    resume = OmegaConf.to_container(OmegaConf.load(resume_file), resolve=True)

    try:
        customizations = apply_presets({}, presets) if presets else None
    except ValueError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    renderer = TemplateRenderer()
    options = RenderOptions(
        format=output_format,
        optimization=RenderOptimization(minify=minify, inline_css=inline_css),
        customizations=customizations,
    )

    try:
        rendered = renderer.render(template_id, resume, options)
    except ValueError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except TemplateEngineError as e:
        typer.secho(f"✗ {e.user_message}", fg=typer.colors.RED, bold=True, err=True)
        for error in getattr(e, "errors", [])[:10]:
            typer.echo(f"  - {error.code}: {error.message}", err=True)
        raise typer.Exit(1)

    if output is None:
        output = resume_file.with_name(f"{resume_file.stem}.{template_id}.html")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered.html, encoding="utf-8")

    if not inline_css and output_format == "html":
        css_path = output.with_name("resume.css")
        css_path.write_text(rendered.css, encoding="utf-8")
        typer.echo(f"  CSS: {css_path}")

    typer.secho("✓ Render succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  HTML: {output}")
    typer.echo(f"  Checksum: {rendered.metadata.checksum}")
    typer.echo(f"  Generated: {format_timestamp(rendered.metadata.generated_at)}")
    typer.echo(
        f"  Size: {rendered.metadata.size['total']} bytes "
        f"in {rendered.metadata.rendering_time_ms:.1f}ms"
    )
    if rendered.warnings:
        typer.echo(f"\nWarnings ({len(rendered.warnings)}):")
        for warning in rendered.warnings[:10]:
            typer.secho(f"  ! {warning}", fg=typer.colors.YELLOW)
        if len(rendered.warnings) > 10:
            typer.echo(f"  ... and {len(rendered.warnings) - 10} more")


if __name__ == "__main__":
    app()
