#!/usr/bin/env python3
"""
Validate resume template definitions.

Usage:
    python scripts/validate_template.py professional-classic
    python scripts/validate_template.py --file path/to/template.yaml
    python scripts/validate_template.py --all
"""

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from vellum.contexts.templating.logger import setup_templating_logger
from vellum.contexts.templating.registries import TemplateRegistry
from vellum.contexts.templating.template_validator import TemplateValidator, ValidationResult
from vellum.utils.report_formatter import format_score_bar

load_dotenv()

app = typer.Typer(help="Validate resume template definitions.", add_completion=False)


def _print_result(label: str, result: ValidationResult, show_warnings: bool) -> None:
    status = "valid" if result.is_valid else "INVALID"
    color = typer.colors.GREEN if result.is_valid else typer.colors.RED
    typer.secho(f"\n{label}: {status}", fg=color, bold=True)
    typer.echo(f"  Score: {result.score:>3} {format_score_bar(result.score)}")
    typer.echo(f"  Errors: {len(result.errors)}  Warnings: {len(result.warnings)}")

    for issue in result.errors:
        typer.secho(f"  ✗ {issue.code} at {issue.field}: {issue.message}", fg=typer.colors.RED)
        if issue.suggestion:
            typer.echo(f"      → {issue.suggestion}")

    if show_warnings:
        for issue in result.warnings:
            typer.secho(f"  ! {issue.code} at {issue.field}: {issue.message}", fg=typer.colors.YELLOW)


@app.command()
def main(
    template_ids: Annotated[
        Optional[List[str]],
        typer.Argument(help="Catalog template ids (e.g., professional-classic)"),
    ] = None,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Validate a template YAML file instead of a catalog id"),
    ] = None,
    all_templates: Annotated[
        bool, typer.Option("--all", "-a", help="Validate every catalog template")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Hide warnings")
    ] = False,
    log: Annotated[bool, typer.Option("--log", help="Write a session log under LOGS_PATH")] = False,
):
    """Validate templates and print their scored reports."""
    if log:
        typer.echo(f"Logging to {setup_templating_logger(phase='validate')}")

    validator = TemplateValidator()
    registry = TemplateRegistry(validator=validator)
    failures = 0

    if file is not None:
        if not file.exists():
            typer.secho(f"Error: File not found: {file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        template = OmegaConf.to_container(OmegaConf.load(file), resolve=True)
        result = validator.validate(template)
        _print_result(file.name, result, show_warnings=not quiet)
        failures += 0 if result.is_valid else 1

    ids = registry.template_ids() if all_templates else list(template_ids or [])
    if file is None and not ids:
        typer.echo("Nothing to validate. Pass template ids, --file, or --all.")
        typer.echo(f"Available templates: {', '.join(registry.template_ids())}")
        raise typer.Exit(1)

    for template_id in ids:
        path = registry.get_template_path(template_id)
        if not path.exists():
            typer.secho(f"\n{template_id}: not found in catalog", fg=typer.colors.RED, bold=True)
            failures += 1
            continue
        template = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
        result = validator.validate(template)
        _print_result(template_id, result, show_warnings=not quiet)
        failures += 0 if result.is_valid else 1

    typer.echo("")
    raise typer.Exit(code=1 if failures else 0)


if __name__ == "__main__":
    app()
