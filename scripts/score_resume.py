#!/usr/bin/env python3
"""
Score a resume for ATS compatibility.

Examples:\n

    score_resume.py data/resume.yaml

    score_resume.py data/resume.yaml --template modern-two-column --job data/job.txt --industry technology

    score_resume.py data/resume.yaml --json > report.json
"""

import json
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from vellum.contexts.targeting.ats_optimizer import ATSOptimizer
from vellum.contexts.targeting.ats_results import ATSOptimizationRequest
from vellum.contexts.targeting.logger import setup_targeting_logger
from vellum.contexts.templating.exceptions import TemplateEngineError
from vellum.contexts.templating.registries import TemplateRegistry
from vellum.utils.report_formatter import format_ats_report

load_dotenv()

app = typer.Typer(help="Score a resume for ATS compatibility.", add_completion=False)


@app.command()
def main(
    resume_file: Annotated[Path, typer.Argument(help="Resume YAML/JSON file")],
    template_id: Annotated[
        str, typer.Option("--template", "-t", help="Catalog template id")
    ] = "professional-classic",
    job_file: Annotated[
        Optional[Path], typer.Option("--job", "-j", help="Job description text file")
    ] = None,
    industry: Annotated[
        Optional[str], typer.Option("--industry", help="Industry (e.g., technology, finance)")
    ] = None,
    company: Annotated[Optional[str], typer.Option("--company", help="Target company")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full report as JSON")] = False,
    log: Annotated[bool, typer.Option("--log", help="Write a session log under LOGS_PATH")] = False,
):
    """Print an ATS report for RESUME_FILE."""
    for path in (resume_file, job_file):
        if path is not None and not path.exists():
            typer.secho(f"Error: File not found: {path}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)

    if log:
        log_file = setup_targeting_logger(industry=industry)
        typer.echo(f"Logging to {log_file}", err=True)

    try:
        template = TemplateRegistry().get(template_id)
    except TemplateEngineError as e:
        typer.secho(f"✗ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    if template is None:
        typer.secho(f"Error: Template not found: {template_id}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    request = ATSOptimizationRequest(
        resume=OmegaConf.to_container(OmegaConf.load(resume_file), resolve=True),
        template=template,
        job_description=job_file.read_text(encoding="utf-8") if job_file else None,
        target_company=company,
        industry=industry,
    )

    try:
        result = ATSOptimizer().optimize_for_ats(request)
    except TemplateEngineError as e:
        typer.secho(f"✗ {e.user_message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(format_ats_report(result))


if __name__ == "__main__":
    app()
