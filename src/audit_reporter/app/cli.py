from __future__ import annotations

import json
import time

import typer
from dotenv import load_dotenv

from .config import AppConfig, check_preflight, load_config
from .container import Container
from .cli_formatter import format_run_result, run_result_to_dict
from ..core.domain.exceptions import AuditReporterError

load_dotenv()

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _load_config(log_level: str | None = None) -> AppConfig:
    try:
        config = load_config()
    except AuditReporterError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    if log_level:
        config = config.model_copy(update={"logging": config.logging.model_copy(update={"level": log_level})})
    return config


def _create_container(config: AppConfig) -> Container:
    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()
    return container


@app.command()
def run(
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (overrides BPR_LOG_LEVEL)", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Run npm audit and publish the report and annotations to Bitbucket."""
    started_at = time.time()

    config = _load_config(log_level)
    try:
        check_preflight(config)
    except AuditReporterError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    container = _create_container(config)
    logger = container.logger()
    logger.info(
        "run_started",
        report_id=config.report.id,
        branch=config.bitbucket.branch,
        commit=config.bitbucket.commit,
        build_number=config.bitbucket.build_number,
        threshold=config.report.level,
    )

    try:
        uc = container.publish_uc()
        result = uc.execute(started_at=started_at)
    except AuditReporterError as e:
        logger.error("run_failed", error_type=type(e).__name__)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        container.shutdown_resources()

    if json_output:
        typer.echo(json.dumps(run_result_to_dict(result), ensure_ascii=False, indent=2))
    else:
        typer.echo(format_run_result(result))


@app.command()
def preview(
    limit: int | None = typer.Option(None, "--limit", "-n", help="Show at most N annotations"),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Run npm audit and show what would be published, without contacting Bitbucket.

    Does not require the BITBUCKET_* identity variables.
    """
    started_at = time.time()

    config = _load_config()
    try:
        check_preflight(config, require_identity=False)
    except AuditReporterError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    container = _create_container(config)
    try:
        uc = container.preview_uc()
        result = uc.execute(started_at=started_at, limit=limit)
    except AuditReporterError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        container.shutdown_resources()

    if json_output:
        typer.echo(json.dumps(run_result_to_dict(result), ensure_ascii=False, indent=2))
    else:
        typer.echo(format_run_result(result))


if __name__ == "__main__":
    app()
