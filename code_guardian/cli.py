"""CLI entry point: command definitions using Click.

Commands:
    init          Generate a template config file
    analyze       Analyse a local directory and emit a JSON report
    rules         List the active pattern rules
"""

import functools
import json
import logging
import sys
from typing import Any

import click
from click.core import ParameterSource

from code_guardian import __version__

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context):
    """Load the config (defaults when the default file is absent) and set up logging."""
    from code_guardian.config import load_or_default

    obj = ctx.obj
    config = load_or_default(obj["config_path"], explicit=obj["config_explicit"])
    level = logging.DEBUG if obj["verbose"] else config.log_level_number
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
    return config


def _emit_json(data: Any, ctx: click.Context) -> None:
    """Write JSON to stdout or to the file specified by --output."""
    obj = ctx.obj
    indent = 2 if obj["pretty"] else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    output_path: str | None = obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _handle_errors(func):
    """Decorator that turns known errors into a message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from code_guardian.config import ConfigError

        try:
            return func(*args, **kwargs)
        except ConfigError as exc:
            click.echo(f"Configuration error: {exc}", err=True)
            sys.exit(1)
        except OSError as exc:
            click.echo(f"File error: {exc}", err=True)
            sys.exit(1)

    return wrapper


def _echo_progress(done: float) -> None:
    click.echo(f"[verbose] {done:.0%} analysed", err=True)


def _load_churn(path: str | None) -> dict[str, float] | None:
    """Read a ``path: change count`` mapping from a YAML or JSON file."""
    if path is None:
        return None
    import yaml

    with open(path, encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise click.BadParameter(f"cannot parse '{path}': {exc}", param_hint="--churn") from exc
    if not isinstance(raw, dict):
        raise click.BadParameter(f"'{path}' must map file paths to numbers", param_hint="--churn")
    try:
        return {str(k): float(v) for k, v in raw.items()}
    except (TypeError, ValueError) as exc:
        raise click.BadParameter(f"'{path}' must map file paths to numbers", param_hint="--churn") from exc


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="code-guardian.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="code-guardian")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """Static source analysis: issues, scores and metrics as JSON."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["config_explicit"] = ctx.get_parameter_source("config_path") is not ParameterSource.DEFAULT
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="code-guardian.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template code-guardian.yaml file."""
    from code_guardian.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it to exclude paths or disable rule categories.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

@cli.command("analyze")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--format", "output_format", type=click.Choice(["report", "webhook", "insights"]),
              default="report", show_default=True, help="Shape of the JSON output.")
@click.option("--name", default=None, help="Name recorded in the report (defaults to PATH).")
@click.option("--churn", "churn_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="YAML/JSON file mapping paths to change counts, used for hotspots.")
@click.pass_context
@_handle_errors
def analyze_command(ctx: click.Context, path: str, output_format: str,
                    name: str | None, churn_path: str | None) -> None:
    """Analyse the source files under PATH."""
    from code_guardian.analyzer import Analyzer
    from code_guardian.reports import build_report, insight_request, webhook_payload
    from code_guardian.sources import collect_sources

    config = _load_config(ctx)
    churn = _load_churn(churn_path)
    files = collect_sources(path, config)

    on_progress = None
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] Analysing {len(files)} files under '{path}'", err=True)
        on_progress = _echo_progress

    result = Analyzer.from_config(config).analyze(files, on_progress=on_progress, churn=churn)

    if output_format == "webhook":
        data = webhook_payload(result, name=name or path)
    elif output_format == "insights":
        data = insight_request(result)
    else:
        data = build_report(result, name or path)
    _emit_json(data, ctx)


# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------

@cli.command("rules")
@click.pass_context
@_handle_errors
def rules_command(ctx: click.Context) -> None:
    """List the pattern rules active under the current configuration."""
    from code_guardian.rules import RuleEngine

    config = _load_config(ctx)
    engine = RuleEngine.from_config(config)
    _emit_json([
        {
            "id":        rule.id,
            "category":  rule.category.value,
            "severity":  rule.severity.value,
            "message":   rule.message,
            "languages": sorted(lang.value for lang in rule.languages),
        }
        for rule in engine.rules
    ], ctx)
