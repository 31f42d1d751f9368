"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import uvicorn

from bruno_collection_generator.bootstrap import BootstrapError, bootstrap_mock_server_environment
from bruno_collection_generator.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    write_placeholder_configuration,
)
from bruno_collection_generator.generation_service import ServiceSettings, create_app
from bruno_collection_generator.output_packaging import (
    GenerationRequest,
    generate_from_config_file,
)

DEFAULT_OUTPUT_DIR = "bruno-generated"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_DEFAULT_SETTINGS = ServiceSettings()


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="bruno-collection-generator")
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """Generate Bruno collections and matching Flask mock data servers."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML generation configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML generation configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="generate")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON generation configuration file",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    type=click.Path(path_type=str),
    help="Directory receiving app.py, the collection, requirements and instructions",
)
def generate(config_path: str, output_dir: str) -> None:
    """Generate the mock server, Bruno collection and setup guide."""
    try:
        outcome = generate_from_config_file(
            GenerationRequest(config_path=config_path, output_dir=output_dir)
        )
    except (ConfigurationError, OSError) as exc:
        raise CliError(str(exc)) from exc
    for path in outcome.written_paths:
        click.echo(str(path))


@cli.command(name="serve")
@click.option("--host", default=_DEFAULT_SETTINGS.host, show_default=True, help="Bind address")
@click.option(
    "--port", default=_DEFAULT_SETTINGS.port, show_default=True, type=int, help="Bind port"
)
@click.option(
    "--ttl-seconds",
    default=_DEFAULT_SETTINGS.ttl_seconds,
    show_default=True,
    type=click.FloatRange(min=1),
    help="Lifetime of generated bundles in memory",
)
@click.option(
    "--sweep-seconds",
    default=_DEFAULT_SETTINGS.sweep_seconds,
    show_default=True,
    type=click.FloatRange(min=1),
    help="Interval between expired-bundle sweeps",
)
def serve(host: str, port: int, ttl_seconds: float, sweep_seconds: float) -> None:
    """Run the generation HTTP service used by the browser form."""
    settings = ServiceSettings(
        host=host, port=port, ttl_seconds=ttl_seconds, sweep_seconds=sweep_seconds
    )
    click.echo(f"generation service listening on http://{host}:{port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


@cli.command(name="bootstrap")
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    type=click.Path(path_type=str),
    help="Directory holding a generated app.py and requirements.txt",
)
def bootstrap(output_dir: str) -> None:
    """Prepare a virtual environment for a generated mock server."""
    try:
        venv_python = bootstrap_mock_server_environment(output_dir=Path(output_dir))
    except BootstrapError as exc:
        raise CliError(str(exc)) from exc
    click.echo(f"mock server environment ready: {venv_python}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
