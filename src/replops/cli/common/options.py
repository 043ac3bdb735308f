"""Common CLI options for the CLI."""

import typer

from replops.core.config import CONFIG_ENV

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Databricks CLI profile (overrides source-catalog.profile)",
)

ConfigOpt = typer.Option(
    None,
    "--config",
    "-c",
    envvar=CONFIG_ENV,
    help="Replication configuration file (YAML)",
)

MaxEventsOpt = typer.Option(
    None,
    "--max-events",
    "-n",
    min=1,
    help="Stop after this many events (default: run until interrupted)",
)

JsonOpt = typer.Option(
    False,
    "--json",
    help="Print one JSON object per event instead of a table row",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable debug logging",
)
