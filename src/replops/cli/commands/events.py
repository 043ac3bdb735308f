"""Commands for reading catalog change events."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import typer
from confluent_kafka import KafkaException

from replops.cli.common.context import (
    build_events_context,
    load_config_or_exit,
    open_event_reader,
)
from replops.cli.common.exits import exit_from_exc
from replops.cli.common.options import (
    ConfigOpt,
    JsonOpt,
    MaxEventsOpt,
    ProfileOpt,
    VerboseOpt,
)
from replops.cli.common.output import configure_logging, out
from replops.core.errors import CatalogLookupError, EventMappingError

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Read and inspect catalog change events.",
    no_args_is_help=True,
)


@dataclass
class EventsOptions:
    """Options shared by all event commands."""

    config_path: str | None
    profile: str | None


@app.callback()
def _init(
    ctx: typer.Context,
    config: str | None = ConfigOpt,
    profile: str | None = ProfileOpt,
    verbose: bool = VerboseOpt,
):
    """Initialize shared event command options."""
    configure_logging(verbose)
    ctx.obj = EventsOptions(config_path=config, profile=profile)


@app.command()
def tail(
    ctx: typer.Context,
    max_events: int | None = MaxEventsOpt,
    as_json: bool = JsonOpt,
):
    """
    Read events from the queue and print them as canonical replication events.

    Messages are acknowledged before they are normalized: an event that fails
    to normalize is reported and not redelivered.
    """
    opts: EventsOptions = ctx.obj
    appctx = build_events_context(opts.config_path, opts.profile)
    receiver = appctx.config.event_receiver

    out.header("Catalog events")
    out.kv(
        {
            "topic": receiver.topic,
            "source catalog": appctx.config.source_catalog.name,
            "source uri": appctx.source_catalog_uri,
            "replications": len(appctx.config.table_replications),
        }
    )

    emitted = 0
    try:
        with open_event_reader(appctx) as reader:
            while max_events is None or emitted < max_events:
                try:
                    event = reader.read()
                except (CatalogLookupError, EventMappingError) as exc:
                    out.warn("Event was acknowledged before normalization and may be lost.")
                    exit_from_exc(exc, message=str(exc), code=1)
                if event is None:
                    continue
                emitted += 1
                if as_json:
                    out.event_json(event)
                else:
                    out.event_line(event)
    except KafkaException as exc:
        exit_from_exc(exc, message=f"Kafka error: {exc}", code=1)
    except OSError as exc:
        exit_from_exc(exc, message=str(exc), code=1)
    except KeyboardInterrupt:
        logger.info("Interrupted")

    out.success(f"Events read: {emitted}")


@app.command()
def replications(ctx: typer.Context):
    """List the configured table replications."""
    opts: EventsOptions = ctx.obj
    config = load_config_or_exit(opts.config_path)

    if not config.table_replications:
        out.warn("No table replications configured; tables replicate under their source names.")
        raise typer.Exit(0)

    out.replications_table(config.table_replications)


@app.command("check-table")
def check_table(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Source database name"),
    table: str = typer.Argument(..., help="Source table name"),
):
    """Check whether a source table is partitioned."""
    opts: EventsOptions = ctx.obj
    appctx = build_events_context(opts.config_path, opts.profile)

    try:
        with out.status("Looking up table..."):
            partitioned = appctx.oracle.is_partitioned(database, table)
    except CatalogLookupError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    name = f"{appctx.config.source_catalog.name}.{database}.{table}"
    if partitioned:
        out.success(f"{name} is partitioned")
    else:
        out.info(f"{name} is not partitioned")
