"""Application context management for the CLI."""

from dataclasses import dataclass

from databricks.sdk import WorkspaceClient

from replops.cli.common.exits import die, exit_from_exc
from replops.core.adapters.kafka import KafkaMessageReader
from replops.core.adapters.unitycatalog import UnityCatalogAdapter
from replops.core.auth import AuthError, get_client, source_catalog_uri
from replops.core.config import ReplicatorConfig, load_config
from replops.core.errors import ConfigError
from replops.core.oracle import CatalogPartitionOracle
from replops.core.reader import CatalogEventReader


@dataclass
class EventsAppContext:
    """Application context holding the configuration and source catalog access."""

    config: ReplicatorConfig
    client: WorkspaceClient
    oracle: CatalogPartitionOracle
    source_catalog_uri: str


def load_config_or_exit(config_path: str | None) -> ReplicatorConfig:
    """Load the replication configuration, exiting with code 2 when invalid."""
    try:
        return load_config(config_path)
    except ConfigError as exc:
        exit_from_exc(exc, message=str(exc), code=2)


def build_events_context(
    config_path: str | None, profile: str | None = None
) -> EventsAppContext:
    """Build the context for event commands.

    Args:
        config_path: Replication configuration file (falls back to $REPLOPS_CONFIG).
        profile: Databricks profile; overrides the one from the configuration.
    """
    config = load_config_or_exit(config_path)
    try:
        client = get_client(profile or config.source_catalog.profile)
        uri = source_catalog_uri(client, config.source_catalog.uri)
    except AuthError as exc:
        die(str(exc), code=1)
    oracle = CatalogPartitionOracle(
        UnityCatalogAdapter(client), catalog=config.source_catalog.name
    )
    return EventsAppContext(
        config=config, client=client, oracle=oracle, source_catalog_uri=uri
    )


def open_event_reader(appctx: EventsAppContext) -> CatalogEventReader:
    """Subscribe to the configured topic and return a reader over it."""
    receiver = appctx.config.event_receiver
    message_reader = KafkaMessageReader.from_properties(
        receiver.topic,
        receiver.configuration_properties,
        poll_timeout=receiver.poll_timeout_seconds,
    )
    return CatalogEventReader(
        message_reader,
        appctx.source_catalog_uri,
        appctx.oracle,
        appctx.config.table_replications,
    )
