"""Replication configuration loading.

The configuration is a YAML document naming the source catalog, the
Kafka topic carrying listener notifications and the table replication
overrides. It is read once at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from replops.core.errors import ConfigError
from replops.core.replication import TableReplication, TableReplications

CONFIG_ENV = "REPLOPS_CONFIG"
DEFAULT_SOURCE_CATALOG = "hive_metastore"


@dataclass(frozen=True)
class SourceCatalogConfig:
    """Where source tables live and how to reach them."""

    name: str = DEFAULT_SOURCE_CATALOG
    uri: str | None = None
    profile: str | None = None


@dataclass(frozen=True)
class EventReceiverConfig:
    """Kafka topic and consumer settings for listener notifications."""

    topic: str
    poll_timeout_seconds: float = 1.0
    configuration_properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReplicatorConfig:
    """Top-level replication configuration."""

    source_catalog: SourceCatalogConfig
    event_receiver: EventReceiverConfig
    table_replications: TableReplications


def _section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        if required:
            raise ConfigError(f"Missing '{key}' section.")
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"'{key}' must be a mapping.")
    return value


def _table_ref(raw: Any, where: str) -> tuple[str | None, str | None]:
    if raw is None:
        return None, None
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where} must be a mapping with database-name and table-name.")
    return raw.get("database-name"), raw.get("table-name")


def parse_table_replications(raw: Any) -> TableReplications:
    """
    Build the replication overrides from the `table-replications` list.

    Replica names default to the source names when omitted.
    """
    if raw is None:
        return TableReplications()
    if not isinstance(raw, list):
        raise ConfigError("'table-replications' must be a list.")

    out: list[TableReplication] = []
    for i, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise ConfigError(f"table-replications[{i}] must be a mapping.")
        src_db, src_table = _table_ref(item.get("source-table"), f"table-replications[{i}].source-table")
        if not src_db or not src_table:
            raise ConfigError(
                f"table-replications[{i}].source-table needs database-name and table-name."
            )
        dst_db, dst_table = _table_ref(item.get("replica-table"), f"table-replications[{i}].replica-table")
        out.append(
            TableReplication(
                source_db_name=str(src_db),
                source_table_name=str(src_table),
                replica_db_name=str(dst_db or src_db),
                replica_table_name=str(dst_table or src_table),
            )
        )
    return TableReplications(out)


def parse_config(raw: Any) -> ReplicatorConfig:
    """Validate a loaded YAML document and build the configuration."""
    if not isinstance(raw, Mapping):
        raise ConfigError("Configuration must be a YAML mapping.")

    source = _section(raw, "source-catalog", required=False)
    receiver = _section(raw, "event-receiver", required=True)

    topic = receiver.get("topic")
    if not topic:
        raise ConfigError("'event-receiver.topic' is required.")

    try:
        poll_timeout = float(receiver.get("poll-timeout-seconds", 1.0))
    except (TypeError, ValueError) as exc:
        raise ConfigError("'event-receiver.poll-timeout-seconds' must be a number.") from exc

    properties = receiver.get("configuration-properties") or {}
    if not isinstance(properties, Mapping):
        raise ConfigError("'event-receiver.configuration-properties' must be a mapping.")

    return ReplicatorConfig(
        source_catalog=SourceCatalogConfig(
            name=str(source.get("name") or DEFAULT_SOURCE_CATALOG),
            uri=source.get("uri"),
            profile=source.get("profile"),
        ),
        event_receiver=EventReceiverConfig(
            topic=str(topic),
            poll_timeout_seconds=poll_timeout,
            configuration_properties=dict(properties),
        ),
        table_replications=parse_table_replications(raw.get("table-replications")),
    )


def resolve_config_path(path: str | Path | None) -> Path:
    """Return the explicit path, or the one from $REPLOPS_CONFIG."""
    if path:
        return Path(path)
    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return Path(env_path)
    raise ConfigError(f"No configuration file given (use --config or ${CONFIG_ENV}).")


def load_config(path: str | Path | None = None) -> ReplicatorConfig:
    """Load and validate a YAML configuration file."""
    config_path = resolve_config_path(path)
    try:
        raw = yaml.safe_load(config_path.read_text())
    except OSError as exc:
        raise ConfigError(f"Could not read configuration file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    return parse_config(raw)
