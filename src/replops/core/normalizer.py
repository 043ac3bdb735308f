"""Mapping of listener events to canonical replication events.

``normalize_event`` is pure apart from one collaborator call: table
alterations consult the partitioned-table oracle to decide whether the
change can be replicated as a metadata-only update.
"""

from __future__ import annotations

from typing import assert_never

from replops.core.events import (
    SOURCE_CATALOG_URI_PARAMETER,
    CatalogEvent,
    CatalogEventBuilder,
    ReplicationMode,
)
from replops.core.listener import (
    AddPartitionEvent,
    AlterPartitionEvent,
    AlterTableEvent,
    CreateTableEvent,
    DropPartitionEvent,
    DropTableEvent,
    InsertTableEvent,
    ListenerEvent,
)
from replops.core.oracle import PartitionedTableOracle
from replops.core.replication import TableReplications


def normalize_event(
    event: ListenerEvent,
    replications: TableReplications,
    oracle: PartitionedTableOracle,
    source_catalog_uri: str,
) -> CatalogEvent:
    """
    Convert one listener event into a canonical replication event.

    Args:
        event: Decoded listener event.
        replications: Configured source to replica overrides.
        oracle: Partitioned-table oracle, used for table alterations only.
        source_catalog_uri: Endpoint of the source catalog, injected into the
            event parameters so the applier can fetch full table metadata.

    Returns:
        The canonical event.

    Raises:
        CatalogLookupError: If the oracle cannot classify a table alteration.
        EventMappingError: If the event cannot form a valid canonical event.
    """
    replica_db_name = event.db_name
    replica_table_name = event.table_name

    replication = replications.resolve(event.db_name, event.table_name)
    if replication is not None:
        replica_db_name = replication.replica_db_name
        replica_table_name = replication.replica_table_name

    builder = (
        CatalogEvent.builder(
            event.event_type,
            event.db_name,
            event.table_name,
            replica_db_name,
            replica_table_name,
        )
        .parameters(event.table_parameters)
        .parameter(SOURCE_CATALOG_URI_PARAMETER, source_catalog_uri)
        .environment_context(event.environment_context)
    )

    if isinstance(event, (AddPartitionEvent, AlterPartitionEvent)):
        _partition_payload(builder, event)
    elif isinstance(event, DropPartitionEvent):
        _partition_payload(builder, event)
        builder.delete_data(True)
    elif isinstance(event, InsertTableEvent):
        # one pass keeps columns[i] and values[i] on the same key
        pairs = list(event.partition_key_values.items())
        builder.partition_columns([column for column, _ in pairs])
        builder.partition_values([value for _, value in pairs])
    elif isinstance(event, AlterTableEvent):
        if _is_metadata_update(event, oracle):
            builder.replication_mode(ReplicationMode.METADATA_UPDATE)
    elif isinstance(event, DropTableEvent):
        builder.delete_data(True)
    elif isinstance(event, CreateTableEvent):
        pass
    else:
        assert_never(event)

    return builder.build()


def _partition_payload(
    builder: CatalogEventBuilder,
    event: AddPartitionEvent | AlterPartitionEvent | DropPartitionEvent,
) -> None:
    builder.partition_columns(list(event.partition_keys.keys()))
    builder.partition_values(event.partition_values)


def _is_metadata_update(event: AlterTableEvent, oracle: PartitionedTableOracle) -> bool:
    """
    True for a partitioned table whose location did not change.

    The oracle is consulted for every alteration, before the locations are
    compared. A lookup failure is fatal even when the locations differ.
    """
    partitioned = oracle.is_partitioned(event.db_name, event.table_name)
    if event.table_location is None or event.table_location != event.old_table_location:
        return False
    return partitioned
