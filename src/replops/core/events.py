"""Canonical replication events.

A ``CatalogEvent`` is the normalized, replica-aware form of a listener
event. It is what the reader hands to the replica applier. Instances are
built through ``CatalogEventBuilder`` and are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Sequence

from replops.core.errors import EventMappingError
from replops.core.listener import EventType

SOURCE_CATALOG_URI_PARAMETER = "source.catalog.uri"


class ReplicationMode(str, Enum):
    """
    Hint for how the applier should replicate the event.

    Values:
        UNSPECIFIED: No hint; the applier decides (full replication).
        METADATA_UPDATE: Only catalog metadata changed, no data moved.
    """

    UNSPECIFIED = "UNSPECIFIED"
    METADATA_UPDATE = "METADATA_UPDATE"


@dataclass(frozen=True)
class CatalogEvent:
    """
    Normalized catalog change ready to be applied to a replica catalog.

    Attributes:
        event_type: Kind of mutation on the source table.
        db_name: Source database name.
        table_name: Source table name.
        replica_db_name: Replica database name (source name unless overridden).
        replica_table_name: Replica table name (source name unless overridden).
        parameters: Table parameters, including the source catalog URI.
        environment_context: Context properties, or None if none were recorded.
        partition_columns: Partition column names, aligned with `partition_values`.
        partition_values: Partition values, aligned with `partition_columns`.
        delete_data: Whether the replica data should be removed as well.
        replication_mode: Replication hint for the applier.
    """

    event_type: EventType
    db_name: str
    table_name: str
    replica_db_name: str
    replica_table_name: str
    parameters: Mapping[str, str]
    environment_context: Mapping[str, str] | None = None
    partition_columns: tuple[str, ...] = ()
    partition_values: tuple[str, ...] = ()
    delete_data: bool = False
    replication_mode: ReplicationMode = ReplicationMode.UNSPECIFIED

    @staticmethod
    def builder(
        event_type: EventType,
        db_name: str,
        table_name: str,
        replica_db_name: str,
        replica_table_name: str,
    ) -> CatalogEventBuilder:
        """Start building an event for the given source and replica table."""
        return CatalogEventBuilder(
            event_type, db_name, table_name, replica_db_name, replica_table_name
        )

    @property
    def qualified_table_name(self) -> str:
        return f"{self.db_name}.{self.table_name}"

    @property
    def replica_qualified_table_name(self) -> str:
        return f"{self.replica_db_name}.{self.replica_table_name}"

    @property
    def is_drop_event(self) -> bool:
        return self.event_type in (EventType.DROP_PARTITION, EventType.DROP_TABLE)


class CatalogEventBuilder:
    """Chainable builder for ``CatalogEvent``."""

    def __init__(
        self,
        event_type: EventType,
        db_name: str,
        table_name: str,
        replica_db_name: str,
        replica_table_name: str,
    ):
        self._event_type = event_type
        self._db_name = db_name
        self._table_name = table_name
        self._replica_db_name = replica_db_name
        self._replica_table_name = replica_table_name
        self._parameters: dict[str, str] = {}
        self._environment_context: dict[str, str] | None = None
        self._partition_columns: list[str] = []
        self._partition_values: list[str] = []
        self._delete_data = False
        self._replication_mode = ReplicationMode.UNSPECIFIED

    def parameters(self, parameters: Mapping[str, str] | None) -> CatalogEventBuilder:
        """Merge table parameters into the event."""
        if parameters:
            self._parameters.update(parameters)
        return self

    def parameter(self, key: str, value: str) -> CatalogEventBuilder:
        """Set a single table parameter."""
        self._parameters[key] = value
        return self

    def environment_context(
        self, context: Mapping[str, str] | None
    ) -> CatalogEventBuilder:
        """Set context properties; None means no context was recorded."""
        self._environment_context = dict(context) if context is not None else None
        return self

    def partition_columns(self, columns: Sequence[str]) -> CatalogEventBuilder:
        self._partition_columns = list(columns)
        return self

    def partition_values(self, values: Sequence[str]) -> CatalogEventBuilder:
        self._partition_values = list(values)
        return self

    def delete_data(self, delete_data: bool) -> CatalogEventBuilder:
        self._delete_data = delete_data
        return self

    def replication_mode(self, mode: ReplicationMode) -> CatalogEventBuilder:
        self._replication_mode = mode
        return self

    def build(self) -> CatalogEvent:
        """
        Build the immutable event.

        Raises:
            EventMappingError: If an identifier is empty or the partition
                columns and values do not line up.
        """
        identifiers = {
            "database": self._db_name,
            "table": self._table_name,
            "replica database": self._replica_db_name,
            "replica table": self._replica_table_name,
        }
        for label, value in identifiers.items():
            if not value:
                raise EventMappingError(f"Catalog event {label} name must not be empty.")

        if len(self._partition_columns) != len(self._partition_values):
            raise EventMappingError(
                f"Partition columns {self._partition_columns} and values "
                f"{self._partition_values} for {self._db_name}.{self._table_name} "
                "must have the same size."
            )

        return CatalogEvent(
            event_type=self._event_type,
            db_name=self._db_name,
            table_name=self._table_name,
            replica_db_name=self._replica_db_name,
            replica_table_name=self._replica_table_name,
            parameters=MappingProxyType(dict(self._parameters)),
            environment_context=MappingProxyType(dict(self._environment_context))
            if self._environment_context is not None
            else None,
            partition_columns=tuple(self._partition_columns),
            partition_values=tuple(self._partition_values),
            delete_data=self._delete_data,
            replication_mode=self._replication_mode,
        )
