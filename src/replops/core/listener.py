"""Raw catalog listener events.

These models mirror the change notifications emitted by the source
catalog's metastore listener: one notification per table or partition
mutation. They are decoded from the queue payload and handed to the
normalizer as-is. Every event kind has its own frozen dataclass, and
``ListenerEvent`` is the closed union over all of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Sequence, Union

from replops.core.errors import EventMappingError


class EventType(str, Enum):
    """
    Kinds of catalog mutations reported by the listener.

    Values are the wire names used in the queue payload.
    """

    CREATE_TABLE = "CREATE_TABLE"
    ADD_PARTITION = "ADD_PARTITION"
    ALTER_PARTITION = "ALTER_PARTITION"
    DROP_PARTITION = "DROP_PARTITION"
    INSERT = "INSERT"
    ALTER_TABLE = "ALTER_TABLE"
    DROP_TABLE = "DROP_TABLE"


@dataclass(frozen=True)
class BaseListenerEvent:
    """
    Fields shared by every listener event.

    Not an event kind itself: each subclass fixes which event types it
    may carry, and construction fails when the type does not match.

    Attributes:
        event_type: Kind of mutation.
        db_name: Source database name.
        table_name: Source table name.
        table_parameters: Table-level parameters at the time of the event.
        environment_context: Context properties recorded with the event,
            or None when the listener recorded none.
    """

    event_types: ClassVar[frozenset[EventType]] = frozenset()

    event_type: EventType
    db_name: str
    table_name: str
    table_parameters: Mapping[str, str] = field(default_factory=dict)
    environment_context: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if self.event_type not in self.event_types:
            kind = getattr(self.event_type, "value", self.event_type)
            raise EventMappingError(f"{type(self).__name__} cannot carry a {kind} event.")


@dataclass(frozen=True)
class CreateTableEvent(BaseListenerEvent):
    """A table was created. Carries no kind-specific payload."""

    event_types: ClassVar[frozenset[EventType]] = frozenset({EventType.CREATE_TABLE})


@dataclass(frozen=True)
class AddPartitionEvent(BaseListenerEvent):
    """A partition was added. Keys map partition column name to column type."""

    event_types: ClassVar[frozenset[EventType]] = frozenset({EventType.ADD_PARTITION})

    partition_keys: Mapping[str, str] = field(default_factory=dict)
    partition_values: Sequence[str] = ()


@dataclass(frozen=True)
class AlterPartitionEvent(BaseListenerEvent):
    """A partition was altered in place."""

    event_types: ClassVar[frozenset[EventType]] = frozenset({EventType.ALTER_PARTITION})

    partition_keys: Mapping[str, str] = field(default_factory=dict)
    partition_values: Sequence[str] = ()
    old_partition_values: Sequence[str] | None = None
    partition_location: str | None = None


@dataclass(frozen=True)
class DropPartitionEvent(BaseListenerEvent):
    """A partition was dropped together with its data."""

    event_types: ClassVar[frozenset[EventType]] = frozenset({EventType.DROP_PARTITION})

    partition_keys: Mapping[str, str] = field(default_factory=dict)
    partition_values: Sequence[str] = ()


@dataclass(frozen=True)
class InsertTableEvent(BaseListenerEvent):
    """Rows were inserted, optionally into a single partition."""

    event_types: ClassVar[frozenset[EventType]] = frozenset({EventType.INSERT})

    partition_key_values: Mapping[str, str] = field(default_factory=dict)
    files: Sequence[str] = ()
    file_checksums: Sequence[str] = ()


@dataclass(frozen=True)
class AlterTableEvent(BaseListenerEvent):
    """Table metadata changed. Locations are None when not reported."""

    event_types: ClassVar[frozenset[EventType]] = frozenset({EventType.ALTER_TABLE})

    table_location: str | None = None
    old_table_location: str | None = None


@dataclass(frozen=True)
class DropTableEvent(BaseListenerEvent):
    """The table was dropped together with its data."""

    event_types: ClassVar[frozenset[EventType]] = frozenset({EventType.DROP_TABLE})


ListenerEvent = Union[
    CreateTableEvent,
    AddPartitionEvent,
    AlterPartitionEvent,
    DropPartitionEvent,
    InsertTableEvent,
    AlterTableEvent,
    DropTableEvent,
]


def _require(payload: Mapping[str, Any], key: str, event_type: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise EventMappingError(f"{event_type} event is missing '{key}'.")
    return value


def _str_mapping(value: Any, key: str, *, drop_nulls: bool = False) -> dict[str, str]:
    """Return a string-to-string mapping; null values are dropped only when allowed."""
    if not isinstance(value, Mapping):
        raise EventMappingError(f"'{key}' must be an object, got {type(value).__name__}.")
    out: dict[str, str] = {}
    for k, v in value.items():
        if v is None and drop_nulls:
            continue
        if not isinstance(v, str):
            raise EventMappingError(
                f"'{key}.{k}' must be a string, got {type(v).__name__}."
            )
        out[str(k)] = v
    return out


def _str_list(value: Any, key: str) -> list[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise EventMappingError(f"'{key}' must be a list, got {type(value).__name__}.")
    for i, v in enumerate(value):
        if not isinstance(v, str):
            raise EventMappingError(f"'{key}[{i}]' must be a string, got {type(v).__name__}.")
    return list(value)


def _environment_context(payload: Mapping[str, Any]) -> dict[str, str] | None:
    """Return context properties, accepting both flat and `{"properties": ...}` shapes."""
    raw = payload.get("environmentContext")
    if raw is None:
        return None
    if isinstance(raw, Mapping) and set(raw) == {"properties"}:
        raw = raw["properties"]
        if raw is None:
            return None
    return _str_mapping(raw, "environmentContext", drop_nulls=True)


def _partition_payload(
    payload: Mapping[str, Any], event_type: str
) -> tuple[dict[str, str], list[str]]:
    keys = _str_mapping(_require(payload, "partitionKeys", event_type), "partitionKeys")
    values = _str_list(
        _require(payload, "partitionValues", event_type), "partitionValues"
    )
    if len(keys) != len(values):
        raise EventMappingError(
            f"{event_type} event has {len(keys)} partition key(s) "
            f"but {len(values)} partition value(s)."
        )
    return keys, values


def parse_listener_event(payload: Mapping[str, Any]) -> ListenerEvent:
    """
    Decode one listener notification into its typed event.

    Args:
        payload: JSON object as produced by the catalog listener
            (camelCase keys, e.g. `eventType`, `dbName`, `partitionKeys`).

    Returns:
        The event dataclass matching `eventType`.

    Raises:
        EventMappingError: If the payload is not an object, the event type is
            unknown, or the payload required by the declared kind is missing.
    """
    if not isinstance(payload, Mapping):
        raise EventMappingError("Listener event payload must be a JSON object.")

    raw_type = payload.get("eventType")
    try:
        event_type = EventType(raw_type)
    except ValueError as exc:
        raise EventMappingError(f"Unknown event type: {raw_type!r}") from exc

    db_name = payload.get("dbName")
    table_name = payload.get("tableName")
    if not db_name or not table_name:
        raise EventMappingError(
            f"{event_type.value} event must carry both 'dbName' and 'tableName'."
        )

    common: dict[str, Any] = {
        "event_type": event_type,
        "db_name": str(db_name),
        "table_name": str(table_name),
        "table_parameters": _str_mapping(
            payload.get("tableParameters") or {}, "tableParameters", drop_nulls=True
        ),
        "environment_context": _environment_context(payload),
    }
    kind = event_type.value

    if event_type in (EventType.ADD_PARTITION, EventType.DROP_PARTITION):
        keys, values = _partition_payload(payload, kind)
        cls = AddPartitionEvent if event_type == EventType.ADD_PARTITION else DropPartitionEvent
        return cls(**common, partition_keys=keys, partition_values=values)

    if event_type == EventType.ALTER_PARTITION:
        keys, values = _partition_payload(payload, kind)
        old_values = payload.get("oldPartitionValues")
        return AlterPartitionEvent(
            **common,
            partition_keys=keys,
            partition_values=values,
            old_partition_values=_str_list(old_values, "oldPartitionValues")
            if old_values is not None
            else None,
            partition_location=payload.get("partitionLocation"),
        )

    if event_type == EventType.INSERT:
        return InsertTableEvent(
            **common,
            partition_key_values=_str_mapping(
                _require(payload, "partitionKeyValues", kind), "partitionKeyValues"
            ),
            files=_str_list(payload.get("files") or [], "files"),
            file_checksums=_str_list(payload.get("fileChecksums") or [], "fileChecksums"),
        )

    if event_type == EventType.ALTER_TABLE:
        return AlterTableEvent(
            **common,
            table_location=payload.get("tableLocation"),
            old_table_location=payload.get("oldTableLocation"),
        )

    if event_type == EventType.DROP_TABLE:
        return DropTableEvent(**common)

    return CreateTableEvent(**common)
