import pytest

from replops.core.errors import CatalogLookupError
from replops.core.events import SOURCE_CATALOG_URI_PARAMETER, ReplicationMode
from replops.core.listener import (
    AddPartitionEvent,
    AlterPartitionEvent,
    AlterTableEvent,
    CreateTableEvent,
    DropPartitionEvent,
    DropTableEvent,
    EventType,
    InsertTableEvent,
)
from replops.core.normalizer import normalize_event
from replops.core.replication import TableReplication, TableReplications

URI = "https://adb-1.azuredatabricks.net"


class _Oracle:
    def __init__(self, partitioned: bool = True, error: Exception | None = None):
        self.partitioned = partitioned
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def is_partitioned(self, database: str, table: str) -> bool:
        self.calls.append((database, table))
        if self.error is not None:
            raise self.error
        return self.partitioned


def _normalize(event, replications=None, oracle=None):
    return normalize_event(
        event,
        replications or TableReplications(),
        oracle or _Oracle(),
        URI,
    )


def _all_events():
    common = {"db_name": "sales", "table_name": "orders"}
    keys = {"year": "string", "month": "string"}
    return [
        CreateTableEvent(EventType.CREATE_TABLE, **common),
        AddPartitionEvent(
            EventType.ADD_PARTITION, **common, partition_keys=keys, partition_values=["2020", "01"]
        ),
        AlterPartitionEvent(
            EventType.ALTER_PARTITION, **common, partition_keys=keys, partition_values=["2020", "02"]
        ),
        DropPartitionEvent(
            EventType.DROP_PARTITION, **common, partition_keys=keys, partition_values=["2020", "03"]
        ),
        InsertTableEvent(EventType.INSERT, **common, partition_key_values={"year": "2020"}),
        AlterTableEvent(EventType.ALTER_TABLE, **common, table_location="s3://a", old_table_location="s3://a"),
        DropTableEvent(EventType.DROP_TABLE, **common),
    ]


@pytest.mark.parametrize("event", _all_events(), ids=lambda e: e.event_type.value)
def test_common_invariants(event):
    result = _normalize(event)

    assert result.event_type == event.event_type
    assert len(result.partition_columns) == len(result.partition_values)
    assert result.delete_data is (
        event.event_type in (EventType.DROP_PARTITION, EventType.DROP_TABLE)
    )
    assert result.replica_db_name == "sales"
    assert result.replica_table_name == "orders"
    assert result.parameters[SOURCE_CATALOG_URI_PARAMETER] == URI


def test_replica_names_come_from_mapping():
    replications = TableReplications(
        [TableReplication("sales", "orders", "replica_sales", "orders_copy")]
    )

    mapped = _normalize(DropTableEvent(EventType.DROP_TABLE, "sales", "orders"), replications)
    unmapped = _normalize(DropTableEvent(EventType.DROP_TABLE, "sales", "items"), replications)

    assert (mapped.replica_db_name, mapped.replica_table_name) == ("replica_sales", "orders_copy")
    assert (mapped.db_name, mapped.table_name) == ("sales", "orders")
    assert (unmapped.replica_db_name, unmapped.replica_table_name) == ("sales", "items")


def test_parameters_are_copied_and_uri_injected():
    event = CreateTableEvent(
        EventType.CREATE_TABLE,
        "sales",
        "orders",
        table_parameters={"owner": "etl"},
        environment_context={"user": "hive"},
    )

    result = _normalize(event)

    assert dict(result.parameters) == {"owner": "etl", SOURCE_CATALOG_URI_PARAMETER: URI}
    assert dict(result.environment_context) == {"user": "hive"}


def test_missing_environment_context_stays_absent():
    result = _normalize(CreateTableEvent(EventType.CREATE_TABLE, "sales", "orders"))

    assert result.environment_context is None


def test_empty_environment_context_is_kept():
    event = CreateTableEvent(EventType.CREATE_TABLE, "sales", "orders", environment_context={})

    assert _normalize(event).environment_context == {}


def test_partition_events_use_key_order_and_values_verbatim():
    event = AddPartitionEvent(
        EventType.ADD_PARTITION,
        "sales",
        "orders",
        partition_keys={"year": "string", "month": "string"},
        partition_values=["2020", "01"],
    )

    result = _normalize(event)

    assert result.partition_columns == ("year", "month")
    assert result.partition_values == ("2020", "01")
    assert result.delete_data is False


def test_drop_partition_deletes_data():
    event = DropPartitionEvent(
        EventType.DROP_PARTITION,
        "sales",
        "orders",
        partition_keys={"dt": "string"},
        partition_values=["2021-01-01"],
    )

    result = _normalize(event)

    assert result.partition_columns == ("dt",)
    assert result.partition_values == ("2021-01-01",)
    assert result.delete_data is True


@pytest.mark.parametrize(
    "mapping",
    [{"year": "2020", "month": "01"}, {"month": "01", "year": "2020"}],
)
def test_insert_keeps_columns_and_values_aligned(mapping):
    event = InsertTableEvent(EventType.INSERT, "sales", "orders", partition_key_values=mapping)

    result = _normalize(event)

    assert sorted(result.partition_columns) == ["month", "year"]
    assert dict(zip(result.partition_columns, result.partition_values)) == {
        "year": "2020",
        "month": "01",
    }


def test_insert_into_unpartitioned_table_has_no_partitions():
    event = InsertTableEvent(EventType.INSERT, "sales", "orders", partition_key_values={})

    result = _normalize(event)

    assert result.partition_columns == ()
    assert result.partition_values == ()


@pytest.mark.parametrize(
    "location, old_location, partitioned, expected",
    [
        ("s3://a", "s3://a", True, ReplicationMode.METADATA_UPDATE),
        ("s3://a", "s3://a", False, ReplicationMode.UNSPECIFIED),
        ("s3://a", "s3://b", True, ReplicationMode.UNSPECIFIED),
        (None, None, True, ReplicationMode.UNSPECIFIED),
        ("s3://a", None, True, ReplicationMode.UNSPECIFIED),
        (None, "s3://a", True, ReplicationMode.UNSPECIFIED),
    ],
)
def test_alter_table_replication_mode(location, old_location, partitioned, expected):
    event = AlterTableEvent(
        EventType.ALTER_TABLE,
        "sales",
        "orders",
        table_location=location,
        old_table_location=old_location,
    )

    result = _normalize(event, oracle=_Oracle(partitioned=partitioned))

    assert result.replication_mode == expected
    assert result.delete_data is False


def test_alter_table_asks_oracle_about_source_table():
    oracle = _Oracle()
    replications = TableReplications(
        [TableReplication("sales", "orders", "replica_sales", "orders_copy")]
    )
    event = AlterTableEvent(
        EventType.ALTER_TABLE, "sales", "orders", table_location="s3://a", old_table_location="s3://a"
    )

    _normalize(event, replications, oracle)

    assert oracle.calls == [("sales", "orders")]


def test_oracle_not_consulted_for_other_events():
    oracle = _Oracle(error=AssertionError("should not be called"))

    for event in _all_events():
        if event.event_type != EventType.ALTER_TABLE:
            _normalize(event, oracle=oracle)

    assert oracle.calls == []


def test_alter_table_propagates_oracle_failure():
    event = AlterTableEvent(
        EventType.ALTER_TABLE, "sales", "orders", table_location="s3://a", old_table_location="s3://a"
    )
    oracle = _Oracle(error=CatalogLookupError("sales", "orders"))

    with pytest.raises(CatalogLookupError, match="sales.orders"):
        _normalize(event, oracle=oracle)


@pytest.mark.parametrize(
    "location, old_location",
    [("s3://a", "s3://b"), (None, None), ("s3://a", None)],
)
def test_alter_table_oracle_failure_is_fatal_whatever_the_locations(location, old_location):
    event = AlterTableEvent(
        EventType.ALTER_TABLE,
        "sales",
        "orders",
        table_location=location,
        old_table_location=old_location,
    )
    oracle = _Oracle(error=CatalogLookupError("sales", "orders", "table does not exist"))

    with pytest.raises(CatalogLookupError, match="does not exist"):
        _normalize(event, oracle=oracle)

    assert oracle.calls == [("sales", "orders")]


def test_alter_table_consults_oracle_when_locations_are_missing():
    oracle = _Oracle(partitioned=True)
    event = AlterTableEvent(EventType.ALTER_TABLE, "sales", "orders")

    result = _normalize(event, oracle=oracle)

    assert oracle.calls == [("sales", "orders")]
    assert result.replication_mode == ReplicationMode.UNSPECIFIED
