import pytest

from replops.core.config import DEFAULT_SOURCE_CATALOG, load_config, parse_config
from replops.core.errors import ConfigError

CONFIG_YAML = """
source-catalog:
  name: main
  uri: https://adb-1.azuredatabricks.net/
event-receiver:
  topic: metastore-events
  poll-timeout-seconds: 2.5
  configuration-properties:
    bootstrap.servers: localhost:9092
    group.id: replops
table-replications:
  - source-table: {database-name: sales, table-name: orders}
    replica-table: {database-name: replica_sales, table-name: orders_copy}
  - source-table: {database-name: sales, table-name: items}
    replica-table: {database-name: replica_sales}
"""


def test_load_config_from_file(tmp_path):
    path = tmp_path / "replication.yml"
    path.write_text(CONFIG_YAML)

    config = load_config(path)

    assert config.source_catalog.name == "main"
    assert config.source_catalog.uri == "https://adb-1.azuredatabricks.net/"
    assert config.event_receiver.topic == "metastore-events"
    assert config.event_receiver.poll_timeout_seconds == 2.5
    assert config.event_receiver.configuration_properties["group.id"] == "replops"

    orders = config.table_replications.resolve("sales", "orders")
    items = config.table_replications.resolve("sales", "items")
    assert (orders.replica_db_name, orders.replica_table_name) == ("replica_sales", "orders_copy")
    assert (items.replica_db_name, items.replica_table_name) == ("replica_sales", "items")
    assert config.table_replications.resolve("sales", "other") is None
    assert len(config.table_replications) == 2


def test_load_config_uses_env_path(tmp_path, monkeypatch):
    path = tmp_path / "replication.yml"
    path.write_text("event-receiver: {topic: events}\n")
    monkeypatch.setenv("REPLOPS_CONFIG", str(path))

    config = load_config()

    assert config.source_catalog.name == DEFAULT_SOURCE_CATALOG
    assert config.source_catalog.uri is None
    assert len(config.table_replications) == 0


def test_load_config_without_path(monkeypatch):
    monkeypatch.delenv("REPLOPS_CONFIG", raising=False)

    with pytest.raises(ConfigError, match="No configuration file"):
        load_config()


def test_load_config_reports_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("event-receiver: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(path)


def test_load_config_reports_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Could not read"):
        load_config(tmp_path / "missing.yml")


@pytest.mark.parametrize(
    "raw, message",
    [
        ("just a string", "YAML mapping"),
        ({}, "event-receiver"),
        ({"event-receiver": {}}, "topic"),
        ({"event-receiver": {"topic": "t", "poll-timeout-seconds": "soon"}}, "number"),
        ({"event-receiver": {"topic": "t"}, "table-replications": {"a": 1}}, "must be a list"),
        (
            {
                "event-receiver": {"topic": "t"},
                "table-replications": [{"source-table": {"database-name": "sales"}}],
            },
            "needs database-name and table-name",
        ),
    ],
)
def test_parse_config_rejects_invalid_structure(raw, message):
    with pytest.raises(ConfigError, match=message):
        parse_config(raw)
