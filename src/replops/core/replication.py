"""Source to replica table mapping.

The mapping is assembled once from configuration and then only read.
A missing entry means the table is replicated under its source names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class TableReplication:
    """
    One configured replication override.

    Attributes:
        source_db_name: Database name in the source catalog.
        source_table_name: Table name in the source catalog.
        replica_db_name: Database name to use in the replica catalog.
        replica_table_name: Table name to use in the replica catalog.
    """

    source_db_name: str
    source_table_name: str
    replica_db_name: str
    replica_table_name: str


class TableReplications:
    """Read-only lookup of replication overrides keyed by source (database, table)."""

    def __init__(self, replications: Iterable[TableReplication] = ()):
        self._by_source: dict[tuple[str, str], TableReplication] = {
            (r.source_db_name, r.source_table_name): r for r in replications
        }

    def resolve(self, database: str, table: str) -> TableReplication | None:
        """Return the override for a source table, or None if none is configured."""
        return self._by_source.get((database, table))

    def __iter__(self) -> Iterator[TableReplication]:
        return iter(self._by_source.values())

    def __len__(self) -> int:
        return len(self._by_source)
