"""Partitioned-table lookups against the source catalog.

Only table alterations need this: whether the table has partition keys
decides if an alteration can be replicated as a metadata-only update.
The lookup is a blocking remote call.
"""

from __future__ import annotations

import logging
from typing import Protocol

from databricks.sdk.errors import DatabricksError, NotFound

from replops.core.errors import CatalogLookupError
from replops.core.uc import UCTable

logger = logging.getLogger(__name__)


class PartitionedTableOracle(Protocol):
    """Interface for answering whether a source table is partitioned."""

    def is_partitioned(self, database: str, table: str) -> bool:
        """
        Return True if the source table has at least one partition key.

        Raises:
            CatalogLookupError: If the table cannot be found or the catalog
                cannot be reached.
        """
        ...


class TableLookupAdapter(Protocol):
    """Subset of the Unity Catalog adapter used by the oracle."""

    def get_table(self, full_name: str) -> UCTable:
        ...


class CatalogPartitionOracle:
    """
    Partitioned-table oracle backed by Unity Catalog.

    Source events only name a database and a table, so the catalog that
    holds them (e.g. ``hive_metastore``) is fixed per oracle.
    """

    def __init__(self, adapter: TableLookupAdapter, catalog: str):
        self.adapter = adapter
        self.catalog = catalog

    def is_partitioned(self, database: str, table: str) -> bool:
        full_name = f"{self.catalog}.{database}.{table}"
        try:
            source_table = self.adapter.get_table(full_name)
        except NotFound as exc:
            raise CatalogLookupError(database, table, "table does not exist") from exc
        except DatabricksError as exc:
            raise CatalogLookupError(database, table, str(exc)) from exc

        logger.debug(
            "Table %s partition columns: %s", full_name, list(source_table.partition_columns)
        )
        return source_table.is_partitioned
