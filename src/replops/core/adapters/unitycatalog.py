from __future__ import annotations

from databricks.sdk import WorkspaceClient

from replops.core.uc import UCTable


class UnityCatalogAdapter:
    """Adapter around Databricks SDK Unity Catalog table APIs."""

    def __init__(self, client: WorkspaceClient) -> None:
        self.client = client

    def get_table(self, full_name: str) -> UCTable:
        """
        Fetch a table by `catalog.schema.table` full name.

        SDK errors (NotFound, PermissionDenied, ...) are raised unchanged.
        """
        t = self.client.tables.get(full_name=full_name)
        # ColumnInfo.partition_index is None for non-partition columns
        partition_columns = sorted(
            (c for c in (t.columns or []) if c.partition_index is not None),
            key=lambda c: c.partition_index,
        )
        table_type = getattr(t, "table_type", None)
        return UCTable(
            full_name=getattr(t, "full_name", None) or full_name,
            table_type=str(table_type.value if hasattr(table_type, "value") else table_type)
            if table_type
            else None,
            storage_location=getattr(t, "storage_location", None),
            partition_columns=tuple(c.name for c in partition_columns),
        )
