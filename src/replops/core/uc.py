"""Core domain models for Unity Catalog.

These models represent Unity Catalog entities in a simple, immutable form.
They are intentionally free of Databricks SDK types and UI/CLI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UCTable:
    """Lightweight representation of a Unity Catalog table."""

    full_name: str
    table_type: str | None = None
    storage_location: str | None = None
    partition_columns: tuple[str, ...] = ()

    @property
    def is_partitioned(self) -> bool:
        return bool(self.partition_columns)
