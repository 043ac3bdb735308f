"""Output formatting utilities for the CLI."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from replops.core.events import CatalogEvent, ReplicationMode

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


def configure_logging(verbose: bool = False) -> None:
    """Route stdlib logging through Rich on the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def event_to_dict(event: CatalogEvent) -> dict[str, Any]:
    """Return a JSON-serializable view of a catalog event."""
    return {
        "eventType": event.event_type.value,
        "dbName": event.db_name,
        "tableName": event.table_name,
        "replicaDbName": event.replica_db_name,
        "replicaTableName": event.replica_table_name,
        "parameters": dict(event.parameters),
        "environmentContext": dict(event.environment_context)
        if event.environment_context is not None
        else None,
        "partitionColumns": list(event.partition_columns),
        "partitionValues": list(event.partition_values),
        "deleteData": event.delete_data,
        "replicationMode": event.replication_mode.value,
    }


def _partition_spec(event: CatalogEvent) -> str:
    return "/".join(
        f"{c}={v}" for c, v in zip(event.partition_columns, event.partition_values)
    )


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def event_json(self, event: CatalogEvent) -> None:
        """Print an event as a single JSON line."""
        console.print_json(data=event_to_dict(event), indent=None)

    def event_line(self, event: CatalogEvent) -> None:
        """
        Print a one-line summary of a catalog event:
        `<type> <source> -> <replica> [partition] [flags]`.
        """
        flags = []
        if event.delete_data:
            flags.append("[err]delete-data[/]")
        if event.replication_mode == ReplicationMode.METADATA_UPDATE:
            flags.append("[ok]metadata-update[/]")
        spec = escape(_partition_spec(event))
        parts = [
            f"[title]{event.event_type.value:<15}[/]",
            escape(event.qualified_table_name),
            "[meta]->[/]",
            escape(event.replica_qualified_table_name),
        ]
        if spec:
            parts.append(f"[meta]{spec}[/]")
        parts.extend(flags)
        console.print(" ".join(parts))

    def replications_table(
        self, replications: Iterable[Any], title: str = "Table replications"
    ) -> None:
        """
        Expects objects with .source_db_name .source_table_name
        .replica_db_name .replica_table_name (like replops.core.replication.TableReplication)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Source table", style="ok")
        t.add_column("Replica table")

        for r in replications:
            t.add_row(
                f"{r.source_db_name}.{r.source_table_name}",
                f"{r.replica_db_name}.{r.replica_table_name}",
            )

        console.print(t)


out = Out()
