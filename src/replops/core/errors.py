"""Error types raised by the replops core.

Transport errors (Kafka, OS) are not wrapped here; they propagate to the
caller unmodified.
"""

from __future__ import annotations


class ReplicationError(Exception):
    """Base class for errors raised while turning catalog events into replication events."""


class EventMappingError(ReplicationError):
    """Raised when a raw catalog event is malformed for its declared kind."""


class ConfigError(ReplicationError):
    """Raised when the replication configuration file is invalid."""


class CatalogLookupError(ReplicationError):
    """
    Raised when the source catalog cannot answer a table lookup.

    Attributes:
        database: Source database of the table that was looked up.
        table: Source table name that was looked up.
    """

    def __init__(self, database: str, table: str, reason: str | None = None):
        self.database = database
        self.table = table
        message = f"Could not find table {database}.{table}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ReaderClosedError(OSError):
    """Raised when reading from an event reader that has already been closed."""
