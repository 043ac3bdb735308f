"""Pull-based reader of canonical catalog events.

The reader owns its queue client. Each ``read()`` pulls at most one
message, acknowledges it, then normalizes it. Acknowledging before
normalizing gives at-most-once delivery: if normalization fails, or the
process dies before the caller has applied the returned event, that event
is gone from the queue. Callers that cannot tolerate this must not use
this reader as their only source of truth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from replops.core.errors import ReaderClosedError
from replops.core.events import CatalogEvent
from replops.core.listener import ListenerEvent
from replops.core.normalizer import normalize_event
from replops.core.oracle import PartitionedTableOracle
from replops.core.replication import TableReplications

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageEvent:
    """
    A decoded queue message.

    Attributes:
        event: Listener event carried by the message.
        handle: Transport-specific handle used to acknowledge the message.
    """

    event: ListenerEvent
    handle: Any = None


class MessageReader(Protocol):
    """Interface of the queue client the reader pulls from."""

    def read(self) -> MessageEvent | None:
        """Return the next message, or None if none is available."""
        ...

    def acknowledge(self, message: MessageEvent) -> None:
        """Remove a message from the queue."""
        ...

    def close(self) -> None:
        """Release the queue client. Failures surface as OSError."""
        ...


class CatalogEventReader:
    """Reads listener events from a queue and returns canonical events."""

    def __init__(
        self,
        message_reader: MessageReader,
        source_catalog_uri: str,
        oracle: PartitionedTableOracle,
        replications: TableReplications,
    ):
        self.message_reader = message_reader
        self.source_catalog_uri = source_catalog_uri
        self.oracle = oracle
        self.replications = replications
        self._closed = False

    def __enter__(self) -> CatalogEventReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying queue client. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        self.message_reader.close()

    def read(self) -> CatalogEvent | None:
        """
        Read and normalize the next event.

        Returns:
            The canonical event, or None when the queue is empty.

        Raises:
            ReaderClosedError: If the reader has been closed.
            CatalogLookupError: If a table alteration cannot be classified.
                The message has already been acknowledged.
            EventMappingError: If the event cannot be normalized. The message
                has already been acknowledged.
        """
        if self._closed:
            raise ReaderClosedError("Catalog event reader is closed.")

        message = self.message_reader.read()
        if message is None:
            return None

        listener_event = message.event
        self.message_reader.acknowledge(message)
        logger.debug(
            "Acknowledged %s event for %s.%s",
            listener_event.event_type.value,
            listener_event.db_name,
            listener_event.table_name,
        )

        try:
            event = normalize_event(
                listener_event,
                self.replications,
                self.oracle,
                self.source_catalog_uri,
            )
        except Exception:
            logger.warning(
                "Dropping acknowledged %s event for %s.%s: normalization failed",
                listener_event.event_type.value,
                listener_event.db_name,
                listener_event.table_name,
            )
            raise

        logger.debug(
            "Read %s event %s -> %s",
            event.event_type.value,
            event.qualified_table_name,
            event.replica_qualified_table_name,
        )
        return event
