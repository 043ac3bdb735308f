from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from confluent_kafka import Consumer, KafkaError, KafkaException

from replops.core.errors import EventMappingError
from replops.core.listener import parse_listener_event
from replops.core.reader import MessageEvent

logger = logging.getLogger(__name__)


class KafkaMessageReader:
    """
    Message reader over a Kafka topic of catalog listener notifications.

    Offsets are committed only through ``acknowledge``; auto-commit is
    always disabled.
    """

    def __init__(self, consumer: Consumer, topic: str, poll_timeout: float = 1.0):
        self.consumer = consumer
        self.topic = topic
        self.poll_timeout = poll_timeout
        self.consumer.subscribe([topic])
        logger.info("Subscribed to topic %s", topic)

    @classmethod
    def from_properties(
        cls,
        topic: str,
        properties: Mapping[str, Any],
        poll_timeout: float = 1.0,
    ) -> KafkaMessageReader:
        """Create a consumer from librdkafka configuration properties."""
        config = dict(properties)
        config["enable.auto.commit"] = False
        return cls(Consumer(config), topic, poll_timeout=poll_timeout)

    def read(self) -> MessageEvent | None:
        """
        Poll for one message.

        Returns None when nothing arrived within the poll timeout or the
        partition end was reached.

        Raises:
            KafkaException: For broker or consumer errors.
            EventMappingError: If the message value is not a listener event.
        """
        msg = self.consumer.poll(timeout=self.poll_timeout)
        if msg is None:
            return None
        if msg.error():
            if msg.error().code() == KafkaError._PARTITION_EOF:
                return None
            raise KafkaException(msg.error())

        value = msg.value()
        try:
            payload = json.loads(value.decode("utf-8") if isinstance(value, bytes) else value)
        except (TypeError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EventMappingError(
                f"Message {msg.topic()}[{msg.partition()}]@{msg.offset()} "
                f"is not valid JSON: {exc}"
            ) from exc

        return MessageEvent(event=parse_listener_event(payload), handle=msg)

    def acknowledge(self, message: MessageEvent) -> None:
        """Synchronously commit the offset of the given message."""
        self.consumer.commit(message=message.handle, asynchronous=False)

    def close(self) -> None:
        try:
            self.consumer.close()
        except (KafkaException, RuntimeError) as exc:
            raise OSError(f"Could not close Kafka consumer: {exc}") from exc
