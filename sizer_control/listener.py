"""
ControlListener - Inbound control channel for the size detector

Bounded Context: MQTT command reception
Responsibilities:
  - Keep a subscription on the control topic (renewed after every reconnect)
  - Turn each inbound MQTT message into a ControlMessage
  - Park it in a bounded in-process inbox

The listener never touches detector state. Whoever wants to act on commands
drains the inbox with get_message(); today the telemetry thread drains and
logs them on every tick.

Threading:
  - paho network thread: _on_message (enqueue only, never blocks)
  - any thread: get_message / pending / get_stats
"""

import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from sizer_mqtt.connection import BrokerConnection
from sizer_mqtt.logging import LogEvent, StructuredLogger

CONTROL_TOPIC = "defects/control"


@dataclass(frozen=True)
class ControlMessage:
    """One inbound control-channel message."""
    topic: str
    payload: bytes
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def text(self) -> str:
        """Payload decoded as UTF-8 (undecodable bytes replaced)."""
        return self.payload.decode('utf-8', errors='replace')


class ControlListener:
    """
    Subscriber for the control topic with a drop-if-full inbox.

    Example:
        listener = ControlListener(
            broker_host="localhost",
            logger=create_logger("control"),
        )
        listener.connect(timeout=5.0)
        ...
        message = listener.get_message(timeout=0.5)
        listener.disconnect()
    """

    def __init__(
        self,
        broker_host: str,
        logger: StructuredLogger,
        topic: str = CONTROL_TOPIC,
        broker_port: int = 1883,
        client_id: str = "object_size_detector_control",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 1,
        inbox_size: int = 64,
    ):
        self.topic = topic
        self.qos = qos
        self.logger = logger.bind(broker=f"{broker_host}:{broker_port}", topic=topic)
        self.connection = BrokerConnection(
            host=broker_host,
            port=broker_port,
            client_id=client_id,
            logger=self.logger,
            username=username,
            password=password,
            on_ready=self._subscribe,
        )
        self.connection.client.on_message = self._on_message

        self._inbox: "queue.Queue[ControlMessage]" = queue.Queue(maxsize=inbox_size)
        self._counts_lock = threading.Lock()
        self._received = 0
        self._dropped = 0

    @property
    def broker(self) -> str:
        return self.connection.address

    def connect(self, timeout: float = 5.0) -> bool:
        """Open the broker link and subscribe. Returns False instead of raising."""
        return self.connection.open(timeout)

    def disconnect(self) -> None:
        """Safe to call multiple times."""
        if self.connection.close():
            self.logger.info(
                event=LogEvent.MQTT_DISCONNECTED,
                message="Control channel closed",
                metadata=self.get_stats()
            )

    def is_connected(self) -> bool:
        return self.connection.is_up()

    def get_message(self, timeout: Optional[float] = None) -> Optional[ControlMessage]:
        """
        Take the oldest queued message.

        Args:
            timeout: Seconds to wait; None blocks, 0 polls

        Returns:
            The message, or None if nothing arrived in time
        """
        try:
            if timeout == 0:
                return self._inbox.get_nowait()
            return self._inbox.get(timeout=timeout)
        except queue.Empty:
            return None

    def pending(self) -> int:
        return self._inbox.qsize()

    def get_stats(self) -> dict:
        with self._counts_lock:
            return {
                'received': self._received,
                'dropped': self._dropped,
                'connected': self.connection.is_up(),
                'topic': self.topic,
                'broker': self.broker,
            }

    # ===== paho callbacks (network thread) =====

    def _subscribe(self, client) -> None:
        client.subscribe(self.topic, qos=self.qos)
        self.logger.info(
            event=LogEvent.CONTROL_SUBSCRIBED,
            message="Subscribed to control channel",
            metadata={'qos': self.qos}
        )

    def _on_message(self, client, userdata, msg) -> None:
        message = ControlMessage(topic=msg.topic, payload=bytes(msg.payload))

        try:
            self._inbox.put_nowait(message)
        except queue.Full:
            with self._counts_lock:
                self._dropped += 1
            self.logger.warning(
                event=LogEvent.CONTROL_MESSAGE_DROPPED,
                message="Control inbox full, message dropped",
                metadata={'received_on': msg.topic}
            )
            return

        with self._counts_lock:
            self._received += 1
        self.logger.info(
            event=LogEvent.CONTROL_MESSAGE_RECEIVED,
            message=f"Control message on {msg.topic}",
            metadata={'size': len(message.payload)}
        )
