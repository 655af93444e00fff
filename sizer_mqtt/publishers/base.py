"""
Base MQTT Publisher
===================

Turns a payload dict into one JSON publish on a fixed topic.

    BasePublisher (abstract: format_message)
        ↓
    DefectPublisher

The broker link itself (client, CONNACK wait, reconnects) lives in
BrokerConnection; this layer adds the topic, QoS, JSON encoding and
success/failure counters. Publishing while the link is down is a counted
failure, not an exception: telemetry is best-effort and the next tick simply
tries again.
"""

import json
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from ..connection import BrokerConnection
from ..logging import LogEvent, StructuredLogger


class BasePublisher(ABC):
    """
    Abstract JSON publisher bound to one topic.

    Attributes:
        topic: Topic every message goes to
        qos: MQTT QoS used for every publish
        connection: Underlying BrokerConnection

    Thread Safety:
        publish() may be called from any thread; counters sit behind a lock.
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int,
        topic: str,
        client_id: str,
        logger: StructuredLogger,
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0
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
        )

        self._counts_lock = threading.Lock()
        self._sent = 0
        self._failed = 0

    @property
    def broker(self) -> str:
        return self.connection.address

    def connect(self, timeout: float = 10.0) -> bool:
        """Open the broker link. Returns False (logged) instead of raising."""
        return self.connection.open(timeout)

    def disconnect(self) -> None:
        if self.connection.close():
            self.logger.info(
                event=LogEvent.MQTT_DISCONNECTED,
                message="Publisher disconnected",
                metadata={'message_count': self._sent}
            )

    def is_connected(self) -> bool:
        return self.connection.is_up()

    @abstractmethod
    def format_message(self, *args, **kwargs) -> Dict[str, Any]:
        """Build the JSON-serializable payload for one publish."""

    def publish(self, message_data: Dict[str, Any], retain: bool = False) -> bool:
        """
        Publish ``message_data`` as UTF-8 JSON on :attr:`topic`.

        Returns:
            True if paho accepted the message for sending
        """
        if not self.connection.is_up():
            return self._fail(
                LogEvent.MQTT_PUBLISH_FAILED, "Broker link down, message not sent"
            )

        try:
            info = self.connection.client.publish(
                topic=self.topic,
                payload=json.dumps(message_data).encode('utf-8'),
                qos=self.qos,
                retain=retain
            )
        except Exception as e:
            return self._fail(LogEvent.MQTT_PUBLISH_ERROR, "Publish raised", exc_info=e)

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            return self._fail(
                LogEvent.MQTT_PUBLISH_FAILED, f"Publish rejected: {mqtt.error_string(info.rc)}"
            )

        with self._counts_lock:
            self._sent += 1
            sent = self._sent
        self.logger.debug(
            event=LogEvent.MQTT_PUBLISH_SUCCESS,
            message="Message handed to paho",
            metadata={'message_count': sent, 'qos': self.qos}
        )
        return True

    def _fail(
        self,
        event: LogEvent,
        message: str,
        exc_info: Optional[BaseException] = None
    ) -> bool:
        with self._counts_lock:
            self._failed += 1
        if exc_info is not None:
            self.logger.error(event=event, message=message, exc_info=exc_info)
        else:
            self.logger.warning(event=event, message=message)
        return False

    def get_stats(self) -> Dict[str, Any]:
        with self._counts_lock:
            return {
                'message_count': self._sent,
                'failure_count': self._failed,
                'connected': self.connection.is_up(),
                'topic': self.topic,
                'broker': self.broker,
            }
