"""
Broker Connection
=================

One paho client, its network thread and the "link is up" flag. Shared by the
telemetry publisher and the control listener so both handle the broker the
same way:

- connect() is bounded by a timeout and never raises; the detector keeps
  classifying without a broker
- paho reconnects on its own after a drop (back-off 1s .. 30s); the
  ``on_ready`` hook runs after every successful (re)connect
- close() is idempotent

Thread: paho callbacks run on the client's network thread.
"""

import threading
from typing import Callable, Optional

import paho.mqtt.client as mqtt

from .logging import LogEvent, StructuredLogger

RECONNECT_MIN_DELAY = 1
RECONNECT_MAX_DELAY = 30
KEEPALIVE_SECONDS = 60


class BrokerConnection:
    """
    Owns a paho ``mqtt.Client`` and tracks whether it is connected.

    Example:
        conn = BrokerConnection("localhost", 1883, "object_size_detector", logger)
        if conn.open(timeout=5.0):
            conn.client.publish("defects/counter", b'{"Defect": "false"}')
        conn.close()
    """

    def __init__(
        self,
        host: str,
        port: int,
        client_id: str,
        logger: StructuredLogger,
        username: Optional[str] = None,
        password: Optional[str] = None,
        on_ready: Optional[Callable[[mqtt.Client], None]] = None,
    ):
        self.host = host
        self.port = port
        self.client_id = client_id
        self.logger = logger
        self.on_ready = on_ready

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if username and password:
            self.client.username_pw_set(username, password)
        self.client.reconnect_delay_set(
            min_delay=RECONNECT_MIN_DELAY, max_delay=RECONNECT_MAX_DELAY
        )
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self._up = threading.Event()
        self._loop_running = False

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def open(self, timeout: float) -> bool:
        """
        Start the network loop and wait for the broker's CONNACK.

        Returns:
            True once connected, False on refusal, timeout or socket error
        """
        try:
            self.client.connect(self.host, self.port, keepalive=KEEPALIVE_SECONDS)
            self.client.loop_start()
            self._loop_running = True
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Cannot reach broker {self.address}",
                exc_info=e
            )
            return False

        if self._up.wait(timeout=timeout):
            return True

        self.logger.error(
            event=LogEvent.MQTT_CONNECTION_ERROR,
            message=f"No CONNACK from {self.address} within {timeout}s",
            metadata={'timeout': timeout}
        )
        return False

    def close(self) -> bool:
        """
        Stop the network loop and disconnect.

        Returns:
            False if the loop was not running (nothing to close)
        """
        if not self._loop_running:
            return False
        self._loop_running = False
        self._up.clear()
        self.client.loop_stop()
        self.client.disconnect()
        return True

    def is_up(self) -> bool:
        return self._up.is_set()

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            self._up.clear()
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Broker refused connection: {reason_code}",
                metadata={'client_id': self.client_id}
            )
            return

        if self.on_ready is not None:
            self.on_ready(client)
        self._up.set()
        self.logger.info(
            event=LogEvent.MQTT_CONNECTED,
            message=f"Connected to {self.address}",
            metadata={'client_id': self.client_id}
        )

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self._up.clear()
        self.logger.warning(
            event=LogEvent.MQTT_DISCONNECTED,
            message=f"Lost connection to {self.address}",
            metadata={'reason_code': str(reason_code)}
        )
