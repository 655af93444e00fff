"""
Telemetry Log Events
====================

Event names written into the ``event`` field of every structured log line
produced by the MQTT layer.

Naming:
    <area>.<subject>[.<outcome>]

    area: mqtt (broker link), telemetry (defect status out),
          control (commands in), error (anything that failed)

Filtering a log file for the defect stream:

    jq 'select(.event == "telemetry.published") | .metadata.defect' logs/detector.log
"""

from enum import Enum


class LogEvent(str, Enum):
    """Typed event names for StructuredLogger."""

    # broker link
    MQTT_CONNECTED = "mqtt.connected"
    MQTT_DISCONNECTED = "mqtt.disconnected"
    MQTT_PUBLISH_SUCCESS = "mqtt.publish.success"
    MQTT_PUBLISH_FAILED = "mqtt.publish.failed"

    # defect status going out on defects/counter
    TELEMETRY_SERIALIZED = "telemetry.serialized"
    TELEMETRY_PUBLISHED = "telemetry.published"

    # commands coming in on the control topic
    CONTROL_SUBSCRIBED = "control.subscribed"
    CONTROL_MESSAGE_RECEIVED = "control.message.received"
    CONTROL_MESSAGE_DROPPED = "control.message.dropped"

    # failures
    SERIALIZATION_ERROR = "error.serialization"
    MQTT_CONNECTION_ERROR = "error.mqtt_connection"
    MQTT_PUBLISH_ERROR = "error.mqtt_publish"

    @property
    def area(self) -> str:
        """Leading segment of the event name, e.g. ``"telemetry"``."""
        return self.value.split(".", 1)[0]

    @property
    def is_error(self) -> bool:
        return self.area == "error"
