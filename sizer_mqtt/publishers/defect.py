"""
Defect Status Publisher
=======================

Bounded Context: Telemetry Production

Message Flow:
    StatusStore → DefectStatusMessage → DefectPublisher → MQTT Broker

Example:
    >>> from sizer_mqtt.publishers import DefectPublisher
    >>> from sizer_mqtt.logging import create_logger
    >>>
    >>> publisher = DefectPublisher(
    ...     broker_host="localhost",
    ...     logger=create_logger("telemetry"),
    ... )
    >>> publisher.connect()
    >>> publisher.publish_status(DefectStatusMessage(defect=False))
"""

from typing import Dict, Optional
from .base import BasePublisher
from ..schemas import DefectStatusMessage, TELEMETRY_TOPIC
from ..logging import StructuredLogger, LogEvent


class DefectPublisher(BasePublisher):
    """Publisher for the periodic defect status telemetry."""

    def __init__(
        self,
        broker_host: str,
        logger: StructuredLogger,
        topic: str = TELEMETRY_TOPIC,
        broker_port: int = 1883,
        client_id: str = "object_size_detector",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0
    ):
        super().__init__(
            broker_host=broker_host,
            broker_port=broker_port,
            topic=topic,
            client_id=client_id,
            logger=logger,
            username=username,
            password=password,
            qos=qos
        )

    def format_message(self, status_msg: DefectStatusMessage) -> Dict[str, str]:
        """
        Format DefectStatusMessage to JSON-compatible dict.

        Raises:
            ValueError: If status_msg cannot be serialized
        """
        try:
            formatted = status_msg.to_dict()
        except Exception as e:
            self.logger.error(
                event=LogEvent.SERIALIZATION_ERROR,
                message="Failed to serialize defect status",
                exc_info=e
            )
            raise ValueError(f"Failed to format defect status: {e}")

        self.logger.debug(
            event=LogEvent.TELEMETRY_SERIALIZED,
            message="Serialized defect status",
            metadata=formatted
        )
        return formatted

    def publish_status(self, status_msg: DefectStatusMessage) -> bool:
        """
        Publish one telemetry tick.

        Returns:
            True if published successfully, False otherwise. Failures are
            logged and never raised.
        """
        try:
            success = self.publish(self.format_message(status_msg))
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_PUBLISH_ERROR,
                message="Error publishing defect status",
                exc_info=e
            )
            return False

        if success:
            self.logger.info(
                event=LogEvent.TELEMETRY_PUBLISHED,
                message="Published defect status",
                metadata={'defect': status_msg.defect}
            )
        return success
