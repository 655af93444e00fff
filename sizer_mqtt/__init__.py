"""
Size Detector MQTT Communication Package
========================================

Bounded Context: Telemetry protocol for the object size detector

Architecture:
- schemas/: Immutable telemetry payloads
- connection.py: Broker link shared by publisher and control listener
- publishers/: Message producers (DefectPublisher)
- logging/: Structured JSON logging for observability

Example:
    >>> from sizer_mqtt import DefectPublisher, DefectStatusMessage, create_logger
    >>>
    >>> publisher = DefectPublisher(
    ...     broker_host="localhost",
    ...     logger=create_logger("telemetry"),
    ... )
    >>> publisher.connect()
    >>> publisher.publish_status(DefectStatusMessage(defect=True))
"""

__version__ = "1.0.0"

from .schemas import DefectStatusMessage, TELEMETRY_TOPIC
from .connection import BrokerConnection
from .publishers import BasePublisher, DefectPublisher
from .logging import LogEvent, StructuredLogger, create_logger

__all__ = [
    '__version__',
    'DefectStatusMessage',
    'TELEMETRY_TOPIC',
    'BrokerConnection',
    'BasePublisher',
    'DefectPublisher',
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
