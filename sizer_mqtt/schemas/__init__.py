"""
MQTT message schemas for the size detector.

Public API
----------
    DefectStatusMessage: Telemetry payload {"Defect": "true"|"false"}
    TELEMETRY_TOPIC: Fixed telemetry topic name
"""

from .defect import DefectStatusMessage, TELEMETRY_TOPIC

__all__ = [
    'DefectStatusMessage',
    'TELEMETRY_TOPIC',
]
