"""
MQTT Publishers
==============

Public API
----------
    BasePublisher: Abstract publisher (connection management)
    DefectPublisher: Defect status telemetry publisher
"""

from .base import BasePublisher
from .defect import DefectPublisher

__all__ = [
    'BasePublisher',
    'DefectPublisher',
]
