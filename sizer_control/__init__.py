"""
sizer_control - Inbound control channel for the size detector

Bounded Context: MQTT-based control messages
Responsibilities:
  - Subscribe to the control topic
  - Log every inbound message
  - Queue messages for whoever consumes them (no state mutation)
"""

from .listener import ControlListener, ControlMessage, CONTROL_TOPIC

__all__ = [
    "ControlListener",
    "ControlMessage",
    "CONTROL_TOPIC",
]
