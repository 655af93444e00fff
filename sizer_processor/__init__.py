"""
sizer_processor - Detection service for the object size detector

Reads a video source, classifies passing parts by silhouette size and
publishes the defect status via MQTT.

Architecture:
- DetectorService: Main orchestrator
- FrameRelay: Single-slot frame hand-off
- ShutdownCoordinator: Cooperative stop + signal handling
- DetectorConfig: Configuration management

Threading Model:
- Main Thread (acquisition + display)
- Detection Thread (segmentation + classification)
- Telemetry Thread (periodic MQTT publish)
- paho-mqtt network threads
"""

from sizer_processor.config import ConfigError, DetectorConfig, MQTTConfig
from sizer_processor.relay import FrameRelay
from sizer_processor.shutdown import ShutdownCoordinator
from sizer_processor.source import VideoSourceError, open_capture, frame_delay_ms
from sizer_processor.service import DetectorService

__all__ = [
    "ConfigError",
    "DetectorConfig",
    "MQTTConfig",
    "FrameRelay",
    "ShutdownCoordinator",
    "VideoSourceError",
    "open_capture",
    "frame_delay_ms",
    "DetectorService",
]
