"""
Configuration schema for the object size detector.

Two sources are combined at startup and frozen afterwards:

- the startup config file (JSON; read with the YAML loader, so YAML works
  too) which names the video source and, optionally, the MQTT broker
- command-line thresholds and telemetry rate

The MQTT_SERVER / MQTT_CLIENT_ID / MQTT_USERNAME / MQTT_PASSWORD environment
variables override the file's broker settings.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple
from urllib.parse import urlparse

import yaml

from sizer_control import CONTROL_TOPIC
from sizer_mqtt.schemas import TELEMETRY_TOPIC

DEFAULT_CONFIG_PATH = Path("resources/config.json")


class ConfigError(Exception):
    """Startup configuration is missing or invalid."""


@dataclass(frozen=True)
class MQTTConfig:
    """MQTT broker configuration."""

    broker: str = "localhost"
    port: int = 1883
    client_id: str = "object_size_detector"
    username: Optional[str] = None
    password: Optional[str] = None
    qos: int = 0  # telemetry is fire-and-forget

    telemetry_topic: str = TELEMETRY_TOPIC
    control_topic: str = CONTROL_TOPIC

    def __post_init__(self):
        """Validate MQTT configuration."""
        if not self.broker:
            raise ValueError("MQTT broker cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ValueError(
                f"MQTT port must be in [1, 65535], got {self.port}"
            )

        if self.qos not in {0, 1, 2}:
            raise ValueError(
                f"MQTT QoS must be 0, 1, or 2, got {self.qos}"
            )

    def with_env(self, environ: Mapping[str, str] = os.environ) -> "MQTTConfig":
        """
        Apply MQTT_* environment overrides.

        MQTT_SERVER accepts ``host``, ``host:port`` or ``tcp://host:port``.
        """
        overrides = {}

        server = environ.get("MQTT_SERVER")
        if server:
            host, port = parse_server(server, default_port=self.port)
            overrides["broker"] = host
            overrides["port"] = port

        for env_name, attr in (
            ("MQTT_CLIENT_ID", "client_id"),
            ("MQTT_USERNAME", "username"),
            ("MQTT_PASSWORD", "password"),
        ):
            if environ.get(env_name):
                overrides[attr] = environ[env_name]

        return replace(self, **overrides) if overrides else self


def parse_server(server: str, default_port: int = 1883) -> Tuple[str, int]:
    """Split an MQTT server string into (host, port)."""
    if "://" not in server:
        server = f"tcp://{server}"
    parsed = urlparse(server)
    if not parsed.hostname:
        raise ValueError(f"Invalid MQTT server: {server!r}")
    return parsed.hostname, parsed.port or default_port


@dataclass(frozen=True)
class DetectorConfig:
    """
    Main configuration for the detector.

    Immutable after construction (frozen dataclass).
    """

    video_source: str
    min_area: int = 20000
    max_area: int = 30000
    publish_interval_seconds: int = 1

    frame_size_wh: Tuple[int, int] = (960, 540)
    display: bool = True

    mqtt_config: MQTTConfig = field(default_factory=MQTTConfig)

    def __post_init__(self):
        """Validate detector configuration."""
        if not self.video_source:
            raise ValueError("video_source cannot be empty")

        if self.min_area < 0:
            raise ValueError(f"min_area must be >= 0, got {self.min_area}")

        if self.max_area < self.min_area:
            raise ValueError(
                f"max_area ({self.max_area}) must be >= min_area ({self.min_area})"
            )

        if self.publish_interval_seconds < 1:
            raise ValueError(
                f"publish_interval_seconds must be >= 1, got {self.publish_interval_seconds}"
            )

        width, height = self.frame_size_wh
        if width <= 0 or height <= 0:
            raise ValueError(
                f"frame_size_wh must have positive dimensions, got {self.frame_size_wh}"
            )

    @classmethod
    def from_file(
        cls,
        config_path: Path,
        min_area: int = 20000,
        max_area: int = 30000,
        publish_interval_seconds: int = 1,
        display: bool = True,
        environ: Mapping[str, str] = os.environ,
    ) -> "DetectorConfig":
        """
        Load the startup config file and merge the CLI values.

        Example file:
            {
              "inputs": [{"video": "resources/conveyor.mp4"}],
              "mqtt": {"broker": "localhost", "port": 1883}
            }

        Raises:
            ConfigError: If the file is missing, unparsable or invalid
        """
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {path}: {e}")

        try:
            video_source = str(data["inputs"][0]["video"])
        except (KeyError, IndexError, TypeError):
            raise ConfigError(f"{path}: missing required key inputs[0].video")

        try:
            mqtt_config = MQTTConfig(**(data.get("mqtt") or {})).with_env(environ)
            return cls(
                video_source=video_source,
                min_area=min_area,
                max_area=max_area,
                publish_interval_seconds=publish_interval_seconds,
                display=display,
                mqtt_config=mqtt_config,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{path}: {e}")
