"""
Startup configuration, video source helpers and the command line.
"""

import json
from pathlib import Path

import cv2
import pytest

import run_detector
from fakes import FakeCapture
from sizer_processor import ConfigError, DetectorConfig, MQTTConfig, frame_delay_ms
from sizer_processor.config import DEFAULT_CONFIG_PATH, parse_server
from sizer_processor.source import DEFAULT_DELAY_MS, resolve_source


def write_config(tmp_path: Path, data, name="config.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


# ─────────────────────────────────────────────────────────────────────────────
# DetectorConfig.from_file
# ─────────────────────────────────────────────────────────────────────────────

def test_from_file_reads_video_source_and_cli_values(tmp_path):
    path = write_config(tmp_path, {"inputs": [{"video": "resources/belt.mp4"}]})

    config = DetectorConfig.from_file(
        path, min_area=18000, max_area=32000, publish_interval_seconds=2, environ={}
    )

    assert config.video_source == "resources/belt.mp4"
    assert (config.min_area, config.max_area) == (18000, 32000)
    assert config.publish_interval_seconds == 2
    assert config.frame_size_wh == (960, 540)
    assert config.mqtt_config == MQTTConfig()


def test_from_file_numeric_video_source_is_kept_as_string(tmp_path):
    path = write_config(tmp_path, {"inputs": [{"video": 0}]})

    assert DetectorConfig.from_file(path, environ={}).video_source == "0"


def test_from_file_reads_mqtt_section(tmp_path):
    path = write_config(tmp_path, {
        "inputs": [{"video": "0"}],
        "mqtt": {"broker": "broker.local", "port": 8883, "client_id": "line-3"},
    })

    mqtt_config = DetectorConfig.from_file(path, environ={}).mqtt_config

    assert mqtt_config.broker == "broker.local"
    assert mqtt_config.port == 8883
    assert mqtt_config.client_id == "line-3"
    assert mqtt_config.telemetry_topic == "defects/counter"
    assert mqtt_config.control_topic == "defects/control"


def test_from_file_accepts_yaml(tmp_path):
    path = write_config(tmp_path, "inputs:\n  - video: cam.mp4\n", name="config.yaml")

    assert DetectorConfig.from_file(path, environ={}).video_source == "cam.mp4"


def test_shipped_config_is_valid():
    config = DetectorConfig.from_file(Path(__file__).parent / DEFAULT_CONFIG_PATH, environ={})

    assert config.video_source.endswith(".mp4")


def test_missing_file_is_a_config_error(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        DetectorConfig.from_file(tmp_path / "nope.json", environ={})


@pytest.mark.parametrize("data", [
    {},
    {"inputs": []},
    {"inputs": [{"camera": "0"}]},
    "[1, 2, 3]",
    "",
])
def test_missing_video_key_is_a_config_error(tmp_path, data):
    path = write_config(tmp_path, data)

    with pytest.raises(ConfigError, match="inputs"):
        DetectorConfig.from_file(path, environ={})


def test_unparsable_file_is_a_config_error(tmp_path):
    path = write_config(tmp_path, '{"inputs": [', name="broken.json")

    with pytest.raises(ConfigError):
        DetectorConfig.from_file(path, environ={})


@pytest.mark.parametrize("kwargs", [
    {"min_area": 30000, "max_area": 20000},
    {"min_area": -1},
    {"publish_interval_seconds": 0},
])
def test_invalid_cli_values_are_config_errors(tmp_path, kwargs):
    path = write_config(tmp_path, {"inputs": [{"video": "0"}]})

    with pytest.raises(ConfigError):
        DetectorConfig.from_file(path, environ={}, **kwargs)


def test_unknown_mqtt_key_is_a_config_error(tmp_path):
    path = write_config(tmp_path, {"inputs": [{"video": "0"}], "mqtt": {"host": "x"}})

    with pytest.raises(ConfigError):
        DetectorConfig.from_file(path, environ={})


def test_equal_min_and_max_area_is_allowed():
    config = DetectorConfig(video_source="0", min_area=25000, max_area=25000)

    assert config.min_area == config.max_area


# ─────────────────────────────────────────────────────────────────────────────
# MQTT settings
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("server, expected", [
    ("localhost", ("localhost", 1883)),
    ("broker:1884", ("broker", 1884)),
    ("tcp://10.0.0.5:8883", ("10.0.0.5", 8883)),
])
def test_parse_server(server, expected):
    assert parse_server(server) == expected


def test_parse_server_rejects_empty_host():
    with pytest.raises(ValueError):
        parse_server("tcp://:1883")


def test_environment_overrides_file_settings(tmp_path):
    path = write_config(tmp_path, {
        "inputs": [{"video": "0"}],
        "mqtt": {"broker": "file-broker", "port": 1883},
    })
    environ = {
        "MQTT_SERVER": "tcp://env-broker:2883",
        "MQTT_CLIENT_ID": "env-client",
        "MQTT_USERNAME": "user",
        "MQTT_PASSWORD": "secret",
    }

    mqtt_config = DetectorConfig.from_file(path, environ=environ).mqtt_config

    assert (mqtt_config.broker, mqtt_config.port) == ("env-broker", 2883)
    assert mqtt_config.client_id == "env-client"
    assert (mqtt_config.username, mqtt_config.password) == ("user", "secret")


def test_empty_environment_values_are_ignored():
    mqtt_config = MQTTConfig(broker="file-broker")

    assert mqtt_config.with_env({"MQTT_SERVER": "", "MQTT_CLIENT_ID": ""}) is mqtt_config


@pytest.mark.parametrize("kwargs", [{"port": 0}, {"qos": 3}, {"broker": ""}])
def test_mqtt_config_validation(kwargs):
    with pytest.raises(ValueError):
        MQTTConfig(**kwargs)


# ─────────────────────────────────────────────────────────────────────────────
# Video source
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("identifier, expected", [
    ("0", 0),
    ("7", 7),
    ("10", "10"),
    ("resources/belt.mp4", "resources/belt.mp4"),
    ("rtsp://cam/stream", "rtsp://cam/stream"),
])
def test_resolve_source(identifier, expected):
    assert resolve_source(identifier) == expected


@pytest.mark.parametrize("fps, expected", [
    (25.0, 40),
    (30.0, 33),
    (2000.0, 1),
    (0.0, DEFAULT_DELAY_MS),
    (-1.0, DEFAULT_DELAY_MS),
    (float("nan"), DEFAULT_DELAY_MS),
])
def test_frame_delay_ms(fps, expected):
    assert frame_delay_ms(FakeCapture([], fps=fps)) == expected


def test_open_capture_failure_is_video_source_error(monkeypatch):
    from sizer_processor import VideoSourceError, open_capture

    class ClosedCapture(FakeCapture):
        def isOpened(self):
            return False

    captures = []

    def fake_video_capture(source):
        captures.append(ClosedCapture([]))
        return captures[-1]

    monkeypatch.setattr(cv2, "VideoCapture", fake_video_capture)

    with pytest.raises(VideoSourceError):
        open_capture("missing.mp4")
    assert captures[0].released is True


# ─────────────────────────────────────────────────────────────────────────────
# Command line
# ─────────────────────────────────────────────────────────────────────────────

def test_parser_defaults():
    args = run_detector.build_parser().parse_args(["--no-display"])

    assert (args.minarea, args.maxarea, args.rate) == (20000, 30000, 1)
    assert args.config == DEFAULT_CONFIG_PATH
    assert args.no_display is True
    assert args.no_log_file is False


def test_parser_short_flags():
    args = run_detector.build_parser().parse_args(["-min", "18000", "-max", "32000", "-r", "5"])

    assert (args.minarea, args.maxarea, args.rate) == (18000, 32000, 5)


def test_parser_long_flags():
    args = run_detector.build_parser().parse_args(
        ["--minarea", "1", "--maxarea", "2", "--rate", "3", "--config", "other.json"]
    )

    assert (args.minarea, args.maxarea, args.rate) == (1, 2, 3)
    assert args.config == Path("other.json")


def test_main_without_arguments_prints_help(capsys):
    assert run_detector.main([]) == 0
    assert "--minarea" in capsys.readouterr().out


def test_main_with_bad_config_exits_1(tmp_path):
    argv = ["--config", str(tmp_path / "missing.json"), "--no-log-file", "--no-display"]

    assert run_detector.main(argv) == 1


def test_main_with_unopenable_source_exits_1(tmp_path, monkeypatch):
    from sizer_processor import VideoSourceError

    path = write_config(tmp_path, {"inputs": [{"video": "missing.mp4"}]})

    def refuse(identifier):
        raise VideoSourceError(f"Unable to open video source: {identifier}")

    monkeypatch.setattr(run_detector, "open_capture", refuse)

    assert run_detector.main(["--config", str(path), "--no-log-file", "--no-display"]) == 1
