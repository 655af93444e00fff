"""Shared test doubles for detector tests.

FakeMQTTClient mimics the slice of paho.mqtt.client.Client the publisher and
control listener use, so tests run without a broker. FakeCapture mimics
cv2.VideoCapture.
"""
from __future__ import annotations

from types import SimpleNamespace

import numpy as np

from sizer_inspection import Candidate


class FakeReasonCode:
    """Stand-in for paho's ReasonCode."""

    def __init__(self, failure: bool = False):
        self.is_failure = failure

    def __str__(self):
        return "Not authorized" if self.is_failure else "Success"


class FakeMQTTClient:
    """Records publishes and subscriptions; connects synchronously."""

    def __init__(self, accept_connection: bool = True, publish_rc: int = 0,
                 publish_error: Exception | None = None,
                 connect_error: Exception | None = None):
        self.accept_connection = accept_connection
        self.publish_rc = publish_rc
        self.publish_error = publish_error
        self.connect_error = connect_error
        self.published = []
        self.subscriptions = []
        self.loop_running = False
        self.disconnected = False
        self.on_connect = None
        self.on_disconnect = None
        self.on_message = None

    def connect(self, host, port, keepalive=60):
        if self.connect_error is not None:
            raise self.connect_error
        self.address = (host, port)

    def loop_start(self):
        self.loop_running = True
        if self.on_connect is not None:
            self.on_connect(self, None, {}, FakeReasonCode(failure=not self.accept_connection), None)

    def loop_stop(self):
        self.loop_running = False

    def disconnect(self):
        self.disconnected = True

    def subscribe(self, topic, qos=0):
        self.subscriptions.append((topic, qos))

    def publish(self, topic, payload=None, qos=0, retain=False):
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append(SimpleNamespace(topic=topic, payload=payload, qos=qos, retain=retain))
        return SimpleNamespace(rc=self.publish_rc)

    def username_pw_set(self, username, password):
        self.credentials = (username, password)


def attach_fake_client(component, fake: FakeMQTTClient) -> FakeMQTTClient:
    """Swap a publisher's / listener's paho client for a fake one."""
    connection = component.connection
    fake.on_connect = connection._on_connect
    fake.on_disconnect = connection._on_disconnect
    fake.on_message = getattr(component, "_on_message", None)
    connection.client = fake
    return fake


def fake_mqtt_message(topic: str, payload: bytes):
    return SimpleNamespace(topic=topic, payload=payload)


class RecordingPublisher:
    """DefectPublisher stand-in for service tests."""

    def __init__(self, connects: bool = True, fail_first: int = 0):
        self.connects = connects
        self.fail_first = fail_first
        self.messages = []
        self.attempts = 0
        self.disconnected = False

    def connect(self, timeout: float = 10.0) -> bool:
        return self.connects

    def publish_status(self, status_msg) -> bool:
        self.attempts += 1
        if self.attempts <= self.fail_first:
            raise ConnectionError("broker went away")
        self.messages.append(status_msg)
        return True

    def disconnect(self):
        self.disconnected = True


class FakeCapture:
    """Plays a fixed list of frames, then reports end of stream."""

    def __init__(self, frames, fps: float = 25.0):
        self._frames = list(frames)
        self.fps = fps
        self.released = False
        self.reads = 0

    def read(self):
        self.reads += 1
        if not self._frames:
            return False, None
        return True, self._frames.pop(0)

    def get(self, prop):
        return self.fps

    def isOpened(self):
        return True

    def release(self):
        self.released = True


class FixedSegmenter:
    """Returns the same candidates for every frame."""

    def __init__(self, candidates):
        self.candidates = list(candidates)
        self.calls = 0

    def segment(self, frame):
        self.calls += 1
        return list(self.candidates)


def blank_frame(width: int = 960, height: int = 540) -> np.ndarray:
    return np.zeros((height, width, 3), dtype=np.uint8)


def part(width: int, height: int, x: int = 100, y: int = 100) -> Candidate:
    return Candidate(x=x, y=y, width=width, height=height)
