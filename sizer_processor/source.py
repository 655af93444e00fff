"""
Video source helpers.

A one-character numeric identifier ("0".."9") selects a local camera index;
anything else is handed to OpenCV as a file path or stream URI.
"""

import logging
import math
from typing import Union

import cv2

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 5


class VideoSourceError(Exception):
    """The video source could not be opened."""


def resolve_source(identifier: str) -> Union[int, str]:
    """Map a config video identifier to a VideoCapture argument."""
    if len(identifier) == 1 and identifier.isdigit():
        return int(identifier)
    return identifier


def open_capture(identifier: str) -> cv2.VideoCapture:
    """
    Open the video source.

    Raises:
        VideoSourceError: If OpenCV cannot open it
    """
    source = resolve_source(identifier)
    capture = cv2.VideoCapture(source)
    if not capture.isOpened():
        capture.release()
        raise VideoSourceError(f"Unable to open video source: {identifier}")

    logger.info(f"📹 Opened video source: {identifier}")
    return capture


def frame_delay_ms(capture) -> int:
    """waitKey delay that matches playback speed to the source FPS."""
    fps = capture.get(cv2.CAP_PROP_FPS)
    if not fps or not math.isfinite(fps) or fps <= 0:
        return DEFAULT_DELAY_MS
    return max(1, int(1000 / fps))
