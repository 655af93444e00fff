"""
Segmentation Module
===================

Turns a raw frame into foreground bounding boxes.

The detector only depends on the Segmenter protocol; ContourSegmenter is the
OpenCV implementation used in production:

    gray -> 3x3 Gaussian blur -> OPEN -> CLOSE -> OPEN -> threshold(200)
         -> external contours -> bounding rectangles

Design:
- Stateless (safe to call from the detection thread only or from many)
- Deterministic for identical pixel input
- Never returns zero-area candidates
"""

from typing import List, Protocol

import cv2
import numpy as np

from sizer_inspection.geometry.shapes import Candidate


class Segmenter(Protocol):
    """Anything that can turn a frame into candidate boxes."""

    def segment(self, frame: np.ndarray) -> List[Candidate]:
        ...


class ContourSegmenter:
    """
    Threshold + morphology + contour segmentation.

    Bright parts on a dark belt: pixels above ``threshold`` after
    smoothing are foreground.

    Attributes:
        kernel_size: Size of the blur kernel and elliptical structuring element
        threshold: Binary threshold applied after morphology (0-255)
    """

    def __init__(self, kernel_size: int = 3, threshold: int = 200):
        if kernel_size < 1 or kernel_size % 2 == 0:
            raise ValueError(f"kernel_size must be a positive odd number, got {kernel_size}")
        if not 0 <= threshold <= 255:
            raise ValueError(f"threshold must be in [0, 255], got {threshold}")

        self.kernel_size = kernel_size
        self.threshold = threshold
        self._kernel = cv2.getStructuringElement(
            cv2.MORPH_ELLIPSE, (kernel_size, kernel_size)
        )

    def preprocess(self, frame: np.ndarray) -> np.ndarray:
        """Return the binary foreground mask for a BGR or grayscale frame."""
        if frame.ndim == 3:
            img = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        else:
            img = frame

        size = (self.kernel_size, self.kernel_size)
        img = cv2.GaussianBlur(img, size, 0)

        # OPEN removes specks in the background, CLOSE fills holes in the part
        img = cv2.morphologyEx(img, cv2.MORPH_OPEN, self._kernel)
        img = cv2.morphologyEx(img, cv2.MORPH_CLOSE, self._kernel)
        img = cv2.morphologyEx(img, cv2.MORPH_OPEN, self._kernel)

        _, mask = cv2.threshold(img, self.threshold, 255, cv2.THRESH_BINARY)
        return mask

    def segment(self, frame: np.ndarray) -> List[Candidate]:
        mask = self.preprocess(frame)
        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)

        candidates = []
        for contour in contours:
            x, y, w, h = cv2.boundingRect(contour)
            if w * h == 0:
                continue
            candidates.append(Candidate(x=int(x), y=int(y), width=int(w), height=int(h)))
        return candidates
