"""
Part Geometry Module
====================

Pure geometric representations - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Axis-aligned boxes in absolute pixel coordinates, origin top-left
- Thread-safe by design (immutability)
"""

from dataclasses import dataclass
from typing import Iterable, Optional

# Narrower blobs are segmentation noise, not parts
MIN_PART_WIDTH = 30


@dataclass(frozen=True)
class Candidate:
    """
    Bounding box of one foreground region found in a frame.

    Attributes:
        x: Left edge x-coordinate (pixels)
        y: Top edge y-coordinate (pixels)
        width: Box width (pixels)
        height: Box height (pixels)
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Candidate dimensions must be >= 0, got {self.width}x{self.height}"
            )

    @property
    def area(self) -> int:
        """Bounding box area in square pixels."""
        return self.width * self.height

    @property
    def right(self) -> int:
        return self.x + self.width

    def inside_horizontally(self, frame_width: int) -> bool:
        """True when neither vertical edge touches the frame border."""
        return self.x > 0 and self.right < frame_width

    def as_xywh(self) -> tuple:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Measurement:
    """
    The single part measurement chosen for one frame.

    An empty measurement (area 0, no rect) means the belt is empty.
    """

    area: int = 0
    rect: Optional[Candidate] = None

    @classmethod
    def empty(cls) -> "Measurement":
        return cls()

    @classmethod
    def of(cls, candidate: Candidate) -> "Measurement":
        return cls(area=candidate.area, rect=candidate)

    @property
    def is_empty(self) -> bool:
        return self.area == 0


def select_measurement(
    candidates: Iterable[Candidate],
    frame_width: int,
    min_width: int = MIN_PART_WIDTH,
) -> Measurement:
    """
    Pick the largest candidate that is fully inside the frame horizontally
    and wider than ``min_width``.

    Args:
        candidates: Candidates produced by the segmenter for one frame
        frame_width: Width of the frame the candidates came from
        min_width: Exclusive lower bound on candidate width

    Returns:
        Measurement of the chosen candidate, or Measurement.empty()
    """
    best: Optional[Candidate] = None
    for candidate in candidates:
        if candidate.width <= min_width:
            continue
        if not candidate.inside_horizontally(frame_width):
            continue
        # strict comparison: on ties the first candidate wins
        if best is None or candidate.area > best.area:
            best = candidate

    if best is None or best.area == 0:
        return Measurement.empty()
    return Measurement.of(best)
