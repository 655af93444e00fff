"""
Geometry Layer
==============

Bounded Context: Part silhouettes and frame segmentation.

Responsibilities:
- Candidate / Measurement representation (immutable)
- Choosing the single measured part per frame
- Segmenting raw frames into candidates
- NO state, NO counting, NO visualization
"""

from sizer_inspection.geometry.shapes import (
    Candidate,
    Measurement,
    MIN_PART_WIDTH,
    select_measurement,
)
from sizer_inspection.geometry.segmenter import Segmenter, ContourSegmenter

__all__ = [
    "Candidate",
    "Measurement",
    "MIN_PART_WIDTH",
    "select_measurement",
    "Segmenter",
    "ContourSegmenter",
]
