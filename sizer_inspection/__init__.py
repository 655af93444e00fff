"""
Size Inspection v1.0
====================

Bounded Context: Size-based defect inspection of parts on a conveyor.

Architecture:

    sizer_inspection/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # Candidate, Measurement, select_measurement
    │   └── segmenter.py   # ContourSegmenter (OpenCV)
    │
    ├── analytics/         # Classification & counting (stateful)
    │   ├── classifier.py  # HysteresisClassifier
    │   └── status.py      # StatusStore, AssemblyInfo, Counters
    │
    └── rendering/         # Visualization (stateless drawing)
        └── overlay.py     # OverlayRenderer, DisplayWindow

Usage:

    from sizer_inspection import (
        ContourSegmenter, HysteresisClassifier, StatusStore, select_measurement,
    )

    segmenter = ContourSegmenter()
    classifier = HysteresisClassifier(min_area=20000, max_area=30000)
    store = StatusStore()

    candidates = segmenter.segment(frame)
    measurement = select_measurement(candidates, frame_width=frame.shape[1])
    store.update(classifier.process(measurement))
    snapshot = store.read()
"""

# Geometry Layer (immutable, stateless)
from sizer_inspection.geometry.shapes import Candidate, Measurement, select_measurement
from sizer_inspection.geometry.segmenter import Segmenter, ContourSegmenter

# Analytics Layer (stateful)
from sizer_inspection.analytics.status import (
    AssemblyInfo,
    Counters,
    StatusSnapshot,
    StatusStore,
)
from sizer_inspection.analytics.classifier import HysteresisClassifier

# Rendering Layer (stateless)
from sizer_inspection.rendering.overlay import OverlayRenderer, DisplayWindow

__all__ = [
    # Geometry
    "Candidate",
    "Measurement",
    "select_measurement",
    "Segmenter",
    "ContourSegmenter",
    # Analytics
    "AssemblyInfo",
    "Counters",
    "StatusSnapshot",
    "StatusStore",
    "HysteresisClassifier",
    # Rendering
    "OverlayRenderer",
    "DisplayWindow",
]

__version__ = "1.0.0"
