"""
Rendering Layer
===============

Bounded Context: Operator overlay.

Responsibilities:
- Draw measurement, totals and part box on a display copy of the frame
- Own the OpenCV window and quit key
- NO classification, NO counting
"""

from sizer_inspection.rendering.overlay import OverlayRenderer, DisplayWindow, WINDOW_NAME

__all__ = [
    "OverlayRenderer",
    "DisplayWindow",
    "WINDOW_NAME",
]
