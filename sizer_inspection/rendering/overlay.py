"""
Overlay Rendering Module
========================

Pure visualization layer for the operator window.

Design:
- Stateless rendering (draws on a copy, never on the relayed frame)
- No business logic: reads a StatusSnapshot, nothing else
- Uses supervision drawing utilities

Dependencies:
- supervision (draw utilities, Color, Point, Rect)
- OpenCV (window, key handling, text metrics)
"""

import cv2
import numpy as np
import supervision as sv

from sizer_inspection.analytics.status import StatusSnapshot

WINDOW_NAME = "Object Size Detector"


class OverlayRenderer:
    """
    Draws the measurement line, the totals line and the part box.

    Usage:
        renderer = OverlayRenderer(min_area=20000, max_area=30000)
        display_frame = renderer.render(frame, store.read())
    """

    def __init__(
        self,
        min_area: int,
        max_area: int,
        text_color: sv.Color = sv.Color(r=0, g=255, b=0),
        ok_color: sv.Color = sv.Color(r=0, g=255, b=0),
        defect_color: sv.Color = sv.Color(r=255, g=0, b=0),
        text_scale: float = 0.5,
        text_thickness: int = 1,
        box_thickness: int = 1,
    ):
        self.min_area = min_area
        self.max_area = max_area
        self.text_color = text_color
        self.ok_color = ok_color
        self.defect_color = defect_color
        self.text_scale = text_scale
        self.text_thickness = text_thickness
        self.box_thickness = box_thickness

    def measurement_label(self, snapshot: StatusSnapshot) -> str:
        info = snapshot.info
        return (
            f"Measurement: {info.area} "
            f"Expected range: [{self.min_area} - {self.max_area}] "
            f"Defect: {'TRUE' if info.show else 'FALSE'}"
        )

    def totals_label(self, snapshot: StatusSnapshot) -> str:
        return str(snapshot.counters)

    def _draw_label(self, frame: np.ndarray, text: str, baseline_y: int) -> np.ndarray:
        # sv.draw_text anchors on the text center; keep the label flush left
        (text_w, text_h), _ = cv2.getTextSize(
            text, cv2.FONT_HERSHEY_SIMPLEX, self.text_scale, self.text_thickness
        )
        anchor = sv.Point(x=text_w // 2, y=baseline_y - text_h // 2)
        return sv.draw_text(
            scene=frame,
            text=text,
            text_anchor=anchor,
            text_color=self.text_color,
            text_scale=self.text_scale,
            text_thickness=self.text_thickness,
            text_padding=0,
        )

    def render(self, frame: np.ndarray, snapshot: StatusSnapshot) -> np.ndarray:
        """
        Draw the overlay on a copy of the frame.

        Returns:
            New frame with overlay drawn
        """
        display = frame.copy()
        display = self._draw_label(display, self.measurement_label(snapshot), 15)
        display = self._draw_label(display, self.totals_label(snapshot), 40)

        rect = snapshot.info.rect
        if rect is not None:
            display = sv.draw_rectangle(
                scene=display,
                rect=sv.Rect(x=rect.x, y=rect.y, width=rect.width, height=rect.height),
                color=self.defect_color if snapshot.info.show else self.ok_color,
                thickness=self.box_thickness,
            )
        return display


class DisplayWindow:
    """
    OpenCV window; any key press is a quit request.

    Attributes:
        delay_ms: waitKey delay, matches playback to the source FPS
    """

    def __init__(self, name: str = WINDOW_NAME, delay_ms: int = 5):
        self.name = name
        self.delay_ms = max(1, int(delay_ms))

    def show(self, frame: np.ndarray) -> bool:
        """
        Show a frame and poll the keyboard.

        Returns:
            True if the operator asked to quit
        """
        cv2.imshow(self.name, frame)
        return cv2.waitKey(self.delay_ms) >= 0

    def close(self) -> None:
        cv2.destroyWindow(self.name)
