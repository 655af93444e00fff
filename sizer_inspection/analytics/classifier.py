"""
Hysteresis Classifier Module
============================

Turns a noisy stream of per-frame part areas into stable part/defect
decisions.

States (derived from HysteresisState):
- Idle:              part_seen=False
- Tracking-OK:       part_seen=True, part_defective=False
- Tracking-Defect:   part_seen=True, part_defective=True

A verdict flips only after more than RUN_LENGTH_THRESHOLD frames of the
opposite evidence, so edge jitter while a part enters or leaves the view
does not produce spurious defect events. A defect is confirmed at most once
per tracked part; an empty belt resets everything.

Known limitation: a part that leaves the view before accumulating enough
out-of-range frames is never counted as defective.
"""

import logging
from dataclasses import dataclass

from sizer_inspection.geometry.shapes import Measurement
from sizer_inspection.analytics.status import AssemblyInfo

logger = logging.getLogger(__name__)

RUN_LENGTH_THRESHOLD = 10


@dataclass
class HysteresisState:
    """Per-part tracking state, persists across frames."""

    part_seen: bool = False
    part_defective: bool = False
    ok_run_count: int = 0
    defect_run_count: int = 0

    def clear(self) -> None:
        self.part_seen = False
        self.part_defective = False
        self.ok_run_count = 0
        self.defect_run_count = 0


class HysteresisClassifier:
    """
    Size-based OK/defect classifier with run-length debouncing.

    NOT thread-safe: owned by the detection thread.

    Usage:
        classifier = HysteresisClassifier(min_area=20000, max_area=30000)
        info = classifier.process(measurement)
        store.update(info)
    """

    def __init__(
        self,
        min_area: int,
        max_area: int,
        run_length_threshold: int = RUN_LENGTH_THRESHOLD,
    ):
        if min_area > max_area:
            raise ValueError(
                f"min_area ({min_area}) must not exceed max_area ({max_area})"
            )
        self.min_area = min_area
        self.max_area = max_area
        self.run_length_threshold = run_length_threshold
        self.state = HysteresisState()

    def is_out_of_range(self, area: int) -> bool:
        return area > self.max_area or area < self.min_area

    def process(self, measurement: Measurement) -> AssemblyInfo:
        """
        Advance the state machine by one frame.

        Args:
            measurement: The frame's chosen measurement (may be empty)

        Returns:
            AssemblyInfo for this frame
        """
        state = self.state

        if measurement.is_empty:
            if state.part_seen:
                logger.debug("Belt empty, part left the view")
            state.clear()
            return AssemblyInfo()

        frame_defect = self.is_out_of_range(measurement.area)
        if frame_defect:
            state.defect_run_count += 1
        else:
            state.ok_run_count += 1

        defect = False
        inc_total = False

        if not state.part_seen:
            state.part_seen = True
            inc_total = True
            logger.info(f"New part entered (area={measurement.area})")
        else:
            if not frame_defect and state.ok_run_count > self.run_length_threshold:
                state.defect_run_count = 0

            if frame_defect and state.defect_run_count > self.run_length_threshold:
                if not state.part_defective:
                    state.part_defective = True
                    defect = True
                    logger.info(
                        f"Defect confirmed (area={measurement.area}, "
                        f"expected [{self.min_area} - {self.max_area}])"
                    )
                state.ok_run_count = 0

        return AssemblyInfo(
            defect=defect,
            show=state.part_defective,
            area=measurement.area,
            rect=measurement.rect,
            inc_total=inc_total,
        )

    def reset(self) -> None:
        """Return to Idle, as if the belt had been seen empty."""
        self.state.clear()
