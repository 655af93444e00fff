"""
Status Store Module
===================

Latest classification output plus process-lifetime counters, shared between
the detection thread (writer), the display loop and the telemetry thread
(readers).

Design:
- Mutable state behind one lock
- Immutable snapshots out (StatusSnapshot)
- Counters are monotonically non-decreasing
"""

import threading
from dataclasses import dataclass, replace
from typing import Optional

from sizer_inspection.geometry.shapes import Candidate


@dataclass(frozen=True)
class AssemblyInfo:
    """
    Classification output for one frame.

    Attributes:
        defect: Edge-triggered; True only on the frame a defect is confirmed
        show: Sustained; True while the tracked part is confirmed defective
        area: Area of the latest measurement (0 on empty belt)
        rect: Box of the latest measurement (None on empty belt)
        inc_total: True only on the frame a new part enters
    """

    defect: bool = False
    show: bool = False
    area: int = 0
    rect: Optional[Candidate] = None
    inc_total: bool = False


@dataclass(frozen=True)
class Counters:
    """Running totals since process start."""

    total_parts: int = 0
    total_defects: int = 0

    def __str__(self) -> str:
        return f"Total parts: {self.total_parts} Total Defects: {self.total_defects}"


@dataclass(frozen=True)
class StatusSnapshot:
    """Consistent (info, counters) pair read under one lock acquisition."""

    info: AssemblyInfo
    counters: Counters


class StatusStore:
    """
    Thread-safe holder of the latest AssemblyInfo and the Counters.

    Usage:
        store = StatusStore()
        store.update(info)          # detection thread
        snapshot = store.read()     # any thread
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._info = AssemblyInfo()
        self._total_parts = 0
        self._total_defects = 0

    def update(self, info: AssemblyInfo) -> None:
        """
        Store the latest decision and apply its counter increments.

        ``inc_total`` is an event, not state: it bumps total_parts but is
        not kept in the stored record.
        """
        with self._lock:
            self._info = replace(info, inc_total=False)
            if info.inc_total:
                self._total_parts += 1
            if info.defect:
                self._total_defects += 1

    def read(self) -> StatusSnapshot:
        with self._lock:
            return StatusSnapshot(
                info=self._info,
                counters=Counters(
                    total_parts=self._total_parts,
                    total_defects=self._total_defects,
                ),
            )

    def reset(self) -> None:
        """Clear defect, area, inc_total and rect. Counters are kept."""
        with self._lock:
            self._info = replace(
                self._info, defect=False, area=0, inc_total=False, rect=None
            )

    @property
    def counters(self) -> Counters:
        return self.read().counters
