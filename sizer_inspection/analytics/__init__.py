"""
Analytics Layer
===============

Bounded Context: Stateful classification and counting.

Responsibilities:
- Debounce per-frame size verdicts into per-part decisions (mutable state)
- Accumulate part and defect totals
- Hand out immutable snapshots to readers on other threads
"""

from sizer_inspection.analytics.status import (
    AssemblyInfo,
    Counters,
    StatusSnapshot,
    StatusStore,
)
from sizer_inspection.analytics.classifier import (
    HysteresisClassifier,
    HysteresisState,
    RUN_LENGTH_THRESHOLD,
)

__all__ = [
    "AssemblyInfo",
    "Counters",
    "StatusSnapshot",
    "StatusStore",
    "HysteresisClassifier",
    "HysteresisState",
    "RUN_LENGTH_THRESHOLD",
]
