"""
Defect Status Message Schema
============================

Bounded Context: Telemetry Data Structures

Wire format published on the telemetry topic once per telemetry tick:

    {"Defect": "true"}   or   {"Defect": "false"}

The value is a string, not a JSON boolean, to stay compatible with existing
dashboards that consume the topic.
"""

from dataclasses import dataclass
from typing import Dict


TELEMETRY_TOPIC = "defects/counter"

_TRUE = "true"
_FALSE = "false"


@dataclass(frozen=True)
class DefectStatusMessage:
    """
    Immutable defect status snapshot for one telemetry tick.

    Attributes:
        defect: Whether the part currently in view is confirmed defective

    Example:
        >>> DefectStatusMessage(defect=True).to_dict()
        {'Defect': 'true'}
    """
    defect: bool

    def to_dict(self) -> Dict[str, str]:
        """Serialize to JSON-compatible dict."""
        return {'Defect': _TRUE if self.defect else _FALSE}

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> 'DefectStatusMessage':
        """
        Deserialize from dict.

        Accepts both the string form and a JSON boolean.

        Raises:
            ValueError: If the Defect key is missing or has an unknown value
        """
        try:
            value = data['Defect']
        except KeyError as e:
            raise ValueError(f"Missing required field: {e}")

        if isinstance(value, bool):
            return cls(defect=value)
        if isinstance(value, str) and value.lower() in (_TRUE, _FALSE):
            return cls(defect=value.lower() == _TRUE)
        raise ValueError(f"Invalid Defect value: {value!r}")
