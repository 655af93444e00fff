"""
Structured JSON logging for the MQTT layer.

Every call writes exactly one line:

    {"timestamp": "2024-05-01T08:00:00+00:00", "level": "INFO",
     "component": "telemetry", "event": "telemetry.published",
     "message": "Published defect status",
     "metadata": {"broker": "localhost:1883", "defect": false}}

Lines go to a dedicated ``sizer_mqtt.<component>`` logger with its own stream
handler and propagation switched off, so the plain-text root handlers set up
by run_detector.py do not print them a second time.

bind() returns a logger sharing the same handler that stamps fixed context
(broker address, topic) into the metadata of every line.
"""

import copy
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent


class StructuredLogger:
    """
    JSON-lines logger keyed by LogEvent.

    Example:
        >>> log = create_logger("telemetry").bind(broker="localhost:1883")
        >>> log.info(
        ...     event=LogEvent.TELEMETRY_PUBLISHED,
        ...     message="Published defect status",
        ...     metadata={'defect': False}
        ... )
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None
    ):
        self.component = component
        self.context: Dict[str, Any] = {}
        self.logger = logging.getLogger(logger_name or f"sizer_mqtt.{component}")
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONLineFormatter())
            self.logger.addHandler(handler)
            self.logger.propagate = False

    def bind(self, **context: Any) -> "StructuredLogger":
        """Copy of this logger that adds ``context`` to every line's metadata."""
        bound = copy.copy(self)
        bound.context = {**self.context, **context}
        return bound

    def _emit(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        line: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        merged = {**self.context, **(metadata or {})}
        if merged:
            line['metadata'] = merged

        if exc_info is not None:
            line['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
            }

        self.logger.log(level, json.dumps(line, default=str))

    def debug(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log a failure.

        ``exc_info`` is summarized as ``{"type", "message"}`` inside the JSON
        line; tracebacks are left to the plain-text application log.
        """
        self._emit(logging.ERROR, event, message, metadata, exc_info)


class JSONLineFormatter(logging.Formatter):
    """The message already is the JSON line; emit it untouched."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(component: str, level: int = logging.INFO) -> StructuredLogger:
    """StructuredLogger for ``component`` (``"telemetry"``, ``"control"``)."""
    return StructuredLogger(component=component, level=level)
