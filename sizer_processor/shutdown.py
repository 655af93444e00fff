"""
ShutdownCoordinator - cooperative cancellation for all workers.

Every worker loop checks is_stopping() at the top of each iteration; sleeps
go through wait() so a stop request interrupts them. Signal handlers only
call request_stop(); they never touch worker state.

Stop sources:
- acquisition: end of stream / blank frame
- operator: quit key in the display window
- process: SIGTERM / SIGINT
"""

import logging
import signal
import threading
from typing import Dict, Optional, Sequence

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """
    Cancellation token plus termination-signal wiring.

    Usage:
        shutdown = ShutdownCoordinator()
        shutdown.install_signal_handlers()

        while not shutdown.is_stopping():
            ...
            shutdown.wait(1.0)
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None
        self._previous_handlers: Dict[int, object] = {}

    def request_stop(self, reason: str = "requested") -> bool:
        """
        Ask every worker to stop. Idempotent; the first reason wins.

        Returns:
            True if this call initiated the shutdown
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()

        logger.info(f"🛑 Stop requested: {reason}")
        return True

    def is_stopping(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Sleep up to ``timeout`` seconds, waking early on a stop request.

        Returns:
            True if a stop was requested
        """
        return self._event.wait(timeout)

    @property
    def reason(self) -> Optional[str]:
        with self._lock:
            return self._reason

    def install_signal_handlers(
        self,
        signals: Sequence[int] = (signal.SIGTERM, signal.SIGINT),
    ) -> None:
        """
        Route termination signals to request_stop().

        Must be called from the main thread (Python signal restriction).
        """
        for signum in signals:
            self._previous_handlers[signum] = signal.signal(signum, self._signal_handler)

    def restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _signal_handler(self, signum, frame):
        signal_name = signal.Signals(signum).name
        logger.info(f"⚠️  Received signal {signal_name} ({signum})")
        self.request_stop(f"signal {signal_name}")
