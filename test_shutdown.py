"""
ShutdownCoordinator: cooperative stop requests and signal wiring.
"""

import signal
import threading
import time

from sizer_processor import ShutdownCoordinator


def test_request_stop_is_idempotent_and_keeps_first_reason():
    shutdown = ShutdownCoordinator()

    assert shutdown.is_stopping() is False
    assert shutdown.reason is None

    assert shutdown.request_stop("end of stream") is True
    assert shutdown.request_stop("signal SIGTERM") is False

    assert shutdown.is_stopping() is True
    assert shutdown.reason == "end of stream"


def test_wait_times_out_without_stop():
    shutdown = ShutdownCoordinator()

    start = time.monotonic()
    assert shutdown.wait(0.05) is False
    assert time.monotonic() - start >= 0.04


def test_wait_wakes_early_on_stop():
    shutdown = ShutdownCoordinator()
    threading.Timer(0.05, shutdown.request_stop, args=("test",)).start()

    start = time.monotonic()
    assert shutdown.wait(5.0) is True
    assert time.monotonic() - start < 2.0


def test_concurrent_requests_initiate_once():
    shutdown = ShutdownCoordinator()
    barrier = threading.Barrier(10)
    results = []

    def request(i):
        barrier.wait()
        results.append(shutdown.request_stop(f"worker {i}"))

    threads = [threading.Thread(target=request, args=(i,)) for i in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=2.0)

    assert results.count(True) == 1
    assert shutdown.reason.startswith("worker ")


def test_signal_handler_requests_stop():
    shutdown = ShutdownCoordinator()

    shutdown._signal_handler(signal.SIGTERM, None)

    assert shutdown.is_stopping() is True
    assert shutdown.reason == "signal SIGTERM"


def test_install_and_restore_signal_handlers():
    previous = signal.getsignal(signal.SIGTERM)
    shutdown = ShutdownCoordinator()

    shutdown.install_signal_handlers(signals=(signal.SIGTERM,))
    try:
        assert signal.getsignal(signal.SIGTERM) == shutdown._signal_handler
        signal.raise_signal(signal.SIGTERM)
        assert shutdown.wait(1.0) is True
        assert shutdown.reason == "signal SIGTERM"
    finally:
        shutdown.restore_signal_handlers()

    assert signal.getsignal(signal.SIGTERM) == previous
