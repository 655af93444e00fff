"""
FrameRelay hand-off semantics: drop-if-full, no reordering, no double take.
"""

import threading
import time

import pytest

from sizer_processor import FrameRelay


def test_take_on_empty_slot_returns_none():
    relay = FrameRelay()

    assert relay.take() is None
    assert relay.is_empty()


def test_offer_drops_when_slot_is_full():
    relay = FrameRelay()

    assert relay.offer("frame-1") is True
    assert relay.offer("frame-2") is False
    assert relay.offer("frame-3") is False

    # the first frame survives, later ones are dropped
    assert relay.take() == "frame-1"
    assert relay.take() is None
    assert relay.accepted_count == 1
    assert relay.dropped_count == 2


def test_slot_accepts_again_after_take():
    relay = FrameRelay()

    relay.offer("a")
    assert relay.take() == "a"
    assert relay.offer("b") is True
    assert relay.take() == "b"


def test_offer_rejects_none():
    with pytest.raises(ValueError):
        FrameRelay().offer(None)


def test_wait_take_times_out_on_empty_slot():
    relay = FrameRelay()

    start = time.monotonic()
    assert relay.wait_take(timeout=0.05) is None
    assert time.monotonic() - start >= 0.04


def test_wait_take_returns_pending_frame_immediately():
    relay = FrameRelay()
    relay.offer("ready")

    assert relay.wait_take(timeout=0) == "ready"
    assert relay.is_empty()


def test_wait_take_is_woken_by_offer():
    relay = FrameRelay()
    received = []

    def consumer():
        received.append(relay.wait_take(timeout=2.0))

    thread = threading.Thread(target=consumer)
    thread.start()
    time.sleep(0.05)
    relay.offer("late-frame")
    thread.join(timeout=2.0)

    assert received == ["late-frame"]


def test_wake_releases_blocked_consumer_without_frame():
    relay = FrameRelay()
    received = []

    thread = threading.Thread(target=lambda: received.append(relay.wait_take(timeout=2.0)))
    thread.start()
    time.sleep(0.05)
    relay.wake()
    thread.join(timeout=0.5)

    # the predicate is still false after wake(), so the consumer keeps
    # waiting until its own timeout; it must never see a phantom frame
    relay.offer("real")
    thread.join(timeout=2.0)
    assert received == ["real"]


def test_concurrent_producer_consumer_never_duplicates_or_reorders():
    relay = FrameRelay()
    produced = 2000
    taken = []
    done = threading.Event()

    def producer():
        for i in range(produced):
            relay.offer(i)
        done.set()

    def consumer():
        while not (done.is_set() and relay.is_empty()):
            frame = relay.wait_take(timeout=0.01)
            if frame is not None:
                taken.append(frame)

    threads = [threading.Thread(target=producer), threading.Thread(target=consumer)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5.0)

    assert len(taken) == len(set(taken))
    assert taken == sorted(taken)
    assert relay.accepted_count == len(taken)
    assert relay.accepted_count + relay.dropped_count == produced


def test_concurrent_offers_accept_exactly_one():
    relay = FrameRelay()
    barrier = threading.Barrier(8)
    results = []
    lock = threading.Lock()

    def offer(i):
        barrier.wait()
        accepted = relay.offer(f"frame-{i}")
        with lock:
            results.append(accepted)

    threads = [threading.Thread(target=offer, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=2.0)

    assert results.count(True) == 1
    assert relay.dropped_count == 7
