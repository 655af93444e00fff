"""
Detector Service - acquisition, detection and telemetry orchestrator.

Pipeline:
    capture → FrameRelay → segmenter → HysteresisClassifier → StatusStore
                                                                  ├→ overlay window
                                                                  └→ DefectPublisher → MQTT

Threading Model:
- Main Thread: acquisition + display (run())
- Detection Thread: takes relayed frames, classifies, updates the store
- Telemetry Thread: publishes the current status every publish interval
- paho-mqtt network threads (publisher, control listener)

Thread Safety:
- relay: single slot behind a Condition
- store: single lock, snapshots out
- classifier: NOT thread-safe, only touched by the Detection Thread
- No lock is held across segmentation, display or publish
"""

import logging
import threading
from typing import Optional

import cv2
import numpy as np

from sizer_inspection import (
    AssemblyInfo,
    ContourSegmenter,
    HysteresisClassifier,
    OverlayRenderer,
    DisplayWindow,
    Segmenter,
    StatusStore,
    select_measurement,
)
from sizer_mqtt import DefectPublisher, DefectStatusMessage
from sizer_control import ControlListener
from sizer_processor.config import DetectorConfig
from sizer_processor.relay import FrameRelay
from sizer_processor.shutdown import ShutdownCoordinator
from sizer_processor.source import DEFAULT_DELAY_MS

logger = logging.getLogger(__name__)

RELAY_POLL_SECONDS = 0.1
WORKER_JOIN_TIMEOUT = 5.0


class DetectorService:
    """
    Main detector service.

    Usage:
        config = DetectorConfig.from_file(Path("resources/config.json"))
        capture = open_capture(config.video_source)
        publisher = DefectPublisher(...)

        service = DetectorService(config, capture, publisher)
        service.run()  # Blocks until end of stream, quit key or signal
    """

    def __init__(
        self,
        config: DetectorConfig,
        capture,  # cv2.VideoCapture or anything with read()/release()
        publisher: DefectPublisher,
        segmenter: Optional[Segmenter] = None,
        control_listener: Optional[ControlListener] = None,
        shutdown: Optional[ShutdownCoordinator] = None,
        display: Optional[DisplayWindow] = None,
        delay_ms: int = DEFAULT_DELAY_MS,
    ):
        self.config = config
        self.capture = capture
        self.publisher = publisher
        self.segmenter = segmenter or ContourSegmenter()
        self.control_listener = control_listener
        self.shutdown = shutdown or ShutdownCoordinator()
        self.display = display
        self.delay_ms = delay_ms

        self.relay = FrameRelay()
        self.store = StatusStore()
        self.classifier = HysteresisClassifier(
            min_area=config.min_area,
            max_area=config.max_area,
        )
        self.renderer = OverlayRenderer(
            min_area=config.min_area,
            max_area=config.max_area,
        )

        self.detection_thread: Optional[threading.Thread] = None
        self.telemetry_thread: Optional[threading.Thread] = None

        self._started = False
        self._stopped = False
        self._frames_read = 0

        logger.info(
            f"DetectorService initialized (expected area range "
            f"[{config.min_area} - {config.max_area}], "
            f"telemetry every {config.publish_interval_seconds}s)"
        )

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """
        Connect transports and start the worker threads (non-blocking).

        Transport failures are logged; the detector keeps running without
        telemetry.
        """
        if self._started:
            logger.warning("Service already running")
            return

        if self.publisher.connect():
            logger.info("✅ Telemetry publisher connected")
        else:
            logger.warning("⚠️ Telemetry publisher NOT connected, publishing will be retried each tick")

        if self.control_listener is not None and not self.control_listener.connect():
            logger.warning("⚠️ Control channel NOT connected")

        self.detection_thread = threading.Thread(
            target=self._detection_loop,
            name="DetectionThread",
            daemon=True,
        )
        self.telemetry_thread = threading.Thread(
            target=self._telemetry_loop,
            name="TelemetryThread",
            daemon=True,
        )
        self.detection_thread.start()
        self.telemetry_thread.start()
        self._started = True
        logger.info("✅ Detector service started")

    def run(self) -> None:
        """
        Run the service on the calling thread until a stop is requested.

        The calling thread does acquisition and display.
        """
        self.start()
        try:
            self._acquisition_loop()
        finally:
            self.stop()

    def stop(self) -> None:
        """
        Stop gracefully: signal workers, join them, release resources.

        Safe to call multiple times.
        """
        if self._stopped:
            return
        self._stopped = True

        self.shutdown.request_stop("service stopping")
        self.relay.wake()

        logger.info("Attempting to stop background threads")
        for thread in (self.detection_thread, self.telemetry_thread):
            if thread is not None:
                thread.join(timeout=WORKER_JOIN_TIMEOUT)
                if thread.is_alive():
                    logger.warning(f"⚠️ {thread.name} did not stop within {WORKER_JOIN_TIMEOUT}s")

        self.capture.release()
        if self.display is not None:
            self.display.close()

        self.publisher.disconnect()
        if self.control_listener is not None:
            self.control_listener.disconnect()

        counters = self.store.counters
        logger.info(
            f"✅ Detector service stopped ({self._frames_read} frames read, "
            f"{self.relay.dropped_count} dropped by relay, {counters})"
        )

    # ─────────────────────────────────────────────────────────────────────
    # Per-iteration operations
    # ─────────────────────────────────────────────────────────────────────

    def classify_frame(self, frame: np.ndarray) -> AssemblyInfo:
        """
        Segment, measure, classify and record one frame.

        Thread: Detection Thread
        """
        candidates = self.segmenter.segment(frame)
        measurement = select_measurement(candidates, frame_width=frame.shape[1])
        info = self.classifier.process(measurement)
        self.store.update(info)
        return info

    def publish_status(self) -> bool:
        """
        Publish the current (sustained) defect status once.

        Thread: Telemetry Thread
        """
        snapshot = self.store.read()
        return self.publisher.publish_status(DefectStatusMessage(defect=snapshot.info.show))

    def drain_control_messages(self) -> int:
        """Log and discard queued control messages. Returns how many."""
        if self.control_listener is None:
            return 0

        drained = 0
        while True:
            message = self.control_listener.get_message(timeout=0)
            if message is None:
                return drained
            drained += 1
            logger.debug(f"Control message on {message.topic}: {message.text()}")

    # ─────────────────────────────────────────────────────────────────────
    # Worker loops
    # ─────────────────────────────────────────────────────────────────────

    def _acquisition_loop(self) -> None:
        """Thread: Main Thread."""
        frame_size = tuple(self.config.frame_size_wh)

        while not self.shutdown.is_stopping():
            try:
                ok, frame = self.capture.read()
            except cv2.error as e:
                logger.error(f"❌ Capture error: {e}")
                self.shutdown.request_stop("capture error")
                break

            if not ok or frame is None or frame.size == 0:
                logger.error("❌ Blank frame grabbed, treating as end of stream")
                self.shutdown.request_stop("end of stream")
                break

            self._frames_read += 1
            frame = cv2.resize(frame, frame_size)
            self.relay.offer(frame)

            if self.display is not None:
                display_frame = self.renderer.render(frame, self.store.read())
                if self.display.show(display_frame):
                    self.shutdown.request_stop("quit key pressed")
                    break
            else:
                self.shutdown.wait(self.delay_ms / 1000.0)

    def _detection_loop(self) -> None:
        """Thread: Detection Thread."""
        logger.info("Video processing thread started")

        while not self.shutdown.is_stopping():
            frame = self.relay.wait_take(timeout=RELAY_POLL_SECONDS)
            if frame is None:
                continue
            try:
                self.classify_frame(frame)
            except Exception as e:
                logger.error(f"❌ Error processing frame: {e}", exc_info=True)

        logger.info("Video processing thread stopped")

    def _telemetry_loop(self) -> None:
        """Thread: Telemetry Thread."""
        logger.info("MQTT sender thread started")
        interval = self.config.publish_interval_seconds

        while not self.shutdown.is_stopping():
            try:
                self.publish_status()
                self.drain_control_messages()
            except Exception as e:
                logger.error(f"❌ Error in telemetry tick: {e}", exc_info=True)
            self.shutdown.wait(interval)

        logger.info("MQTT sender thread stopped")
