#!/usr/bin/env python3
"""
Object Size Detector - Entry Point
==================================

This script starts the object size detector, which:
- Reads a conveyor video feed (camera index, file or stream URI)
- Measures the silhouette of each passing part
- Classifies parts as OK or defective by area, with debouncing
- Shows an operator overlay with running totals
- Publishes the defect status to MQTT topic "defects/counter"

Usage:
    python run_detector.py --config resources/config.json -min 20000 -max 30000 -r 1

Lifecycle:
    1. Parse CLI arguments (no arguments prints help)
    2. Setup logging (console + file)
    3. Load configuration
    4. Open video source (fatal on failure)
    5. Create publisher, control listener and DetectorService
    6. Run until end of stream, quit key or SIGTERM/SIGINT
    7. Graceful shutdown

Logs:
    - Console: INFO level
    - File: logs/detector.log (INFO level)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sizer_control import ControlListener
from sizer_inspection import DisplayWindow
from sizer_mqtt import DefectPublisher, create_logger
from sizer_processor import (
    ConfigError,
    DetectorConfig,
    DetectorService,
    ShutdownCoordinator,
    VideoSourceError,
    frame_delay_ms,
    open_capture,
)
from sizer_processor.config import DEFAULT_CONFIG_PATH


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(log_file: Optional[Path] = None) -> logging.Logger:
    """
    Setup logging for the detector.

    Args:
        log_file: Optional path to log file

    Returns:
        Logger instance for the entry point
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    return logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Object Size Detector - conveyor part size inspection with MQTT telemetry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default thresholds, video source from resources/config.json
  python run_detector.py --config resources/config.json

  # Custom acceptable area range, publish every 2 seconds
  python run_detector.py -min 18000 -max 32000 -r 2

  # Headless (no window), console-only logging
  python run_detector.py --no-display --no-log-file

Environment:
  MQTT_SERVER, MQTT_CLIENT_ID, MQTT_USERNAME, MQTT_PASSWORD override the
  broker settings of the config file.
        """
    )

    parser.add_argument(
        '--minarea', '-min',
        type=int,
        default=20000,
        help='Minimum part area of assembly object (default: 20000)'
    )
    parser.add_argument(
        '--maxarea', '-max',
        type=int,
        default=30000,
        help='Maximum part area of assembly object (default: 30000)'
    )
    parser.add_argument(
        '--rate', '-r',
        type=int,
        default=1,
        help='Number of seconds between data updates to MQTT server (default: 1)'
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f'Path to startup config file (default: {DEFAULT_CONFIG_PATH})'
    )
    parser.add_argument(
        '--log-file',
        type=Path,
        default=Path('logs/detector.log'),
        help='Path to log file (default: logs/detector.log)'
    )
    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Disable file logging (console only)'
    )
    parser.add_argument(
        '--no-display',
        action='store_true',
        help='Run headless, without the overlay window'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit code (0 on normal shutdown or help, 1 on startup failure)
    """
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    logger = setup_logging(None if args.no_log_file else args.log_file)

    logger.info("=" * 80)
    logger.info("🚀 Object Size Detector - Starting")
    logger.info("=" * 80)

    try:
        config = DetectorConfig.from_file(
            args.config,
            min_area=args.minarea,
            max_area=args.maxarea,
            publish_interval_seconds=args.rate,
            display=not args.no_display,
        )
    except ConfigError as e:
        logger.error(f"❌ Configuration error: {e}")
        return 1

    logger.info(f"✅ Configuration loaded (video={config.video_source})")

    try:
        capture = open_capture(config.video_source)
    except VideoSourceError as e:
        logger.error(f"❌ ERROR! {e}")
        return 1

    delay_ms = frame_delay_ms(capture)
    mqtt_config = config.mqtt_config

    publisher = DefectPublisher(
        broker_host=mqtt_config.broker,
        broker_port=mqtt_config.port,
        topic=mqtt_config.telemetry_topic,
        logger=create_logger(component="telemetry"),
        client_id=mqtt_config.client_id,
        username=mqtt_config.username,
        password=mqtt_config.password,
        qos=mqtt_config.qos,
    )
    control_listener = ControlListener(
        broker_host=mqtt_config.broker,
        broker_port=mqtt_config.port,
        topic=mqtt_config.control_topic,
        logger=create_logger(component="control"),
        client_id=f"{mqtt_config.client_id}_control",
        username=mqtt_config.username,
        password=mqtt_config.password,
    )
    logger.info(f"📤 Telemetry topic: {mqtt_config.telemetry_topic} ({mqtt_config.broker}:{mqtt_config.port})")
    logger.info(f"📥 Control topic: {mqtt_config.control_topic}")

    shutdown = ShutdownCoordinator()
    shutdown.install_signal_handlers()

    service = DetectorService(
        config=config,
        capture=capture,
        publisher=publisher,
        control_listener=control_listener,
        shutdown=shutdown,
        display=DisplayWindow(delay_ms=delay_ms) if config.display else None,
        delay_ms=delay_ms,
    )

    try:
        service.run()
    finally:
        shutdown.restore_signal_handlers()

    logger.info("=" * 80)
    logger.info(f"✅ Shutdown complete ({shutdown.reason})")
    logger.info("=" * 80)
    return 0


if __name__ == '__main__':
    sys.exit(main())
