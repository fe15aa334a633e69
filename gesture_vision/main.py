#!/usr/bin/env python3
"""
Live gesture session service - command line runner.

Starts one recognition session on a local camera and prints every event the
session publishes until interrupted.

Usage:
    gesture-vision                         # camera 0, session "local"
    gesture-vision --camera 1 --session demo
    gesture-vision --config my.yaml --log-level DEBUG --duration 30
"""

import sys
import json
import time
import signal
import argparse
import logging
import threading

from gesture_vision.core.events import EventBus, Events
from gesture_vision.modules.session.registry import SessionRegistry
from gesture_vision.modules.utils.config import Config
from gesture_vision.modules.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Live higher/lower gesture recognition")
    parser.add_argument("--config", default=None, help="Path to YAML config")
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--session", default="local", help="Session id")
    parser.add_argument("--log-level", default=None, help="Override logging.level")
    parser.add_argument("--log-file", default=None, help="Override logging.file")
    parser.add_argument("--duration", type=float, default=0.0,
                        help="Stop after N seconds (0 = run until interrupted)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    config = Config().load(args.config)
    log_cfg = config.logging
    setup_logging(
        level=args.log_level or log_cfg.get("level", "INFO"),
        log_file=args.log_file or log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
        module_levels=log_cfg.get("levels"),
    )

    bus = EventBus()
    registry = SessionRegistry(config.data, bus=bus)
    done = threading.Event()

    def print_event(event):
        print(json.dumps(event.to_message()), flush=True)
        if event.gesture.value in ("error", "stopped"):
            done.set()

    bus.subscribe(Events.gesture_topic(args.session), print_event)

    def handle_signal(signum, frame):
        logger.info("Signal %d received, stopping", signum)
        done.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    if not registry.start(args.session, args.camera):
        registry.shutdown()
        return 1

    deadline = time.monotonic() + args.duration if args.duration > 0 else None
    try:
        while not done.is_set():
            timeout = 0.5
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                timeout = min(timeout, remaining)
            done.wait(timeout)
    finally:
        stats = registry.session_stats(args.session)
        if stats:
            logger.info("Session stats: %s", stats)
        registry.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
