"""
Replay driver: feeds recorded classifier output through the arbitration core
"""

import argparse
import json
import logging
import sys

from controls.action_sink import LoggingActionSink
from controls.keyboard import KeyboardActionSink
from gestures.config import EngineConfig, load_config
from gestures.exceptions import ConfigurationError
from gestures.types import GestureFrame
from utils.action_coordinator import ActionCoordinator

logger = logging.getLogger("replay")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_line(line, line_number):
    """
    Parse one JSON-lines record.

    Returns:
        ('frame', GestureFrame), ('lost', actor_id) or None for blank/invalid lines
    """
    line = line.strip()
    if not line:
        return None

    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        logger.warning("Line %d: invalid JSON (%s), skipped", line_number, e)
        return None

    if not isinstance(record, dict) or 'actor' not in record:
        logger.warning("Line %d: record without 'actor', skipped", line_number)
        return None

    actor_id = record['actor']
    if actor_id is None or not isinstance(actor_id, (int, str)):
        logger.warning("Line %d: actor id %r is not an integer or string, skipped", line_number, actor_id)
        return None
    if record.get('lost'):
        return 'lost', actor_id

    gestures = record.get('gestures', {})
    if not isinstance(gestures, dict):
        logger.warning("Line %d: 'gestures' must be an object, skipped", line_number)
        return None
    return 'frame', GestureFrame.from_mapping(actor_id, gestures, timestamp=record.get('t'))


def replay(lines, coordinator):
    """
    Push every record through the coordinator.

    Returns:
        Number of actions fired
    """
    fired_count = 0
    for line_number, line in enumerate(lines, start=1):
        parsed = parse_line(line, line_number)
        if parsed is None:
            continue

        kind, payload = parsed
        if kind == 'lost':
            coordinator.on_tracking_lost(payload)
        elif coordinator.on_frame(payload) is not None:
            fired_count += 1
    return fired_count


def build_parser():
    parser = argparse.ArgumentParser(description="Replay recorded gesture frames into key presses")
    parser.add_argument("frames", help="JSON-lines file of frames ('-' for stdin)")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--dry-run", action="store_true", help="log actions instead of pressing keys")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING, ERROR")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format=LOG_FORMAT)

    print("=" * 60)
    print("Gesture Arbiter - replay")
    print("=" * 60)

    try:
        config = load_config(args.config) if args.config else EngineConfig()
    except ConfigurationError as e:
        print(f"✗ Invalid configuration: {e}")
        return 2
    print(f"✓ {len(config.gesture_classes)} gesture class(es), {config.max_concurrent_actors} player slot(s)")

    if args.dry_run:
        sink = LoggingActionSink()
    else:
        try:
            sink = KeyboardActionSink(config.key_bindings)
        except ImportError as e:
            print(f"✗ Error initializing keyboard: {e}")
            print("  Use --dry-run to replay without key presses")
            return 1
    print(f"✓ {type(sink).__name__} initialized")

    coordinator = ActionCoordinator(sink, config=config)

    try:
        stream = sys.stdin if args.frames == "-" else open(args.frames, "r", encoding="utf-8")
    except OSError as e:
        print(f"✗ Could not open frames file: {e}")
        return 1

    try:
        fired = replay(stream, coordinator)
    except KeyboardInterrupt:
        print("\nInterrupted")
        fired = None
    finally:
        coordinator.reset()
        if isinstance(sink, KeyboardActionSink):
            sink.release_all()
        if stream is not sys.stdin:
            stream.close()

    if fired is not None:
        print(f"✓ Replay finished, {fired} action(s) fired")
    return 0


if __name__ == "__main__":
    sys.exit(main())
