#!/usr/bin/env python
"""
mcnotify - watches a Minecraft server log and sends email/SMS when a player joins.

Usage: mcnotify <Minecraft log file to watch>

Configuration comes from the environment (SMTP_*, TWILIO_*, USERNAME_TO_TWILIO), see config.py.
"""

import sys
import logging
from datetime import datetime
from enum import Enum

import config
from events import PlayerJoined, PlayerLeft
from log_processor import parse_log_line
from logger import setup_logging
from notifier import TransportNotifier
from presence import PresenceTracker
from router import NotificationRouter
from watchdog_handler import LogTail

logger = logging.getLogger(__name__)

class LoopState(Enum):
    STARTING = "starting"
    WATCHING = "watching"

class WatchLoop:
    """
    Pulls lines from the source one at a time and turns joins into notifications.

    Lines observed during the startup suppression interval are dropped entirely, so the
    historical log content replayed when the tail opens does not trigger anything.
    """

    def __init__(self, source, tracker, router, clock=datetime.now, startup_suppression=config.STARTUP_SUPPRESSION):
        self.source = source
        self.tracker = tracker
        self.router = router
        self.clock = clock
        self.startup_suppression = startup_suppression
        self.state = LoopState.STARTING
        self.ignore_until = None

    def start(self):
        self.ignore_until = self.clock() + self.startup_suppression
        self.state = LoopState.WATCHING
        logger.info("Watching...")

    def handle_line(self, line):
        """Processes one LogLine. Returns the parsed event, or None if the line was ignored."""
        if self.state is not LoopState.WATCHING:
            self.start()
        if line.observed_at < self.ignore_until:
            return None

        event = parse_log_line(line)
        if isinstance(event, PlayerJoined):
            logger.info(f"{event.actor} Joined!")
            if self.tracker.on_joined(event.actor, event.at):
                logger.info(f"notify of {event.actor}")
                self.router.notify_joined(event.actor)
        elif isinstance(event, PlayerLeft):
            logger.info(f"{event.actor} Left!")
            self.tracker.on_left(event.actor, event.at)
        return event

    def run(self):
        self.start()
        for line in self.source.lines():
            self.handle_line(line)

def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) != 1:
        print(config.USAGE)
        return 1
    path = argv[0]

    # Logging zuerst, damit Warnungen aus load_config in den Log-Dateien landen
    logging_enabled, logging_level = config.load_logging_options()
    setup_logging(log_level=logging_level, enable_logging=logging_enabled)
    settings = config.load_config()

    try:
        tail = LogTail(path, poll_interval=settings.poll_interval)
        tail.start()
    except OSError as e:
        print(f"Failed to tail server log: {e}", file=sys.stderr)
        return 1

    router = NotificationRouter(settings.targets(), TransportNotifier(settings), sender=settings.smtp_send_as)
    tracker = PresenceTracker(settings.debounce_window)
    loop = WatchLoop(tail, tracker, router, startup_suppression=settings.startup_suppression)

    try:
        loop.run()
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        tail.stop()
    return 0

if __name__ == "__main__":
    sys.exit(main())
