import re
from typing import Optional

from events import LogLine, PlayerEvent, PlayerJoined, PlayerLeft


ACTOR_NAME = r"(?P<actor>[A-Za-z0-9_]{1,16})"

JOIN_REGEX = re.compile(r"Server thread/INFO\]: " + ACTOR_NAME + r" joined the game")
LEFT_REGEX = re.compile(r"Server thread/INFO\]: " + ACTOR_NAME + r" left the game")

# Reihenfolge zählt: die erste passende Regel gewinnt
EVENT_RULES = (
    (JOIN_REGEX, PlayerJoined),
    (LEFT_REGEX, PlayerLeft),
)

def parse_log_line(line: LogLine) -> Optional[PlayerEvent]:
    """
    Maps a single log line to a PlayerJoined/PlayerLeft event stamped with the line's observed time.
    Returns None for every other line.
    """
    for pattern, event_type in EVENT_RULES:
        match = pattern.search(line.text)
        if match:
            return event_type(actor=match.group("actor"), at=line.observed_at)
    return None
