import threading
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

import config

# Logger für diese Datei einrichten
logger = logging.getLogger(__name__)

class PresenceTracker:
    """
    Remembers when each player was last seen and decides whether a join is worth a notification.

    A join notifies only if the player has been away for at least the debounce window, which turns
    the reconnect noise of the server log (every network blip produces a fresh "joined the game")
    into a coarser "player actually arrived" signal. State lives in memory for the process lifetime.
    """

    def __init__(self, debounce_window: timedelta = config.DEBOUNCE_WINDOW):
        self.debounce_window = debounce_window
        self._last_seen: Dict[str, datetime] = {}
        # Entscheidung und Aktualisierung müssen zusammen passieren
        self._lock = threading.Lock()

    def on_joined(self, actor: str, at: datetime) -> bool:
        """Records the join and returns True if a notification should be sent for it."""
        with self._lock:
            previous = self._last_seen.get(actor)
            should_notify = previous is None or previous + self.debounce_window <= at
            self._last_seen[actor] = at

        if not should_notify:
            logger.debug(f"{actor} war zuletzt um {previous} aktiv, keine Benachrichtigung")
        return should_notify

    def on_left(self, actor: str, at: datetime) -> None:
        with self._lock:
            self._last_seen[actor] = at

    def last_seen(self, actor: str) -> Optional[datetime]:
        with self._lock:
            return self._last_seen.get(actor)

    def __len__(self):
        with self._lock:
            return len(self._last_seen)
