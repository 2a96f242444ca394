"""Data types flowing through the watch loop: raw log lines and the player events parsed from them."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LogLine:
    text: str
    observed_at: datetime  # when the watcher read the line, not a time parsed from it


@dataclass(frozen=True)
class PlayerEvent:
    actor: str
    at: datetime


@dataclass(frozen=True)
class PlayerJoined(PlayerEvent):
    pass


@dataclass(frozen=True)
class PlayerLeft(PlayerEvent):
    pass
