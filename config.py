import os
import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

APP_NAME = "mcnotify"

# Hilfsfunktion, um den richtigen Pfad für Anwendungsdaten zu bestimmen
def get_app_data_path():
    """Returns the per-user data directory for mcnotify (APPDATA, XDG_STATE_HOME or ~/.local/state)."""
    if os.environ.get('APPDATA'):
        return os.path.join(os.environ['APPDATA'], APP_NAME)
    state_home = os.environ.get('XDG_STATE_HOME') or os.path.join(os.path.expanduser('~'), ".local", "state")
    return os.path.join(state_home, APP_NAME)

# Anwendungsverzeichnis für Daten
APP_DATA_PATH = get_app_data_path()

# Logging folders
LOG_FOLDER = os.path.join(APP_DATA_PATH, "Logs")
ERROR_LOG_FOLDER = os.path.join(LOG_FOLDER, "errors")
GENERAL_LOG_FOLDER = os.path.join(LOG_FOLDER, "general")
DEBUG_LOG_FOLDER = os.path.join(LOG_FOLDER, "debug")

# Default/Global values
LOGGING_ENABLED = True   # Datei-Logging, die Konsole bekommt immer die Statuszeilen
LOGGING_LEVEL = "INFO"
DEBOUNCE_WINDOW = timedelta(minutes=7)
STARTUP_SUPPRESSION = timedelta(seconds=5)
POLL_INTERVAL = 1.0      # Sekunden, falls ein Dateisystem-Event verloren geht
DEFAULT_SMTP_PORT = 465  # SMTP über implizites TLS

USAGE = "mcnotify <Minecraft log file to watch>"


@dataclass(frozen=True)
class NotificationTargets:
    """Static recipients, loaded once at startup and read-only afterwards."""
    email_recipients: Tuple[str, ...] = ()
    sms_recipients: Tuple[str, ...] = ()
    phone_by_actor: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def phone_for(self, actor: str) -> Optional[str]:
        return self.phone_by_actor.get(actor)


@dataclass
class Settings:
    smtp_host: str = ""
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_send_as: str = ""
    smtp_to_notify: List[str] = field(default_factory=list)
    twilio_phone: str = ""
    twilio_sid: str = ""
    twilio_token: str = ""
    twilio_to_notify: List[str] = field(default_factory=list)
    username_to_twilio: Dict[str, str] = field(default_factory=dict)
    debounce_window: timedelta = DEBOUNCE_WINDOW
    startup_suppression: timedelta = STARTUP_SUPPRESSION
    poll_interval: float = POLL_INTERVAL
    logging_enabled: bool = LOGGING_ENABLED
    logging_level: str = LOGGING_LEVEL

    def targets(self) -> NotificationTargets:
        return NotificationTargets(
            email_recipients=tuple(self.smtp_to_notify),
            sms_recipients=tuple(self.twilio_to_notify),
            phone_by_actor=MappingProxyType(dict(self.username_to_twilio)),
        )


def split_list(value):
    """Splits a comma-separated option, dropping blanks: "a, b,," -> ["a", "b"]."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_phone_map(raw):
    """
    Decodes USERNAME_TO_TWILIO (a JSON object actor -> phone number).

    Malformed input is not fatal: a warning is logged and an empty mapping returned.
    """
    if not raw or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Error decoding USERNAME_TO_TWILIO: {e}")
        return {}
    if not isinstance(decoded, dict):
        logger.warning(f"Error decoding USERNAME_TO_TWILIO: expected a JSON object, got {type(decoded).__name__}")
        return {}

    phone_map = {}
    for actor, phone in decoded.items():
        if not isinstance(phone, str):
            logger.warning(f"USERNAME_TO_TWILIO: Eintrag für {actor} ist keine Telefonnummer, wird ignoriert")
            continue
        phone_map[str(actor)] = phone.strip()
    return phone_map


def _parse_number(environ, name, parse, default, minimum=0):
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = parse(raw)
    except ValueError:
        logger.warning(f"Ungültiger Wert für {name}: {raw!r}, verwende Standard {default}")
        return default
    # Begrenze auf sinnvolle Werte
    return max(minimum, value)


def load_logging_options(environ=None):
    """
    Returns (logging_enabled, logging_level) from the environment.
    Never logs, so it can run before logging is set up.
    """
    if environ is None:
        environ = os.environ
    enabled = environ.get("MCNOTIFY_LOGGING_ENABLED", "").strip().lower()
    level = environ.get("MCNOTIFY_LOGGING_LEVEL", "").strip().upper()
    return (LOGGING_ENABLED if not enabled else enabled == "true"), (level or LOGGING_LEVEL)


def load_config(environ=None) -> Settings:
    """Reads the environment into a Settings object. Called once at startup."""
    if environ is None:
        environ = os.environ

    debounce_minutes = _parse_number(
        environ, "MCNOTIFY_DEBOUNCE_MINUTES", float, DEBOUNCE_WINDOW.total_seconds() / 60)
    grace_seconds = _parse_number(
        environ, "MCNOTIFY_STARTUP_GRACE_SECONDS", float, STARTUP_SUPPRESSION.total_seconds())
    poll_interval = _parse_number(
        environ, "MCNOTIFY_POLL_INTERVAL", float, POLL_INTERVAL, minimum=0.05)

    logging_enabled, logging_level = load_logging_options(environ)
    settings = Settings(
        smtp_host=environ.get("SMTP_HOST", "").strip(),
        smtp_port=_parse_number(environ, "SMTP_PORT", int, DEFAULT_SMTP_PORT, minimum=1),
        smtp_user=environ.get("SMTP_USER", ""),
        smtp_pass=environ.get("SMTP_PASS", ""),
        smtp_send_as=environ.get("SMTP_SEND_AS", "").strip(),
        smtp_to_notify=split_list(environ.get("SMTP_TO_NOTIFY", "")),
        twilio_phone=environ.get("TWILIO_PHONE", "").strip(),
        twilio_sid=environ.get("TWILIO_SID", "").strip(),
        twilio_token=environ.get("TWILIO_TOKEN", ""),
        twilio_to_notify=split_list(environ.get("TWILIO_TO_NOTIFY", "")),
        username_to_twilio=parse_phone_map(environ.get("USERNAME_TO_TWILIO", "")),
        debounce_window=timedelta(minutes=debounce_minutes),
        startup_suppression=timedelta(seconds=grace_seconds),
        poll_interval=poll_interval,
        logging_enabled=logging_enabled,
        logging_level=logging_level,
    )

    if not settings.smtp_host and settings.smtp_to_notify:
        logger.warning("SMTP_TO_NOTIFY ist gesetzt, aber SMTP_HOST fehlt - E-Mails werden fehlschlagen")
    if not settings.twilio_sid and settings.twilio_to_notify:
        logger.warning("TWILIO_TO_NOTIFY ist gesetzt, aber TWILIO_SID fehlt - SMS werden fehlschlagen")

    return settings
