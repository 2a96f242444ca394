import unittest
import sys
import os
from datetime import datetime

# Pfad zum Projektverzeichnis hinzufügen, damit die Module importiert werden können
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import log_processor
from events import LogLine, PlayerJoined, PlayerLeft


T0 = datetime(2025, 3, 1, 12, 0, 0)


def line(text):
    return LogLine(text=text, observed_at=T0)


class TestLogProcessor(unittest.TestCase):
    """Testklasse für das Erkennen von Join/Leave-Zeilen"""

    def test_join_line(self):
        """Join-Zeile liefert PlayerJoined mit Zeitstempel der Zeile"""
        event = log_processor.parse_log_line(line("[12:00:00] [Server thread/INFO]: Steve joined the game"))
        self.assertEqual(event, PlayerJoined(actor="Steve", at=T0))

    def test_left_line(self):
        """Leave-Zeile liefert PlayerLeft"""
        event = log_processor.parse_log_line(line("[12:05:00] [Server thread/INFO]: Alex_99 left the game"))
        self.assertIsInstance(event, PlayerLeft)
        self.assertEqual(event.actor, "Alex_99")
        self.assertEqual(event.at, T0)

    def test_valid_names(self):
        """Alle erlaubten Namen (1-16 Zeichen, alphanumerisch und Unterstrich) werden erkannt"""
        for name in ("a", "Z", "_", "0", "Player_1", "ABCDEFGHIJKLMNOP", "abc_DEF_0123_xyz"):
            with self.subTest(name=name):
                event = log_processor.parse_log_line(line(f"[Server thread/INFO]: {name} joined the game"))
                self.assertEqual(event, PlayerJoined(actor=name, at=T0))

    def test_invalid_names(self):
        """Namen mit unerlaubten Zeichen oder zu lang werden nicht erkannt"""
        for name in ("Bad-Name", "bad.name", "Sp ace", "ABCDEFGHIJKLMNOPQ", "Stéve", ""):
            with self.subTest(name=name):
                self.assertIsNone(log_processor.parse_log_line(line(f"[Server thread/INFO]: {name} joined the game")))
                self.assertIsNone(log_processor.parse_log_line(line(f"[Server thread/INFO]: {name} left the game")))

    def test_unrelated_lines(self):
        """Andere Zeilen liefern None"""
        for text in (
            "",
            "[12:00:00] [Server thread/INFO]: Starting minecraft server version 1.20.4",
            "[12:00:00] [Server thread/INFO]: Steve lost connection: Disconnected",
            "[12:00:00] [Server thread/WARN]: Steve joined the game",
            "[12:00:00] [User Authenticator #1/INFO]: UUID of player Steve is 069a79f4",
            "[12:00:00] [Server thread/INFO]: Steve joined the gam",
        ):
            with self.subTest(text=text):
                self.assertIsNone(log_processor.parse_log_line(line(text)))

    def test_rule_table_order(self):
        """Die Join-Regel steht vor der Leave-Regel"""
        self.assertIs(log_processor.EVENT_RULES[0][1], PlayerJoined)
        self.assertIs(log_processor.EVENT_RULES[1][1], PlayerLeft)


if __name__ == "__main__":
    unittest.main()
