from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from datetime import datetime
from collections import deque
import threading
import logging
import os

import config
from events import LogLine

logger = logging.getLogger(__name__)

class LogFileNotFoundError(FileNotFoundError):
    """The log file to watch does not exist at startup. Fatal."""
    pass

class GameLogHandler(FileSystemEventHandler):
    """Wakes the tail whenever the watched log is modified, created, moved or deleted."""

    def __init__(self, log_path, wakeup):
        super().__init__()
        self.log_path = os.path.normcase(os.path.abspath(log_path))
        self.wakeup = wakeup

    def _is_log(self, path):
        if not path:
            return False
        return os.path.normcase(os.path.abspath(os.fsdecode(path))) == self.log_path

    def on_modified(self, event):
        if event.is_directory:
            return
        if self._is_log(event.src_path):
            self.wakeup.set()

    def on_created(self, event):
        if event.is_directory:
            return
        if self._is_log(event.src_path):
            self.wakeup.set()

    def on_moved(self, event):
        if event.is_directory:
            return
        if self._is_log(event.src_path) or self._is_log(event.dest_path):
            self.wakeup.set()

    def on_deleted(self, event):
        if event.is_directory:
            return
        if self._is_log(event.src_path):
            self.wakeup.set()

class LogTail:
    """
    Follows a growing log file like `tail -F` and yields its lines as LogLine objects.

    - Lines are delivered in append order, each stamped with the clock time it was read.
    - If the file is replaced (log rotation), the old file is read to its end first and then
      the new one is opened and read from the start.
    - If the file is truncated or rewritten in place (copytruncate), the tail rewinds to the
      start of the new content. Besides a shrinking size this is detected by re-reading the
      last bytes already consumed before every disk read: if they changed, the content did too.
    - Waiting for new data blocks on a watchdog notification, with `poll_interval` as an
      upper bound so a missed file system event only delays delivery.

    A missing file at construction raises LogFileNotFoundError. Anything that goes wrong
    later (file briefly gone, read errors) is logged and retried.
    """

    CHUNK_SIZE = 64 * 1024
    FINGERPRINT_SIZE = 64

    def __init__(self, path, clock=datetime.now, poll_interval=config.POLL_INTERVAL, seek_end=False):
        self.path = os.path.abspath(path)
        if not os.path.isfile(self.path):
            raise LogFileNotFoundError(f"Log file does not exist: {self.path}")
        self.clock = clock
        self.poll_interval = poll_interval
        self.seek_end = seek_end

        self._wakeup = threading.Event()
        self._stopped = threading.Event()
        self._observer = None
        self._file = None
        self._file_id = None
        self._lines = deque()     # vollständige, noch nicht gelieferte Zeilen
        self._partial = b""       # angefangene Zeile ohne Zeilenende
        self._fingerprint = b""   # die zuletzt gelesenen Bytes, enden an der Leseposition
        self._missing = False

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()

    def start(self):
        """Opens the log and starts the watchdog observer on its directory."""
        if self._file is not None or self._stopped.is_set():
            return self
        self._open(seek_end=self.seek_end)

        try:
            observer = Observer()
            observer.schedule(GameLogHandler(self.path, self._wakeup), os.path.dirname(self.path), recursive=False)
            observer.start()
        except OSError as e:
            logger.warning(f"Dateisystem-Überwachung nicht verfügbar ({e}), prüfe alle {self.poll_interval}s")
        else:
            self._observer = observer

        logger.debug(f"Starting to tail log: {self.path}")
        return self

    def stop(self):
        self._stopped.set()
        self._wakeup.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        self._close_file()

    def lines(self):
        """Infinite generator of LogLine objects; ends only after stop()."""
        self.start()
        while not self._stopped.is_set():
            if self._lines:
                raw = self._lines.popleft()
                text = raw.decode("utf-8", errors="replace").rstrip("\r")
                yield LogLine(text=text, observed_at=self.clock())
                continue

            if self._file is None:
                break
            try:
                if self._check_rewritten():
                    continue
                chunk = self._file.read(self.CHUNK_SIZE)
            except ValueError:
                # Datei wurde durch stop() geschlossen
                break
            except OSError as e:
                logger.warning(f"Lesefehler in {self.path}: {e}")
                chunk = b""

            if chunk:
                self._consume(chunk)
                continue

            if self._check_replaced():
                continue
            self._wait()

    def _consume(self, chunk):
        self._fingerprint = (self._fingerprint + chunk)[-self.FINGERPRINT_SIZE:]
        *complete, self._partial = (self._partial + chunk).split(b"\n")
        self._lines.extend(complete)

    def _wait(self):
        if self._wakeup.wait(self.poll_interval):
            self._wakeup.clear()

    def _open(self, seek_end=False):
        try:
            f = open(self.path, "rb", buffering=0)
        except FileNotFoundError as e:
            raise LogFileNotFoundError(f"Log file does not exist: {self.path}") from e
        stat = os.fstat(f.fileno())
        if seek_end:
            f.seek(0, os.SEEK_END)
        self._close_file()
        self._file = f
        self._file_id = (stat.st_dev, stat.st_ino)
        self._reset()

    def _reset(self):
        self._lines.clear()
        self._partial = b""
        self._fingerprint = b""

    def _close_file(self):
        if self._file is not None:
            try:
                self._file.close()
            except OSError as e:
                logger.debug(f"Fehler beim Schließen von {self.path}: {e}")
            self._file = None

    def _check_rewritten(self):
        """
        Returns True if the open file was truncated or overwritten in place; reading then restarts at 0.
        Only called when every complete line read so far has been delivered.
        """
        position = self._file.tell()
        if os.fstat(self._file.fileno()).st_size < position:
            logger.info(f"{self.path}: File truncated, reading from the start")
        elif self._fingerprint:
            self._file.seek(position - len(self._fingerprint))
            current = self._file.read(len(self._fingerprint))
            self._file.seek(position)
            if current == self._fingerprint:
                return False
            logger.info(f"{self.path}: File rewritten, reading from the start")
        else:
            return False

        self._file.seek(0)
        self._reset()
        return True

    def _check_replaced(self):
        """Returns True if the path now points to a different file, which has been opened instead."""
        try:
            stat = os.stat(self.path)
        except FileNotFoundError:
            if not self._missing:
                logger.warning(f"{self.path} ist verschwunden, warte auf neue Datei")
                self._missing = True
            return False
        except OSError as e:
            logger.warning(f"Konnte {self.path} nicht prüfen: {e}")
            return False

        if self._missing:
            logger.info(f"{self.path} ist wieder da")
            self._missing = False

        if (stat.st_dev, stat.st_ino) == self._file_id:
            return False

        logger.info(f"{self.path}: File replaced, reopening...")
        try:
            self._open()
        except OSError as e:
            logger.warning(f"Konnte {self.path} nicht neu öffnen: {e}")
            return False
        return True
