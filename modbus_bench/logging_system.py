"""Event and request logging for the Modbus slave and master.

LogManager keeps two bounded histories in memory: operator-facing events
(levels DEBUG..CRITICAL) and the protocol requests seen by the slave.
Events are also appended to a JSON-lines file so the TUI and dashboard
can show history across restarts.
"""

import json
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_FILE = "logs/server_events.jsonl"


def format_clock(timestamp: float) -> str:
    """HH:MM:SS.mmm for a UNIX timestamp."""
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S.%f")[:-3]


@dataclass
class EventEntry:
    timestamp: float
    level: str
    message: str

    def get_formatted_time(self) -> str:
        return format_clock(self.timestamp)

    def format(self) -> str:
        return f"{self.get_formatted_time()} [{self.level}] {self.message}"


@dataclass
class RequestLogEntry:
    """One request as decoded by the slave, before any handling."""
    timestamp: float
    kind: str  # Table key: "coils", "discrete_inputs", ...
    unit_id: int
    address: int
    quantity: int
    is_write: bool = False
    args: List[Any] = field(default_factory=list)

    def get_formatted_time(self) -> str:
        return format_clock(self.timestamp)

    def describe(self) -> str:
        action = "write" if self.is_write else "read"
        text = f"{action} {self.kind} unit={self.unit_id} addr={self.address} qty={self.quantity}"
        if self.is_write:
            text += f" args={self.args}"
        return text


class EventFile:
    """JSON-lines event file with a single ``.old`` generation."""

    def __init__(self, path: Path):
        self.path = path
        self.backup = Path(str(path) + '.old')

    def append(self, entry: EventEntry) -> None:
        record = {
            'timestamp': entry.timestamp,
            'level': entry.level,
            'message': entry.message,
            'formatted_time': entry.get_formatted_time(),
        }
        with open(self.path, 'a') as f:
            f.write(json.dumps(record) + '\n')

    def history(self) -> Iterator[EventEntry]:
        """Entries from the backup, then the current file, oldest first.

        Lines that are not valid entries are skipped.
        """
        for path in (self.backup, self.path):
            if not path.exists():
                continue
            with open(path, 'r') as f:
                for line in f:
                    try:
                        record = json.loads(line)
                        yield EventEntry(record['timestamp'], record['level'], record['message'])
                    except (json.JSONDecodeError, KeyError, TypeError):
                        continue

    def line_count(self) -> int:
        if not self.path.exists():
            return 0
        with open(self.path, 'r') as f:
            return sum(1 for _ in f)

    def rotate(self) -> None:
        """Move the current file to ``.old``, replacing any previous backup."""
        self.path.replace(self.backup)


class LogManager:
    """Bounded event and request logs, persisted events and log subscribers.

    Safe to call from the request, simulator and UI threads at once.
    """

    def __init__(
        self,
        max_entries: int = 3000,
        log_file: Optional[str] = None,
        debug_mode: bool = False,
        persist: bool = True,
    ):
        """Initialize log manager.

        Args:
            max_entries: Entries kept per history, and lines per file before rotation
            log_file: Event file path (default: logs/server_events.jsonl)
            debug_mode: Keep DEBUG events instead of dropping them
            persist: Append events to log_file and preload its history
        """
        self.max_entries = max_entries
        self.debug_mode = debug_mode
        self.persist = persist
        self.log_file = Path(log_file or DEFAULT_LOG_FILE)
        self.event_logs: deque = deque(maxlen=max_entries)
        self.request_logs: deque = deque(maxlen=max_entries)

        self._file = EventFile(self.log_file)
        self._once_keys: set = set()
        self._subscribers: List[Callable[[EventEntry], None]] = []
        self._lock = threading.Lock()

        if persist:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self._preload()

    def add_subscriber(self, callback: Callable[[EventEntry], None]) -> None:
        """Call callback with every event recorded from now on.

        Callbacks run on whichever thread logged the event.
        """
        with self._lock:
            self._subscribers.append(callback)

    # Requests

    def log_request(
        self,
        kind: str,
        unit_id: int,
        address: int,
        quantity: int,
        is_write: bool = False,
        args: Optional[List[Any]] = None,
    ) -> RequestLogEntry:
        entry = RequestLogEntry(time.time(), kind, unit_id, address, quantity, is_write, list(args or []))
        self.request_logs.append(entry)
        self.debug(f"Request: {entry.describe()}")
        return entry

    def get_recent_requests(self, count: int = 10) -> List[RequestLogEntry]:
        return list(self.request_logs)[-count:]

    # Events

    def log_event(self, level: str, message: str) -> None:
        """Record an event at one of LEVELS (case-insensitive).

        Raises:
            ValueError: If level is not a known level
        """
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        if level == "DEBUG" and not self.debug_mode:
            return

        entry = EventEntry(time.time(), level, message)
        self.event_logs.append(entry)

        with self._lock:
            if self.persist:
                try:
                    self._file.append(entry)
                except OSError:
                    # A full disk must not take the slave down
                    pass
            subscribers = list(self._subscribers)

        for callback in subscribers:
            callback(entry)

    def debug(self, message: str) -> None:
        """Dropped unless debug_mode is on."""
        self.log_event("DEBUG", message)

    def info(self, message: str) -> None:
        self.log_event("INFO", message)

    def warning(self, message: str) -> None:
        self.log_event("WARNING", message)

    def error(self, message: str) -> None:
        self.log_event("ERROR", message)

    def critical(self, message: str) -> None:
        self.log_event("CRITICAL", message)

    def log_once(self, level: str, message: str) -> bool:
        """Record level+message the first time only.

        Returns:
            bool: Whether the event was recorded
        """
        key = (level.upper(), message)
        with self._lock:
            if key in self._once_keys:
                return False
            self._once_keys.add(key)
        self.log_event(level, message)
        return True

    def warning_once(self, message: str) -> bool:
        return self.log_once("WARNING", message)

    def error_once(self, message: str) -> bool:
        return self.log_once("ERROR", message)

    def clear_logged_once(self) -> None:
        with self._lock:
            self._once_keys.clear()

    def get_recent_events(self, count: int = 50) -> List[EventEntry]:
        return list(self.event_logs)[-count:]

    # Persistence

    def rotate_log_file(self) -> None:
        """Start a new event file once the current one exceeds max_entries lines."""
        if not self.persist:
            return

        with self._lock:
            try:
                if self._file.line_count() > self.max_entries:
                    self._file.rotate()
                return
            except OSError as e:
                problem = f"Could not rotate {self.log_file}: {e}"
        self.warning(problem)

    def _preload(self) -> None:
        try:
            self.event_logs.extend(self._file.history())
        except OSError as e:
            self.event_logs.append(EventEntry(time.time(), "WARNING", f"Could not load {self.log_file}: {e}"))
