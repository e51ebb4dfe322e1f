import json
import logging
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

RED = "\033[91m"
YELLOW = "\033[93m"
GREEN = "\033[92m"
RESET = "\033[0m"
WHITE = "\033[97m"

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s.%(msecs)03d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger("booker")

LEVELS = ("log", "info", "warn", "error")

_STATUS_COLORS = {
    "error": RED,
    "warn": YELLOW,
    "warning": YELLOW,
    "good": GREEN,
    "info": GREEN,
}

_STATUS_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
}


def log_status(status, message, extra=""):
    status = status.lower()
    color = _STATUS_COLORS.get(status, WHITE)
    level = _STATUS_LEVELS.get(status, logging.INFO)

    if not extra:
        logger.log(level, f"{color}{message}{RESET}")
    else:
        logger.log(level, f"{color}{message}{extra}{RESET}")


def _render_data(data: Any) -> str:
    if isinstance(data, BaseException):
        return "".join(traceback.format_exception(type(data), data, data.__traceback__)).rstrip()
    if isinstance(data, (dict, list)):
        return json.dumps(data, indent=2, default=str)
    return str(data)


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    message: str
    test_name: Optional[str] = None
    data: Any = None

    def render(self) -> str:
        prefix = f"[{self.test_name}]" if self.test_name else ""
        line = f"[{self.timestamp}]{prefix}[{self.level.upper()}] {self.message}"
        if self.data is None:
            return line
        return f"{line}\n{_render_data(self.data)}"


class TestLogger:
    """
    Ordered, per-test log buffer.

    One instance lives for exactly one test. Every entry is echoed to the
    console through log_status() and kept so the reporting hook can attach
    the whole text to the TestRail comment. No state is shared between
    instances.
    """
    __test__ = False

    def __init__(self, test_name: Optional[str] = None):
        self.test_name = test_name
        self._entries: List[LogEntry] = []

    def set_test_name(self, name: str) -> None:
        self.test_name = name

    def _append(self, level: str, message: str, data: Any = None) -> LogEntry:
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            level=level,
            message=message,
            test_name=self.test_name,
            data=data,
        )
        self._entries.append(entry)
        log_status(level, entry.render())
        return entry

    def log(self, message: str, data: Any = None) -> LogEntry:
        return self._append("log", message, data)

    def info(self, message: str, data: Any = None) -> LogEntry:
        return self._append("info", message, data)

    def warn(self, message: str, data: Any = None) -> LogEntry:
        return self._append("warn", message, data)

    def error(self, message: str, error: Any = None) -> LogEntry:
        return self._append("error", message, error)

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def get_logs(self) -> str:
        return "\n".join(entry.render() for entry in self._entries)

    def clear(self) -> None:
        self._entries = []
