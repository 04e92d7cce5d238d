import json
import sys
import threading
from enum import IntEnum

from utils.timestamp import format_timestamp


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def parse(cls, name):
        name = name.upper()
        if name == "WARNING":
            name = "WARN"
        return cls[name]


_logger = None
_logger_lock = threading.Lock()


class StructuredLogger:
    def __init__(self, level=LogLevel.INFO, name="ksuid"):
        self.level = level
        self.name = name

    def _emit(self, level, message, error=None, **kwargs):
        if level < self.level:
            return
        try:
            record = {
                "timestamp": format_timestamp(),
                "level": level.name,
                "logger": self.name,
                "msg": message,
                **kwargs,
            }
            if error:
                record["err"] = str(error)
            print(json.dumps(record, default=str), file=sys.stderr, flush=True)
        except Exception:
            pass

    def debug(self, message, **kwargs):
        self._emit(LogLevel.DEBUG, message, **kwargs)

    def info(self, message, **kwargs):
        self._emit(LogLevel.INFO, message, **kwargs)

    def warn(self, message, error=None, **kwargs):
        self._emit(LogLevel.WARN, message, error, **kwargs)

    def error(self, message, error=None, **kwargs):
        self._emit(LogLevel.ERROR, message, error, **kwargs)

    @classmethod
    def configure(cls, min_level=LogLevel.INFO):
        global _logger
        with _logger_lock:
            _logger = cls(min_level)


def get_logger():
    global _logger
    if _logger is None:
        with _logger_lock:
            if _logger is None:
                _logger = StructuredLogger()
    return _logger
