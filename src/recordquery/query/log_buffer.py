"""Request-scoped, severity-capped log buffer.

One ``BoundedLogger`` is created per request and passed explicitly into every
engine call. Entries land in the response envelope; the per-severity cap keeps
a pathological fan-out from flooding either the envelope or the process log.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from recordquery.utils.logging import AUDIT, get_logger
from recordquery.utils.time import utc_now_z

logger = get_logger(__name__)

DEFAULT_LOG_LIMIT = 5


class Severity(str, Enum):
    DEBUG = "debug"
    AUDIT = "audit"
    WARNING = "warning"
    ERROR = "error"
    EMERGENCY = "emergency"


_STDLIB_LEVELS = {
    Severity.DEBUG: logging.DEBUG,
    Severity.AUDIT: AUDIT,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.EMERGENCY: logging.CRITICAL,
}


@dataclass
class LogCounter:
    count: int = 0
    limit: int = DEFAULT_LOG_LIMIT


@dataclass
class LogEntry:
    timestamp: str
    severity: Severity
    title: str
    detail: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "severity": self.severity.value,
            "title": self.title,
            "detail": list(self.detail),
        }


def _render_detail(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    try:
        return json.dumps(value, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return repr(value)


class BoundedLogger:
    """
    Accumulates LogEntry values with a per-severity cap.
    
    ``log`` always increments the severity counter, but only appends (and
    mirrors to the process logger) while the counter is below its limit, so
    ``counters`` reports true totals even after entries start being dropped.
    """

    def __init__(self, limit: int = DEFAULT_LOG_LIMIT, limits: Optional[Dict[Severity, int]] = None):
        if limit < 0:
            raise ValueError(f"log limit must be >= 0, got {limit}")
        self.counters: Dict[Severity, LogCounter] = {
            severity: LogCounter(limit=(limits or {}).get(severity, limit))
            for severity in Severity
        }
        self.entries: List[LogEntry] = []

    def log(self, severity: Severity, title: str, *detail: Any) -> bool:
        """
        Record one entry.
        
        Returns:
            True if the entry was kept, False if it was dropped by the cap
        """
        severity = Severity(severity)
        counter = self.counters[severity]
        kept = counter.count < counter.limit
        counter.count += 1
        if not kept:
            return False
        rendered = [_render_detail(d) for d in detail] or [title]
        self.entries.append(LogEntry(timestamp=utc_now_z(), severity=severity, title=title, detail=rendered))
        logger.log(_STDLIB_LEVELS[severity], "%s | %s", title, " | ".join(rendered))
        return True

    def debug(self, title: str, *detail: Any) -> bool:
        return self.log(Severity.DEBUG, title, *detail)

    def audit(self, title: str, *detail: Any) -> bool:
        return self.log(Severity.AUDIT, title, *detail)

    def warning(self, title: str, *detail: Any) -> bool:
        return self.log(Severity.WARNING, title, *detail)

    def error(self, title: str, *detail: Any) -> bool:
        return self.log(Severity.ERROR, title, *detail)

    def emergency(self, title: str, *detail: Any) -> bool:
        return self.log(Severity.EMERGENCY, title, *detail)

    def count(self, severity: Severity) -> int:
        """True number of log calls made at this severity, including dropped ones."""
        return self.counters[Severity(severity)].count

    def dropped(self, severity: Severity) -> int:
        counter = self.counters[Severity(severity)]
        return max(counter.count - counter.limit, 0)

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]
