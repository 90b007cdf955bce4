"""
=============================================================================
ACCESS LOGGING
=============================================================================

One structured record per served request, written to the
"cannedhttp.access" logger.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT FORMAT (default, common-log style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [10/Jun/2026:10:55:36 +0000] "GET /users" 200 60 0.41ms│
    │ ─────────────────────────────────────────────────────────────────── │
    │ IP          Timestamp               Path        Status Size Duration │
    └─────────────────────────────────────────────────────────────────────┘

    JSON FORMAT (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"connection_id": "a1b2c3d4", "client_ip": "127.0.0.1",             │
    │  "path": "/users", "matched": true, "content_type": "...",          │
    │  "content_length": 60, "sent": true, "duration_ms": 0.41, ...}      │
    └─────────────────────────────────────────────────────────────────────┘

"path" is what the parser extracted ("-" when the request line was
unparseable); "matched" says whether a configured route answered or the
default entry did. The status is always 200.

Connections that never produced a response (empty read, read error) are
not access-logged; the connection handler reports those as diagnostics.

=============================================================================
"""

import json
import time
import logging
from dataclasses import dataclass, asdict
from typing import Optional


logger = logging.getLogger("cannedhttp.access")


@dataclass
class RequestLog:
    """Structured log entry for one request/response cycle."""

    connection_id: str
    client_ip: str
    path: Optional[str]
    matched: bool
    content_type: str
    content_length: int
    sent: bool
    duration_ms: float
    timestamp: str
    status_code: int = 200

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        path = self.path if self.path is not None else "-"
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"GET {path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
            + ("" if self.sent else " (send failed)")
        )


class AccessLogger:
    """
    Emits RequestLog records in the configured format.

    Usage:
        access = AccessLogger(log_format="json")
        access.log(entry)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level the records are logged at.
        """
        self.log_format = log_format
        self.log_level = log_level

    @staticmethod
    def timestamp() -> str:
        return time.strftime("%d/%b/%Y:%H:%M:%S %z")

    def format(self, entry: RequestLog) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    def log(self, entry: RequestLog) -> None:
        logger.log(self.log_level, self.format(entry))
