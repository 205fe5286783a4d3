"""
Audit trail for an appraisal run.

Every component (CLI, aggregator, report service, generative client) writes
through one AuditLogger so a run can be followed end to end: which domain was
submitted, which report kinds were requested, when the generative service
failed and when a report fell back to local scoring.

The generative service is called with a bearer key and the config file holds
that key, so anything that looks like a credential is replaced with
MASK_VALUE before it is stored or written. Entries stay in memory for the
lifetime of the logger; the CLI reads them back after a run.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO, Union
from urllib.parse import urlsplit, urlunsplit

from domain_appraiser.enums import LogLevel


LEVEL_ORDER = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}

OUTPUT_FORMATS = ("json", "text", "both")

# Substrings; "auth" also covers "Authorization" headers
CREDENTIAL_MARKERS = frozenset({
    'token', 'secret', 'password', 'api_key', 'apikey',
    'auth', 'bearer', 'credential', 'private_key',
})


def _is_credential(key: Any) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in CREDENTIAL_MARKERS)


def _scrub(value: Any, mask: str) -> Any:
    if isinstance(value, dict):
        return {
            key: mask if _is_credential(key) else _scrub(item, mask)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(item, mask) for item in value]
    return value


def redact_url(url: str, mask: str) -> str:
    """Mask credential query parameters (e.g. ?api_key=...) and userinfo in a URL."""
    parts = urlsplit(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = f"{mask}@{netloc.rsplit('@', 1)[1]}"

    pairs = []
    for pair in parts.query.split("&") if parts.query else []:
        name, sep, _ = pair.partition("=")
        pairs.append(f"{name}={mask}" if sep and _is_credential(name) else pair)

    return urlunsplit((parts.scheme, netloc, parts.path, "&".join(pairs), parts.fragment))


@dataclass
class LogEntry:
    """One audit record; `data` is already scrubbed."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)


class AuditLogger:
    """
    In-memory audit trail with JSON and/or text output.

    Components are identified by name ("aggregator", "generative_client",
    ...). The CLI builds one logger from the `logging` config section and
    hands it to everything it constructs.
    """

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        min_level: Union[LogLevel, str] = LogLevel.INFO,
    ):
        """
        Args:
            output_format: 'json', 'text' or 'both' (JSON line first)
            output_stream: Where lines go; stderr keeps stdout free for reports
            min_level: Lower-severity entries are dropped, not just hidden
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._stream = output_stream or sys.stderr
        self._min_level = LogLevel(min_level) if isinstance(min_level, str) else min_level
        self._entries: list[LogEntry] = []

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def min_level(self) -> LogLevel:
        return self._min_level

    @property
    def entries(self) -> list[LogEntry]:
        """Snapshot of the trail so far."""
        return list(self._entries)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_ORDER[level] >= LEVEL_ORDER[self._min_level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """Record and write one entry; returns None when `level` is filtered out."""
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)
        self._write(entry)
        return entry

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record a failed operation, typically a generative service call.

        Appraiser errors contribute their code and details; the request URL
        is written with credential query parameters masked.
        """
        data = dict(additional_data or {})

        if error is not None:
            data["error_message"] = str(error)
            data["error_type"] = type(error).__name__
            code = getattr(error, "code", None)
            if code is not None:
                data["error_code"] = code
            details = getattr(error, "details", None)
            if details:
                data["error_details"] = details

        if request_url is not None:
            data["request_url"] = redact_url(request_url, self.MASK_VALUE)
        if response_status_code is not None:
            data["response_status_code"] = response_status_code

        return self.log(LogLevel.ERROR, component, message, data)

    def mask_sensitive_data(self, data: dict) -> dict:
        """Copy of `data` with credential-like keys masked at any depth."""
        if not isinstance(data, dict):
            return data
        return _scrub(data, self.MASK_VALUE)

    def _write(self, entry: LogEntry) -> None:
        if self._output_format in ("json", "both"):
            self._stream.write(self.format_json(entry) + "\n")
        if self._output_format in ("text", "both"):
            self._stream.write(self.format_text(entry) + "\n")
        self._stream.flush()

    def format_json(self, entry: LogEntry) -> str:
        return json.dumps({
            "timestamp": entry.timestamp,
            "level": entry.level.value,
            "component": entry.component,
            "message": entry.message,
            "data": entry.data,
        }, ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        """`[timestamp] LEVEL [component] message {data}`"""
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line

    def clear_entries(self) -> None:
        self._entries.clear()
