"""Logging setup shared by the CLI and the HTTP server.

Events are short snake_case names with structured `extra` fields, e.g.::

    logger.warning(
        "provider_request_failed",
        extra={"provider": "openai", "reason": reason, "status_code": 429},
    )

Levels: DEBUG for per-request provider detail, INFO for served requests,
WARNING for provider failures that fell back to local analysis and ERROR for
failures returned to the caller. Uploaded images and documents are never
logged, only their sizes.

Every line that leaves this module passes through the secret redactor, so a
provider error that echoes an API key does not leak it into the console or
the log files.
"""

import json
import logging
import os
import re
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, TextIO

DEFAULT_LOG_RETENTION_DAYS = 7
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Group 1 is the secret; the rest of the match is kept for context.
SECRET_PATTERNS: tuple[str, ...] = (
    r"\b(sk-[A-Za-z0-9_-]{20,})\b",
    r"\b(hf_[A-Za-z0-9]{20,})\b",
    r"\b(AIza[0-9A-Za-z\-_]{20,})\b",
    r"[?&]key=([A-Za-z0-9\-_]{8,})",
    r"\b[A-Z0-9_]+(?:KEY|TOKEN|SECRET|PASSWORD)\s*[=:]\s*([^\s\"']{8,})",
    r"\bBearer\s+([A-Za-z0-9._\-+=]{20,})\b",
)

QUIET_LOGGERS = ("httpx", "httpcore", "openai", "multipart", "uvicorn.access")

_RECORD_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "component"}


def _mask(secret: str) -> str:
    if len(secret) < 12:
        return "***"
    return f"{secret[:4]}...{secret[-4:]}"


class SecretRedactor:
    """Masks API keys and bearer tokens, keeping the first and last 4 chars."""

    def __init__(
        self, patterns: list[str] | None = None, *, enabled: bool = True
    ) -> None:
        self.enabled = enabled
        self._patterns = [
            re.compile(p, re.IGNORECASE) for p in (patterns or SECRET_PATTERNS)
        ]

    def redact(self, text: str) -> str:
        if not self.enabled or not text:
            return text
        for pattern in self._patterns:
            text = pattern.sub(self._replace, text)
        return text

    @staticmethod
    def _replace(match: re.Match[str]) -> str:
        whole = match.group(0)
        secret = match.group(1)
        if "..." in secret:
            return whole
        return whole.replace(secret, _mask(secret))


_redactor = SecretRedactor()


def redact(text: str) -> str:
    """Redact secrets with the shared redactor."""
    return _redactor.redact(text)


def prune_old_logs(
    logs_dir: Path,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    suffix: str = ".jsonl",
) -> int:
    """Delete ``*.jsonl`` files older than ``retention_days``; return the count."""
    if not logs_dir.is_dir():
        return 0

    cutoff = (datetime.now(UTC) - timedelta(days=retention_days)).timestamp()
    removed = 0
    for path in logs_dir.glob(f"*{suffix}"):
        try:
            if path.is_file() and path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except OSError as e:
            logging.getLogger(__name__).debug(
                "log_prune_failed", extra={"path": str(path), "error": str(e)}
            )
    return removed


def component_name(logger_name: str) -> str:
    """``playground.analysis.dispatcher`` -> ``analysis``."""
    parts = logger_name.split(".")
    if parts[0] == "playground" and len(parts) > 1:
        return parts[1]
    return parts[0]


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_FIELDS and not key.startswith("_")
    }


class ComponentFormatter(logging.Formatter):
    """Prefixes the component and appends `extra` fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        record.component = component_name(record.name)
        line = super().format(record)
        fields = extra_fields(record)
        if fields:
            line += " [" + " ".join(f"{k}={v}" for k, v in fields.items()) + "]"
        return redact(line)


class JSONLHandler(logging.Handler):
    """Appends one JSON object per record to ``<logs_dir>/YYYY-MM-DD.jsonl``."""

    def __init__(
        self, logs_dir: Path, retention_days: int = DEFAULT_LOG_RETENTION_DAYS
    ) -> None:
        super().__init__()
        logs_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir = logs_dir
        self.retention_days = retention_days
        self._day: str | None = None
        self._stream: TextIO | None = None

    def _stream_for(self, day: str) -> TextIO:
        if self._stream is None or day != self._day:
            if self._stream is not None:
                self._stream.close()
            self._day = day
            self._stream = (self.logs_dir / f"{day}.jsonl").open("a", encoding="utf-8")
            prune_old_logs(self.logs_dir, self.retention_days)
        return self._stream

    def to_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        now = datetime.now(UTC)
        entry: dict[str, Any] = {
            "ts": now.isoformat(),
            "level": record.levelname,
            "component": component_name(record.name),
            "logger": record.name,
            "message": redact(record.getMessage()),
        }
        if record.exc_info:
            formatter = self.formatter or logging.Formatter()
            entry["exception"] = redact(formatter.formatException(record.exc_info))
        fields = extra_fields(record)
        if fields:
            entry["extra"] = json.loads(redact(json.dumps(fields, default=str)))
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.to_entry(record))
            stream = self._stream_for(datetime.now(UTC).strftime("%Y-%m-%d"))
            stream.write(line + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        super().close()


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            show_path=False, markup=False, rich_tracebacks=False
        )
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
        return handler

    handler = logging.StreamHandler()
    handler.setFormatter(
        ComponentFormatter(
            "%(asctime)s | %(levelname)-8s | %(component)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    return handler


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
) -> None:
    """Install the root handlers. Call once per process.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Defaults to
            $PLAYGROUND_LOG_LEVEL, then INFO; anything else means INFO.
        use_rich: Render console output with Rich (server mode). Uvicorn's
            own loggers are routed through the same handlers.
        log_to_file: Also write JSONL files under $PLAYGROUND_HOME/logs.
    """
    from playground.config.paths import get_logs_path

    name = (level or os.environ.get("PLAYGROUND_LOG_LEVEL") or "INFO").upper()
    log_level = getattr(logging, name) if name in LOG_LEVELS else logging.INFO

    handlers = [_console_handler(use_rich)]
    if log_to_file:
        handlers.append(JSONLHandler(get_logs_path()))

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for quiet in QUIET_LOGGERS:
        logging.getLogger(quiet).setLevel(logging.WARNING)

    if use_rich:
        for uvicorn_name in ("uvicorn", "uvicorn.error"):
            uvicorn_logger = logging.getLogger(uvicorn_name)
            uvicorn_logger.handlers = list(handlers)
            uvicorn_logger.propagate = False
