"""
Logging utility with timestamps and timing support.
Provides structured, colourful console output for consent handling stages.
Optionally writes logs to a timestamped file when WRITE_TO_FILE is set.

All mutable per-page state (timers, log buffer, log-file handle)
is stored in ``contextvars.ContextVar`` so that several pages driven
from one event loop do not interleave each other's buffers.
"""

from __future__ import annotations

import contextvars
import io
import os
import pathlib
import re
import sys
import time
from datetime import UTC, datetime

# ============================================================================
# Per-page state (isolated via contextvars)
# ============================================================================

_timers_var: contextvars.ContextVar[dict[str, tuple[float, str]]] = contextvars.ContextVar("_timers_var")
_log_buffer_var: contextvars.ContextVar[list[str]] = contextvars.ContextVar("_log_buffer_var")
_log_file_stream_var: contextvars.ContextVar[io.TextIOWrapper | None] = contextvars.ContextVar("_log_file_stream_var", default=None)

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")


def _get_timers() -> dict[str, tuple[float, str]]:
    """Return the per-context timer dict, creating it on first access."""
    try:
        return _timers_var.get()
    except LookupError:
        timers: dict[str, tuple[float, str]] = {}
        _timers_var.set(timers)
        return timers


def _get_log_buffer() -> list[str]:
    """Return the per-context log buffer, creating it on first access."""
    try:
        return _log_buffer_var.get()
    except LookupError:
        buf: list[str] = []
        _log_buffer_var.set(buf)
        return buf


def get_log_buffer() -> list[str]:
    """Return a copy of the accumulated log lines (ANSI-stripped)."""
    return list(_get_log_buffer())


def clear_log_buffer() -> None:
    """Clear the in-memory log buffer and timers."""
    _get_log_buffer().clear()
    _get_timers().clear()


# ============================================================================
# Level filtering
# ============================================================================

_level_rank = {
    "debug": 10,
    "timing": 10,
    "info": 20,
    "success": 20,
    "warn": 30,
    "error": 40,
}


def _min_rank() -> int:
    """Return the minimum rank that is emitted, from ``LOG_LEVEL``."""
    level = os.environ.get("LOG_LEVEL", "debug").lower()
    if level == "warning":
        level = "warn"
    return _level_rank.get(level, 10)


# ============================================================================
# File Logging
# ============================================================================


def _write_to_file_enabled() -> bool:
    return os.environ.get("WRITE_TO_FILE", "").lower() == "true"


def start_log_file(host: str) -> None:
    """Start a new log file for the page at *host*."""
    if not _write_to_file_enabled():
        return

    end_log_file()

    logs_dir = pathlib.Path.cwd() / ".logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    safe_host = host.removeprefix("www.")
    safe_host = "".join(c if c.isalnum() or c in ".-" else "_" for c in safe_host)[:50] or "page"

    now = datetime.now(UTC)
    log_file_path = logs_dir / f"{safe_host}_{now.strftime('%Y-%m-%d_%H-%M-%S')}.log"

    try:
        stream = open(log_file_path, "a", encoding="utf-8")  # noqa: SIM115
    except OSError as exc:
        print(f"\033[31m✗ [Logger] Failed to open log file: {exc}\033[0m", file=sys.stderr)
        return

    _log_file_stream_var.set(stream)
    stream.write(f"\n{'=' * 80}\n  Consent Log - {host}\n  Started: {now.isoformat()}\n{'=' * 80}\n")


def end_log_file() -> None:
    """Flush and close the current log file."""
    stream = _log_file_stream_var.get(None)
    if stream is not None:
        try:
            stream.flush()
            stream.close()
        except Exception:
            print("\033[33m⚠ [Logger] Failed to flush/close log file stream\033[0m", file=sys.stderr)
        _log_file_stream_var.set(None)


def _write_to_log_file(line: str) -> None:
    """Write a line to the log file (without ANSI colours)."""
    stream = _log_file_stream_var.get(None)
    if stream is None:
        return
    stream.write(_ANSI_RE.sub("", line) + "\n")
    stream.flush()


# ============================================================================
# ANSI Colours
# ============================================================================

_colours = {
    "reset": "\033[0m",
    "bright": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "red": "\033[31m",
    "magenta": "\033[35m",
    "gray": "\033[90m",
}

_level_colour = {
    "info": _colours["cyan"],
    "success": _colours["green"],
    "warn": _colours["yellow"],
    "error": _colours["red"],
    "debug": _colours["gray"],
    "timing": _colours["magenta"],
}

_level_symbol = {
    "info": "ℹ",
    "success": "✓",
    "warn": "⚠",
    "error": "✗",
    "debug": "•",
    "timing": "⏱",
}


def _get_timestamp() -> str:
    """Return the current UTC time as HH:MM:SS.mmm."""
    now = datetime.now(UTC)
    return now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"


def _format_duration(ms: float) -> str:
    """Format a duration in milliseconds for display."""
    if ms < 1000:
        return f"{int(ms)}ms"
    return f"{ms / 1000:.2f}s"


def _format_value(value: object) -> str:
    """Return an ANSI-coloured representation of *value*."""
    c = _colours
    if value is None:
        return f"{c['dim']}None{c['reset']}"
    if isinstance(value, bool):
        return f"{c['green']}True{c['reset']}" if value else f"{c['red']}False{c['reset']}"
    if isinstance(value, (int, float)):
        return f"{c['yellow']}{value}{c['reset']}"
    if isinstance(value, str):
        display = value[:197] + "..." if len(value) > 200 else value
        return f'{c["green"]}"{display}"{c["reset"]}'
    if isinstance(value, list):
        return f"{c['cyan']}[{len(value)} items]{c['reset']}"
    return str(value)


# ============================================================================
# Logger Class
# ============================================================================


class Logger:
    """Structured logger with context prefix and timing support."""

    def __init__(self, context: str = "CookieCutter") -> None:
        """Create a logger that prefixes messages with *context*."""
        self._context = context

    def _log(self, level: str, message: str, data: dict[str, object] | None = None) -> None:
        """Format and emit a log line at the given level."""
        if _level_rank.get(level, 20) < _min_rank():
            return

        c = _colours
        colour = _level_colour.get(level, c["cyan"])
        symbol = _level_symbol.get(level, "ℹ")
        prefix = f"{c['gray']}[{_get_timestamp()}]{c['reset']} {colour}{symbol}{c['reset']} {c['bright']}[{self._context}]{c['reset']}"

        if data:
            data_str = " ".join(f"{c['dim']}{k}={c['reset']}{_format_value(v)}" for k, v in data.items())
            log_line = f"{prefix} {message} {data_str}"
        else:
            log_line = f"{prefix} {message}"

        print(log_line, file=sys.stderr)
        _write_to_log_file(log_line)
        _get_log_buffer().append(_ANSI_RE.sub("", log_line))

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        """Log an informational message."""
        self._log("info", message, data)

    def success(self, message: str, data: dict[str, object] | None = None) -> None:
        """Log a success message."""
        self._log("success", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        """Log a warning message."""
        self._log("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        """Log an error message."""
        self._log("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        """Log a debug-level message."""
        self._log("debug", message, data)

    def start_timer(self, label: str) -> None:
        """Start a named timer for performance measurement."""
        key = f"{self._context}:{label}"
        _get_timers()[key] = (time.monotonic() * 1000, _get_timestamp())

    def end_timer(self, label: str, message: str | None = None) -> float:
        """Stop a named timer and log the elapsed time."""
        key = f"{self._context}:{label}"
        entry = _get_timers().pop(key, None)
        if entry is None:
            self.warn(f'Timer "{label}" was not started')
            return 0.0

        start_ms, start_ts = entry
        duration = time.monotonic() * 1000 - start_ms
        c = _colours
        duration_str = f"{c['magenta']}{_format_duration(duration)}{c['reset']}"
        display_message = message or f"Completed: {label}"
        self._log(
            "timing",
            f"{display_message} {c['dim']}took{c['reset']} {duration_str} {c['dim']}(started {start_ts}){c['reset']}",
        )
        return duration


def create_logger(context: str) -> Logger:
    """Create a logger for a specific module."""
    return Logger(context)
