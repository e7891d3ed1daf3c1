"""Unified logging configuration for applications embedding blockpaint.

The library itself only calls ``logging.getLogger(__name__)``; an embedding
application installs handlers once through setup_logging() (or
setup_from_config() with the ``logging`` section of a canvas config).

Provides:
    - ContextFormatter: human-readable or JSON-lines records carrying
      contextual fields (canvas, frame, asset, ...)
    - setup_logging(): console and file handlers, optional rotation,
      warning capture; idempotent
    - push_context() / pop_context() / log_context(): contextual fields held
      in a contextvar

Format examples:
    Human: 2025-10-28T13:45:12.345Z | INFO     | canvas=main | Rendered 40 rows
    JSON: {"t":"2025-10-28T13:45:12.345+00:00","lvl":"INFO","canvas":"main","msg":"..."}

Usage:
    from blockpaint.utils import logging_config
    logging_config.setup_logging("DEBUG", "logs/session.log", json=True)
    with logging_config.log_context(canvas="main"):
        render.render(canvas)
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

if TYPE_CHECKING:
    from .validators import LoggingConfig

_context_var = contextvars.ContextVar('blockpaint_logging_context', default={})

_installed_handlers: List[logging.Handler] = []

LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_COLOR_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Formatter appending the fields pushed with push_context().

    Parameters
    ----------
    fmt_mode : str
        "human" or "json"
    use_color : bool
        Color the level name (only when stderr is a terminal)
    tz : str
        "UTC" or "local" timestamps
    """

    def __init__(self, fmt_mode: str = "human", use_color: bool = True, tz: str = "UTC"):
        super().__init__()
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

    def _timestamp(self, record: logging.LogRecord) -> datetime:
        if self.tz == "UTC":
            return datetime.fromtimestamp(record.created, tz=timezone.utc)
        return datetime.fromtimestamp(record.created)

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get({})
        ts = self._timestamp(record)
        exc = self.formatException(record.exc_info) if record.exc_info else None

        if self.fmt_mode == "json":
            fields = {
                't': ts.isoformat(),
                'lvl': record.levelname,
                'name': record.name,
                'pid': os.getpid(),
                'msg': record.getMessage(),
                **context,
            }
            if exc:
                fields['exc'] = exc
            return json.dumps(fields, default=str)

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{LEVEL_COLORS.get(record.levelname, '')}{level}{_COLOR_RESET}"

        head = [ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z', level]
        if context:
            head.append(' '.join(f"{k}={v}" for k, v in context.items()))
        line = ' | '.join(head) + ' | ' + record.getMessage()
        if exc:
            line += '\n' + exc
        return line


def _file_handler(log_file: str, rotate: Optional[Dict[str, Any]]) -> logging.Handler:
    """Plain, size-rotated or time-rotated file handler."""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    if not rotate:
        return logging.FileHandler(log_file)

    mode = rotate.get('mode', 'size')
    if mode == 'size':
        return logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=rotate.get('max_bytes', 10_000_000),
            backupCount=rotate.get('backup_count', 5),
        )
    if mode == 'time':
        return logging.handlers.TimedRotatingFileHandler(
            log_file,
            when=rotate.get('when', 'D'),
            interval=rotate.get('interval', 1),
            backupCount=rotate.get('backup_count', 7),
        )
    raise ValueError(f"Unknown rotation mode: {mode}. Use 'size' or 'time'.")


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Configure the root logger.

    Calling it again replaces the handlers a previous call installed and
    leaves foreign handlers alone.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Log file path; None for no file logging
    json : bool
        JSON-lines format for the file handler
    color : bool
        ANSI level colors on the console
    to_stderr : bool
        Add a console handler on stderr
    rotate : dict, optional
        {"mode": "size", "max_bytes": ..., "backup_count": ...} or
        {"mode": "time", "when": "D", "interval": 1, "backup_count": ...}
    tz : str
        "UTC" or "local"
    capture_warnings : bool
        Route Python warnings to logging
    context : dict, optional
        Initial contextual fields

    Returns
    -------
    dict
        {"handlers": [...]} installed by this call

    Raises
    ------
    ValueError
        If ``rotate`` names an unknown mode
    """
    root = logging.getLogger()
    new_handlers: List[logging.Handler] = []

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", color, tz))
        new_handlers.append(console)
    if log_file:
        handler = _file_handler(log_file, rotate)
        handler.setFormatter(ContextFormatter("json" if json else "human", use_color=False, tz=tz))
        new_handlers.append(handler)

    for old in _installed_handlers:
        root.removeHandler(old)
        old.close()
    _installed_handlers[:] = new_handlers
    for handler in new_handlers:
        root.addHandler(handler)

    root.setLevel(getattr(logging, log_level.upper()))
    if context:
        push_context(**context)
    if capture_warnings:
        logging.captureWarnings(True)
    return {'handlers': list(new_handlers)}


def setup_from_config(cfg: "LoggingConfig", **overrides) -> Dict[str, Any]:
    """setup_logging() driven by the ``logging`` section of a canvas config."""
    kwargs = dict(log_level=cfg.log_level, log_file=cfg.log_file, json=cfg.json_format, color=cfg.color)
    kwargs.update(overrides)
    return setup_logging(**kwargs)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """Change the root logger level at runtime."""
    logging.getLogger().setLevel(getattr(logging, level.upper()))


# ============================================================================
# CONTEXT FIELDS
# ============================================================================

def push_context(**kwargs) -> None:
    """Add contextual fields to all subsequent log records.

    Examples
    --------
    >>> push_context(canvas="main")
    >>> logger.info("Rendered")  # → "... | canvas=main | Rendered"
    """
    _context_var.set({**_context_var.get({}), **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them when ``keys`` is None."""
    if keys is None:
        _context_var.set({})
        return
    _context_var.set({k: v for k, v in _context_var.get({}).items() if k not in keys})


def get_context() -> Dict[str, Any]:
    return dict(_context_var.get({}))


@contextmanager
def log_context(**kwargs) -> Iterator[None]:
    """Push fields for the duration of a block, restoring the previous set."""
    token = _context_var.set({**_context_var.get({}), **kwargs})
    try:
        yield
    finally:
        _context_var.reset(token)


def shutdown() -> None:
    """Flush and close all logging handlers."""
    logging.shutdown()
