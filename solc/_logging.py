"""
Logging for the binding.

Everything logs through the single ``solc`` logger, tagged with one of five
scopes:

    loader    locating and loading libsolc            (_bindings)
    compile   native compile calls                    (compiler)
    callback  read requests and the file readers      (_callback, readers)
    gate      invocation gate poisoning               (_gate)
    cli       the command-line wrapper                (cli)

Records render either as OpenTelemetry log records, one JSON object per line,
or as a short line for a terminal::

    12:04:31 DEBUG [callback] Read requested (lib/d.sol) [_callback.py:100]

Environment::

    SOLC_LOG_LEVEL=trace|debug|info|warn|error|fatal|off   (default: info)
    SOLC_LOG_FORMAT=json|human   (default: human on a TTY, json otherwise)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from ._version import __version__

__all__ = [
    "SCOPES",
    "logger",
    "setup_logging",
    "scoped_logger",
    "JsonFormatter",
    "HumanFormatter",
]

SCOPES = frozenset({"loader", "compile", "callback", "gate", "cli"})

OFF = logging.CRITICAL + 10

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "off": OFF,
}

_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

# Levels that carry code.filepath / code.lineno
_LOCATED = frozenset({logging.DEBUG, logging.ERROR, logging.CRITICAL})

# Attributes every LogRecord has; anything else arrived through ``extra``
_RECORD_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "scope",
}


def parse_level(level: str | int) -> int:
    """Map a level name (case-insensitive) or a logging constant to a level."""
    if isinstance(level, int):
        return level
    return _LEVELS.get(level.lower(), logging.INFO)


def _scope(record: logging.LogRecord) -> str:
    return getattr(record, "scope", None) or record.name.rpartition(".")[2]


def _code_path(pathname: str) -> str:
    """Path relative to the package, or the bare file name outside it."""
    _, sep, tail = pathname.replace("\\", "/").rpartition("/solc/")
    return tail if sep else os.path.basename(pathname)


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_FIELDS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One OpenTelemetry log record per line."""

    RESOURCE = {"service.name": "solc", "service.version": __version__}

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        attributes = {"scope": _scope(record), **_extras(record)}

        if record.levelno in _LOCATED:
            attributes["code.filepath"] = _code_path(record.pathname)
            attributes["code.lineno"] = record.lineno

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            attributes["exception.type"] = type(exc).__name__
            attributes["exception.message"] = str(exc)
            attributes["exception.stacktrace"] = self.formatException(record.exc_info)

        return json.dumps(
            {
                # RFC3339, microseconds padded to nanoseconds
                "timestamp": f"{created:%Y-%m-%dT%H:%M:%S}.{created.microsecond:06d}000Z",
                "severityText": _SEVERITY.get(record.levelno, "INFO"),
                "body": record.getMessage(),
                "attributes": attributes,
                "resource": self.RESOURCE,
            },
            separators=(",", ":"),
            default=str,
        )


class HumanFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL [scope] message (path) [file:line]`` for terminals."""

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _CYAN = "\x1b[36m"
    _LEVEL_COLORS = {
        logging.DEBUG: "\x1b[2m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31m",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _paint(self, text: str, color: str | None) -> str:
        if not (self._use_colors and color):
            return text
        return f"{color}{text}{self._RESET}"

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        severity = _SEVERITY.get(record.levelno, "INFO")

        line = (
            f"{created:%H:%M:%S} "
            f"{self._paint(f'{severity:<5}', self._LEVEL_COLORS.get(record.levelno))} "
            f"{self._paint(f'[{_scope(record)}]', self._CYAN)} "
            f"{record.getMessage()}"
        )

        # Import being resolved, if any
        path = getattr(record, "path", None)
        if path:
            line += f" ({path})"

        if record.levelno in _LOCATED:
            line += self._paint(f" [{_code_path(record.pathname)}:{record.lineno}]", self._DIM)

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _level_from_env() -> int:
    return parse_level(os.environ.get("SOLC_LOG_LEVEL", "info"))


def _format_from_env() -> str:
    fmt = os.environ.get("SOLC_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _make_handler(fmt: str | None = None) -> logging.Handler:
    fmt = (fmt or _format_from_env()).lower()
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


logger = logging.getLogger("solc")


def setup_logging(level: str | int = "INFO", format: str | None = None) -> None:
    """
    Replace the binding's log handler.

    Parameters
    ----------
    level : str or int, default "INFO"
        A name from ``SOLC_LOG_LEVEL`` (any case) or a logging constant.
        Unknown names fall back to INFO.
    format : str, optional
        "json" or "human". Defaults to ``SOLC_LOG_FORMAT``, then to human
        on a TTY and json otherwise.

    Examples
    --------
    Trace every native call and read request::

        >>> import solc
        >>> solc.setup_logging("debug", format="human")
    """
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(_make_handler(format))
    logger.setLevel(parse_level(level))


class _ScopedAdapter(logging.LoggerAdapter):
    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """Return an adapter that tags every record with ``scope``.

    Raises ValueError for a scope outside ``SCOPES``.
    """
    if scope not in SCOPES:
        raise ValueError(f"unknown log scope {scope!r}; expected one of {sorted(SCOPES)}")
    return _ScopedAdapter(logger, {"scope": scope})


# Leave an application-installed handler alone
if not logger.handlers:
    logger.addHandler(_make_handler())
    logger.setLevel(_level_from_env())
