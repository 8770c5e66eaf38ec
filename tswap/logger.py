"""
TSwap logging.

Every module logs through `get_logger(__name__)`. The first call configures
the root logger from the `.env` defaults in `tswap.constants`; a deployment
re-applies it from the [logging] section of its config via
`configure_logging(...)`.

Console output goes through rich with a theme that picks out the things
engine logs are made of (addresses, integer amounts, bracketed tags);
file output rotates. Both pass through TerminalSafeFormatter, because
log lines carry caller-supplied identities and token names.
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_DATE_FORMAT,
    LOG_FILE_OUTPUT,
    LOG_FORMAT,
    LOG_LEVEL,
    LOG_MAX_FILE_SIZE,
)

DEFAULT_LOG_FILE = Path("logs") / "tswap.log"

TSWAP_THEME = Theme(
    {
        "tswap.address":        "cyan",
        "tswap.amount":         "bold white",
        "tswap.level_critical": "bold red reverse",
        "tswap.level_debug":    "bold dim",
        "tswap.level_error":    "bold red",
        "tswap.level_info":     "bold green",
        "tswap.level_warning":  "bold yellow",
        "tswap.logger_name":    "magenta",
        "tswap.tag":            "bold magenta",
        "tswap.timestamp":      "bold cyan",
    }
)


class TerminalSafeFormatter(logging.Formatter):
    """Formatter that drops ANSI escapes and control characters (CWE-117)."""

    # CSI sequences, lone ESC sequences, and C0 controls other than \t and \n
    _unsafe = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"
        r"|\x1b[@-Z\\-_]"
        r"|[\x00-\x08\x0B-\x1F\x7F]"
    )

    @classmethod
    def sanitize(cls, text: str) -> str:
        return cls._unsafe.sub("", text) if text else text

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class TSwapLogHighlighter(RegexHighlighter):
    """Colors hex identities, bare integer amounts, bracketed tags and levels."""

    base_style = "tswap."
    highlights = [
        r"(?P<address>\b0x[0-9a-fA-F]{40}\b)",
        r"(?P<amount>(?<![\w.])\d+(?![\w.]))",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"\-\s+\w+\s+-\s+(?P<logger_name>[\w.]+)(?=\s-\s)",
        r"(?P<tag>\[.*?\])",
        r"(?P<timestamp>^(.*?)UTC)",
    ]


def build_formatter(
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
) -> Tuple[TerminalSafeFormatter, List[str]]:
    """
    UTC formatter for the given (or `.env`) formats.

    A format that logging rejects, or one without a single %(field)s, falls
    back to the built-in default. Returns the formatter and one message per
    fallback so the caller can log them once handlers exist.
    """
    log_format = str(log_format or LOG_FORMAT)
    date_format = str(date_format or LOG_DATE_FORMAT)
    problems = []

    try:
        logging.PercentStyle(log_format).validate()
    except ValueError as e:
        problems.append(f"Ignoring LOG_FORMAT {log_format!r}: {e}")
        log_format = str(LOG_FORMAT.default())

    try:
        if time.strftime(date_format, time.gmtime(0)) == date_format:
            raise ValueError("no strftime directives")
    except ValueError as e:
        problems.append(f"Ignoring LOG_DATE_FORMAT {date_format!r}: {e}")
        date_format = str(LOG_DATE_FORMAT.default())

    formatter = TerminalSafeFormatter(fmt=log_format, datefmt=f"{date_format} UTC")
    formatter.converter = time.gmtime
    return formatter, problems


def _console_handler(highlight: bool) -> logging.Handler:
    if not highlight:
        return logging.StreamHandler(sys.stdout)
    return RichHandler(
        console=Console(theme=TSWAP_THEME, highlight=False),
        highlighter=TSwapLogHighlighter(),
        keywords=[],
        rich_tracebacks=True,
        show_path=False,
        show_time=False,
        show_level=False,
        markup=False,
    )


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        filename=str(path),
        maxBytes=LOG_MAX_FILE_SIZE,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


class LogManager:
    """Owns the handlers tswap installs on the root logger; configured lazily on first use."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._configured = False
        self._handlers: List[logging.Handler] = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
        force: bool = False,
    ) -> None:
        """
        Swap tswap's root-logger handlers for a fresh set.

        Unset arguments fall back to the `.env` defaults. Without *force*
        only the first call has any effect.
        """
        with self._lock:
            if self._configured and not force:
                return

            level = getattr(logging, str(log_level or LOG_LEVEL).upper(), logging.INFO)
            formatter, problems = build_formatter()

            handlers = []
            if console_output:
                handlers.append(_console_handler(bool(LOG_CONSOLE_HIGHLIGHTING)))
            if LOG_FILE_OUTPUT if file_output is None else file_output:
                handlers.append(_file_handler(Path(log_file) if log_file else DEFAULT_LOG_FILE))

            root = logging.getLogger()
            root.setLevel(level)
            # only ours; handlers installed by the host application stay
            for handler in self._handlers:
                root.removeHandler(handler)
                handler.close()
            self._handlers = handlers
            for handler in handlers:
                handler.setLevel(level)
                handler.setFormatter(formatter)
                root.addHandler(handler)

            self._configured = True

        for problem in problems:
            logging.getLogger(__name__).warning(problem)

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)


log_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """Module logger; configures logging from `.env` defaults on first use."""
    return log_manager.get_logger(name)


def configure_logging(**kwargs) -> None:
    """Re-apply logging configuration (e.g. from a loaded config file)."""
    log_manager.configure(force=True, **kwargs)
