"""
Console Logging Utility for the Bounded Verifier
Provides leveled, timestamped output used as the diagnostic channel of a run.
"""
import sys
from datetime import datetime
from typing import Optional, TextIO
from enum import Enum


class LogLevel(Enum):
    """Log levels for controlling verbosity."""
    DEBUG = 0    # Engine options, snapshot keys
    INFO = 1     # General information
    STEP = 2     # Pipeline stage reached
    SUCCESS = 3  # Contract proved
    WARNING = 4  # Downgraded failures (inconclusive runs, report I/O)
    ERROR = 5    # Rejected requests


class VerifierLogger:
    """Leveled logger writing plain-text lines to a console stream."""

    def __init__(self, verbose: bool = True, debug: bool = False, name: str = "verifier",
                 stream: Optional[TextIO] = None, err_stream: Optional[TextIO] = None):
        """
        Initialize logger.

        Args:
            verbose: Print INFO and above
            debug: Print DEBUG and above
            name: Logger name, shown in debug lines
            stream: Destination for non-error messages (defaults to stdout)
            err_stream: Destination for errors (defaults to stderr)
        """
        self.name = name
        self.stream = stream
        self.err_stream = err_stream
        self.indent_level = 0

        if debug:
            self.min_level = LogLevel.DEBUG
        elif verbose:
            self.min_level = LogLevel.INFO
        else:
            self.min_level = LogLevel.WARNING

    def _should_log(self, level: LogLevel) -> bool:
        return level.value >= self.min_level.value

    def _format_message(self, level: LogLevel, message: str) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S")
        indent = "  " * self.indent_level
        if level == LogLevel.DEBUG:
            return f"[{timestamp}] {indent}DEBUG [{self.name}]: {message}"
        if level == LogLevel.WARNING:
            return f"[{timestamp}] {indent}WARNING: {message}"
        if level == LogLevel.ERROR:
            return f"[{timestamp}] {indent}ERROR: {message}"
        return f"[{timestamp}] {indent}{message}"

    def _emit(self, level: LogLevel, message: str):
        if not self._should_log(level):
            return
        if level == LogLevel.ERROR:
            out = self.err_stream or sys.stderr
        else:
            out = self.stream or sys.stdout
        print(self._format_message(level, message), file=out)

    def debug(self, message: str):
        self._emit(LogLevel.DEBUG, message)

    def info(self, message: str):
        self._emit(LogLevel.INFO, message)

    def step(self, message: str):
        self._emit(LogLevel.STEP, message)

    def success(self, message: str):
        self._emit(LogLevel.SUCCESS, message)

    def warning(self, message: str):
        self._emit(LogLevel.WARNING, message)

    def error(self, message: str):
        self._emit(LogLevel.ERROR, message)

    def section(self, title: str, char: str = "=", width: int = 70):
        """Print section header."""
        if self._should_log(LogLevel.INFO):
            out = self.stream or sys.stdout
            print(f"\n{char * width}", file=out)
            print(title, file=out)
            print(f"{char * width}", file=out)

    def indent(self):
        """Increase indentation level."""
        self.indent_level += 1

    def dedent(self):
        """Decrease indentation level."""
        self.indent_level = max(0, self.indent_level - 1)

    def options(self, options: dict, title: str = "Engine options"):
        """Print an option mapping, one key per line (debug only)."""
        if self._should_log(LogLevel.DEBUG):
            self.debug(title)
            self.indent()
            for key in sorted(options):
                self.debug(f"{key} = {options[key]}")
            self.dedent()


# Global logger instance
_global_logger: Optional[VerifierLogger] = None


def get_logger(name: str = "verifier", verbose: bool = True, debug: bool = False) -> VerifierLogger:
    """Get or create global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = VerifierLogger(verbose=verbose, debug=debug, name=name)
    return _global_logger


def set_logger(logger: Optional[VerifierLogger]):
    """Set global logger instance (None resets it)."""
    global _global_logger
    _global_logger = logger
