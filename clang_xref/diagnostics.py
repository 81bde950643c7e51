"""Diagnostic logging system for the cross-reference indexer.

Facts go to a sink; this module only carries human-oriented diagnostics.
Output goes to stderr by default so a JSON-lines fact stream on stdout
stays clean.
"""

import os
import sys
from enum import IntEnum
from typing import Optional, TextIO


class DiagnosticLevel(IntEnum):
    """Diagnostic message levels in order of severity."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    FATAL = 4


_LEVEL_NAMES = {level.name: level for level in DiagnosticLevel}

# -v count -> level; anything past the last entry is DEBUG
_VERBOSITY_LEVELS = (DiagnosticLevel.WARNING, DiagnosticLevel.INFO)


class DiagnosticLogger:
    """Handles diagnostic output with configurable levels and output streams."""

    def __init__(
        self, level: DiagnosticLevel = DiagnosticLevel.INFO, output_stream: TextIO = sys.stderr
    ):
        self.level = level
        self.output_stream = output_stream
        self._enabled = True
        self._owned_stream: Optional[TextIO] = None

    def set_level(self, level: DiagnosticLevel):
        """Set the minimum diagnostic level to output."""
        self.level = level

    def set_output_stream(self, stream: TextIO):
        """Set the output stream for diagnostics."""
        self._close_owned_stream()
        self.output_stream = stream

    def open_log_file(self, path: str, append: bool = False):
        """Redirect diagnostics to a log file owned by this logger."""
        stream = open(path, "a" if append else "w", encoding="utf-8")
        self.set_output_stream(stream)
        self._owned_stream = stream

    def set_enabled(self, enabled: bool):
        """Enable or disable all diagnostic output."""
        self._enabled = enabled

    def _close_owned_stream(self):
        if self._owned_stream is not None:
            self._owned_stream.close()
            self._owned_stream = None

    def _should_output(self, level: DiagnosticLevel) -> bool:
        return self._enabled and level >= self.level

    def log(self, level: DiagnosticLevel, message: str):
        """Output a message at the given level."""
        if self._should_output(level):
            print(f"[{level.name}] {message}", file=self.output_stream, flush=True)

    def debug(self, message: str):
        self.log(DiagnosticLevel.DEBUG, message)

    def info(self, message: str):
        self.log(DiagnosticLevel.INFO, message)

    def warning(self, message: str):
        self.log(DiagnosticLevel.WARNING, message)

    def error(self, message: str):
        self.log(DiagnosticLevel.ERROR, message)

    def fatal(self, message: str):
        self.log(DiagnosticLevel.FATAL, message)


# Global diagnostic logger instance
_global_logger: Optional[DiagnosticLogger] = None


def get_logger() -> DiagnosticLogger:
    """Get the global diagnostic logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = _create_default_logger()
    return _global_logger


def parse_level(name: str, default: DiagnosticLevel = DiagnosticLevel.INFO) -> DiagnosticLevel:
    """Map a level name such as ``"debug"`` to a DiagnosticLevel."""
    return _LEVEL_NAMES.get(str(name).upper(), default)


def _create_default_logger() -> DiagnosticLogger:
    """Create a logger with default settings from the environment."""
    level = parse_level(os.environ.get("CLANG_XREF_DIAGNOSTIC_LEVEL", "INFO"))
    return DiagnosticLogger(level=level, output_stream=sys.stderr)


def configure_from_config(config: dict):
    """Configure the global logger from a configuration dictionary.

    Expected config format:
    {
        "diagnostics": {
            "level": "info",  # debug, info, warning, error, fatal
            "enabled": true
        }
    }
    """
    diag_config = config.get("diagnostics") or {}
    logger = get_logger()
    logger.set_level(parse_level(diag_config.get("level", "INFO"), logger.level))
    logger.set_enabled(bool(diag_config.get("enabled", True)))


def configure_from_verbosity(verbose: Optional[int], log_file: Optional[str] = None, append: bool = False):
    """Configure the global logger from the command line's -v/-L/-A options.

    Args:
        verbose: Number of ``-v`` flags; 0 shows warnings, 1 adds info, 2+ adds
                 debug. None keeps the level already configured
        log_file: Optional path receiving diagnostics instead of stderr
        append: Append to ``log_file`` instead of truncating it
    """
    logger = get_logger()
    if verbose is not None:
        index = max(verbose, 0)
        if index < len(_VERBOSITY_LEVELS):
            logger.set_level(_VERBOSITY_LEVELS[index])
        else:
            logger.set_level(DiagnosticLevel.DEBUG)

    if log_file:
        logger.open_log_file(log_file, append=append)


# Module-level shortcuts over the global logger
def debug(message: str):
    get_logger().debug(message)


def info(message: str):
    get_logger().info(message)


def warning(message: str):
    get_logger().warning(message)


def error(message: str):
    get_logger().error(message)


def fatal(message: str):
    get_logger().fatal(message)
