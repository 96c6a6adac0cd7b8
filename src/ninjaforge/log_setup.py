"""Logging setup for ninjaforge.

Diagnostics go to stderr with a fixed tool prefix:

    [ninjaforge] warning: debug symbols enabled, forcing optimization to debug level
"""

import logging
import sys

PREFIX = "[ninjaforge]"


class DiagnosticFormatter(logging.Formatter):
    """Formats records as '[ninjaforge] <level>: <message>'."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return f"{PREFIX} {record.levelname.lower()}: {message}"


def setup_logging(verbose: bool = False) -> None:
    """Setup logging for the CLI.

    Args:
        verbose: Include debug messages
    """
    logger = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler.formatter, DiagnosticFormatter):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(DiagnosticFormatter("%(message)s"))
    logger.addHandler(console_handler)
