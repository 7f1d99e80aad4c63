"""Logging utilities for colorized terminal output.

This module provides a ColoredFormatter and setup function so that the
non-fatal data warnings raised during a ranking run (dropped frames,
unmatched best frame, cluster coverage gaps) stand out in a terminal.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO


class ColoredFormatter(logging.Formatter):
    """Formatter that adds ANSI color codes for WARNING and ERROR levels.

    Colors are only applied when ``stream`` (default: stderr) is an
    interactive terminal. When redirecting to a file or pipe, plain text is
    used.

    Attributes
    ----------
    COLORS : dict
        Mapping of log levels to ANSI color codes.
    RESET : str
        ANSI code to reset text formatting.
    """

    COLORS = {
        logging.WARNING: "\033[93m",  # Yellow
        logging.ERROR: "\033[91m",  # Red
        logging.CRITICAL: "\033[91m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str | None = None, stream: TextIO | None = None) -> None:
        super().__init__(fmt)
        self.stream = stream if stream is not None else sys.stderr

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelno)
        if color and self.stream.isatty():
            return f"{color}{message}{self.RESET}"
        return message


def setup_logging(quiet: bool = False, debug: bool = False) -> None:
    """Configure the root logger with colored output.

    Parameters
    ----------
    quiet : bool, optional
        Show only WARNING and above. Default False (INFO and above).
    debug : bool, optional
        Show DEBUG messages. Takes precedence over ``quiet``.

    Examples
    --------
    >>> from mechframe.logging_utils import setup_logging
    >>> setup_logging()  # INFO and above
    >>> setup_logging(quiet=True)  # WARNING and above
    """
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s %(name)s: %(message)s"
    elif quiet:
        level = logging.WARNING
        fmt = "%(message)s"
    else:
        level = logging.INFO
        fmt = "%(message)s"

    stream = sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(fmt, stream=stream))

    logging.root.handlers = []
    logging.root.addHandler(handler)
    logging.root.setLevel(level)
