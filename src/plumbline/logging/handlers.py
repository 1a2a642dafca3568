"""Log handlers for the Plumbline logging system.

Classes:
    ConsoleHandler: stdout handler that routes errors to stderr
    RotatingFileHandler: Size-based rotating file handler

Example:
    >>> handler = RotatingFileHandler("logs/plumbline.log", maxBytes=10485760, backupCount=5)
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TextIO, Union


class ConsoleHandler(logging.StreamHandler):
    """Write records to stdout, or to stderr from ERROR upwards.

    The stderr split can be turned off with ``use_stderr_for_errors=False``.
    """

    def __init__(self, *, use_stderr_for_errors: bool = True) -> None:
        super().__init__(sys.stdout)
        self.use_stderr_for_errors = use_stderr_for_errors

    def _stream_for(self, record: logging.LogRecord) -> TextIO:
        if self.use_stderr_for_errors and record.levelno >= logging.ERROR:
            return sys.stderr
        return self.stream

    def emit(self, record: logging.LogRecord) -> None:
        target = self._stream_for(record)
        if target is self.stream:
            super().emit(record)
            return

        stdout, self.stream = self.stream, target
        try:
            super().emit(record)
        finally:
            self.stream = stdout


class RotatingFileHandler(logging.handlers.RotatingFileHandler):
    """Size-rotated log file whose directory is created on demand."""

    def __init__(
        self,
        filename: Union[str, Path],
        *,
        maxBytes: int = 10485760,
        backupCount: int = 5,
        encoding: str = "utf-8",
        delay: bool = False,
    ) -> None:
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(path, maxBytes=maxBytes, backupCount=backupCount, encoding=encoding, delay=delay)
