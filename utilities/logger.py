"""
Structured logging using structlog.
Provides logging setup and the request logging sink used by the book handlers.
"""

import contextlib
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging with configurable output formats.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Add call site details to every entry
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        # One handler per file, even when the app starts several times in-process.
        attached = any(
            isinstance(handler, logging.FileHandler)
            and handler.baseFilename == os.path.abspath(log_file)
            for handler in root_logger.handlers
        )
        if not attached:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(getattr(logging, log_level.upper()))
            file_handler.setFormatter(logging.Formatter("%(message)s"))
            root_logger.addHandler(file_handler)

    get_logger(__name__).info(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class RequestLogger:
    """
    Logging sink for request handlers.

    Every entry carries the operation name and, when present, the book id.
    A failing logger never propagates: a request must not abort because
    its log line could not be written.
    """

    def __init__(self, name: str = "api.books"):
        self.logger = structlog.get_logger(name)

    def log_request(self, operation: str, book_id: Optional[int] = None) -> None:
        """Trace an incoming request."""
        with contextlib.suppress(Exception):
            self.logger.info("Request received", operation=operation, book_id=book_id)

    def log_warning(self, message: str, operation: str, book_id: Optional[int] = None) -> None:
        """Log a client-side outcome (bad input, missing record)."""
        with contextlib.suppress(Exception):
            self.logger.warning(message, operation=operation, book_id=book_id)

    def log_error(
        self,
        message: str,
        operation: str,
        book_id: Optional[int] = None,
        error: Optional[BaseException] = None
    ) -> None:
        """Log a failed request together with the error that caused it."""
        with contextlib.suppress(Exception):
            self.logger.error(
                message,
                operation=operation,
                book_id=book_id,
                error=str(error) if error else None,
                exc_info=error,
            )
