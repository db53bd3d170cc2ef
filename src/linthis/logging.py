"""
Structured logging for linthis using structlog.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import structlog


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> None:
    """
    Configure structured logging for the plugin tooling.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Render console records as JSON instead of the dev renderer
        log_file: Optional file that receives JSON records
        console_output: Emit records on stderr
    """
    shared = _shared_processors()

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: List[logging.Handler] = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)
        )
        handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        # Files are always JSON so they can be grepped with jq
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared,
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,
    )


def level_for_verbosity(verbose: bool) -> str:
    """Map the CLI ``--verbose`` flag to a log level."""
    return "DEBUG" if verbose else "WARNING"


def get_logger(name: str = "linthis") -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


@contextmanager
def log_operation(
    logger: structlog.stdlib.BoundLogger, operation: str, **kwargs
) -> Iterator[structlog.stdlib.BoundLogger]:
    """
    Log the start and end of a multi-step operation.

    Usage:
        with log_operation(log, "plugin_fetch", plugin="official") as op_log:
            op_log.debug("git_clone", url=url)
    """
    log = logger.bind(operation=operation, **kwargs)
    started = time.monotonic()
    log.debug(f"{operation}.started")

    try:
        yield log
    except Exception as e:
        log.warning(
            f"{operation}.failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        raise
    log.debug(
        f"{operation}.completed",
        duration_ms=round((time.monotonic() - started) * 1000, 2),
    )
