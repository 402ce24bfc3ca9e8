"""Structured logging for Storyreel.

structlog renders both its own key/value events (API layer) and plain
``logging`` records (services, wizard), so every module logs through one
handler. Wizard requests bind their session and operation with
``wizard_log_context``; those keys then appear on every line emitted while
the operation runs, including records from the provider adapters.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

# Provider SDKs log every request at INFO
PROVIDER_LOGGERS = ("httpx", "httpcore", "google_genai", "google_genai.models")


def _pre_chain() -> list:
    """Processors applied to structlog events and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Route all logging through structlog on stderr.

    Args:
        log_level: Root level name (DEBUG, INFO, WARNING, ERROR)
        json_output: One JSON object per line instead of the colored console view
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level.upper())

    for name in PROVIDER_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Key/value logger for the API layer."""
    return structlog.get_logger(name)


@contextmanager
def wizard_log_context(session_id: str, operation: Optional[str] = None) -> Iterator[None]:
    """Tag every log line inside the block with the wizard session.

    Args:
        session_id: Wizard session being driven
        operation: Wizard operation name, when the block runs one
    """
    context = {"session_id": session_id}
    if operation:
        context["operation"] = operation
    with structlog.contextvars.bound_contextvars(**context):
        yield
