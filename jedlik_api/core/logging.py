"""
Logging utilities: JSON structured logging with contextual fields.

- Configures a root logger emitting JSON using python-json-logger.
- Provides a helper to bind contextual fields (request_id, dependency) to a logger.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

from pythonjsonlogger import jsonlogger

CONTEXT_FIELDS = ("request_id", "dependency", "attempt")


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextJsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


@contextmanager
def bind_context(logger: logging.Logger, **kwargs: Any) -> Iterator[logging.LoggerAdapter]:
    """Yield an adapter that adds contextual fields to every record.

    Usage:
        with bind_context(logger, request_id=...) as log:
            log.info("message")
    """
    yield logging.LoggerAdapter(logger, extra=kwargs)


class ContextJsonFormatter(jsonlogger.JsonFormatter):
    def process_log_record(self, log_record):
        # Drop empty context fields so records stay compact
        for key in CONTEXT_FIELDS:
            if key in log_record and log_record[key] is None:
                del log_record[key]
        return super().process_log_record(log_record)
