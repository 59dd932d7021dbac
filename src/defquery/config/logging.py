"""Log routing for defquery.

Service code logs structured events with structlog; library modules use
``logging.getLogger(__name__)``. Both reach one stdlib handler on the root
logger and are rendered by the same structlog chain, either for a terminal
or as JSON lines (``--log-json``). Logs never go to stdout, which carries
command results.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog
from structlog.types import Processor

LOGGER_NAME = "defquery"
HANDLER_NAME = "defquery-stderr"

# Third-party loggers held at WARNING whatever the verbosity.
PINNED_LOGGERS = ("sqlalchemy",)

_PRE_CHAIN: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _renderer(log_json: bool, stream: TextIO) -> list[Processor]:
    if log_json:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=stream.isatty())]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route defquery logs to *stream* (stderr by default).

    ``defquery.*`` loggers emit DEBUG when *verbose*, WARNING otherwise.
    Calling again replaces the handler installed by the previous call.
    """
    stream = stream or sys.stderr

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderer(log_json, stream),
            ],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in PINNED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
