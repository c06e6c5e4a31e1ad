"""Structured logging for the IVK Skill SDK.

SDK modules log through :func:`get_logger`: structlog loggers bound to the
stdlib ``ivk_skill_sdk.*`` logger hierarchy that do not depend on the global
``structlog.configure`` state. Events reach stdlib logging as ordinary
records (event as message, key-value pairs as ``extra``), so the host
application decides where SDK logs go with its usual logging setup.

:func:`configure_logging` is an opt-in convenience that renders SDK records
as JSON or colored console lines. It only touches the ``ivk_skill_sdk``
logger (plus the level of ``httpx``/``httpcore``), never the root logger.
"""

import logging
import sys
from typing import IO, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SDK_LOGGER_NAME = "ivk_skill_sdk"
HANDLER_NAME = "ivk-skill-sdk"

# Applied when a record is rendered by a ProcessorFormatter.
_RECORD_PRE_CHAIN: list[Processor] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
]


def add_sdk_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every log event with the emitting library."""
    event_dict.setdefault("sdk", "ivk-skill-sdk")
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger writing to the stdlib logger ``name``.

    Args:
        name: Module name, normally ``__name__`` (``ivk_skill_sdk.*``)

    Returns:
        Bound logger whose events become stdlib records with ``extra`` fields
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            add_sdk_context,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """Render SDK log records as structured output.

    Calling it again replaces the handler installed by the previous call.
    SDK records stop propagating to the root logger while it is installed.

    Args:
        log_level: Level for the ``ivk_skill_sdk`` logger (DEBUG, INFO, ...)
        log_format: ``json`` for machine-parseable output, anything else for
            colored console output
        stream: Output stream, defaults to stdout

    Returns:
        The installed handler
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_json = log_format.lower() == "json"

    if is_json:
        processors: list[Processor] = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=stream is None),
        ]

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=processors,
            foreign_pre_chain=_RECORD_PRE_CHAIN,
        )
    )

    sdk_logger = logging.getLogger(SDK_LOGGER_NAME)
    for existing in [h for h in sdk_logger.handlers if h.get_name() == HANDLER_NAME]:
        sdk_logger.removeHandler(existing)
        existing.close()
    sdk_logger.addHandler(handler)
    sdk_logger.setLevel(log_level_int)
    sdk_logger.propagate = False

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    get_logger(__name__).debug(
        "SDK logging configured",
        log_level=log_level,
        renderer="json" if is_json else "console",
    )
    return handler
