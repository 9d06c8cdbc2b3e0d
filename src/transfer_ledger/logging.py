import logging
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Literal

import structlog
from ulid import ULID

from transfer_ledger.config import Settings


NOISY_LOGGERS = ("sqlalchemy", "asyncio", "redis")

LogFormat = Literal["json", "console"]


def _shared_processors(log_format: LogFormat) -> list[structlog.typing.Processor]:
    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
    return processors


def _renderer(log_format: LogFormat) -> structlog.typing.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    level: str = "INFO",
    log_format: LogFormat = "json",
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Route structlog and stdlib records through one stdout handler.

    Records from SQLAlchemy, asyncpg and redis go through the same
    formatter, so a ``tx_id`` bound by ``transaction_context`` shows up on
    driver logs emitted inside a transaction as well.
    """
    shared_processors = _shared_processors(log_format)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_format),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    for logger_name in quiet_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def configure_logging_from_settings(config: Settings) -> None:
    configure_logging(level=config.log_level, log_format=config.log_format)


@contextmanager
def transaction_context(**fields: Any) -> Iterator[str]:
    """Bind a fresh ``tx_id`` (plus ``fields``) to every log line in the block."""
    tx_id = str(ULID())
    with structlog.contextvars.bound_contextvars(tx_id=tx_id, **fields):
        yield tx_id
