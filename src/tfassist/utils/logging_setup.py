"""structlog configuration: console on stderr plus optional JSON and text log files."""

import logging
import sys
from datetime import datetime
from pathlib import Path

import structlog

from tfassist.config import Settings

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _handler(handler: logging.Handler, renderer, pre_chain: list) -> logging.Handler:
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))
    return handler


def _log_file(directory: Path, stamp: str, suffix: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"tfassist_{stamp}{suffix}"


def setup_logging(settings: Settings) -> structlog.stdlib.BoundLogger:
    """
    Route structlog and stdlib logging through one set of handlers.

    The console handler writes to stderr so stdout carries only answers.
    LOG_FORMAT selects which file sinks under LOG_DIR are added: json/,
    text/, or both.
    """
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    pre_chain = _shared_processors()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers = [
        _handler(
            logging.StreamHandler(sys.stderr),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            pre_chain,
        )
    ]

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if settings.log_format in ("json", "both"):
        path = _log_file(settings.log_dir / "json", stamp, ".json")
        handlers.append(
            _handler(logging.FileHandler(path, encoding="utf-8"), structlog.processors.JSONRenderer(), pre_chain)
        )
    if settings.log_format in ("text", "both"):
        path = _log_file(settings.log_dir / "text", stamp, ".log")
        handlers.append(
            _handler(logging.FileHandler(path, encoding="utf-8"), structlog.dev.ConsoleRenderer(colors=False), pre_chain)
        )

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    return structlog.get_logger()
