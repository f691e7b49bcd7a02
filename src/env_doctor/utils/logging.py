"""Logging setup for env-doctor.

Modules log through ``get_logger("scanner")`` and friends, which hang off the
``env_doctor`` logger. Nothing is printed unless the embedding application
configures logging or calls ``configure_logging``.
"""

import logging
import sys
from typing import IO, Any, Mapping

ROOT_LOGGER = "env_doctor"

LOG_FORMATS = {
    "plain": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)s %(name)s %(message)s",
}

# Marks the handler configure_logging installed, so reconfiguring replaces it.
_HANDLER_FLAG = "_env_doctor_handler"


class ContextFormatter(logging.Formatter):
    """Formatter that renders a record's ``context`` mapping as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context: Mapping[str, Any] | None = getattr(record, "context", None)
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{message} [{pairs}]"


def configure_logging(
    level: int | str = logging.INFO,
    detailed: bool = False,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a stderr handler to the env_doctor logger.

    Calling it again replaces the handler it installed earlier and leaves
    handlers added by the application alone.

    Args:
        level: Level name or number
        detailed: Include timestamps and logger names
        stream: Output stream (default: stderr)

    Returns:
        The env_doctor logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ContextFormatter(LOG_FORMATS["detailed" if detailed else "plain"]))
    setattr(handler, _HANDLER_FLAG, True)

    logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_FLAG, False):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def set_verbose(verbose: bool) -> None:
    """Switch the env_doctor logger to DEBUG, installing a handler if none exists."""
    if not verbose:
        return
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        logger.setLevel(logging.DEBUG)
    else:
        configure_logging(logging.DEBUG)


def get_logger(name: str) -> logging.Logger:
    """Get the logger for an env-doctor module (``scanner``, ``engine``...)."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class ContextAdapter(logging.LoggerAdapter):
    """Adapter that attaches fixed context (project root, framework) to records."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**(self.extra or {}), **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextAdapter":
        """Return an adapter with additional context."""
        return ContextAdapter(self.logger, {**(self.extra or {}), **context})


def get_logger_with_context(name: str, **context: Any) -> ContextAdapter:
    """Get a module logger that tags every record with ``context``."""
    return ContextAdapter(get_logger(name), context)
