"""
Logging setup for the command-line entry point.

Library modules only create module-level loggers; handlers are
attached here, once, when the CLI starts.
"""

import logging as _logging
import sys as _sys
import typing as _typing

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "aetherskills-cli"


def configure_logging(
    level: str = "WARNING",
    stream: _typing.TextIO | None = None,
) -> _logging.Logger:
    """
    Attach a stderr handler to the package logger.

    Calling again replaces the previous handler, so repeated CLI
    invocations in one process (tests) do not stack handlers.

    Args:
        level: Log level name.
        stream: Output stream (defaults to stderr).

    Returns:
        The package logger.
    """
    logger = _logging.getLogger("aetherskills")
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = _logging.StreamHandler(stream or _sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(_logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
