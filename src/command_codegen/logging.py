# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Logging utilities for CommandCodeGen.

Records on the ``command_codegen`` logger are routed to the active reporter,
so library code can log normally and still honor the CLI's output mode.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .reporting import get_reporter, get_verbosity

_LOGGER_NAME = "command_codegen"
_STEP_PREFIX = "  ->"

__all__ = [
    "get_logger",
    "configure_logging",
    "section",
    "step",
]


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


class _ReporterHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        rep = get_reporter()
        msg = self.format(record)
        lvl = record.levelno
        if lvl >= logging.ERROR:
            rep.error(msg)
        elif lvl >= logging.WARNING:
            rep.warning(msg)
        elif lvl >= logging.INFO:
            rep.status(msg)
        else:
            # DEBUG maps to verbose level 2
            rep.verbose(msg, level=2)


def configure_logging(verbosity: int = 0) -> logging.Logger:
    logger = get_logger()
    logger.setLevel(logging.DEBUG if verbosity >= 2 else logging.INFO)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    handler = _ReporterHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def step(message: str) -> None:
    get_reporter().status(f"{_STEP_PREFIX} {message}")


@contextmanager
def section(title: str) -> Iterator[logging.Logger]:
    logger = get_logger()
    get_reporter().section(title)
    try:
        yield logger
    finally:
        if get_verbosity() >= 2:
            logger.debug("end section: %s", title)
