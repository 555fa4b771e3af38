# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from .base import (
    Reporter,
    TaskStatus,
    get_reporter,
    get_verbosity,
    set_reporter,
    set_verbosity,
    task,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

REPORTERS = {
    "plain": PlainReporter,
    "rich": RichReporter,
    "json": JsonLinesReporter,
    "silent": SilentReporter,
}


def make_reporter(name: str) -> Reporter:
    try:
        return REPORTERS[name]()
    except KeyError:
        raise ValueError(f"Unknown reporter '{name}'") from None


__all__ = [
    "Reporter",
    "TaskStatus",
    "get_reporter",
    "set_reporter",
    "task",
    "set_verbosity",
    "get_verbosity",
    "make_reporter",
    "REPORTERS",
    "PlainReporter",
    "JsonLinesReporter",
    "SilentReporter",
    "RichReporter",
]
