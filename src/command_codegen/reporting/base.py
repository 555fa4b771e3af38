# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Reporter interface, global active reporter and verbosity.

Verbosity (set by the CLI, -v repeats):
  0 = normal (status, warnings, errors)
  1 = verbose (per-record progress)
  2 = debug (layout entries, template details)
"""

from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "STAT_KEYS",
    "completion_line",
    "supports_color",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
]

# Task metadata keys echoed on completion lines
STAT_KEYS = ("records", "layouts", "bytes", "padding", "files")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


_STATUS_ICON = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
    TaskStatus.SKIPPED: "→",
}


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time) if self.end_time else 0.0


def completion_line(rec: TaskRecord) -> str:
    icon = _STATUS_ICON.get(rec.status, "?")
    total = f" {rec.completed}/{rec.total}" if rec.total is not None else ""
    stats = [f"{k}={rec.meta[k]}" for k in STAT_KEYS if k in rec.meta]
    stats_part = f" [{' '.join(stats)}]" if stats else ""
    return f"{icon} {rec.name}{total} ({rec.duration:.2f}s){stats_part}"


def supports_color(stream) -> bool:
    if os.environ.get("NO_COLOR") is not None:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


_VERBOSITY: int = 0


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    supports_progress: bool = False

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        raise NotImplementedError

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        raise NotImplementedError

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        raise NotImplementedError

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        # gated by global verbosity; ignored unless overridden
        pass

    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def section(self, title: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def task(
    task_id: str, name: str, total: int | None = None, **meta: Any
) -> Iterator[Dict[str, Any]]:
    """Run a reporter task; the yielded dict becomes the final metadata."""
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    final: Dict[str, Any] = {}
    try:
        yield final
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED, **final)
        raise
    else:
        rep.end_task(task_id, TaskStatus.SUCCESS, **final)
