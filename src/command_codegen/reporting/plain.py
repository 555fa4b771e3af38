# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from __future__ import annotations

import sys
import time
from typing import Any, Dict

from .base import (
    Reporter,
    TaskRecord,
    TaskStatus,
    completion_line,
    get_verbosity,
    supports_color,
)


class PlainReporter(Reporter):
    """Deterministic line-oriented reporter with optional ANSI color."""

    def __init__(self, stream=None, use_color: bool | None = None):
        self.stream = stream or sys.stderr
        self.use_color = (
            use_color if use_color is not None else supports_color(self.stream)
        )
        self._tasks: Dict[str, TaskRecord] = {}

    def _c(self, code: str, text: str) -> str:
        if not self.use_color:
            return text
        return f"\x1b[{code}m{text}\x1b[0m"

    def _line(self, label: str, color: str, message: str) -> None:
        self.stream.write(f"{self._c(color, label)}: {message}\n")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._tasks[task_id] = TaskRecord(task_id, name, total, meta=meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.get(task_id)
        if not rec:
            return
        rec.completed += step
        rec.meta.update(meta)
        if get_verbosity() < 1:
            return
        item = meta.get("current_item") or f"#{rec.completed}"
        total = rec.total if rec.total is not None else "?"
        self.stream.write(
            f"   · {rec.name}: {item} ({rec.completed}/{total})\n"
        )

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.pop(task_id, None)
        if not rec:
            return
        rec.status = status
        rec.end_time = time.time()
        rec.meta.update(final_meta)
        self.stream.write(f" {completion_line(rec)}\n")

    def status(self, message: str, **fields: Any) -> None:
        self._line("INFO", "32", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self._line(f"VERB{level}", "36", message)

    def error(self, message: str, **fields: Any) -> None:
        self._line("ERROR", "31", message)

    def warning(self, message: str, **fields: Any) -> None:
        self._line("WARN", "33", message)

    def section(self, title: str) -> None:
        self.stream.write(f"\n[{title}]\n")

    def flush(self) -> None:
        self.stream.flush()
