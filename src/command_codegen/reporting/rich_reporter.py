# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from __future__ import annotations

import os
import time
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .base import (
    Reporter,
    TaskRecord,
    TaskStatus,
    completion_line,
    get_verbosity,
)

TRANSIENT_ENV = "CMDGEN_PROGRESS_TRANSIENT"


class RichReporter(Reporter):
    """Console reporter with live progress bars for counted tasks.

    Tasks started without a total are shown as section rules. With
    CMDGEN_PROGRESS_TRANSIENT set, bars disappear when the last task ends
    and the completion lines are printed together afterwards.
    """

    supports_progress = True

    def __init__(self, console: Console | None = None):
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )
        self._transient = os.getenv(TRANSIENT_ENV, "0").lower() in (
            "1",
            "true",
            "yes",
        )
        self.progress: Progress | None = None
        self._tasks: Dict[str, TaskRecord] = {}
        self._bar_ids: Dict[str, Any] = {}
        self._deferred: List[str] = []

    def _ensure_progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.description}", justify="left"),
                BarColumn(bar_width=None),
                TextColumn("{task.completed}/{task.total}"),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def _stop_progress(self) -> None:
        if self.progress is None:
            return
        try:
            self.progress.stop()
        finally:
            self.progress = None
            self._bar_ids.clear()
            if self._deferred:
                self.console.print("\n".join(self._deferred))
                self._deferred.clear()

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._tasks[task_id] = TaskRecord(task_id, name, total, meta=meta)
        if total is None:
            self.console.rule(escape(name))
            return
        progress = self._ensure_progress()
        self._bar_ids[task_id] = progress.add_task(escape(name), total=total)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.get(task_id)
        if not rec:
            return
        rec.completed += step
        rec.meta.update(meta)
        bar = self._bar_ids.get(task_id)
        if bar is not None and self.progress is not None:
            item = meta.get("current_item")
            desc = f"{rec.name}: {item}" if item else rec.name
            self.progress.update(
                bar, completed=rec.completed, description=escape(desc)
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
        bar = self._bar_ids.pop(task_id, None)
        if bar is not None and self.progress is not None:
            self.progress.update(
                bar, completed=rec.total, description=escape(rec.name)
            )
        line = escape(completion_line(rec))
        if self._transient and self.progress is not None:
            self._deferred.append(line)
        else:
            self.console.print(line)
        if not self._bar_ids:
            self._stop_progress()

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {escape(message)}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self.console.print(f"[cyan]VERB{level}[/]: {escape(message)}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {escape(message)}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {escape(message)}")

    def section(self, title: str) -> None:
        self.console.rule(escape(title))

    def flush(self) -> None:
        self._stop_progress()
