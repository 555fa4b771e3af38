# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from __future__ import annotations

from .base import Reporter, TaskStatus


class SilentReporter(Reporter):
    """Reporter behind ``-q`` and ``--reporter silent``.

    Drops every message, including fatal errors, so the exit status (1 on
    failure) and the ``--plan`` JSON on stdout are the only output.
    """

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta
    ):
        pass

    def advance(self, task_id: str, step: int = 1, **meta):
        pass

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta,
    ):
        pass

    def status(self, message: str, **fields):
        pass

    def error(self, message: str, **fields):
        pass

    def warning(self, message: str, **fields):
        pass

    def section(self, title: str) -> None:
        pass
