"""Snapshot helper utilities for CommandCodeGen tests.

Supports auto-updating snapshots when environment variable
CMDGEN_UPDATE_SNAPSHOTS is set to a truthy value ("1", "true", "yes").

Usage:
    from snapshot_helper import assert_matches_snapshot
    assert_matches_snapshot(generated_text, 'records_sample.h')

Snapshots live in tests/_snapshots/. A missing snapshot is written on first
run and the assertion passes.
"""

from __future__ import annotations

import difflib
import json
import os
from pathlib import Path
from typing import Any, Mapping, Union

_SNAPSHOT_DIR = Path(__file__).parent / "_snapshots"


def _is_truthy(val: str | None) -> bool:
    if val is None:
        return False
    return val.lower() in {"1", "true", "yes", "on", "update"}


def _dump(obj: Union[str, Mapping[str, Any]]) -> str:
    if isinstance(obj, str):
        return obj
    return json.dumps(obj, indent=2, sort_keys=True) + "\n"


def assert_matches_snapshot(
    actual: Union[str, Mapping[str, Any]], snapshot_name: str
) -> None:
    """Compare text (or a mapping, as canonical JSON) against a snapshot.

    Raises AssertionError with a unified diff on mismatch unless
    auto-update is enabled.
    """
    _SNAPSHOT_DIR.mkdir(parents=True, exist_ok=True)
    snapshot_path = _SNAPSHOT_DIR / snapshot_name
    update = _is_truthy(os.getenv("CMDGEN_UPDATE_SNAPSHOTS"))
    text = _dump(actual)

    if update or not snapshot_path.exists():
        snapshot_path.write_text(text, encoding="utf-8", newline="")
        return

    expected = snapshot_path.read_text(encoding="utf-8")
    if text != expected:
        diff = "\n".join(
            difflib.unified_diff(
                expected.splitlines(),
                text.splitlines(),
                fromfile="expected",
                tofile="actual",
                lineterm="",
            )
        )
        raise AssertionError(f"Snapshot mismatch for {snapshot_name}\n{diff}")
