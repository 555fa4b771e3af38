# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from __future__ import annotations

import textwrap

import pytest

from command_codegen.reporting import (
    SilentReporter,
    set_reporter,
    set_verbosity,
)


@pytest.fixture(autouse=True)
def _silent_reporter():
    set_reporter(SilentReporter())
    set_verbosity(0)
    yield
    set_reporter(SilentReporter())
    set_verbosity(0)


SAMPLE_SPEC = """\
meta:
  version: "1.2.0"
  namespace: "System.Windows.Media.Composition"
records:
  - name: TranslateTransform
    description: Translation by (X, Y).
    fields:
      - {name: X, type: double, animated: true}
      - {name: Y, type: double, animated: true}
  - name: Visual_SetContent
    fields:
      - {name: Content, kind: handle}
  - name: DrawLine
    fields:
      - {name: Pen, kind: handle}
      - {name: Point0, type: Point}
      - {name: Point1, type: Point}
  - name: PushOpacity
    fields:
      - {name: Opacity, type: double, animated: true}
      - {name: Flags, type: uint, advanced: true}
  - name: Pop
"""


@pytest.fixture
def sample_spec(tmp_path):
    path = tmp_path / "Commands.yaml"
    path.write_text(SAMPLE_SPEC, encoding="utf-8")
    return path


@pytest.fixture
def write_spec(tmp_path):
    """Write a dedented YAML document and return its path."""

    def _write(text: str, name: str = "Commands.yaml"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return _write
