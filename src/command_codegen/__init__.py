# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""CommandCodeGen package

Generates byte-compatible command record structs for two languages from one
layout computation: an explicit-offset C# form and a sequential C++ form,
each with a generated size check.

Prefer importing the CLI entry point from :mod:`command_codegen.cli` or the
programmatic generator from :mod:`command_codegen.generator`.
"""

from ._version import __version__  # noqa: F401
from .errors import CodegenError, LayoutError, SchemaError, TemplateError
from .model import (
    CompiledLayout,
    FieldDescriptor,
    FieldKind,
    LayoutEntry,
    Platform,
    RecordDescriptor,
    Variant,
)

__all__ = [
    "__version__",
    "CodegenError",
    "LayoutError",
    "SchemaError",
    "TemplateError",
    "CompiledLayout",
    "FieldDescriptor",
    "FieldKind",
    "LayoutEntry",
    "Platform",
    "RecordDescriptor",
    "Variant",
]


def get_cli_module():
    """Lazily import and return the CLI module."""
    from . import cli as _cli

    return _cli


def get_generator_module():
    """Lazily import and return the generator module."""
    from . import generator as _g

    return _g
