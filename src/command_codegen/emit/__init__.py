# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from .manifest import build_manifest, dumps_manifest, layout_to_dict
from .records import (
    MemberDecl,
    RecordEmitter,
    RenderedRecord,
    command_name,
    struct_name,
)
from .types import BUILTIN_TYPES, TargetType, TypeTable, padding_type

__all__ = [
    "build_manifest",
    "dumps_manifest",
    "layout_to_dict",
    "MemberDecl",
    "RecordEmitter",
    "RenderedRecord",
    "command_name",
    "struct_name",
    "BUILTIN_TYPES",
    "TargetType",
    "TypeTable",
    "padding_type",
]
