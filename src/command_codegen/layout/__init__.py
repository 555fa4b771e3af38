# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from .cursor import AlignmentCursor, align, finish
from .compiler import (
    compile_layout,
    compile_record,
    compile_records,
    order_fields,
    select_fields,
)
from .natural import SequentialMember, check_equivalence, natural_layout

__all__ = [
    "AlignmentCursor",
    "align",
    "finish",
    "compile_layout",
    "compile_record",
    "compile_records",
    "order_fields",
    "select_fields",
    "SequentialMember",
    "check_equivalence",
    "natural_layout",
]
