# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Model of the implicit-sequential compiler.

Recomputes member offsets the way a C/C++ compiler lays out a plain struct
with default packing: every member goes to the next multiple of its own
alignment and the struct size rounds up to the largest member alignment.
Used to cross-check compiled layouts against the sequential rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..errors import E_LAYOUT_DIVERGENCE, layout_error
from ..model import CompiledLayout
from .cursor import padding_for

__all__ = ["SequentialMember", "natural_layout", "check_equivalence"]


@dataclass(frozen=True, slots=True)
class SequentialMember:
    name: str
    size: int
    alignment: int


def natural_layout(
    members: Sequence[SequentialMember],
) -> Tuple[List[int], int]:
    """Return (offsets, sizeof) for members declared in order."""
    offsets: List[int] = []
    offset = 0
    max_align = 1
    for m in members:
        offset += padding_for(offset, m.alignment)
        offsets.append(offset)
        offset += m.size
        max_align = max(max_align, m.alignment)
    # an empty struct still occupies one byte
    size = offset + padding_for(offset, max_align) if members else 1
    return offsets, size


def check_equivalence(
    layout: CompiledLayout, members: Sequence[SequentialMember]
) -> None:
    """Raise E_LAYOUT_DIVERGENCE unless members reproduce layout exactly."""
    ctx = {"record": layout.record.name, "variant": layout.variant.value}
    if len(members) != len(layout.entries):
        raise layout_error(
            E_LAYOUT_DIVERGENCE,
            f"Sequential form declares {len(members)} members, explicit "
            f"form {len(layout.entries)}",
            ctx,
        )
    offsets, size = natural_layout(members)
    for entry, member, off in zip(layout.entries, members, offsets):
        if off != entry.offset or member.size != entry.size:
            raise layout_error(
                E_LAYOUT_DIVERGENCE,
                f"Member '{member.name}' lands at {off}+{member.size}, "
                f"explicit offset is {entry.offset}+{entry.size}",
                ctx,
            )
    if size != layout.total_size:
        raise layout_error(
            E_LAYOUT_DIVERGENCE,
            f"Sequential size {size} != explicit size {layout.total_size}",
            ctx,
        )
