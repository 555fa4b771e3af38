# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Alignment cursor: offset tracking and padding insertion.

The cursor walks an ordered field sequence, decides where each field lands
and where opaque padding entries are needed, and finally pads the record up
to its packing boundary. Padding entries never carry field identity; they
exist so both target renderings can spell out every byte explicitly.
"""

from __future__ import annotations

from typing import List, Tuple

from ..errors import E_ALIGNMENT, E_FIELD_SIZE, internal_error, schema_error
from ..model import FieldDescriptor, LayoutEntry, Platform

__all__ = [
    "AlignmentCursor",
    "align",
    "finish",
    "is_power_of_two",
    "padding_for",
]

_PAD_PREFIX = "padding"


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def padding_for(offset: int, alignment: int) -> int:
    rem = offset % alignment
    return alignment - rem if rem else 0


def align(current_offset: int, field_alignment: int) -> Tuple[int, int]:
    """Return (padding_size, aligned_offset) for a field at current_offset."""
    pad = padding_for(current_offset, field_alignment)
    return pad, current_offset + pad


def finish(current_offset: int, struct_alignment: int) -> int:
    """Trailing padding needed to round current_offset to struct_alignment."""
    return padding_for(current_offset, struct_alignment)


class AlignmentCursor:
    """Stateful offset tracker producing contiguous layout entries."""

    def __init__(self, platform: Platform | None = None):
        self.platform = platform or Platform()
        self.offset = 0
        self.entries: List[LayoutEntry] = []
        self.interior_padding = 0
        self._max_alignment = 0
        self._pad_count = 0
        self._closed = False

    @property
    def struct_alignment(self) -> int:
        return max(self.platform.min_struct_alignment, self._max_alignment)

    def _check(self, fd: FieldDescriptor) -> int:
        alignment = fd.required_alignment
        ctx = {"field": fd.name, "alignment": alignment, "size": fd.byte_size}
        if not is_power_of_two(alignment):
            raise schema_error(
                E_ALIGNMENT,
                f"Field '{fd.name}' alignment {alignment} is not a power of two",
                ctx,
            )
        if alignment > self.platform.max_alignment:
            raise schema_error(
                E_ALIGNMENT,
                f"Field '{fd.name}' alignment {alignment} exceeds platform "
                f"ceiling {self.platform.max_alignment}",
                ctx,
            )
        if fd.byte_size <= 0 or fd.byte_size % alignment:
            raise schema_error(
                E_FIELD_SIZE,
                f"Field '{fd.name}' size {fd.byte_size} is not a positive "
                f"multiple of its alignment {alignment}",
                ctx,
            )
        return alignment

    def _pad(self, size: int) -> LayoutEntry:
        entry = LayoutEntry(
            offset=self.offset,
            size=size,
            field=None,
            name=f"{_PAD_PREFIX}{self._pad_count}",
        )
        self._pad_count += 1
        self.entries.append(entry)
        self.offset += size
        return entry

    def place(self, fd: FieldDescriptor) -> LayoutEntry:
        if self._closed:
            raise internal_error(
                "AlignmentCursor.place() after close()", {"field": fd.name}
            )
        alignment = self._check(fd)
        pad, _ = align(self.offset, alignment)
        if pad:
            self._pad(pad)
            self.interior_padding += 1
        entry = LayoutEntry(
            offset=self.offset, size=fd.byte_size, field=fd, name=fd.name
        )
        self.entries.append(entry)
        self.offset += fd.byte_size
        self._max_alignment = max(self._max_alignment, alignment)
        return entry

    def close(self) -> Tuple[Tuple[LayoutEntry, ...], int]:
        """Append trailing padding and return (entries, total_size)."""
        if not self._closed:
            trailing = finish(self.offset, self.struct_alignment)
            if trailing:
                self._pad(trailing)
            self._closed = True
        return tuple(self.entries), self.offset
