# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Struct layout compiler.

Produces one CompiledLayout per (record, variant). Fields are ordered by
descending size with declaration order breaking ties, which makes the
natural sequential packing of the ordered members free of implicit padding
for power-of-two sizes. The explicit-offset rendering then reaches the same
offsets independently through the alignment cursor.

The animated variant keeps the base variant's ordering as a prefix and
appends its extra fields (sorted the same way), so adding animation fields
never moves a field that the base variant already placed.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..errors import (
    E_DUP_FIELD,
    E_DUP_RECORD,
    CodegenError,
    internal_error,
    schema_error,
)
from ..model import (
    CompiledLayout,
    FieldDescriptor,
    FieldKind,
    Platform,
    RecordDescriptor,
    Variant,
)
from .cursor import AlignmentCursor

__all__ = [
    "compile_layout",
    "compile_record",
    "compile_records",
    "order_fields",
    "select_fields",
    "validate_record",
]

# Native struct types cannot be zero-sized; an empty record occupies one byte.
EMPTY_RECORD_SIZE = 1


def _in_base_variant(fd: FieldDescriptor) -> bool:
    if fd.is_advanced_only:
        return False
    kind = fd.kind
    if kind is FieldKind.VALUE or kind is FieldKind.HANDLE:
        return True
    if kind is FieldKind.ANIMATION_HANDLE:
        return False
    raise internal_error(f"Unhandled field kind {kind!r}", {"field": fd.name})


def validate_record(record: RecordDescriptor) -> None:
    seen: set[str] = set()
    for fd in record.all_fields:
        if fd.name in seen:
            raise schema_error(
                E_DUP_FIELD,
                f"Duplicate field name '{fd.name}'",
                {"record": record.name, "field": fd.name},
            )
        seen.add(fd.name)


def select_fields(
    record: RecordDescriptor, variant: Variant
) -> Tuple[Tuple[FieldDescriptor, ...], Tuple[FieldDescriptor, ...]]:
    """Split the variant's field set into (base_fields, extra_fields)."""
    base: List[FieldDescriptor] = []
    extra: List[FieldDescriptor] = []
    for fd in record.all_fields:
        if _in_base_variant(fd):
            base.append(fd)
        else:
            extra.append(fd)
    if variant is Variant.BASE:
        return tuple(base), ()
    if variant is Variant.ANIMATED:
        return tuple(base), tuple(extra)
    raise internal_error(
        f"Unhandled variant {variant!r}", {"record": record.name}
    )


def order_fields(fields: Iterable[FieldDescriptor]) -> List[FieldDescriptor]:
    # sorted() is stable: equal sizes keep declaration order
    return sorted(fields, key=lambda fd: -fd.byte_size)


def _check_invariants(layout: CompiledLayout) -> None:
    ctx = {"record": layout.record.name, "variant": layout.variant.value}
    expected = 0
    for e in layout.entries:
        if e.offset != expected or e.size <= 0:
            raise internal_error(
                f"Layout entry '{e.name}' at {e.offset}+{e.size} breaks "
                f"contiguity (expected offset {expected})",
                ctx,
            )
        expected = e.end
    if layout.is_empty:
        return
    if expected != layout.total_size:
        raise internal_error(
            f"Entries end at {expected} but total size is {layout.total_size}",
            ctx,
        )
    if layout.total_size % layout.struct_alignment:
        raise internal_error(
            f"Total size {layout.total_size} is not a multiple of "
            f"{layout.struct_alignment}",
            ctx,
        )


def compile_layout(
    record: RecordDescriptor,
    variant: Variant,
    platform: Platform | None = None,
) -> CompiledLayout:
    platform = platform or Platform()
    try:
        validate_record(record)
        base, extra = select_fields(record, variant)
        ordered = order_fields(base) + order_fields(extra)
        if not ordered:
            return CompiledLayout(
                record=record,
                variant=variant,
                entries=(),
                total_size=EMPTY_RECORD_SIZE,
                struct_alignment=EMPTY_RECORD_SIZE,
                is_empty=True,
            )
        cursor = AlignmentCursor(platform)
        for fd in ordered:
            cursor.place(fd)
        entries, total = cursor.close()
        layout = CompiledLayout(
            record=record,
            variant=variant,
            entries=entries,
            total_size=total,
            struct_alignment=cursor.struct_alignment,
        )
        _check_invariants(layout)
        return layout
    except CodegenError as e:
        raise e.with_context(record=record.name, variant=variant.value)


def compile_record(
    record: RecordDescriptor, platform: Platform | None = None
) -> Tuple[CompiledLayout, ...]:
    return tuple(
        compile_layout(record, v, platform) for v in record.variants()
    )


def compile_records(
    records: Sequence[RecordDescriptor], platform: Platform | None = None
) -> List[CompiledLayout]:
    """Compile every record; the first failure aborts the whole batch."""
    seen: set[str] = set()
    layouts: List[CompiledLayout] = []
    for record in records:
        if record.name in seen:
            raise schema_error(
                E_DUP_RECORD,
                f"Duplicate record name '{record.name}'",
                {"record": record.name},
            )
        seen.add(record.name)
        layouts.extend(compile_record(record, platform))
    return layouts
