# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Struct layout compiler: ordering, variants and fatal conditions."""

from __future__ import annotations

import pytest

from command_codegen.errors import (
    E_ALIGNMENT,
    E_DUP_FIELD,
    E_DUP_RECORD,
    SchemaError,
)
from command_codegen.layout import (
    compile_layout,
    compile_record,
    compile_records,
    order_fields,
    select_fields,
)
from command_codegen.model import (
    FieldDescriptor,
    FieldKind,
    Platform,
    RecordDescriptor,
    Variant,
)


def _value(name, size, **kw):
    return FieldDescriptor(name=name, byte_size=size, **kw)


def _handle(name, size=4):
    return FieldDescriptor(name=name, byte_size=size, kind=FieldKind.HANDLE)


def _anim(name, size=4):
    return FieldDescriptor(
        name=name,
        byte_size=size,
        kind=FieldKind.ANIMATION_HANDLE,
        is_advanced_only=True,
    )


def _record_r():
    return RecordDescriptor(
        name="R",
        fields=(_handle("H"), _value("V8", 8), _value("V4", 4)),
        animated_fields=(_anim("V8Animations"), _anim("V4Animations")),
    )


def _placed(layout):
    return [(e.name, e.offset, e.size) for e in layout.field_entries]


def test_descending_size_places_eight_byte_field_first():
    base = compile_layout(_record_r(), Variant.BASE)
    assert _placed(base) == [("V8", 0, 8), ("H", 8, 4), ("V4", 12, 4)]
    assert base.total_size == 16
    assert base.padding_total == 0


def test_animated_variant_keeps_base_offsets():
    base, animated = compile_record(_record_r())
    assert animated.variant is Variant.ANIMATED
    assert _placed(animated)[:3] == _placed(base)
    assert _placed(animated)[3:] == [
        ("V8Animations", 16, 4),
        ("V4Animations", 20, 4),
    ]
    assert animated.total_size == 24
    base_names = {e.name for e in base.field_entries}
    animated_names = {e.name for e in animated.field_entries}
    assert base_names < animated_names


def test_extra_field_larger_than_base_gets_padding_not_relayout():
    rec = RecordDescriptor(
        name="Mixed",
        fields=(_value("Small", 4),),
        animated_fields=(_value("Wide", 8, is_advanced_only=True),),
    )
    base, animated = compile_record(rec)
    assert base.offset_of("Small") == animated.offset_of("Small") == 0
    assert animated.offset_of("Wide") == 8
    assert [e.name for e in animated.entries] == ["Small", "padding0", "Wide"]


def test_ties_keep_declaration_order():
    fields = [_value("a", 4), _value("b", 8), _value("c", 4), _value("d", 8)]
    assert [f.name for f in order_fields(fields)] == ["b", "d", "a", "c"]


def test_select_fields_splits_by_kind_and_flag():
    rec = _record_r()
    base, extra = select_fields(rec, Variant.BASE)
    assert [f.name for f in base] == ["H", "V8", "V4"]
    assert extra == ()
    base, extra = select_fields(rec, Variant.ANIMATED)
    assert [f.name for f in extra] == ["V8Animations", "V4Animations"]


def test_record_without_animation_has_single_variant():
    rec = RecordDescriptor(name="Plain", fields=(_value("X", 8),))
    layouts = compile_record(rec)
    assert [lay.variant for lay in layouts] == [Variant.BASE]


def test_empty_record_has_size_one():
    layout = compile_layout(RecordDescriptor(name="Pop"), Variant.BASE)
    assert layout.is_empty
    assert layout.total_size == 1
    assert layout.entries == ()


def test_compilation_is_deterministic():
    rec = _record_r()
    assert compile_record(rec) == compile_record(rec)


def test_total_size_multiple_of_struct_alignment():
    rec = RecordDescriptor(
        name="Odd", fields=(_value("A", 8), _value("B", 2), _value("C", 1))
    )
    layout = compile_layout(rec, Variant.BASE)
    assert layout.struct_alignment == 8
    assert layout.total_size == 16
    assert layout.entries[-1].is_padding


def test_duplicate_field_across_base_and_animated_sets():
    rec = RecordDescriptor(
        name="Dup",
        fields=(_value("X", 8),),
        animated_fields=(_anim("X"),),
    )
    with pytest.raises(SchemaError) as ei:
        compile_layout(rec, Variant.BASE)
    assert ei.value.code == E_DUP_FIELD
    assert ei.value.context["record"] == "Dup"
    assert ei.value.context["variant"] == "base"


def test_alignment_error_names_record_and_variant():
    rec = RecordDescriptor(
        name="Wide",
        fields=(_value("X", 4),),
        animated_fields=(_value("Y", 16, is_advanced_only=True),),
    )
    compile_layout(rec, Variant.BASE, Platform(max_alignment=8))
    with pytest.raises(SchemaError) as ei:
        compile_layout(rec, Variant.ANIMATED, Platform(max_alignment=8))
    err = ei.value
    assert err.code == E_ALIGNMENT
    assert "record=Wide variant=animated" in str(err)


def test_duplicate_record_names_rejected():
    rec = RecordDescriptor(name="Same", fields=(_value("X", 4),))
    with pytest.raises(SchemaError) as ei:
        compile_records([rec, rec])
    assert ei.value.code == E_DUP_RECORD


def test_handle_size_follows_platform():
    rec = RecordDescriptor(
        name="H8", fields=(_handle("A", 8), _value("B", 4))
    )
    layout = compile_layout(rec, Variant.BASE)
    assert _placed(layout) == [("A", 0, 8), ("B", 8, 4)]
    assert layout.total_size == 16
