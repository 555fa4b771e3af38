# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

from __future__ import annotations

import re

import pytest

from command_codegen.emit import RecordEmitter, TypeTable, padding_type
from command_codegen.errors import E_DUP_FIELD, SchemaError
from command_codegen.layout import compile_layout, compile_record
from command_codegen.model import (
    FieldDescriptor,
    FieldKind,
    Platform,
    RecordDescriptor,
    Variant,
)


def _draw_line():
    return RecordDescriptor(
        name="DrawLine",
        fields=(
            FieldDescriptor("Pen", 4, kind=FieldKind.HANDLE),
            FieldDescriptor("Point0", 16, alignment=8, type_name="Point"),
            FieldDescriptor("Point1", 16, alignment=8, type_name="Point"),
        ),
    )


def _translate():
    return RecordDescriptor(
        name="TranslateTransform",
        fields=(
            FieldDescriptor("X", 8, type_name="double", animated=True),
            FieldDescriptor("Y", 8, type_name="double", animated=True),
        ),
        animated_fields=(
            FieldDescriptor(
                "XAnimations",
                4,
                kind=FieldKind.ANIMATION_HANDLE,
                is_advanced_only=True,
            ),
            FieldDescriptor(
                "YAnimations",
                4,
                kind=FieldKind.ANIMATION_HANDLE,
                is_advanced_only=True,
            ),
        ),
    )


def test_sequential_form_with_size_assertion():
    layout = compile_layout(_draw_line(), Variant.BASE)
    rendered = RecordEmitter().emit(layout)
    assert rendered.sequential_text == (
        "struct MILCMD_DRAWLINE\n"
        "{\n"
        "    MilPoint2D Point0;\n"
        "    MilPoint2D Point1;\n"
        "    HMIL_RESOURCE hPen;\n"
        "    UINT32 padding0;\n"
        "};\n"
        "static_assert(sizeof(MILCMD_DRAWLINE) == 40, "
        '"MILCMD_DRAWLINE does not match its managed layout");'
    )


def test_explicit_form_tags_every_member_with_offset():
    layout = compile_layout(_draw_line(), Variant.BASE)
    rendered = RecordEmitter().emit(layout)
    assert rendered.explicit_text == (
        "[StructLayout(LayoutKind.Explicit)]\n"
        "internal struct MILCMD_DRAWLINE\n"
        "{\n"
        "    internal const int Size = 40;\n"
        "\n"
        "    [FieldOffset(0)] internal Point Point0;\n"
        "    [FieldOffset(16)] internal Point Point1;\n"
        "    [FieldOffset(32)] internal DUCE.ResourceHandle hPen;\n"
        "    [FieldOffset(36)] private uint padding0;\n"
        "}"
    )
    assert rendered.size_check_text == (
        "Debug.Assert(sizeof(MILCMD_DRAWLINE) == MILCMD_DRAWLINE.Size, "
        '"MILCMD_DRAWLINE size mismatch");'
    )


def test_both_forms_declare_same_members():
    for layout in compile_record(_translate()):
        rendered = RecordEmitter().emit(layout)
        explicit = re.findall(
            r"\[FieldOffset\(\d+\)\] \w+ (?:fixed )?[\w.]+ (\w+)",
            rendered.explicit_text,
        )
        body = rendered.sequential_text.split("{", 1)[1].split("}", 1)[0]
        sequential = re.findall(r"(\w+)(?:\[\d+\])?;", body)
        assert explicit == sequential
        assert len(explicit) == len(layout.entries)
        assert rendered.member_names == tuple(
            n for n in explicit if not n.startswith("padding")
        )


def test_animated_variant_names_and_handles():
    base, animated = compile_record(_translate())
    emitter = RecordEmitter()
    r_base = emitter.emit(base, 1)
    r_anim = emitter.emit(animated, 2)
    assert r_base.struct_name == "MILCMD_TRANSLATETRANSFORM"
    assert r_anim.struct_name == "MILCMD_TRANSLATETRANSFORM_ANIMATE"
    assert r_anim.command_name == "MilCmdTranslateTransformAnimate"
    assert r_anim.member_names == ("X", "Y", "hXAnimations", "hYAnimations")
    assert "== 24," in r_anim.sequential_text
    assert "[FieldOffset(20)] internal DUCE.ResourceHandle hYAnimations;" in (
        r_anim.explicit_text
    )


def test_empty_record_asserts_size_one():
    layout = compile_layout(RecordDescriptor(name="Pop"), Variant.BASE)
    rendered = RecordEmitter().emit(layout)
    assert rendered.is_empty and rendered.total_size == 1
    assert rendered.sequential_text == (
        "// No fields; the struct still occupies one byte.\n"
        "struct MILCMD_POP\n"
        "{\n"
        "};\n"
        'static_assert(sizeof(MILCMD_POP) == 1, "MILCMD_POP does not match '
        'its managed layout");'
    )
    assert rendered.explicit_text == (
        "[StructLayout(LayoutKind.Explicit)]\n"
        "internal struct MILCMD_POP\n"
        "{\n"
        "    internal const int Size = 1;\n"
        "}"
    )
    assert rendered.sequential_members == ()


def test_odd_padding_becomes_fixed_buffer_and_unsafe_struct():
    rec = RecordDescriptor(
        name="Bytes",
        fields=(FieldDescriptor("D", 8), FieldDescriptor("B", 1)),
    )
    rendered = RecordEmitter().emit(compile_layout(rec, Variant.BASE))
    assert "    BYTE padding0[7];" in rendered.sequential_text
    assert (
        "[FieldOffset(9)] private fixed byte padding0[7];"
        in rendered.explicit_text
    )
    assert "internal unsafe struct MILCMD_BYTES" in rendered.explicit_text


def test_record_comment_is_emitted_in_both_forms():
    rec = RecordDescriptor(
        name="Note", fields=(FieldDescriptor("A", 4),), comment="Says hi."
    )
    rendered = RecordEmitter().emit(compile_layout(rec, Variant.BASE))
    assert rendered.sequential_text.startswith("// Says hi.\n")
    assert rendered.explicit_text.startswith("/// <summary>Says hi.</summary>\n")


def test_multiline_comment_prefixes_every_line():
    rec = RecordDescriptor(
        name="Note",
        fields=(FieldDescriptor("A", 4),),
        comment="first line\nint oops = 1; \\",
    )
    rendered = RecordEmitter().emit(compile_layout(rec, Variant.BASE))
    assert rendered.sequential_text.startswith(
        "// first line\n// int oops = 1;\nstruct MILCMD_NOTE\n"
    )
    assert rendered.explicit_text.startswith(
        "/// <summary>\n"
        "/// first line\n"
        "/// int oops = 1; \\\n"
        "/// </summary>\n"
        "[StructLayout(LayoutKind.Explicit)]\n"
    )


def test_comment_text_is_emitted_verbatim():
    rec = RecordDescriptor(
        name="Note",
        fields=(FieldDescriptor("A", 4),),
        comment="See [[attr]] for a < b",
    )
    rendered = RecordEmitter().emit(compile_layout(rec, Variant.BASE))
    assert rendered.sequential_text.startswith("// See [[attr]] for a < b\n")
    assert rendered.explicit_text.startswith(
        "/// <summary>See [[attr]] for a &lt; b</summary>\n"
    )


@pytest.mark.parametrize("field", ["Size", "MILCMD_CLASH"])
def test_member_name_clash_with_generated_names_is_rejected(field):
    rec = RecordDescriptor(name="Clash", fields=(FieldDescriptor(field, 4),))
    with pytest.raises(SchemaError) as ei:
        RecordEmitter().emit(compile_layout(rec, Variant.BASE))
    assert ei.value.code == E_DUP_FIELD
    assert ei.value.context["field"] == field
    assert "is reserved" in ei.value.message


def test_member_name_clash_with_padding_is_rejected():
    rec = RecordDescriptor(
        name="Clash",
        fields=(FieldDescriptor("D", 8), FieldDescriptor("padding0", 1)),
    )
    with pytest.raises(SchemaError) as ei:
        RecordEmitter().emit(compile_layout(rec, Variant.BASE))
    assert ei.value.code == E_DUP_FIELD
    assert ei.value.context["variant"] == "base"


@pytest.mark.parametrize(
    "offset,size,native,array",
    [
        (4, 4, "UINT32", None),
        (6, 2, "UINT16", None),
        (3, 1, "BYTE", None),
        (9, 7, "BYTE", 7),
        (2, 4, "BYTE", 4),
    ],
)
def test_padding_type(offset, size, native, array):
    t = padding_type(offset, size)
    assert t.native == native
    assert t.array_length == array
    assert t.size == size


def test_handles_follow_platform_size():
    types = TypeTable(Platform(handle_size=8))
    t = types.resolve(FieldDescriptor("H", 8, kind=FieldKind.HANDLE))
    assert (t.native, t.managed, t.size, t.alignment) == (
        "HMIL_RESOURCE",
        "DUCE.ResourceHandle",
        8,
        8,
    )


def test_custom_and_opaque_value_types():
    types = TypeTable(
        custom={"Vec4": {"size": 16, "alignment": 4, "managed": "Vector4"}}
    )
    t = types.resolve(FieldDescriptor("V", 16, alignment=4, type_name="Vec4"))
    assert (t.native, t.managed) == ("Vec4", "Vector4")
    t = types.resolve(FieldDescriptor("O", 8, type_name="OpaqueThing"))
    assert (t.native, t.managed, t.alignment) == ("OpaqueThing",) * 2 + (8,)


def test_file_level_rendering_contains_enum_and_checks():
    emitter = RecordEmitter()
    layouts = compile_record(_translate()) + compile_record(
        RecordDescriptor(name="Pop")
    )
    rendered = emitter.emit_all(layouts)
    header = {
        "src": "Commands.yaml",
        "src_ver": "1.0.0",
        "tool_ver": "1.0.0",
        "ts": "",
        "namespace": "Test.Space",
    }
    native = emitter.render_native_file(rendered, header)
    managed = emitter.render_managed_file(rendered, header)
    assert "    MilCmdInvalid = 0x00,\n" in native
    assert "    MilCmdTranslateTransformAnimate = 0x02,\n" in native
    assert "    MilCmdPop = 0x03,\n" in native
    assert "// Generated:" not in native
    assert "namespace Test.Space\n{" in managed
    assert "        MilCmdPop = 0x03,\n" in managed
    assert (
        "            Debug.Assert(sizeof(MILCMD_POP) == MILCMD_POP.Size,"
        in managed
    )
    # records are nested inside the namespace block
    assert "    internal struct MILCMD_POP\n    {\n" in managed
    assert not any(line != line.rstrip() for line in managed.splitlines())
