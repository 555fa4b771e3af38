# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Record emitter: one compiled layout, two struct renderings.

The explicit-offset form (C#) tags every member with its byte offset. The
sequential form (C++) lists the same members in the same order and relies
on the compiler's natural packing, which reproduces the offsets because
every padding entry is spelled out as a filler member. A size assertion
follows each native struct; the managed side gets a ``Size`` constant and a
debug check in ``CommandLayout.VerifySizes``.
"""

from __future__ import annotations

from dataclasses import dataclass
from xml.sax.saxutils import escape
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..errors import E_DUP_FIELD, schema_error
from ..layout.natural import SequentialMember
from ..model import CompiledLayout, LayoutEntry, Variant
from ..template import Literal, TemplateEngine
from ..templates import (
    TEMPLATE_MANAGED,
    TEMPLATE_MANAGED_RECORD,
    TEMPLATE_NATIVE,
    TEMPLATE_NATIVE_RECORD,
    TEMPLATE_SIZE_CHECK,
)
from .types import TargetType, TypeTable, padding_type

__all__ = [
    "MemberDecl",
    "RenderedRecord",
    "RecordEmitter",
    "struct_name",
    "command_name",
]

HANDLE_PREFIX = "h"
STRUCT_PREFIX = "MILCMD_"
ANIMATE_SUFFIX = "_ANIMATE"
COMMAND_PREFIX = "MilCmd"

# Declared by the managed record template next to the members
RESERVED_MANAGED_NAMES = ("Size",)


def struct_name(layout: CompiledLayout) -> str:
    name = STRUCT_PREFIX + layout.record.name.upper()
    if layout.variant is Variant.ANIMATED:
        name += ANIMATE_SUFFIX
    return name


def command_name(layout: CompiledLayout) -> str:
    name = COMMAND_PREFIX + layout.record.name
    if layout.variant is Variant.ANIMATED:
        name += "Animate"
    return name


def _data(value: Any) -> Any:
    """Bind emitted text as a literal so it is never read as markup."""
    if isinstance(value, str) and value:
        return Literal(value)
    return value


def native_comment(text: str | None) -> str:
    # a trailing backslash would splice the next line into the comment
    lines = (line.rstrip().rstrip("\\") for line in (text or "").splitlines())
    return "\n".join(f"// {line}".rstrip() for line in lines)


def managed_summary(text: str | None) -> str:
    lines = [escape(line) for line in (text or "").splitlines()]
    if not lines:
        return ""
    if len(lines) == 1:
        return f"/// <summary>{lines[0]}</summary>"
    body = [f"/// {line}".rstrip() for line in lines]
    return "\n".join(["/// <summary>", *body, "/// </summary>"])


def member_name(entry: LayoutEntry) -> str:
    if entry.field is None:
        return entry.name
    if entry.field.is_handle:
        return HANDLE_PREFIX + entry.field.name
    return entry.field.name


@dataclass(frozen=True, slots=True)
class MemberDecl:
    name: str
    offset: int
    target: TargetType
    is_padding: bool = False

    @property
    def is_array(self) -> bool:
        return self.target.array_length is not None

    def native(self) -> str:
        if self.is_array:
            return f"{self.target.native} {self.name}[{self.target.array_length}];"
        return f"{self.target.native} {self.name};"

    def managed(self) -> str:
        access = "private" if self.is_padding else "internal"
        head = f"[FieldOffset({self.offset})] {access}"
        if self.is_array:
            return (
                f"{head} fixed {self.target.managed} "
                f"{self.name}[{self.target.array_length}];"
            )
        return f"{head} {self.target.managed} {self.name};"

    def sequential(self) -> SequentialMember:
        return SequentialMember(
            name=self.name,
            size=self.target.size,
            alignment=self.target.alignment,
        )


@dataclass(frozen=True, slots=True)
class RenderedRecord:
    layout: CompiledLayout
    struct_name: str
    command_name: str
    type_id: int
    members: Tuple[MemberDecl, ...]
    explicit_text: str
    sequential_text: str
    size_check_text: str

    @property
    def total_size(self) -> int:
        return self.layout.total_size

    @property
    def is_empty(self) -> bool:
        return self.layout.is_empty

    @property
    def member_names(self) -> Tuple[str, ...]:
        """Names of the non-padding members, identical in both forms."""
        return tuple(m.name for m in self.members if not m.is_padding)

    @property
    def sequential_members(self) -> Tuple[SequentialMember, ...]:
        return tuple(m.sequential() for m in self.members)


class RecordEmitter:
    """Renders compiled layouts through the template engine."""

    def __init__(
        self,
        types: TypeTable | None = None,
        engine: TemplateEngine | None = None,
    ):
        self.types = types or TypeTable()
        self.engine = engine or TemplateEngine()

    def members(self, layout: CompiledLayout) -> Tuple[MemberDecl, ...]:
        decls: List[MemberDecl] = []
        seen: Dict[str, LayoutEntry] = {}
        reserved = set(RESERVED_MANAGED_NAMES) | {struct_name(layout)}
        for entry in layout.entries:
            name = member_name(entry)
            if name in seen or name in reserved:
                what = "is used twice" if name in seen else "is reserved"
                raise schema_error(
                    E_DUP_FIELD,
                    f"Member name '{name}' {what}",
                    {
                        "record": layout.record.name,
                        "variant": layout.variant.value,
                        "field": name,
                    },
                )
            seen[name] = entry
            if entry.field is None:
                target = padding_type(entry.offset, entry.size)
            else:
                target = self.types.resolve(entry.field)
            decls.append(
                MemberDecl(
                    name=name,
                    offset=entry.offset,
                    target=target,
                    is_padding=entry.is_padding,
                )
            )
        return tuple(decls)

    def emit(self, layout: CompiledLayout, type_id: int = 0) -> RenderedRecord:
        members = self.members(layout)
        sname = struct_name(layout)
        comment = layout.record.comment
        engine = self.engine.bind(
            struct_name=sname,
            total_size=layout.total_size,
            comment=_data(native_comment(comment)),
            is_empty=layout.is_empty,
            has_members=bool(members),
            is_unsafe=any(m.is_array for m in members),
            members=lambda: _data("\n".join(m.native() for m in members)),
        )
        sequential = engine.render(TEMPLATE_NATIVE_RECORD)
        explicit = engine.bind(
            comment=_data(managed_summary(comment)),
            members=lambda: _data("\n".join(m.managed() for m in members)),
        ).render(TEMPLATE_MANAGED_RECORD)
        return RenderedRecord(
            layout=layout,
            struct_name=sname,
            command_name=command_name(layout),
            type_id=type_id,
            members=members,
            explicit_text=explicit,
            sequential_text=sequential,
            size_check_text=engine.render(TEMPLATE_SIZE_CHECK),
        )

    def emit_all(
        self, layouts: Sequence[CompiledLayout]
    ) -> List[RenderedRecord]:
        # type ids start at 1; 0 is MilCmdInvalid
        return [self.emit(layout, i) for i, layout in enumerate(layouts, 1)]

    def _enum_members(self, rendered: Sequence[RenderedRecord]) -> str:
        lines = [f"{COMMAND_PREFIX}Invalid = 0x00,"]
        lines.extend(f"{r.command_name} = 0x{r.type_id:02x}," for r in rendered)
        return "\n".join(lines)

    def render_native_file(
        self, rendered: Sequence[RenderedRecord], header: Mapping[str, Any]
    ) -> str:
        engine = self.engine.bind(
            **{k: _data(v) for k, v in header.items()},
            enum_members=lambda: _data(self._enum_members(rendered)),
            records=lambda: _data(
                "\n\n".join(r.sequential_text for r in rendered)
            ),
        )
        return engine.render(TEMPLATE_NATIVE)

    def render_managed_file(
        self, rendered: Sequence[RenderedRecord], header: Mapping[str, Any]
    ) -> str:
        engine = self.engine.bind(
            **{k: _data(v) for k, v in header.items()},
            enum_members=lambda: _data(self._enum_members(rendered)),
            records=lambda: _data(
                "\n\n".join(r.explicit_text for r in rendered)
            ),
            size_checks=lambda: _data(
                "\n".join(r.size_check_text for r in rendered)
            ),
        )
        return engine.render(TEMPLATE_MANAGED)
