# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Typed data model for the command record pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class FieldKind(Enum):
    VALUE = "value"
    HANDLE = "handle"
    ANIMATION_HANDLE = "animation_handle"


class Variant(Enum):
    BASE = "base"
    ANIMATED = "animated"


@dataclass(frozen=True, slots=True)
class Platform:
    """Target platform rules shared by both renderings."""

    handle_size: int = 4
    max_alignment: int = 8
    min_struct_alignment: int = 4


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    byte_size: int
    kind: FieldKind = FieldKind.VALUE
    is_advanced_only: bool = False
    alignment: Optional[int] = None  # None: natural (== byte_size)
    type_name: Optional[str] = None
    animated: bool = False

    @property
    def required_alignment(self) -> int:
        return self.alignment if self.alignment is not None else self.byte_size

    @property
    def is_handle(self) -> bool:
        return self.kind in (FieldKind.HANDLE, FieldKind.ANIMATION_HANDLE)


@dataclass(frozen=True, slots=True)
class RecordDescriptor:
    name: str
    fields: Tuple[FieldDescriptor, ...] = ()
    animated_fields: Tuple[FieldDescriptor, ...] = ()
    comment: Optional[str] = None

    @property
    def has_animated_variant(self) -> bool:
        return bool(self.animated_fields)

    @property
    def all_fields(self) -> Tuple[FieldDescriptor, ...]:
        return self.fields + self.animated_fields

    def variants(self) -> Tuple[Variant, ...]:
        if self.has_animated_variant:
            return (Variant.BASE, Variant.ANIMATED)
        return (Variant.BASE,)


@dataclass(frozen=True, slots=True)
class LayoutEntry:
    offset: int
    size: int
    field: Optional[FieldDescriptor] = None
    name: str = ""

    @property
    def is_padding(self) -> bool:
        return self.field is None

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True, slots=True)
class CompiledLayout:
    record: RecordDescriptor
    variant: Variant
    entries: Tuple[LayoutEntry, ...]
    total_size: int
    struct_alignment: int
    is_empty: bool = False

    @property
    def field_entries(self) -> Tuple[LayoutEntry, ...]:
        return tuple(e for e in self.entries if not e.is_padding)

    @property
    def padding_total(self) -> int:
        return sum(e.size for e in self.entries if e.is_padding)

    def offset_of(self, name: str) -> int:
        for e in self.entries:
            if not e.is_padding and e.name == name:
                return e.offset
        raise KeyError(name)


@dataclass(slots=True)
class Meta:
    version: Optional[str] = None
    namespace: Optional[str] = None
    description: Optional[str] = None


@dataclass(slots=True)
class CommandModel:
    meta: Meta
    platform: Platform
    records: list[RecordDescriptor] = field(default_factory=list)
    custom_types: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def record(self, name: str) -> RecordDescriptor:
        for r in self.records:
            if r.name == name:
                return r
        raise KeyError(name)
