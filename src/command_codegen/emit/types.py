# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Value type tables for the native (C++) and managed (C#) targets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..errors import E_SPEC_INVALID, internal_error, schema_error
from ..model import FieldDescriptor, FieldKind, Platform

__all__ = ["TargetType", "TypeTable", "BUILTIN_TYPES", "padding_type"]

NATIVE_HANDLE = "HMIL_RESOURCE"
MANAGED_HANDLE = "DUCE.ResourceHandle"


@dataclass(frozen=True, slots=True)
class TargetType:
    native: str
    managed: str
    size: int
    alignment: int
    array_length: Optional[int] = None  # fixed byte buffer when set


BUILTIN_TYPES: Dict[str, TargetType] = {
    "byte": TargetType("BYTE", "byte", 1, 1),
    "ushort": TargetType("UINT16", "ushort", 2, 2),
    "short": TargetType("INT16", "short", 2, 2),
    "int": TargetType("INT32", "int", 4, 4),
    "uint": TargetType("UINT32", "uint", 4, 4),
    "bool": TargetType("BOOL", "int", 4, 4),
    "float": TargetType("FLOAT", "float", 4, 4),
    "long": TargetType("INT64", "long", 8, 8),
    "ulong": TargetType("UINT64", "ulong", 8, 8),
    "double": TargetType("DOUBLE", "double", 8, 8),
    "Color": TargetType("MilColorF", "MilColorF", 16, 4),
    "Point": TargetType("MilPoint2D", "Point", 16, 8),
    "Size": TargetType("MilSizeD", "Size", 16, 8),
    "Vector": TargetType("MilPoint2D", "Vector", 16, 8),
    "Rect": TargetType("MilPointAndSizeD", "Rect", 32, 8),
    "Matrix": TargetType("MilMatrix3x2D", "MilMatrix3x2D", 48, 8),
    "Point3D": TargetType("MilPoint3F", "MilPoint3F", 12, 4),
}

# Untyped scalars, chosen by size
_SCALARS = {
    1: ("BYTE", "byte"),
    2: ("UINT16", "ushort"),
    4: ("UINT32", "uint"),
    8: ("UINT64", "ulong"),
}


def padding_type(offset: int, size: int) -> TargetType:
    """Filler member for a padding entry of `size` bytes at `offset`."""
    names = _SCALARS.get(size)
    if names is not None and offset % size == 0:
        return TargetType(names[0], names[1], size, size)
    return TargetType("BYTE", "byte", size, 1, array_length=size)


class TypeTable:
    """Built-in value types plus the custom types declared by a spec."""

    def __init__(
        self,
        platform: Platform | None = None,
        custom: Mapping[str, Mapping[str, Any]] | None = None,
    ):
        self.platform = platform or Platform()
        self._types: Dict[str, TargetType] = dict(BUILTIN_TYPES)
        for name, decl in (custom or {}).items():
            size = int(decl["size"])
            self._types[name] = TargetType(
                native=str(decl.get("native") or name),
                managed=str(decl.get("managed") or name),
                size=size,
                alignment=int(decl.get("alignment") or size),
            )

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def lookup(self, name: str) -> TargetType:
        try:
            return self._types[name]
        except KeyError:
            raise schema_error(
                E_SPEC_INVALID, f"Unknown value type '{name}'", {"type": name}
            ) from None

    def handle(self) -> TargetType:
        size = self.platform.handle_size
        return TargetType(NATIVE_HANDLE, MANAGED_HANDLE, size, size)

    def resolve(self, fd: FieldDescriptor) -> TargetType:
        """Target types for a field; size and alignment follow the field."""
        kind = fd.kind
        if kind is FieldKind.HANDLE or kind is FieldKind.ANIMATION_HANDLE:
            return self.handle()
        if kind is not FieldKind.VALUE:
            raise internal_error(
                f"Unhandled field kind {kind!r}", {"field": fd.name}
            )
        if fd.type_name and fd.type_name in self._types:
            t = self._types[fd.type_name]
            return TargetType(
                t.native, t.managed, fd.byte_size, fd.required_alignment
            )
        if fd.type_name:
            # explicitly sized opaque type, emitted verbatim
            return TargetType(
                fd.type_name,
                fd.type_name,
                fd.byte_size,
                fd.required_alignment,
            )
        names = _SCALARS.get(fd.byte_size)
        if names is not None and fd.required_alignment == fd.byte_size:
            return TargetType(names[0], names[1], fd.byte_size, fd.byte_size)
        return TargetType(
            "BYTE",
            "byte",
            fd.byte_size,
            fd.required_alignment,
            array_length=fd.byte_size,
        )
