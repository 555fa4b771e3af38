# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Fragment tree nodes consumed by the template engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Tuple, Union


@dataclass(frozen=True, slots=True)
class Literal:
    text: str


@dataclass(frozen=True, slots=True)
class Placeholder:
    producer: Callable[[], Any]
    name: str | None = None

    @property
    def key(self) -> str:
        if self.name:
            return self.name
        return getattr(self.producer, "__qualname__", repr(self.producer))

    @property
    def identity(self) -> Tuple[str, Any]:
        # parsed markup builds a fresh producer per expansion of a name
        if self.name:
            return ("name", self.name)
        return ("producer", id(self.producer))


@dataclass(frozen=True, slots=True)
class Conditional:
    predicate: Union[bool, Callable[[], Any]]
    body: "Fragment"
    negate: bool = False
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Block:
    parts: Tuple["Fragment", ...] = ()


Fragment = Union[Literal, Placeholder, Conditional, Block]


def block(*parts: Union[Fragment, str]) -> Block:
    """Build a Block; bare strings become Literal nodes."""
    return Block(
        tuple(Literal(p) if isinstance(p, str) else p for p in parts)
    )
