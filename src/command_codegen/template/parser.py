# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Markup parser: turns bracket markup into a fragment tree.

Syntax:
  [[name]]                 placeholder bound to bindings[name]
  [[if name]] ... [[/if]]  included when bindings[name] is truthy
  [[if not name]] ... [[/if]]

A conditional tag standing alone on its line swallows the whole line, so
templates can place tags on their own lines without leaving blank lines
behind.
"""

from __future__ import annotations

import re
from typing import Any, Callable, List, Mapping, Tuple

from ..errors import E_TEMPLATE_SYNTAX, E_TEMPLATE_UNBOUND, TemplateError
from .fragments import Block, Conditional, Fragment, Literal, Placeholder

__all__ = ["parse_markup"]

_TAG = re.compile(r"\[\[(.*?)\]\]", re.DOTALL)
_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_PLACEHOLDER = re.compile(rf"^\s*({_NAME})\s*$")
_IF = re.compile(rf"^\s*if\s+(not\s+)?({_NAME})\s*$")
_ENDIF = re.compile(r"^\s*/if\s*$")
_LINE_TAIL = re.compile(r"[ \t]*(\r?\n|$)")


def _const(value: Any) -> Callable[[], Any]:
    def _value() -> Any:
        return value

    return _value


def _line_col(text: str, index: int) -> Tuple[int, int]:
    line = text.count("\n", 0, index) + 1
    col = index - (text.rfind("\n", 0, index) + 1) + 1
    return line, col


def _resolve(bindings: Mapping[str, Any], name: str, text: str, pos: int):
    if name not in bindings:
        line, col = _line_col(text, pos)
        raise TemplateError(
            E_TEMPLATE_UNBOUND,
            f"Unbound template name '{name}' at {line}:{col}",
            {"name": name, "line": line, "column": col},
        )
    return bindings[name]


def _syntax(message: str, text: str, pos: int) -> TemplateError:
    line, col = _line_col(text, pos)
    return TemplateError(
        E_TEMPLATE_SYNTAX,
        f"{message} at {line}:{col}",
        {"line": line, "column": col},
    )


class _Frame:
    __slots__ = ("parts", "predicate", "negate", "name", "pos")

    def __init__(self, predicate=None, negate=False, name=None, pos=0):
        self.parts: List[Fragment] = []
        self.predicate = predicate
        self.negate = negate
        self.name = name
        self.pos = pos


def _standalone(text: str, start: int, end: int) -> Tuple[int, int] | None:
    """Return (line_start, line_end) when [start, end) is alone on its line."""
    line_start = text.rfind("\n", 0, start) + 1
    if text[line_start:start].strip(" \t"):
        return None
    tail = _LINE_TAIL.match(text, end)
    if tail is None:
        return None
    return line_start, tail.end()


def parse_markup(text: str, bindings: Mapping[str, Any]) -> Fragment:
    stack: List[_Frame] = [_Frame()]
    pos = 0

    def _emit_literal(upto: int) -> None:
        if upto > pos:
            stack[-1].parts.append(Literal(text[pos:upto]))

    for m in _TAG.finditer(text):
        if m.start() < pos:
            # already consumed as part of a standalone tag line
            continue
        body = m.group(1)
        ph = _PLACEHOLDER.match(body)
        if ph:
            _emit_literal(m.start())
            name = ph.group(1)
            value = _resolve(bindings, name, text, m.start())
            producer = value if callable(value) else _const(value)
            stack[-1].parts.append(Placeholder(producer, name))
            pos = m.end()
            continue

        cond = _IF.match(body)
        endif = None if cond else _ENDIF.match(body)
        if not cond and not endif:
            raise _syntax(f"Unrecognized tag '[[{body}]]'", text, m.start())

        span = _standalone(text, m.start(), m.end())
        _emit_literal(span[0] if span else m.start())
        pos = span[1] if span else m.end()

        if cond:
            name = cond.group(2)
            predicate = _resolve(bindings, name, text, m.start())
            stack.append(
                _Frame(
                    predicate=predicate,
                    negate=bool(cond.group(1)),
                    name=name,
                    pos=m.start(),
                )
            )
        else:
            if len(stack) == 1:
                raise _syntax("Unmatched '[[/if]]'", text, m.start())
            frame = stack.pop()
            stack[-1].parts.append(
                Conditional(
                    predicate=frame.predicate,
                    body=Block(tuple(frame.parts)),
                    negate=frame.negate,
                    name=frame.name,
                )
            )

    if len(stack) > 1:
        raise _syntax(
            f"Unclosed '[[if {stack[-1].name}]]'", text, stack[-1].pos
        )
    _emit_literal(len(text))
    return Block(tuple(stack[0].parts))
