# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Template substitution engine.

Renders fragment trees into text at generation time. Placeholders call their
producer; when the produced text contains markup it is parsed against the
same bindings and rendered re-entrantly. Conditionals are decided once while
rendering and leave nothing behind when false, so the generated output never
contains a runtime branch for them.

Producer chains are tracked so that a producer re-entering itself (directly
or through others) fails with the full chain instead of looping.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple, Union

from ..errors import (
    E_TEMPLATE_CYCLE,
    E_TEMPLATE_DEPTH,
    E_TEMPLATE_PRODUCER,
    TemplateError,
)
from .fragments import Block, Conditional, Fragment, Literal, Placeholder
from .parser import parse_markup

__all__ = ["TemplateEngine", "render"]

DEFAULT_MAX_DEPTH = 32
_MARKUP_OPEN = "[["


class TemplateEngine:
    def __init__(
        self,
        bindings: Mapping[str, Any] | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.bindings: Dict[str, Any] = dict(bindings or {})
        self.max_depth = max_depth

    def bind(self, **values: Any) -> "TemplateEngine":
        """Return a new engine with extra bindings layered on top."""
        merged = dict(self.bindings)
        merged.update(values)
        return TemplateEngine(merged, max_depth=self.max_depth)

    def parse(self, text: str) -> Fragment:
        return parse_markup(text, self.bindings)

    def render(self, template: Union[Fragment, str]) -> str:
        if isinstance(template, str):
            template = self.parse(template)
        out = _Renderer(self)
        out.render(template)
        return _normalize(out.text())


class _Renderer:
    def __init__(self, engine: TemplateEngine):
        self.engine = engine
        self.chunks: List[str] = []
        self.active: List[str] = []
        self.idents: List[Tuple[str, Any]] = []

    def text(self) -> str:
        return "".join(self.chunks)

    def _current_indent(self) -> str:
        # leading whitespace of the line currently being written
        tail: List[str] = []
        for chunk in reversed(self.chunks):
            nl = chunk.rfind("\n")
            if nl >= 0:
                tail.append(chunk[nl + 1 :])
                break
            tail.append(chunk)
        line = "".join(reversed(tail))
        return line[: len(line) - len(line.lstrip(" \t"))]

    def _fail(self, code: str, message: str, chain: List[str]) -> TemplateError:
        text = " -> ".join(chain)
        return TemplateError(
            code,
            f"{message} (chain: {text})",
            {"producer": chain[-1], "chain": text},
        )

    def render(self, node: Fragment) -> None:
        if isinstance(node, Literal):
            self.chunks.append(node.text)
        elif isinstance(node, Block):
            for part in node.parts:
                self.render(part)
        elif isinstance(node, Conditional):
            if self._decide(node):
                self.render(node.body)
        elif isinstance(node, Placeholder):
            self._expand(node)
        else:
            raise TypeError(f"Not a template fragment: {node!r}")

    def _call(self, fn, key: str, what: str) -> Any:
        try:
            return fn()
        except TemplateError:
            raise
        except Exception as e:
            raise self._fail(
                E_TEMPLATE_PRODUCER,
                f"{what} '{key}' raised {type(e).__name__}: {e}",
                self.active + [key],
            ) from e

    def _decide(self, node: Conditional) -> bool:
        pred = node.predicate
        if callable(pred):
            key = node.name or getattr(pred, "__qualname__", repr(pred))
            pred = self._call(pred, key, "Predicate")
        return bool(pred) != node.negate

    def _expand(self, node: Placeholder) -> None:
        key = node.key
        ident = node.identity
        if ident in self.idents:
            cycle = self.active[self.idents.index(ident) :] + [key]
            raise self._fail(
                E_TEMPLATE_CYCLE, "Template producer cycle", cycle
            )
        if len(self.active) >= self.engine.max_depth:
            raise self._fail(
                E_TEMPLATE_DEPTH,
                f"Template nesting exceeds {self.engine.max_depth} levels",
                self.active + [key],
            )
        indent = self._current_indent()
        value = self._call(node.producer, key, "Producer")
        sub = _Renderer(self.engine)
        sub.active = self.active
        sub.idents = self.idents
        self.active.append(key)
        self.idents.append(ident)
        try:
            if isinstance(value, (Literal, Block, Conditional, Placeholder)):
                sub.render(value)
            else:
                text = "" if value is None else str(value)
                if _MARKUP_OPEN in text:
                    sub.render(self.engine.parse(text))
                else:
                    sub.chunks.append(text)
        finally:
            self.active.pop()
            self.idents.pop()
        produced = sub.text()
        if indent and "\n" in produced:
            produced = produced.replace("\n", "\n" + indent)
        self.chunks.append(produced)


def _normalize(text: str) -> str:
    return "\n".join(line.rstrip() for line in text.split("\n"))


def render(
    template: Union[Fragment, str], bindings: Mapping[str, Any] | None = None
) -> str:
    return TemplateEngine(bindings).render(template)
