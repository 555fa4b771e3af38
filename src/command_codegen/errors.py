# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Error definitions for CommandCodeGen.

Every failure in the generator is a configuration or programming error, so
all of them are fatal. Each error carries a stable code plus a context dict
that names the offending record and variant whenever they are known.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

# Schema (descriptor) errors
E_ALIGNMENT = "E_ALIGNMENT"
E_FIELD_SIZE = "E_FIELD_SIZE"
E_FIELD_KIND = "E_FIELD_KIND"
E_DUP_FIELD = "E_DUP_FIELD"
E_DUP_RECORD = "E_DUP_RECORD"
E_SPEC_MISSING_FIELD = "E_SPEC_MISSING_FIELD"
E_SPEC_TYPE_MISMATCH = "E_SPEC_TYPE_MISMATCH"
E_SPEC_VALUE_RANGE = "E_SPEC_VALUE_RANGE"
E_SPEC_INVALID = "E_SPEC_INVALID"

# Layout errors
E_LAYOUT_DIVERGENCE = "E_LAYOUT_DIVERGENCE"
E_INTERNAL = "E_INTERNAL"

# Template engine errors
E_TEMPLATE_CYCLE = "E_TEMPLATE_CYCLE"
E_TEMPLATE_DEPTH = "E_TEMPLATE_DEPTH"
E_TEMPLATE_PRODUCER = "E_TEMPLATE_PRODUCER"
E_TEMPLATE_UNBOUND = "E_TEMPLATE_UNBOUND"
E_TEMPLATE_SYNTAX = "E_TEMPLATE_SYNTAX"


@dataclass
class CodegenError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        where = ""
        ctx = self.context or {}
        if "record" in ctx:
            where = f" [record={ctx['record']}"
            if "variant" in ctx:
                where += f" variant={ctx['variant']}"
            where += "]"
        return f"{self.code}: {self.message}{where}"

    def with_context(self, **extra: Any) -> "CodegenError":
        """Return the same error with missing context keys filled in."""
        merged = dict(extra)
        merged.update(self.context or {})
        self.context = merged
        return self


class SchemaError(CodegenError):
    pass


class LayoutError(CodegenError):
    pass


class TemplateError(CodegenError):
    pass


def schema_error(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> SchemaError:
    return SchemaError(code=code, message=message, context=context)


def layout_error(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> LayoutError:
    return LayoutError(code=code, message=message, context=context)


def internal_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> LayoutError:
    return LayoutError(code=E_INTERNAL, message=message, context=context)


__all__ = [
    "CodegenError",
    "SchemaError",
    "LayoutError",
    "TemplateError",
    "schema_error",
    "layout_error",
    "internal_error",
    "E_ALIGNMENT",
    "E_FIELD_SIZE",
    "E_FIELD_KIND",
    "E_DUP_FIELD",
    "E_DUP_RECORD",
    "E_SPEC_MISSING_FIELD",
    "E_SPEC_TYPE_MISMATCH",
    "E_SPEC_VALUE_RANGE",
    "E_SPEC_INVALID",
    "E_LAYOUT_DIVERGENCE",
    "E_INTERNAL",
    "E_TEMPLATE_CYCLE",
    "E_TEMPLATE_DEPTH",
    "E_TEMPLATE_PRODUCER",
    "E_TEMPLATE_UNBOUND",
    "E_TEMPLATE_SYNTAX",
]
