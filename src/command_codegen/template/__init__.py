# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Generation-time template substitution."""

from .engine import TemplateEngine, render
from .fragments import Block, Conditional, Fragment, Literal, Placeholder, block
from .parser import parse_markup

__all__ = [
    "TemplateEngine",
    "render",
    "Block",
    "Conditional",
    "Fragment",
    "Literal",
    "Placeholder",
    "block",
    "parse_markup",
]
