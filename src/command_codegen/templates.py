# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Markup templates used by the command record generator.

Rendered by ``command_codegen.template.TemplateEngine``. Multi-line
placeholders are re-indented to the column they appear at.
"""

TEMPLATE_NATIVE = """//===----------------------------------------------------------------------===//
// Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
// copy at https://opensource.org/licenses/BSD-3-Clause.
// SPDX-License-Identifier: BSD-3-Clause
//===----------------------------------------------------------------------===//
// clang-format off

// Generated file - do not edit.
// Source: [[src]]
// Source-Version: [[src_ver]]
// Tool: CommandCodeGen [[tool_ver]]
[[if ts]]
// Generated: [[ts]]
[[/if]]

#pragma once

#include <cstdint>

enum MILCMD : uint32_t
{
    [[enum_members]]
};

[[records]]

// clang-format on
"""

TEMPLATE_MANAGED = """//===----------------------------------------------------------------------===//
// Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
// copy at https://opensource.org/licenses/BSD-3-Clause.
// SPDX-License-Identifier: BSD-3-Clause
//===----------------------------------------------------------------------===//

// Generated file - do not edit.
// Source: [[src]]
// Source-Version: [[src_ver]]
// Tool: CommandCodeGen [[tool_ver]]
[[if ts]]
// Generated: [[ts]]
[[/if]]

using System;
using System.Diagnostics;
using System.Runtime.InteropServices;

namespace [[namespace]]
{
    internal enum MILCMD : uint
    {
        [[enum_members]]
    }

    [[records]]

    internal static partial class CommandLayout
    {
        /// <summary>Checks every record against its native size.</summary>
        [Conditional("DEBUG")]
        internal static unsafe void VerifySizes()
        {
            [[size_checks]]
        }
    }
}
"""

# One struct per (record, variant)

TEMPLATE_NATIVE_RECORD = """[[if comment]]
[[comment]]
[[/if]]
[[if is_empty]]
// No fields; the struct still occupies one byte.
[[/if]]
struct [[struct_name]]
{
[[if has_members]]
    [[members]]
[[/if]]
};
static_assert(sizeof([[struct_name]]) == [[total_size]], "[[struct_name]] does not match its managed layout");"""

TEMPLATE_MANAGED_RECORD = """[[if comment]]
[[comment]]
[[/if]]
[StructLayout(LayoutKind.Explicit)]
internal [[if is_unsafe]]unsafe [[/if]]struct [[struct_name]]
{
    internal const int Size = [[total_size]];
[[if has_members]]

    [[members]]
[[/if]]
}"""

TEMPLATE_SIZE_CHECK = (
    'Debug.Assert(sizeof([[struct_name]]) == [[struct_name]].Size, '
    '"[[struct_name]] size mismatch");'
)
