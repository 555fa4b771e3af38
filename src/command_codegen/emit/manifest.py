# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Machine-readable layout manifest (JSON)."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Sequence

from ..model import CompiledLayout
from .records import RenderedRecord, struct_name


def layout_to_dict(layout: CompiledLayout) -> Dict[str, Any]:
    return {
        "record": layout.record.name,
        "variant": layout.variant.value,
        "struct": struct_name(layout),
        "total_size": layout.total_size,
        "struct_alignment": layout.struct_alignment,
        "is_empty": layout.is_empty,
        "padding_bytes": layout.padding_total,
        "entries": [
            {
                "name": e.name,
                "offset": e.offset,
                "size": e.size,
                "padding": e.is_padding,
                **({"kind": e.field.kind.value} if e.field else {}),
            }
            for e in layout.entries
        ],
    }


def build_manifest(
    rendered: Sequence[RenderedRecord], header: Mapping[str, Any]
) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "source": header.get("src"),
        "source_version": header.get("src_ver"),
        "tool_version": header.get("tool_ver"),
        "records": [],
    }
    if header.get("ts"):
        doc["generated"] = header["ts"]
    for r in rendered:
        entry = layout_to_dict(r.layout)
        entry["command"] = r.command_name
        entry["type_id"] = r.type_id
        doc["records"].append(entry)
    return doc


def dumps_manifest(doc: Mapping[str, Any]) -> str:
    return json.dumps(doc, indent=2) + "\n"


__all__ = ["layout_to_dict", "build_manifest", "dumps_manifest"]
