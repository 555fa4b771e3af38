# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Generator orchestration: load, validate, compile, verify, render, write."""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from ._version import __version__ as TOOL_VERSION
from .emit import (
    RecordEmitter,
    RenderedRecord,
    TypeTable,
    build_manifest,
    dumps_manifest,
)
from .layout import check_equivalence, compile_records
from .logging import get_logger, section, step
from .model import CommandModel, CompiledLayout
from .reporting import get_reporter, task
from .spec import (
    build_model,
    find_schema,
    load_document,
    normalize_doc,
    schema_version,
    validate_against_schema,
)

TS_STRATEGIES = ("omit", "now")
GENERATED_INFIX = "Generated."

log = get_logger()


@dataclass(frozen=True, slots=True)
class EmittedSources:
    native: str
    managed: str
    manifest: str


@dataclass(slots=True)
class GenerationResult:
    model: CommandModel
    layouts: List[CompiledLayout]
    rendered: List[RenderedRecord]
    sources: EmittedSources
    outputs: Dict[str, str] = field(default_factory=dict)
    changed: bool = False


def output_paths(out_base: str) -> Dict[str, str]:
    """Derive output file paths; `out_base` gets a 'Generated.' suffix."""
    base = out_base if out_base.endswith(GENERATED_INFIX) else (
        out_base + GENERATED_INFIX
    )
    return {
        "native": base + "Records.h",
        "managed": base + "Records.cs",
        "manifest": base + "Layouts.json",
    }


def timestamp(strategy: str) -> str:
    if strategy == "omit":
        return ""
    if strategy == "now":
        return time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime())
    raise ValueError(f"Unknown timestamp strategy '{strategy}'")


def source_label(input_path: str) -> str:
    """Repo-relative path of the input when inside git, else its file name."""
    abs_path = os.path.abspath(input_path)
    try:
        root = subprocess.check_output(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=os.path.dirname(abs_path),
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return os.path.basename(abs_path)
    return os.path.relpath(abs_path, root).replace("\\", "/")


def transactional_write_files(files: Mapping[str, str]) -> bool:
    """Write multiple files as a single transaction.

    Every target is staged to a temp file first; only targets whose content
    differs are replaced, with backups of the originals. If a replacement
    fails, the already replaced targets are restored (or removed when they
    did not exist before) and RuntimeError is raised.

    Returns True if any target changed content, False otherwise.
    """
    tmp_suffix = ".tmp.tx"
    bak_suffix = ".bak.tx"
    staged: List[tuple[str, str]] = []
    replaced: List[str] = []
    backups: Dict[str, str] = {}

    def _remove(path: str) -> None:
        if os.path.exists(path):
            os.remove(path)

    try:
        for target, content in files.items():
            if os.path.exists(target):
                with open(target, "r", encoding="utf-8", newline="") as f:
                    if f.read() == content:
                        continue
            tmp = target + tmp_suffix
            with open(tmp, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            staged.append((target, tmp))

        for target, tmp in staged:
            if os.path.exists(target):
                bak = target + bak_suffix
                shutil.copyfile(target, bak)
                backups[target] = bak
            os.replace(tmp, target)
            replaced.append(target)
    except OSError as e:
        for target in replaced:
            if target in backups:
                os.replace(backups.pop(target), target)
            else:
                _remove(target)
        for _, tmp in staged:
            _remove(tmp)
        for bak in backups.values():
            _remove(bak)
        raise RuntimeError(f"Transactional write failed: {e}") from e

    for bak in backups.values():
        _remove(bak)
    return bool(replaced)


def compile_and_verify(
    model: CommandModel, types: TypeTable
) -> tuple[List[CompiledLayout], List[RenderedRecord]]:
    """Compile every record variant and cross-check both renderings."""
    records = model.records
    with task("compile", "Compile layouts", total=len(records)) as final:
        layouts = compile_records(records, model.platform)
        emitter = RecordEmitter(types)
        rendered = emitter.emit_all(layouts)
        by_record: Dict[str, List[RenderedRecord]] = {}
        for r in rendered:
            by_record.setdefault(r.layout.record.name, []).append(r)
        rep = get_reporter()
        for record in records:
            for r in by_record.get(record.name, []):
                check_equivalence(r.layout, r.sequential_members)
                _warn_interior_padding(r)
                log.debug(
                    "%s: size=%d align=%d members=%s",
                    r.struct_name,
                    r.total_size,
                    r.layout.struct_alignment,
                    ",".join(
                        f"{m.name}@{m.offset}" for m in r.members
                    ),
                )
            rep.advance("compile", current_item=record.name)
        final.update(
            records=len(records),
            layouts=len(layouts),
            bytes=sum(lay.total_size for lay in layouts),
            padding=sum(lay.padding_total for lay in layouts),
        )
    return layouts, rendered


def _warn_interior_padding(r: RenderedRecord) -> None:
    entries = r.layout.entries
    interior = [e for e in entries[:-1] if e.is_padding]
    if interior:
        pads = ", ".join(f"{e.size}@{e.offset}" for e in interior)
        log.warning(
            "%s has interior padding (%s); both renderings depend on it",
            r.struct_name,
            pads,
        )


def render_sources(
    model: CommandModel,
    rendered: Sequence[RenderedRecord],
    types: TypeTable,
    header: Mapping[str, Any],
) -> EmittedSources:
    emitter = RecordEmitter(types)
    bindings = dict(header)
    bindings.setdefault("namespace", model.meta.namespace or "")
    return EmittedSources(
        native=emitter.render_native_file(rendered, bindings),
        managed=emitter.render_managed_file(rendered, bindings),
        manifest=dumps_manifest(build_manifest(rendered, bindings)),
    )


def load_and_validate(
    input_path: str,
    *,
    schema_path: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> tuple[CommandModel, str | None]:
    """Return (model, schema version) for the input spec."""
    log.debug("Loading input: %s", input_path)
    doc = load_document(input_path)
    normalize_doc(doc)
    resolved = find_schema(schema_path, input_path)
    log.debug("Schema: %s", resolved)
    validate_against_schema(doc, resolved)
    model = build_model(doc, overrides)
    return model, schema_version(resolved)


def generate(
    input_path: str,
    out_base: str | None = None,
    *,
    dry_run: bool = False,
    schema_path: str | None = None,
    ts_strategy: str = "omit",
    overrides: Mapping[str, Any] | None = None,
) -> GenerationResult:
    """Run the whole pipeline; raises CodegenError on any fatal condition.

    Nothing is written unless every record compiled and verified. With
    `dry_run` (or no `out_base`) the sources are rendered but not written.
    """
    log.info("CommandCodeGen %s", TOOL_VERSION)
    model, schema_ver = load_and_validate(
        input_path, schema_path=schema_path, overrides=overrides
    )
    log.info("Spec version: %s", model.meta.version)
    if schema_ver:
        log.debug("Schema version: %s", schema_ver)

    types = TypeTable(model.platform, model.custom_types)
    layouts, rendered = compile_and_verify(model, types)
    log.info(
        "Layout summary: records=%d layouts=%d bytes=%d padding=%d",
        len(model.records),
        len(layouts),
        sum(lay.total_size for lay in layouts),
        sum(lay.padding_total for lay in layouts),
    )

    header = {
        "src": source_label(input_path),
        "src_ver": model.meta.version,
        "tool_ver": TOOL_VERSION,
        "ts": timestamp(ts_strategy),
    }
    sources = render_sources(model, rendered, types, header)
    result = GenerationResult(
        model=model, layouts=layouts, rendered=rendered, sources=sources
    )
    if out_base is None:
        return result

    outputs = output_paths(out_base)
    result.outputs = outputs
    if dry_run:
        with section("Dry run: planned outputs"):
            for key in ("native", "managed", "manifest"):
                step(f"{key}: {outputs[key]}")
        return result

    files = {
        outputs["native"]: sources.native,
        outputs["managed"]: sources.managed,
        outputs["manifest"]: sources.manifest,
    }
    with section("Write outputs"):
        for path in files:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            step(path)
        result.changed = transactional_write_files(files)
    log.info(
        "Write summary: files=%d changed=%s", len(files), result.changed
    )
    if result.changed:
        log.info("Outputs updated")
    else:
        log.info("No changes (up to date)")
    return result


def plan(
    input_path: str,
    *,
    schema_path: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Dict[str, Any]:
    """Compile without rendering files and return the layout manifest."""
    model, _ = load_and_validate(
        input_path, schema_path=schema_path, overrides=overrides
    )
    types = TypeTable(model.platform, model.custom_types)
    _, rendered = compile_and_verify(model, types)
    return build_manifest(
        rendered,
        {
            "src": source_label(input_path),
            "src_ver": model.meta.version,
            "tool_ver": TOOL_VERSION,
        },
    )


__all__ = [
    "EmittedSources",
    "GenerationResult",
    "TS_STRATEGIES",
    "compile_and_verify",
    "generate",
    "load_and_validate",
    "output_paths",
    "plan",
    "render_sources",
    "source_label",
    "timestamp",
    "transactional_write_files",
]
