# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Command-line entry point for CommandCodeGen.

Loads a YAML description of command records and emits a C++ header with the
sequential struct definitions, a C# file with the explicit-offset twins and
a JSON manifest of the computed layouts. The tool is typically invoked from
the build before either side compiles.
"""

import argparse
import json
import sys

from ._version import __version__
from .errors import CodegenError
from .generator import TS_STRATEGIES, generate, plan
from .logging import configure_logging
from .reporting import REPORTERS, get_reporter, make_reporter, set_reporter
from .reporting import set_verbosity


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="command_codegen")
    p.add_argument(
        "--input",
        help="Path to the YAML (or JSON) file describing command records",
    )
    p.add_argument(
        "--out-base",
        help="Output base path without extension (e.g. path/to/Commands)",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and render without writing output files",
    )
    p.add_argument(
        "--plan",
        action="store_true",
        help="Print the computed layouts as JSON to stdout and exit",
    )
    p.add_argument(
        "--schema",
        help="Optional path to Commands.schema.json to use for validation",
    )
    p.add_argument(
        "--handle-size",
        type=int,
        help="Override platform.handle_size (bytes)",
    )
    p.add_argument(
        "--max-alignment",
        type=int,
        help="Override platform.max_alignment (bytes)",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v: per-record progress, -vv: debug)",
    )
    p.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report errors (same as --reporter silent)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=sorted(REPORTERS),
        default="plain",
        help="Output style for progress and messages",
    )
    p.add_argument(
        "--ts-strategy",
        choices=TS_STRATEGIES,
        default="omit",
        help="Timestamp in generated files: omit (reproducible) or now",
    )
    p.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    return p


def main(argv=None) -> int:
    """Parse CLI args and run the generator.

    Args:
        argv: Optional list of arguments (defaults to sys.argv[1:]).

    Returns:
        0 on success, 1 on any fatal condition.
    """
    p = build_parser()
    args = p.parse_args(argv)
    if args.version:
        print(f"CommandCodeGen {__version__}")
        return 0
    if not args.input:
        p.error("--input is required")
    if not args.out_base and not (args.plan or args.dry_run):
        p.error("--out-base is required unless --plan or --dry-run is given")

    set_verbosity(args.verbose)
    set_reporter(make_reporter("silent" if args.quiet else args.reporter))
    configure_logging(args.verbose)
    rep = get_reporter()
    overrides = {
        "handle_size": args.handle_size,
        "max_alignment": args.max_alignment,
    }

    try:
        if args.plan:
            doc = plan(args.input, schema_path=args.schema, overrides=overrides)
            sys.stdout.write(json.dumps(doc, indent=2) + "\n")
        else:
            generate(
                args.input,
                args.out_base,
                dry_run=args.dry_run,
                schema_path=args.schema,
                ts_strategy=args.ts_strategy,
                overrides=overrides,
            )
    except CodegenError as e:
        rep.error(str(e), code=e.code, context=e.context or {})
        return 1
    except (OSError, RuntimeError) as e:
        rep.error(f"{type(e).__name__}: {e}")
        return 1
    finally:
        rep.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
