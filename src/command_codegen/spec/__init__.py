# ===-----------------------------------------------------------------------===#
# Distributed under the 3-Clause BSD License. See accompanying file LICENSE or
# copy at https://opensource.org/licenses/BSD-3-Clause.
# SPDX-License-Identifier: BSD-3-Clause
# ===-----------------------------------------------------------------------===#

"""Command spec loading and validation."""

from .loader import (
    DEFAULT_NAMESPACE,
    build_model,
    build_platform,
    build_record,
    check_version,
    load_document,
    load_model,
)
from .schema import (
    PACKAGED_SCHEMA,
    find_schema,
    normalize_doc,
    schema_version,
    validate_against_schema,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "build_model",
    "build_platform",
    "build_record",
    "check_version",
    "load_document",
    "load_model",
    "PACKAGED_SCHEMA",
    "find_schema",
    "normalize_doc",
    "schema_version",
    "validate_against_schema",
]
