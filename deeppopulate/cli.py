#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Print the deep populate tree for a content type.

    python -m deeppopulate.cli api::article.article --schema-dir ./src
    python -m deeppopulate.cli /api/articles --schema-dir ./src --indent
"""

# Standard
import argparse
import logging
import sys
from typing import List, Optional

# Third-Party
import orjson

# First-Party
from deeppopulate.builder import PopulateSpecBuilder
from deeppopulate.config import settings
from deeppopulate.errors import DeepPopulateError
from deeppopulate.middleware.path_filter import content_type_uid
from deeppopulate.registry import SchemaRegistry


def configure_logging(level: str) -> None:
    """Send log records to stderr at ``level``.

    Args:
        level: Logging level name, e.g. ``"INFO"``.
    """
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def resolve_uid(target: str) -> str:
    """Accept either a content-type identifier or a request path.

    Args:
        target: ``api::article.article`` or ``/api/articles``.

    Returns:
        str: The content-type identifier.

    Examples:
        >>> resolve_uid("api::article.article")
        'api::article.article'
        >>> resolve_uid("/api/articles?foo=1")
        'api::article.article'
    """
    if target.startswith("/"):
        return content_type_uid(target, settings.uid_namespace)
    return target


def main(argv: Optional[List[str]] = None) -> int:
    """Run CLI entrypoint.

    Args:
        argv: Command line arguments, defaults to ``sys.argv[1:]``.

    Returns:
        int: Process exit code (`0` success, `1` on schema errors).
    """
    parser = argparse.ArgumentParser(description="Print the deep populate tree for a content type.")
    parser.add_argument("target", help="Content-type identifier (api::article.article) or request path (/api/articles)")
    parser.add_argument("--schema-dir", default=None, help="Directory with api/ and components/ schema files (default: DEEP_POPULATE_SCHEMA_DIR)")
    parser.add_argument("--indent", action="store_true", help="Pretty-print the JSON output")
    parser.add_argument("--include-audit-fields", action="store_true", default=None, help="Populate createdBy/updatedBy even when hidden")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    schema_dir = args.schema_dir or settings.schema_dir
    if not schema_dir:
        print("No schema directory given; use --schema-dir or DEEP_POPULATE_SCHEMA_DIR.", file=sys.stderr)
        return 1

    try:
        registry = SchemaRegistry.from_directory(schema_dir)
        builder = PopulateSpecBuilder(
            registry,
            populate_overrides=settings.populate_overrides,
            include_audit_fields=settings.include_audit_fields if args.include_audit_fields is None else args.include_audit_fields,
        )
        tree = builder.build(resolve_uid(args.target))
    except (DeepPopulateError, FileNotFoundError) as e:
        print(str(e), file=sys.stderr)
        return 1

    option = orjson.OPT_INDENT_2 if args.indent else 0
    print(orjson.dumps(tree, option=option).decode("utf-8"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
