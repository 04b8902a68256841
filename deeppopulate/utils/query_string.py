# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/utils/query_string.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Bracket-notation encoding of populate trees.

The retrieval layer reads populate directives from the query string in the
``qs`` bracket style used by content APIs:

    populate[cover][populate]=*
    populate[sections][on][shared.quote][populate][author][populate]=*

Empty nested mappings cannot be expressed in that notation and are dropped,
the same way ``qs.stringify`` drops them.
"""

# Standard
from typing import Any, List, Mapping, Tuple
from urllib.parse import parse_qsl, urlencode

# First-Party
from deeppopulate.middleware.path_filter import POPULATE_PARAM


def flatten_populate(tree: Mapping[str, Any], prefix: str = POPULATE_PARAM) -> List[Tuple[str, str]]:
    """Flatten a populate tree into bracketed key/value pairs.

    Args:
        tree: The populate tree.
        prefix: Key prefix for the top level.

    Returns:
        List[Tuple[str, str]]: Pairs in tree order.

    Examples:
        >>> flatten_populate({"cover": {"populate": "*"}, "body": {"populate": {}}})
        [('populate[cover][populate]', '*')]
        >>> flatten_populate({"blocks": {"on": {"shared.quote": {"populate": {"author": {"populate": "*"}}}}}})
        [('populate[blocks][on][shared.quote][populate][author][populate]', '*')]
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in tree.items():
        name = f"{prefix}[{key}]"
        if isinstance(value, Mapping):
            pairs.extend(flatten_populate(value, name))
        else:
            pairs.append((name, str(value)))
    return pairs


def merge_populate_query(query_string: str, tree: Mapping[str, Any]) -> str:
    """Append a populate tree to an existing query string.

    A blank ``populate=`` parameter in the original query is replaced.
    The query is handled as latin-1 text, the way the ASGI scope is decoded, so
    existing bytes are re-emitted unchanged.

    Args:
        query_string: Original query string (without ``?``).
        tree: The populate tree.

    Returns:
        str: The merged query string.

    Examples:
        >>> merge_populate_query("sort=title&populate=", {"cover": {"populate": "*"}})
        'sort=title&populate[cover][populate]=*'
        >>> merge_populate_query("", {})
        ''
    """
    params = [(key, value) for key, value in parse_qsl(query_string, keep_blank_values=True, encoding="latin-1") if key != POPULATE_PARAM]
    existing = urlencode(params, safe="[]*", encoding="latin-1")
    populate = urlencode(flatten_populate(tree), safe="[]*")
    return "&".join(part for part in (existing, populate) if part)
