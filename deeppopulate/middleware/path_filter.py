# -*- coding: utf-8 -*-
"""Centralized request filtering and path mapping for deep populate.

Copyright 2025
SPDX-License-Identifier: Apache-2.0

A request is deep populated only when all of these hold:
- the method is GET
- the path starts with the API prefix
- the query carries no ``populate`` parameter of its own
- the URL (path and query) contains none of the excluded fragments

The collection segment of the path is then singularized and turned into a
content-type identifier: ``/api/articles`` -> ``api::article.article``.
Singularization is best effort; a wrong guess surfaces as an unknown
identifier in the schema lookup.
"""

# Standard
from functools import lru_cache
import logging
from typing import Iterable, Tuple
from urllib.parse import parse_qsl

# Third-Party
import inflect

logger = logging.getLogger(__name__)

POPULATE_PARAM = "populate"

_inflect_engine = inflect.engine()


def extract_path_segment(url: str) -> str:
    """Return the last non-empty path segment before any query string.

    Args:
        url: Request path, optionally followed by ``?query``.

    Returns:
        str: The segment, or an empty string if there is none.

    Examples:
        >>> extract_path_segment("/api/articles?foo=1")
        'articles'
        >>> extract_path_segment("/api/articles/")
        'articles'
        >>> extract_path_segment("/")
        ''
    """
    path = url.split("?", 1)[0]
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else ""


@lru_cache(maxsize=512)
def singularize(word: str) -> str:
    """Singularize an English plural noun; singular input is returned unchanged.

    Args:
        word: The word to singularize.

    Returns:
        str: The singular form.

    Examples:
        >>> singularize("articles")
        'article'
        >>> singularize("categories")
        'category'
        >>> singularize("article")
        'article'
        >>> singularize("")
        ''
    """
    if not word:
        return word
    singular = _inflect_engine.singular_noun(word)
    return singular if singular else word


@lru_cache(maxsize=512)
def content_type_uid(url: str, namespace: str = "api") -> str:
    """Map a request path to its content-type identifier.

    Args:
        url: Request path, optionally followed by ``?query``.
        namespace: Identifier namespace.

    Returns:
        str: ``<namespace>::<singular>.<singular>``.

    Examples:
        >>> content_type_uid("/api/articles?foo=1")
        'api::article.article'
        >>> content_type_uid("/api/global")
        'api::global.global'
    """
    singular = singularize(extract_path_segment(url))
    return f"{namespace}::{singular}.{singular}"


def has_populate_param(query_string: str) -> bool:
    """Return True if the query already asks for a populate.

    Both ``populate=...`` and bracketed ``populate[...]=...`` count. An empty
    ``populate=`` does not.

    Args:
        query_string: Raw query string (without ``?``).

    Returns:
        bool: Whether a populate parameter is present.

    Examples:
        >>> has_populate_param("populate=*")
        True
        >>> has_populate_param("populate%5Bcover%5D=true")
        True
        >>> has_populate_param("populate=&sort=title")
        False
        >>> has_populate_param("foo=1")
        False
    """
    for key, value in parse_qsl(query_string, keep_blank_values=True):
        if key == POPULATE_PARAM and value:
            return True
        if key.startswith(f"{POPULATE_PARAM}["):
            return True
    return False


def _matches_fragment(path: str, fragments: Tuple[str, ...]) -> bool:
    """Return True if path contains any fragment.

    Args:
        path: The URL path to check
        fragments: Fragments to look for

    Returns:
        True if any fragment occurs in path

    Examples:
        >>> _matches_fragment("/api/users/me", ("/api/users",))
        True
        >>> _matches_fragment("/api/articles", ("/api/users", "/api/seo"))
        False
    """
    return any(fragment in path for fragment in fragments)


def should_deep_populate(method: str, path: str, query_string: str, api_prefix: str, excluded_paths: Iterable[str]) -> bool:
    """Decide whether a request gets a deep populate.

    Args:
        method: HTTP method.
        path: Request path.
        query_string: Raw query string (without ``?``).
        api_prefix: Paths must start with this prefix.
        excluded_paths: Fragments of the path or query that disable deep populate.

    Returns:
        bool: Whether to build and attach a populate tree.

    Examples:
        >>> should_deep_populate("GET", "/api/articles", "", "/api/", ["/api/users"])
        True
        >>> should_deep_populate("POST", "/api/articles", "", "/api/", [])
        False
        >>> should_deep_populate("GET", "/admin/articles", "", "/api/", [])
        False
        >>> should_deep_populate("GET", "/api/articles", "populate=*", "/api/", [])
        False
        >>> should_deep_populate("GET", "/api/users/me", "", "/api/", ["/api/users"])
        False
    """
    if method.upper() != "GET":
        return False
    if not path.startswith(api_prefix):
        return False
    if has_populate_param(query_string):
        return False
    url = f"{path}?{query_string}" if query_string else path
    if _matches_fragment(url, tuple(excluded_paths)):
        return False
    return True
