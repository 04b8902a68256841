# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/middleware/deep_populate.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Deep Populate Middleware.

For every read request against the content API that does not specify a
populate of its own, this middleware builds the full populate tree of the
requested content type and attaches it to the request:

- on the ASGI scope state, readable with ``get_populate(request)``
- in the query string, as ``populate[...]`` bracket parameters

Unknown content types and malformed schemas fail the request; a partial
tree would silently under-fetch.

Note: Implemented as raw ASGI middleware (not BaseHTTPMiddleware) to avoid
response body buffering issues with streaming responses.

Examples:
    >>> from deeppopulate.middleware.deep_populate import DeepPopulateMiddleware  # doctest: +SKIP
    >>> app.add_middleware(DeepPopulateMiddleware, schema_lookup=registry)  # doctest: +SKIP
"""

# Standard
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

# Third-Party
from fastapi import FastAPI
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

# First-Party
from deeppopulate.builder import PopulateSpecBuilder, PopulateTree
from deeppopulate.config import settings
from deeppopulate.errors import DeepPopulateError
from deeppopulate.middleware.path_filter import content_type_uid, should_deep_populate
from deeppopulate.registry import SchemaLookup
from deeppopulate.utils.query_string import merge_populate_query
from deeppopulate.visibility import VisibilityPolicy

logger = logging.getLogger(__name__)

POPULATE_STATE_KEY = "populate"


class DeepPopulateMiddleware:
    """Raw ASGI middleware that attaches a deep populate tree to read requests.

    Options left as None are read from ``deeppopulate.config.settings``.
    """

    def __init__(
        self,
        app: ASGIApp,
        schema_lookup: SchemaLookup,
        visibility_policy: Optional[VisibilityPolicy] = None,
        populate_overrides: Optional[Mapping[str, str]] = None,
        include_audit_fields: Optional[bool] = None,
        api_prefix: Optional[str] = None,
        excluded_paths: Optional[Iterable[str]] = None,
        uid_namespace: Optional[str] = None,
        enabled: Optional[bool] = None,
    ) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application to wrap
            schema_lookup: Resolves content-type identifiers to schemas
            visibility_policy: Decides which relations are exposed
            populate_overrides: Relation name to field path table
            include_audit_fields: Populate createdBy/updatedBy even when hidden
            api_prefix: Only paths with this prefix are populated
            excluded_paths: Path fragments that disable deep populate
            uid_namespace: Namespace of mapped content-type identifiers
            enabled: Whether the middleware does anything at all
        """
        self.app = app
        self.enabled = settings.enabled if enabled is None else enabled
        self.api_prefix = settings.api_prefix if api_prefix is None else api_prefix
        self.excluded_paths = tuple(settings.excluded_paths if excluded_paths is None else excluded_paths)
        self.uid_namespace = settings.uid_namespace if uid_namespace is None else uid_namespace
        self.builder = PopulateSpecBuilder(
            schema_lookup,
            visibility_policy=visibility_policy,
            populate_overrides=settings.populate_overrides if populate_overrides is None else populate_overrides,
            include_audit_fields=settings.include_audit_fields if include_audit_fields is None else include_audit_fields,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process ASGI request.

        Args:
            scope: ASGI scope dict
            receive: Receive callable
            send: Send callable

        Raises:
            DeepPopulateError: If the requested content type cannot be resolved.
        """
        # Only process HTTP requests
        if scope["type"] != "http" or not self.enabled:
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        query_string = scope.get("query_string", b"").decode("latin-1")
        if not should_deep_populate(scope.get("method", "GET"), path, query_string, self.api_prefix, self.excluded_paths):
            await self.app(scope, receive, send)
            return

        uid = content_type_uid(path, self.uid_namespace)
        logger.info(f"Using deep populate middleware for {uid}")

        try:
            tree = self.builder.build(uid)
        except DeepPopulateError as e:
            logger.error(f"Deep populate failed for {path} ({uid}): {e}")
            raise

        scope = dict(scope)
        scope["query_string"] = merge_populate_query(query_string, tree).encode("latin-1")
        state: Dict[str, Any] = dict(scope.get("state") or {})
        state[POPULATE_STATE_KEY] = tree
        scope["state"] = state

        await self.app(scope, receive, send)


def get_populate(request: Request) -> Optional[PopulateTree]:
    """Return the populate tree attached to a request, if any.

    Args:
        request: The incoming request.

    Returns:
        Optional[PopulateTree]: The tree, or None if the request was not deep populated.

    Examples:
        >>> from starlette.requests import Request
        >>> get_populate(Request({"type": "http", "state": {"populate": {"cover": {"populate": "*"}}}}))
        {'cover': {'populate': '*'}}
        >>> get_populate(Request({"type": "http"})) is None
        True
    """
    return getattr(request.state, POPULATE_STATE_KEY, None)


def install_deep_populate(app: FastAPI, schema_lookup: SchemaLookup, **options: Any) -> None:
    """Add ``DeepPopulateMiddleware`` to an application.

    Args:
        app: FastAPI (or Starlette) application.
        schema_lookup: Resolves content-type identifiers to schemas.
        **options: Extra ``DeepPopulateMiddleware`` keyword arguments.
    """
    app.add_middleware(DeepPopulateMiddleware, schema_lookup=schema_lookup, **options)
    logger.info("Deep populate middleware installed")
